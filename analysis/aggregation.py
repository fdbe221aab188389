"""
analysis/aggregation.py — Gruppierte Reducer (Summe / Anzahl / Durchschnitt).

Zwei-Pass-Prinzip: Pass 1 gruppiert und reduziert, Pass 2 berechnet
Kennzahlen relativ zu einer unabhängig ermittelten Gesamtsumme
(z.B. Umsatzanteil in %). Die Reihenfolge der Ausgabezeilen ist hier
bewusst NICHT definiert — sortiert wird erst im Report-Assembler.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

Keys = Union[str, list]


# ─────────────────────────────────────────────
# RUNDUNG
# ─────────────────────────────────────────────

def to_decimal(value) -> Decimal:
    """
    Exakte Dezimaldarstellung eines (auf Cent gerundeten) Floats.

    str() liefert die kürzeste Darstellung, 1.15 wird also zu Decimal("1.15")
    und nicht zu 1.149999999999999911182158029987...
    """
    return Decimal(str(value))


def quantize_half_up(value: Decimal, digits: int = 2) -> float:
    """Decimal kaufmännisch auf digits Stellen runden (0.5 → weg von 0)."""
    return float(value.quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP))


def round_half_up(value: float, digits: int = 2) -> float:
    """
    Kaufmännische Rundung (0.5 → aufrunden, weg von 0) statt Banker's Rounding.

    Nur für bereits fertige Werte; Quotienten werden über divide_half_up()
    exakt in Decimal gerechnet, bevor gerundet wird. NaN/None bleiben NaN.

    Example:
        >>> round_half_up(2.675)
        2.68
    """
    if value is None or pd.isna(value):
        return np.nan
    return quantize_half_up(to_decimal(value), digits)


def round_series(values: pd.Series, digits: int = 2) -> pd.Series:
    """round_half_up() elementweise auf eine Series."""
    return values.map(lambda v: round_half_up(v, digits)).astype(float)


def divide_half_up(
    numerators: pd.Series,
    denominators,
    digits: int = 2,
    scale: int = 1
) -> pd.Series:
    """
    numerator * scale / denominator in Decimal, danach kaufmännisch gerundet.

    denominators: Series (elementweise) oder ein Skalar für alle Zeilen.
    Nenner 0 oder NaN bzw. fehlender Zähler → NaN in dieser Zeile.

    Example:
        >>> divide_half_up(pd.Series([1.15]), 1000.0, scale=100).tolist()
        [0.12]
    """
    if not isinstance(denominators, pd.Series):
        denominators = pd.Series(denominators, index=numerators.index, dtype=float)

    result = []
    for num, den in zip(numerators, denominators):
        if pd.isna(num) or pd.isna(den) or den == 0:
            result.append(np.nan)
        else:
            result.append(quantize_half_up(to_decimal(num) * scale / to_decimal(den), digits))
    return pd.Series(result, index=numerators.index, dtype=float)


# ─────────────────────────────────────────────
# REDUCER
# ─────────────────────────────────────────────

def group_reduce(
    frame: pd.DataFrame,
    keys: Keys,
    value: str = "amount",
    distinct: Optional[dict] = None
) -> pd.DataFrame:
    """
    Eine Ausgabezeile je distinktem Schlüssel mit sum, count, avg.

    count zählt Zeilen (COUNT(*)), nicht distinkte Werte. Ein Schlüssel
    erscheint nur, wenn mindestens eine Zeile existiert; avg ist trotzdem
    gegen count = 0 abgesichert (→ NaN).

    Args:
        frame: Bereits gejointe Records
        keys: Gruppierungsspalte(n), auch zusammengesetzt
        value: Spalte, die summiert/gemittelt wird
        distinct: Optional {ausgabe_spalte: quell_spalte} für COUNT(DISTINCT ...)

    Returns:
        DataFrame [*keys, sum, count, avg, *distinct]
    """
    keys = [keys] if isinstance(keys, str) else list(keys)
    distinct = distinct or {}
    columns = keys + ["sum", "count", "avg"] + list(distinct)

    if frame.empty:
        return pd.DataFrame(columns=columns)

    aggs = {
        "sum": (value, "sum"),
        "count": (value, "size"),
    }
    for out_col, src_col in distinct.items():
        aggs[out_col] = (src_col, "nunique")

    grouped = frame.groupby(keys, sort=False, dropna=False).agg(**aggs).reset_index()
    grouped["avg"] = grouped["sum"] / grouped["count"].replace(0, np.nan)

    logger.debug(f"group_reduce({keys}): {len(frame):,} Zeilen → {len(grouped):,} Gruppen")
    return grouped[columns]


def summarize(frame: pd.DataFrame, value: str = "amount") -> dict:
    """
    sum / count / avg ohne Gruppierung (Gesamtsumme als eigener Pass).

    Über 0 Zeilen: sum und avg NaN (wie SQL SUM/AVG über leere Menge), count 0.
    """
    count = int(len(frame))
    if count == 0:
        return {"sum": np.nan, "count": 0, "avg": np.nan}
    total = float(frame[value].sum())
    return {"sum": total, "count": count, "avg": total / count}


def percentage_of_total(values: pd.Series, total: float, digits: int = 2) -> pd.Series:
    """
    Anteil an der Gesamtsumme in %, exakt in Decimal gerechnet und
    kaufmännisch gerundet. Werte und total müssen auf Cent gerundet sein.

    total = 0 oder NaN → NaN je Zeile (keine ZeroDivisionError).
    """
    if total is None or pd.isna(total) or total == 0:
        return pd.Series(np.nan, index=values.index, dtype=float)
    return divide_half_up(values, total, digits, scale=100)
