"""
analysis/windowing.py — Fensterfunktionen über bereits sortierte Sequenzen.

Explizites Äquivalent zu SQL-Window-Functions (AVG OVER ROWS, RANK,
NTILE, SUM OVER ORDER BY). Jede Funktion erwartet die Eingabe schon in
der dokumentierten Sortierung und rechnet positionsbasiert; der Index
der Eingabe-Series bleibt erhalten, damit das Ergebnis direkt als
Spalte zugewiesen werden kann.

Leere Eingabe → leere Ausgabe, nie ein Fehler.
"""

import logging
from typing import Iterable, Tuple, Union

import numpy as np
import pandas as pd

from analysis.aggregation import quantize_half_up, to_decimal
from config import ConfigurationError

logger = logging.getLogger(__name__)

Values = Union[pd.Series, Iterable[float]]


def _as_series(values: Values) -> pd.Series:
    if isinstance(values, pd.Series):
        return values
    return pd.Series(list(values), dtype=float)


# ─────────────────────────────────────────────
# MOVING AVERAGE
# ─────────────────────────────────────────────

def moving_average(values: Values, window: int = 2, digits: int = 2) -> pd.Series:
    """
    Trailing Moving Average inklusive aktuellem Element.

    Element i mittelt [max(0, i-window+1) .. i]; das erste Element ist
    sein eigener Durchschnitt (Fenster der Größe 1). Summe und Division
    laufen in Decimal, damit exakte Mittelwerte wie 1.665 nicht durch
    Float-Fehler auf 1.66 abrunden.

    Example:
        >>> moving_average([10, 20, 30]).tolist()
        [10.0, 15.0, 25.0]
    """
    if window < 1:
        raise ConfigurationError(f"Fenstergröße muss >= 1 sein (ist {window})")
    values = _as_series(values)
    if values.empty:
        return pd.Series([], index=values.index, dtype=float)

    exact = [to_decimal(v) for v in values.astype(float)]
    averages = []
    for i in range(len(exact)):
        frame = exact[max(0, i - window + 1):i + 1]
        averages.append(quantize_half_up(sum(frame) / len(frame), digits))
    return pd.Series(averages, index=values.index, dtype=float)


# ─────────────────────────────────────────────
# RANK
# ─────────────────────────────────────────────

def rank_descending(values: Values) -> pd.Series:
    """
    SQL-RANK über absteigende Werte: Gleichstand teilt sich den Rang,
    der nächste Rang wird übersprungen.

    Example:
        >>> rank_descending([100, 100, 90]).tolist()
        [1, 1, 3]
    """
    values = _as_series(values)
    if values.empty:
        return pd.Series([], index=values.index, dtype=int)
    return values.rank(method="min", ascending=False).astype(int)


# ─────────────────────────────────────────────
# NTILE
# ─────────────────────────────────────────────

def tile_sizes(n_items: int, n_tiles: int) -> list:
    """Bucket-Größen wie NTILE: vordere Buckets bekommen den Rest."""
    if n_tiles <= 0:
        raise ConfigurationError(f"Tile-Anzahl muss > 0 sein (ist {n_tiles})")
    base, extra = divmod(n_items, n_tiles)
    return [base + 1 if i < extra else base for i in range(n_tiles)]


def assign_tiles(values: Values, n_tiles: int) -> pd.Series:
    """
    Verteilt die (absteigend sortierte) Sequenz auf n_tiles Buckets.

    Bucket 1 = höchste Werte. Bei n nicht teilbar durch n_tiles sind die
    ersten Buckets je ein Element größer (10 Elemente / 3 → 4, 3, 3).
    Tie-Break ist allein die Eingabereihenfolge.

    Raises:
        ConfigurationError: n_tiles <= 0
    """
    values = _as_series(values)
    sizes = tile_sizes(len(values), n_tiles)
    tiles = np.repeat(np.arange(1, n_tiles + 1), sizes)
    return pd.Series(tiles, index=values.index, dtype=int)


# ─────────────────────────────────────────────
# KUMULATIVE SUMME
# ─────────────────────────────────────────────

def cumulative_sum(values: Values, include_peers: bool = False) -> Tuple[pd.Series, float]:
    """
    Laufende Summe in Eingabereihenfolge plus unabhängige Gesamtsumme.

    Args:
        values: Absteigend sortierte Werte
        include_peers: True → gleiche Werte teilen sich die Summe ihrer
                       gesamten Peer-Gruppe (SQL-Default-Frame RANGE);
                       False → strikt zeilenweise Präfixsumme (ROWS)

    Returns:
        (laufende Summe, Gesamtsumme); Gesamtsumme über 0 Elemente ist NaN
    """
    values = _as_series(values).astype(float)
    if values.empty:
        return pd.Series([], index=values.index, dtype=float), np.nan

    running = values.cumsum()
    if include_peers:
        running = running.groupby(values.to_numpy(), sort=False).transform("last")
    return running, float(values.sum())
