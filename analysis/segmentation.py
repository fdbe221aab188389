"""
analysis/segmentation.py — Schwellwert- und Tier-Klassifikation.

Jede Regel ist eine totale Funktion: jeder Input bekommt genau ein
Label, es gibt keine Fehlerfälle. Vergleiche sind strikt ">" und
werden von oben nach unten ausgewertet, der erste Treffer gewinnt
(ein Kunde mit exakt 1000.00 Umsatz ist also "Medium", nicht "High").
"""

from typing import Optional

import pandas as pd

from config import SegmentationConfig

_DEFAULTS = SegmentationConfig()

TOP_REVENUE = "Top 80% Revenue"
LONG_TAIL = "Long Tail"

TILE_LABELS = {1: "VIP", 2: "Regular"}


def film_tier(total_revenue: float, total_rentals: int, config: Optional[SegmentationConfig] = None) -> str:
    """Blockbuster (Umsatz UND Ausleihen hoch) → Hit (nur Umsatz) → Regular."""
    config = config or _DEFAULTS
    if total_revenue > config.blockbuster_revenue and total_rentals > config.blockbuster_rentals:
        return "Blockbuster"
    if total_revenue > config.hit_revenue:
        return "Hit"
    return "Regular"


def spend_tier(total_spend: float, config: Optional[SegmentationConfig] = None) -> str:
    config = config or _DEFAULTS
    if total_spend > config.high_spend:
        return "High"
    if total_spend > config.medium_spend:
        return "Medium"
    return "Low"


def tile_tier(tile: int) -> str:
    """Tile 1 → VIP, Tile 2 → Regular, alles andere → Low."""
    return TILE_LABELS.get(tile, "Low")


def pareto_category(cumulative_revenue: float, grand_total: float, share: float = 0.80) -> str:
    """
    80/20-Zuordnung einer Zeile anhand ihrer kumulativen Umsatzsumme.

    Wird auf umsatz-absteigend sortierten Zeilen ausgewertet: sobald die
    Schwelle überschritten ist, bleiben alle folgenden Zeilen Long Tail.
    """
    if cumulative_revenue <= grand_total * share:
        return TOP_REVENUE
    return LONG_TAIL


# ─────────────────────────────────────────────
# SPALTEN-VARIANTEN FÜR DIE ASSEMBLER
# ─────────────────────────────────────────────

def film_tiers(revenue: pd.Series, rentals: pd.Series, config: Optional[SegmentationConfig] = None) -> pd.Series:
    labels = [film_tier(r, n, config) for r, n in zip(revenue, rentals)]
    return pd.Series(labels, index=revenue.index, dtype=object)


def spend_tiers(total_spend: pd.Series, config: Optional[SegmentationConfig] = None) -> pd.Series:
    return pd.Series([spend_tier(v, config) for v in total_spend], index=total_spend.index, dtype=object)


def tile_tiers(tiles: pd.Series) -> pd.Series:
    return pd.Series([tile_tier(t) for t in tiles], index=tiles.index, dtype=object)


def pareto_categories(cumulative: pd.Series, grand_total: float, share: float = 0.80) -> pd.Series:
    labels = [pareto_category(c, grand_total, share) for c in cumulative]
    return pd.Series(labels, index=cumulative.index, dtype=object)
