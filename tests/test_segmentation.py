"""
Unit Tests - Segmentierungsregeln
"""
import numpy as np
import pandas as pd
import pytest

from analysis.segmentation import (
    LONG_TAIL,
    TOP_REVENUE,
    film_tier,
    pareto_categories,
    pareto_category,
    spend_tier,
    tile_tier,
    tile_tiers,
)
from config import SegmentationConfig


class TestFilmTier:
    """Tests for film_tier"""

    def test_blockbuster_needs_revenue_and_rentals(self):
        assert film_tier(5000.01, 101) == "Blockbuster"

    def test_high_revenue_low_rentals_is_hit(self):
        assert film_tier(6000.0, 100) == "Hit"

    def test_boundaries_are_strict(self):
        assert film_tier(5000.0, 500) == "Hit"
        assert film_tier(3000.0, 500) == "Regular"

    def test_custom_thresholds(self):
        config = SegmentationConfig(blockbuster_revenue=10.0, blockbuster_rentals=2, hit_revenue=5.0)
        assert film_tier(12.0, 3, config) == "Blockbuster"
        assert film_tier(6.0, 1, config) == "Hit"
        assert film_tier(1.0, 1, config) == "Regular"


class TestSpendTier:
    """Tests for spend_tier"""

    @pytest.mark.parametrize("total, expected", [
        (1000.01, "High"),
        (1000.00, "Medium"),
        (500.01, "Medium"),
        (500.00, "Low"),
        (0.0, "Low"),
    ])
    def test_thresholds(self, total, expected):
        assert spend_tier(total) == expected


class TestTileTier:
    """Tests for tile_tier"""

    def test_labels(self):
        assert tile_tier(1) == "VIP"
        assert tile_tier(2) == "Regular"
        assert tile_tier(3) == "Low"
        assert tile_tier(7) == "Low"

    def test_series_keeps_index(self):
        result = tile_tiers(pd.Series([1, 2, 3], index=[4, 5, 6]))
        assert result.to_dict() == {4: "VIP", 5: "Regular", 6: "Low"}


class TestPareto:
    """Tests for pareto_category"""

    def test_threshold_is_inclusive(self):
        assert pareto_category(80.0, 100.0) == TOP_REVENUE
        assert pareto_category(80.01, 100.0) == LONG_TAIL

    def test_once_long_tail_always_long_tail(self):
        running = pd.Series([50.0, 75.0, 85.0, 95.0, 100.0])

        labels = pareto_categories(running, 100.0).tolist()

        assert labels == [TOP_REVENUE, TOP_REVENUE, LONG_TAIL, LONG_TAIL, LONG_TAIL]

    def test_missing_total_is_long_tail(self):
        assert pareto_category(10.0, np.nan) == LONG_TAIL
