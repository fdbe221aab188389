"""
Unit Tests - Fensterfunktionen
"""
import numpy as np
import pandas as pd
import pytest

from analysis.windowing import (
    assign_tiles,
    cumulative_sum,
    moving_average,
    rank_descending,
    tile_sizes,
)
from config import ConfigurationError


class TestMovingAverage:
    """Tests for moving_average"""

    def test_trailing_two_element_window(self):
        assert moving_average([10, 20, 30]).tolist() == [10.0, 15.0, 25.0]

    def test_first_element_is_its_own_average(self):
        assert moving_average([7.5], window=3).tolist() == [7.5]

    def test_wider_window(self):
        assert moving_average([3, 6, 9, 12], window=3).tolist() == [3.0, 4.5, 6.0, 9.0]

    def test_rounds_half_up(self):
        # 0.125 → 0.13 (Banker's Rounding ergäbe 0.12)
        assert moving_average([0.25, 0.0]).tolist() == [0.25, 0.13]

    @pytest.mark.parametrize("values, expected", [
        ([0.07, 3.26], [0.07, 1.67]),   # 1.665
        ([4.99, 3.98], [4.99, 4.49]),   # 4.485
        ([0.01, 0.02], [0.01, 0.02]),   # 0.015
    ])
    def test_midpoint_of_cent_values_rounds_up(self, values, expected):
        assert moving_average(values).tolist() == expected

    def test_keeps_index(self):
        values = pd.Series([1.0, 3.0], index=[5, 9])
        assert list(moving_average(values).index) == [5, 9]

    def test_empty_input(self):
        assert moving_average([]).empty

    def test_invalid_window_raises(self):
        with pytest.raises(ConfigurationError):
            moving_average([1, 2], window=0)


class TestRank:
    """Tests for rank_descending"""

    def test_ties_share_rank_and_next_rank_skips(self):
        assert rank_descending([100, 100, 90]).tolist() == [1, 1, 3]

    def test_distinct_values(self):
        assert rank_descending([30, 20, 10]).tolist() == [1, 2, 3]

    def test_empty_input(self):
        assert rank_descending([]).empty


class TestTiles:
    """Tests for tile_sizes / assign_tiles"""

    def test_earlier_buckets_take_remainder(self):
        assert tile_sizes(10, 3) == [4, 3, 3]
        assert tile_sizes(11, 3) == [4, 4, 3]

    def test_assign_tiles_over_ten_items(self):
        tiles = assign_tiles(list(range(10, 0, -1)), 3)
        assert tiles.tolist() == [1, 1, 1, 1, 2, 2, 2, 3, 3, 3]

    def test_fewer_items_than_tiles(self):
        assert assign_tiles([5.0, 4.0], 3).tolist() == [1, 2]

    def test_empty_input(self):
        assert assign_tiles([], 3).empty

    @pytest.mark.parametrize("n_tiles", [0, -1])
    def test_non_positive_tile_count_raises(self, n_tiles):
        with pytest.raises(ConfigurationError):
            assign_tiles([1.0, 2.0], n_tiles)


class TestCumulativeSum:
    """Tests for cumulative_sum"""

    def test_running_sum_and_total(self):
        running, total = cumulative_sum([50.0, 30.0, 20.0])
        assert running.tolist() == [50.0, 80.0, 100.0]
        assert total == 100.0

    def test_rows_frame_is_strictly_per_row(self):
        running, _ = cumulative_sum([40.0, 30.0, 30.0])
        assert running.tolist() == [40.0, 70.0, 100.0]

    def test_peers_share_group_sum(self):
        running, _ = cumulative_sum([40.0, 30.0, 30.0], include_peers=True)
        assert running.tolist() == [40.0, 100.0, 100.0]

    def test_empty_input(self):
        running, total = cumulative_sum([])
        assert running.empty
        assert np.isnan(total)
