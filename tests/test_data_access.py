"""
Unit Tests - Data Access Layer
"""
import pandas as pd
import pytest

from analysis.data_access import SOURCE_SCHEMA, SourceData, empty_frame
from config import ConfigurationError


class TestSourceData:
    """Tests for SourceData.from_frames"""

    def test_missing_recordsets_become_typed_empty_frames(self):
        source = SourceData.from_frames()

        assert all(count == 0 for count in source.row_counts().values())
        assert list(source.payments.columns) == list(SOURCE_SCHEMA["payments"])
        assert source.payments["amount"].dtype == float

    def test_row_counts(self, source):
        counts = source.row_counts()

        assert counts["payments"] == 6
        assert counts["rentals"] == 6
        assert counts["stores"] == 2

    def test_dates_are_parsed(self):
        rentals = pd.DataFrame({
            "rental_id": [1],
            "rental_date": ["2005-05-24 22:53:30"],
            "inventory_id": [1],
            "customer_id": [1],
            "return_date": [None],
        })

        source = SourceData.from_frames(rentals=rentals)

        assert pd.api.types.is_datetime64_any_dtype(source.rentals["rental_date"])
        assert source.rentals["return_date"].isna().all()

    def test_unknown_recordset_raises(self):
        with pytest.raises(ConfigurationError):
            SourceData.from_frames(orders=pd.DataFrame())

    def test_missing_column_raises(self):
        with pytest.raises(ConfigurationError):
            SourceData.from_frames(stores=pd.DataFrame({"id": [1]}))

    def test_extra_columns_are_kept(self, source_frames):
        customers = source_frames["customers"].assign(store_id=[1, 1, 2, 2])

        source = SourceData.from_frames(customers=customers)

        assert "store_id" in source.customers.columns


def test_empty_frame_has_schema_dtypes():
    df = empty_frame("inventory")

    assert df.empty
    assert df.dtypes.to_dict() == {col: "int64" for col in SOURCE_SCHEMA["inventory"]}
