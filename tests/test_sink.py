"""
Unit Tests - Output Sinks
"""
import sqlite3

import pandas as pd
import pytest

from config import ConfigurationError
from database.sink import STAGING_SUFFIX, MemorySink, SQLiteSink


@pytest.fixture
def sqlite_sink(tmp_path) -> SQLiteSink:
    return SQLiteSink(tmp_path / "results" / "reports.db")


class TestSQLiteSink:
    """Tests for SQLiteSink"""

    def test_put_and_get(self, sqlite_sink):
        rows = pd.DataFrame({"store_id": [1, 2], "store_revenue": [10.97, 8.98]})

        sqlite_sink.put("kpi_revenue_by_store", rows)

        pd.testing.assert_frame_equal(sqlite_sink.get("kpi_revenue_by_store"), rows)

    def test_put_replaces_previous_content(self, sqlite_sink):
        sqlite_sink.put("pareto_analysis", pd.DataFrame({"film_id": [1, 2, 3]}))
        sqlite_sink.put("pareto_analysis", pd.DataFrame({"film_id": [9]}))

        assert sqlite_sink.get("pareto_analysis")["film_id"].tolist() == [9]

    def test_put_replaces_schema(self, sqlite_sink):
        sqlite_sink.put("report", pd.DataFrame({"a": [1]}))
        sqlite_sink.put("report", pd.DataFrame({"b": ["x"], "c": [2.5]}))

        assert list(sqlite_sink.get("report").columns) == ["b", "c"]

    def test_no_staging_table_left_behind(self, sqlite_sink):
        sqlite_sink.put("kpi_total_revenue", pd.DataFrame({"total_amount": [1.0]}))
        sqlite_sink.put("kpi_total_revenue", pd.DataFrame({"total_amount": [2.0]}))

        conn = sqlite3.connect(sqlite_sink.db_path)
        try:
            tables = [r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")]
        finally:
            conn.close()

        assert tables == ["kpi_total_revenue"]
        assert not any(t.endswith(STAGING_SUFFIX) for t in tables)

    def test_empty_table_is_published(self, sqlite_sink):
        sqlite_sink.put("adv_top_customers", pd.DataFrame({"customer_id": [1]}))
        sqlite_sink.put("adv_top_customers", pd.DataFrame(columns=["customer_id", "spend_rank"]))

        df = sqlite_sink.get("adv_top_customers")
        assert df.empty
        assert list(df.columns) == ["customer_id", "spend_rank"]

    def test_failed_write_keeps_old_table(self, sqlite_sink):
        sqlite_sink.put("report", pd.DataFrame({"value": [1]}))

        with pytest.raises(Exception):
            sqlite_sink.put("report", pd.DataFrame({"value": [{"not": "storable"}]}))

        assert sqlite_sink.get("report")["value"].tolist() == [1]
        assert sqlite_sink.names() == ["report"]

    def test_invalid_table_name_raises(self, sqlite_sink):
        with pytest.raises(ConfigurationError):
            sqlite_sink.put("drop table; --", pd.DataFrame({"a": [1]}))


class TestMemorySink:
    """Tests for MemorySink"""

    def test_put_stores_a_copy(self):
        sink = MemorySink()
        rows = pd.DataFrame({"a": [1]})

        sink.put("report", rows)
        rows.loc[0, "a"] = 99

        assert sink.get("report")["a"].tolist() == [1]

    def test_names_sorted(self):
        sink = MemorySink()
        sink.put("b_report", pd.DataFrame())
        sink.put("a_report", pd.DataFrame())

        assert sink.names() == ["a_report", "b_report"]
