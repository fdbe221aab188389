"""
Unit Tests - Helpers
"""
import logging
import sqlite3

import pandas as pd
import pytest

from analysis.data_access import load_source_data
from utils.helpers import connect_readonly, load_queries, missing_columns, setup_logging


@pytest.fixture
def small_db(tmp_path):
    db_path = tmp_path / "small.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE t (id INTEGER, name TEXT)")
    conn.executemany("INSERT INTO t VALUES (?, ?)", [(1, "a"), (2, "b")])
    conn.commit()
    conn.close()
    return db_path


class TestReadOnlyAccess:
    """Tests for connect_readonly / load_queries"""

    def test_load_queries(self, small_db):
        frames = load_queries(small_db, {"all": "SELECT * FROM t ORDER BY id", "one": "SELECT id FROM t WHERE id = 2"})

        assert frames["all"]["name"].tolist() == ["a", "b"]
        assert frames["one"]["id"].tolist() == [2]

    def test_connection_rejects_writes(self, small_db):
        conn = connect_readonly(small_db)
        try:
            with pytest.raises(sqlite3.OperationalError):
                conn.execute("INSERT INTO t VALUES (3, 'c')")
        finally:
            conn.close()

    def test_missing_database(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_queries(tmp_path / "nope.db", {"x": "SELECT 1"})

    def test_missing_database_is_not_created(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_source_data(tmp_path / "nope.db")

        assert not (tmp_path / "nope.db").exists()


class TestMissingColumns:
    """Tests for missing_columns"""

    def test_complete_schema(self):
        assert missing_columns(pd.DataFrame({"a": [], "b": []}), "t", ["a", "b"]) == []

    def test_reports_missing(self):
        assert missing_columns(pd.DataFrame({"a": [1]}), "t", ["a", "b", "c"]) == ["b", "c"]

    def test_none(self):
        assert missing_columns(None, "t", ["a"]) == ["a"]


def test_setup_logging_does_not_duplicate_handlers(tmp_path):
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        setup_logging("INFO", tmp_path / "a.log")
        setup_logging("DEBUG", tmp_path / "b.log")

        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2
        assert logging.getLogger("matplotlib").level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
