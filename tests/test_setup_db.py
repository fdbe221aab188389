"""
Integration Tests - Synthetische Quell-Datenbank → Reports
"""
import sqlite3

import pytest

from analysis.data_access import load_source_data
from analysis.reports import REPORTS, run_reports
from analysis.segmentation import LONG_TAIL, TOP_REVENUE
from database.setup_db import CATEGORIES, STORES, generate_films, setup_database
from database.sink import MemorySink


@pytest.fixture(scope="module")
def rental_db(tmp_path_factory):
    db_path = tmp_path_factory.mktemp("source") / "rental.db"
    assert setup_database(db_path)
    return db_path


def _count(db_path, table: str) -> int:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


class TestSetupDatabase:
    """Tests for setup_database"""

    def test_master_data(self, rental_db):
        assert _count(rental_db, "store") == len(STORES)
        assert _count(rental_db, "category") == len(CATEGORIES)
        assert _count(rental_db, "film") == 200
        assert _count(rental_db, "film_category") == 200

    def test_transactions(self, rental_db):
        rentals = _count(rental_db, "rental")
        payments = _count(rental_db, "payment")

        assert rentals > 1000
        # einzelne Ausleihen bleiben ohne Zahlung
        assert 0 < payments < rentals

    def test_some_rentals_are_open(self, rental_db):
        assert _count(rental_db, "rental WHERE return_date IS NULL") > 0

    def test_idempotent_without_force(self, rental_db):
        before = _count(rental_db, "payment")

        assert setup_database(rental_db)

        assert _count(rental_db, "payment") == before

    def test_films_are_deterministic(self):
        assert generate_films(n=20) == generate_films(n=20)


class TestEndToEnd:
    """Alle Reports über die synthetische Datenbank"""

    @pytest.fixture(scope="class")
    def tables(self, rental_db):
        sink = MemorySink()
        results = run_reports(None, load_source_data(rental_db), sink)
        assert all(r.success for r in results)
        return sink.tables

    def test_every_report_has_rows(self, tables):
        assert set(tables) == set(REPORTS)
        assert all(len(df) > 0 for df in tables.values())

    def test_store_revenue_below_grand_total(self, tables):
        total = tables["kpi_total_revenue"]["total_amount"].iloc[0]
        assert tables["kpi_revenue_by_store"]["store_revenue"].sum() <= total + 0.01

    def test_category_percentages_sum_to_hundred(self, tables):
        # jeder Film hat genau eine Kategorie, jede Zahlung ein Exemplar
        assert tables["kpi_revenue_by_category"]["revenue_percentage"].sum() == pytest.approx(100.0, abs=0.1)

    def test_pareto_split(self, tables):
        labels = tables["pareto_analysis"]["pareto_category"].tolist()

        assert labels[0] == TOP_REVENUE
        assert labels[-1] == LONG_TAIL
        first_tail = labels.index(LONG_TAIL)
        assert set(labels[first_tail:]) == {LONG_TAIL}

    def test_top_customers_limited(self, tables):
        df = tables["adv_top_customers"]

        assert len(df) == 10
        assert df["total_spend"].is_monotonic_decreasing

    def test_customer_tiers_are_balanced(self, tables):
        counts = tables["adv_customer_segments"]["customer_tier"].value_counts()

        assert counts.max() - counts.min() <= 1
