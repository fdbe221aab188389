"""
Test Suite Configuration

Kleiner, von Hand nachrechenbarer Verleih-Datensatz:
- 2 Filialen, 2 Kategorien, 4 Filme (Film 4 ohne Exemplar)
- 4 Kunden (Kunde 4 ohne Aktivität)
- 6 Ausleihen: r3 noch offen, r6 verweist auf ein unbekanntes Exemplar
- 6 Zahlungen, Gesamtumsatz 20.95
"""
import pandas as pd
import pytest

from analysis.data_access import SourceData
from database.sink import MemorySink


def _ts(values):
    return pd.to_datetime(pd.Series(values))


@pytest.fixture
def source_frames() -> dict:
    """Rohe DataFrames je Recordset (für Varianten in einzelnen Tests)"""
    return {
        "stores": pd.DataFrame({"store_id": [1, 2]}),
        "categories": pd.DataFrame({"category_id": [1, 2], "name": ["Action", "Comedy"]}),
        "films": pd.DataFrame({
            "film_id": [1, 2, 3, 4],
            "title": ["ALPHA", "BETA", "GAMMA", "DELTA"],
        }),
        "film_categories": pd.DataFrame({"film_id": [1, 2, 3], "category_id": [1, 2, 1]}),
        "inventory": pd.DataFrame({
            "inventory_id": [10, 11, 20, 30],
            "film_id": [1, 1, 2, 3],
            "store_id": [1, 2, 1, 2],
        }),
        "customers": pd.DataFrame({
            "customer_id": [1, 2, 3, 4],
            "first_name": ["ANNA", "BEN", "CARL", "DORA"],
            "last_name": ["SMITH", "JONES", "BROWN", "WHITE"],
        }),
        "rentals": pd.DataFrame({
            "rental_id": [1, 2, 3, 4, 5, 6],
            "rental_date": _ts([
                "2005-05-01 10:00:00", "2005-06-01 10:00:00", "2005-06-10 10:00:00",
                "2005-07-01 10:00:00", "2005-07-15 10:00:00", "2005-07-20 10:00:00",
            ]),
            "inventory_id": [10, 11, 20, 30, 10, 999],
            "customer_id": [1, 1, 2, 3, 2, 3],
            "return_date": _ts([
                "2005-05-03 10:00:00", "2005-06-02 10:00:00", None,
                "2005-07-04 10:00:00", "2005-07-16 10:00:00", "2005-07-21 10:00:00",
            ]),
        }),
        "payments": pd.DataFrame({
            "payment_id": [1, 2, 3, 4, 5, 6],
            "customer_id": [1, 1, 2, 3, 2, 3],
            "rental_id": [1, 2, 3, 4, 5, 6],
            "amount": [4.99, 2.99, 0.99, 5.99, 4.99, 1.00],
            "payment_date": _ts([
                "2005-05-01 10:05:00", "2005-06-01 10:05:00", "2005-06-10 10:05:00",
                "2005-07-01 10:05:00", "2005-07-15 10:05:00", "2005-07-20 10:05:00",
            ]),
        }),
    }


@pytest.fixture
def source(source_frames) -> SourceData:
    """Vollständiger Quell-Snapshot"""
    return SourceData.from_frames(**source_frames)


@pytest.fixture
def empty_source() -> SourceData:
    """Snapshot ohne eine einzige Zeile"""
    return SourceData.from_frames()


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()
