"""
analysis/data_access.py — Read-only Sicht auf die fünf Quell-Recordsets.

Reine Daten, keine Logik: lädt Payments, Rentals, Inventory, Filme/
Kategorien und Kunden/Filialen als typisierte DataFrames. Datums-
spalten werden einmal hier geparst, damit die Report-Assembler mit
echten Timestamps rechnen.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import pandas as pd

from config import ConfigurationError
from database.queries import SOURCE_QUERIES
from utils.helpers import load_queries, missing_columns

logger = logging.getLogger(__name__)

# Pflichtspalten + Typen je Recordset (Typen gelten für leere Tabellen)
SOURCE_SCHEMA = {
    "payments": {
        "payment_id": "int64",
        "customer_id": "int64",
        "rental_id": "int64",
        "amount": "float64",
        "payment_date": "datetime64[ns]",
    },
    "rentals": {
        "rental_id": "int64",
        "rental_date": "datetime64[ns]",
        "inventory_id": "int64",
        "customer_id": "int64",
        "return_date": "datetime64[ns]",
    },
    "inventory": {"inventory_id": "int64", "film_id": "int64", "store_id": "int64"},
    "films": {"film_id": "int64", "title": "object"},
    "film_categories": {"film_id": "int64", "category_id": "int64"},
    "categories": {"category_id": "int64", "name": "object"},
    "customers": {"customer_id": "int64", "first_name": "object", "last_name": "object"},
    "stores": {"store_id": "int64"},
}

DATE_COLUMNS = {
    "payments": ["payment_date"],
    "rentals": ["rental_date", "return_date"],
}


def empty_frame(name: str) -> pd.DataFrame:
    """Leeres, korrekt typisiertes Recordset."""
    return pd.DataFrame({
        col: pd.Series(dtype=dtype) for col, dtype in SOURCE_SCHEMA[name].items()
    })


@dataclass(frozen=True)
class SourceData:
    """Snapshot aller Quelltabellen für einen Report-Lauf."""
    payments: pd.DataFrame
    rentals: pd.DataFrame
    inventory: pd.DataFrame
    films: pd.DataFrame
    film_categories: pd.DataFrame
    categories: pd.DataFrame
    customers: pd.DataFrame
    stores: pd.DataFrame

    @classmethod
    def from_frames(cls, **frames: pd.DataFrame) -> "SourceData":
        """
        Baut einen Snapshot aus beliebigen DataFrames (Tests, CSV-Importe).

        Fehlende Recordsets werden als leere Tabellen mit korrekten
        Spalten ergänzt; Datumsspalten werden normalisiert.

        Raises:
            ConfigurationError: Unbekanntes Recordset oder fehlende Pflichtspalten
        """
        unknown = set(frames) - set(SOURCE_SCHEMA)
        if unknown:
            raise ConfigurationError(f"Unbekannte Recordsets: {sorted(unknown)}")

        data = {}
        for f in fields(cls):
            df = frames.get(f.name)
            if df is None:
                data[f.name] = empty_frame(f.name)
                continue
            missing = missing_columns(df, f.name, list(SOURCE_SCHEMA[f.name]))
            if missing:
                raise ConfigurationError(f"Recordset '{f.name}': Spalten fehlen: {missing}")
            if df.empty:
                # SQLite liefert leere Ergebnisse ohne Typen
                data[f.name] = empty_frame(f.name)
                continue
            data[f.name] = _coerce_types(f.name, df.copy())
        return cls(**data)

    def row_counts(self) -> dict:
        return {f.name: len(getattr(self, f.name)) for f in fields(self)}


def _coerce_types(name: str, df: pd.DataFrame) -> pd.DataFrame:
    for col in DATE_COLUMNS.get(name, []):
        df[col] = pd.to_datetime(df[col])
    if name == "payments":
        df["amount"] = pd.to_numeric(df["amount"]).astype(float)
    return df


def load_source_data(db_path: Path) -> SourceData:
    """
    Lädt alle Quell-Recordsets aus der SQLite-Datenbank.

    Args:
        db_path: Pfad zur Quell-Datenbank (wird nur gelesen)

    Returns:
        SourceData-Snapshot

    Raises:
        FileNotFoundError: Wenn die Datenbank nicht existiert
        ConfigurationError: Wenn Pflichtspalten fehlen
    """
    frames = load_queries(db_path, SOURCE_QUERIES)
    for name, df in frames.items():
        logger.info(f"  ✓ {name:<16}: {len(df):>7,} Zeilen")
    return SourceData.from_frames(**frames)
