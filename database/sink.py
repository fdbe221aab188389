"""
database/sink.py — Ziel für materialisierte Report-Tabellen.

Vertrag: put(report_name, rows) ersetzt den bisherigen Inhalt unter
diesem Namen vollständig. Leser sehen entweder die alte oder die neue
Tabelle, nie einen Zwischenstand: SQLiteSink schreibt zuerst in eine
Staging-Tabelle und tauscht sie dann in einer einzigen Transaktion aus.
"""

import logging
import re
import sqlite3
from pathlib import Path

import pandas as pd

from config import ConfigurationError

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
STAGING_SUFFIX = "__staging"


def _check_table_name(name: str) -> None:
    if not _TABLE_NAME.match(name or ""):
        raise ConfigurationError(f"Ungültiger Tabellenname: {name!r}")


class MemorySink:
    """Dict-basierter Sink für Tests und Trockenläufe."""

    def __init__(self):
        self.tables: dict = {}

    def put(self, report_name: str, rows: pd.DataFrame) -> None:
        _check_table_name(report_name)
        self.tables[report_name] = rows.copy(deep=True)

    def get(self, report_name: str) -> pd.DataFrame:
        return self.tables[report_name].copy(deep=True)

    def names(self) -> list:
        return sorted(self.tables)


class SQLiteSink:
    """
    Materialisiert Reports als Tabellen in einer eigenen Ergebnis-Datenbank.

    Die Quell-Datenbank bleibt unberührt (read-only); Ergebnisse landen
    in results_db_path.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    def put(self, report_name: str, rows: pd.DataFrame) -> None:
        """
        Ersetzt die Tabelle report_name atomar durch rows.

        Ablauf: Staging-Tabelle befüllen (eigene Transaktion), danach
        DROP alt + RENAME staging in EINER Transaktion.

        Raises:
            ConfigurationError: Ungültiger Tabellenname
            sqlite3.Error: Bei Schreibfehlern (alte Tabelle bleibt erhalten)
        """
        _check_table_name(report_name)
        staging = f"{report_name}{STAGING_SUFFIX}"
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.db_path)
        try:
            rows.to_sql(staging, conn, if_exists="replace", index=False)

            # Autocommit aus → Transaktion manuell steuern
            conn.isolation_level = None
            conn.execute("BEGIN IMMEDIATE")
            try:
                conn.execute(f'DROP TABLE IF EXISTS "{report_name}"')
                conn.execute(f'ALTER TABLE "{staging}" RENAME TO "{report_name}"')
                conn.execute("COMMIT")
            except sqlite3.Error:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()

        logger.debug(f"Tabelle {report_name} ersetzt ({len(rows):,} Zeilen)")

    def get(self, report_name: str) -> pd.DataFrame:
        _check_table_name(report_name)
        conn = sqlite3.connect(self.db_path)
        try:
            return pd.read_sql_query(f'SELECT * FROM "{report_name}"', conn)
        finally:
            conn.close()

    def names(self) -> list:
        conn = sqlite3.connect(self.db_path)
        try:
            cursor = conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            )
            return [row[0] for row in cursor if not row[0].endswith(STAGING_SUFFIX)]
        finally:
            conn.close()
