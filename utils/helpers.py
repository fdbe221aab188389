"""
utils/helpers.py — Querschnitts-Funktionen der Pipeline.

Logging-Setup, read-only Zugriff auf die Quell-Datenbank, Schema-Check
an der Grenze SQL → pandas und die Konsolen-Zusammenfassung am Ende
eines Laufs.
"""

import logging
import sqlite3
import sys
from pathlib import Path
from typing import Optional

import pandas as pd

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"

# Markiert Handler, die setup_logging() selbst installiert hat
_PIPELINE_HANDLER = "_rental_pipeline_handler"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """
    Konfiguriert Console- und optional Datei-Logging für den Root-Logger.

    Mehrfach aufrufbar: Handler eines früheren Aufrufs werden ersetzt,
    nicht verdoppelt. Die Datei protokolliert immer DEBUG.

    Args:
        level: Console-Level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional: Pfad zur Log-Datei
    """
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S")
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        if getattr(handler, _PIPELINE_HANDLER, False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setLevel(getattr(logging, level.upper(), logging.INFO))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _PIPELINE_HANDLER, True)
        root_logger.addHandler(handler)

    # Chart- und Excel-Bibliotheken loggen sehr gesprächig
    for noisy_lib in ["matplotlib", "PIL", "openpyxl"]:
        logging.getLogger(noisy_lib).setLevel(logging.WARNING)


def connect_readonly(db_path: Path) -> sqlite3.Connection:
    """
    Öffnet die Quell-Datenbank im read-only Modus (SQLite-URI mode=ro).

    Raises:
        FileNotFoundError: Wenn die Datenbankdatei nicht existiert
    """
    db_path = Path(db_path)
    if not db_path.exists():
        raise FileNotFoundError(f"Datenbank nicht gefunden: {db_path}")
    return sqlite3.connect(f"{db_path.resolve().as_uri()}?mode=ro", uri=True)


def load_queries(db_path: Path, queries: dict) -> dict:
    """
    Führt mehrere Queries über EINE read-only Verbindung aus.

    Args:
        db_path: Pfad zur SQLite-Datenbankdatei
        queries: {name: SQL}

    Returns:
        {name: DataFrame}

    Raises:
        FileNotFoundError: Wenn die Datenbankdatei nicht existiert
        sqlite3.Error / pandas.errors.DatabaseError: Bei SQL-Fehlern
    """
    conn = connect_readonly(db_path)
    try:
        return {name: pd.read_sql_query(sql, conn) for name, sql in queries.items()}
    finally:
        conn.close()


def missing_columns(df: Optional[pd.DataFrame], name: str, required_columns: list) -> list:
    """
    Liefert die Pflichtspalten, die in df fehlen (leer = Schema ok).

    Leere DataFrames sind gültig; nur die Struktur zählt.
    """
    if df is None:
        logger.error(f"Schema-Check [{name}]: kein DataFrame")
        return list(required_columns)

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        logger.error(f"Schema-Check [{name}]: Spalten fehlen: {missing}")
    return missing


def ensure_output_dir(output_dir: Path) -> Path:
    """Legt das Output-Verzeichnis an und gibt den absoluten Pfad zurück."""
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir.resolve()


def print_pipeline_summary(result) -> None:
    """
    Konsolen-Zusammenfassung eines Pipeline-Laufs.

    Args:
        result: PipelineResult
    """
    line = "=" * 64
    print(f"\n{line}")
    print("  RENTAL-BI PIPELINE")
    print(line)

    status = "✅ ERFOLGREICH" if result.success else "❌ FEHLGESCHLAGEN"
    print(f"  Status:   {status}")
    if result.error_message:
        print(f"  Fehler:   {result.error_message}")
    print(f"  Laufzeit: {result.duration_seconds:.1f} s")
    if result.phases_completed:
        print(f"  Phasen:   {' → '.join(result.phases_completed)}")

    if result.reports:
        ok = sum(1 for r in result.reports if r.success)
        print(f"\n  📋 Reports ({ok}/{len(result.reports)}):")
        for report in result.reports:
            if report.success:
                print(f"    ✓ {report.name:<26} {report.row_count:>7,} Zeilen")
            else:
                print(f"    ✗ {report.name:<26} {report.error_message}")

    if result.output_files:
        print("\n  📁 Dateien:")
        for file_type, path in result.output_files.items():
            path = Path(path)
            size_kb = path.stat().st_size / 1024 if path.exists() else 0
            print(f"    {file_type:<20} {path.name} ({size_kb:.1f} KB)")

    print(f"{line}\n")
