"""
main.py — Rental-BI Pipeline: Einstiegspunkt & Orchestrierung.

Orchestriert 5 Phasen:
  1. Setup     → Quell-Datenbank (synthetisch, falls nicht vorhanden)
  2. Load      → Quell-Recordsets lesen → SourceData
  3. Reports   → elf Report-Assembler → Ergebnis-Datenbank (atomarer Replace)
  4. Visualize → Charts aus den Report-Tabellen
  5. Export    → Text + Excel Report

Verwendung:
  python main.py                                   # alle elf Reports
  python main.py --report pareto_analysis          # einzelne Reports (mehrfach möglich)
  python main.py --list                            # verfügbare Reports
  python main.py --force-recreate-db               # Quell-DB neu aufbauen
  python main.py --skip-charts --skip-excel        # nur Tabellen materialisieren
  python main.py --log-level DEBUG                 # Verbose Logging

Stack: Python 3.10+ | SQLite | Pandas | NumPy | Matplotlib/Seaborn | openpyxl
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from config import PipelineConfig, PipelineResult
from database.setup_db import setup_database
from database.sink import SQLiteSink
from analysis.data_access import SourceData, load_source_data
from analysis.reports import REPORTS, run_reports
from visualization.charts import create_all_charts
from reporting.report_generator import generate_text_report, generate_excel_report
from utils.helpers import setup_logging, ensure_output_dir, print_pipeline_summary

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# CLI ARGUMENT PARSER
# ─────────────────────────────────────────────

def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parst CLI-Argumente.

    Der Kern braucht nur "welche Reports"; alles andere steuert
    Setup und Export.
    """
    parser = argparse.ArgumentParser(
        description="Rental-BI Pipeline — KPIs, Segmentierung & Pareto-Analyse",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Beispiele:
  python main.py                               Alle Reports
  python main.py --report kpi_total_revenue    Nur den Gesamtumsatz
  python main.py --list                        Reports auflisten
        """
    )

    parser.add_argument(
        "--report",
        action="append",
        dest="reports",
        metavar="NAME",
        help="Report ausführen (mehrfach möglich, default: alle)"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Verfügbare Reports auflisten und beenden"
    )
    parser.add_argument(
        "--force-recreate-db",
        action="store_true",
        help="Quell-Datenbank löschen und neu aufbauen (neue Testdaten)"
    )
    parser.add_argument(
        "--skip-charts",
        action="store_true",
        help="Visualisierungen überspringen"
    )
    parser.add_argument(
        "--skip-excel",
        action="store_true",
        help="Excel-Export überspringen"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging-Level (default: INFO)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Alternatives Output-Verzeichnis"
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="Alternative Quell-Datenbank"
    )

    return parser.parse_args(argv)


# ─────────────────────────────────────────────
# PIPELINE PHASEN
# ─────────────────────────────────────────────

def phase1_setup(config: PipelineConfig, force_recreate: bool = False) -> bool:
    """Phase 1: Quell-Datenbank bereitstellen (idempotent)."""
    logger.info("📦 Phase 1/5: Datenbank Setup...")
    success = setup_database(config.db_path, force_recreate=force_recreate)
    if success:
        logger.info(f"  ✓ Datenbank bereit: {config.db_path}")
    return success


def phase2_load(config: PipelineConfig) -> SourceData:
    """Phase 2: Quell-Recordsets lesen."""
    logger.info("🔍 Phase 2/5: Quelldaten laden...")
    source = load_source_data(config.db_path)
    for name, count in source.row_counts().items():
        logger.info(f"  ✓ {name:<20}: {count:>6,} Zeilen")
    return source


def phase3_reports(source: SourceData, config: PipelineConfig, names: Optional[list]) -> tuple[list, dict]:
    """
    Phase 3: Reports berechnen und in der Ergebnis-DB materialisieren.

    Returns:
        (ReportResults, {report_name: DataFrame} der erfolgreichen Reports)
    """
    logger.info("📊 Phase 3/5: Reports berechnen...")
    sink = SQLiteSink(config.results_db_path)
    results = run_reports(names, source, sink, config)

    tables = {r.name: sink.get(r.name) for r in results if r.success}
    logger.info(f"  → {len(tables)}/{len(results)} Reports erfolgreich")
    return results, tables


def phase4_visualize(tables: dict, config: PipelineConfig, skip: bool = False) -> dict:
    """Phase 4: Charts aus den Report-Tabellen."""
    if skip:
        logger.info("🎨 Phase 4/5: Charts übersprungen (--skip-charts)")
        return {}

    logger.info("🎨 Phase 4/5: Charts werden erstellt...")
    return create_all_charts(tables, config.visualization, config.output_dir)


def phase5_export(tables: dict, config: PipelineConfig, skip_excel: bool = False) -> dict:
    """Phase 5: Text- und Excel-Report."""
    logger.info("📝 Phase 5/5: Export...")
    output_files = {}

    try:
        output_files["text_report"] = generate_text_report(tables, config, config.output_dir)
    except OSError as e:
        logger.error(f"  ✗ Text-Report fehlgeschlagen: {e}")

    if not skip_excel:
        try:
            output_files["excel_report"] = generate_excel_report(tables, config, config.output_dir)
        except (OSError, ValueError) as e:
            logger.error(f"  ✗ Excel-Report fehlgeschlagen: {e}")

    return output_files


# ─────────────────────────────────────────────
# PIPELINE ORCHESTRIERUNG
# ─────────────────────────────────────────────

def run_pipeline(config: PipelineConfig, args: argparse.Namespace) -> PipelineResult:
    """
    Orchestriert die komplette Pipeline.

    Ein fehlgeschlagener Report stoppt die anderen nicht; success ist
    nur True, wenn ALLE angefragten Reports materialisiert wurden.
    """
    result = PipelineResult(success=False, start_time=datetime.now())

    logger.info("🚀 Rental-BI Pipeline gestartet")
    logger.info(f"   Quelle:    {config.db_path}")
    logger.info(f"   Ergebnis:  {config.results_db_path}")

    try:
        if not phase1_setup(config, force_recreate=args.force_recreate_db):
            result.error_message = "Datenbank-Setup fehlgeschlagen"
            return result
        result.phases_completed.append("Setup")

        source = phase2_load(config)
        result.phases_completed.append("Load")

        reports, tables = phase3_reports(source, config, args.reports)
        result.reports = reports
        result.phases_completed.append("Reports")

        chart_paths = phase4_visualize(tables, config, skip=args.skip_charts)
        result.phases_completed.append("Visualize")

        output_files = phase5_export(tables, config, skip_excel=args.skip_excel)
        output_files.update(chart_paths)
        result.phases_completed.append("Export")
        result.output_files = {k: str(v) for k, v in output_files.items() if v}

        result.success = not result.failed_reports
        if result.failed_reports:
            result.error_message = f"Fehlgeschlagene Reports: {', '.join(result.failed_reports)}"

    except Exception as e:
        logger.exception(f"💥 Unerwarteter Pipeline-Fehler: {e}")
        result.error_message = str(e)

    result.end_time = datetime.now()
    if result.success:
        logger.info(f"✅ Pipeline erfolgreich in {result.duration_seconds:.1f}s abgeschlossen")
    return result


# ─────────────────────────────────────────────
# EINSTIEGSPUNKT
# ─────────────────────────────────────────────

def main(argv: Optional[list] = None) -> int:
    """
    Haupt-Einstiegspunkt mit CLI-Integration.

    Returns:
        Exit-Code: 0 = Erfolg, 1 = Fehler
    """
    args = parse_args(argv)

    if args.list:
        for name in REPORTS:
            print(name)
        return 0

    config = PipelineConfig()
    if args.output_dir:
        config.output_dir = args.output_dir
        config.results_db_path = args.output_dir / config.results_db_path.name
    if args.db_path:
        config.db_path = args.db_path
    ensure_output_dir(config.output_dir)

    setup_logging(level=args.log_level, log_file=config.output_dir / "pipeline.log")

    result = run_pipeline(config, args)
    print_pipeline_summary(result)

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
