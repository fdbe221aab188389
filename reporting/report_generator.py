"""
reporting/report_generator.py — Text & Excel Export der Report-Tabellen.

Erstellt aus den materialisierten Ergebnistabellen:
- Text-Report: Maschinell lesbar, Git-versionierbar, schnell
- Excel-Report: Ein Sheet je Report, Business-User friendly

Design: Report-Layer kennt nur fertige DataFrames, keine Business-Logik.
"""

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from analysis.segmentation import TOP_REVENUE
from config import PipelineConfig

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    "kpi_total_revenue":       "GESAMTUMSATZ",
    "kpi_revenue_by_store":    "UMSATZ JE FILIALE",
    "kpi_revenue_by_category": "UMSATZ JE FILMKATEGORIE",
    "kpi_rental_stats":        "AUSLEIHDAUER & Ø ZAHLUNG",
    "adv_monthly_revenue":     "MONATSUMSATZ (2-MONATS-MOVING-AVERAGE)",
    "adv_top_customers":       "TOP-KUNDEN NACH UMSATZ",
    "adv_customer_segments":   "KUNDEN-TIERS (VIP / REGULAR / LOW)",
    "film_segmentation":       "FILM-SEGMENTIERUNG",
    "store_performance":       "FILIAL-VERGLEICH",
    "customer_segmentation":   "KUNDEN-SEGMENTIERUNG (HIGH / MEDIUM / LOW)",
    "pareto_analysis":         "PARETO-ANALYSE (80/20)",
}

# Corporate-Farben
HEADER_BG = "1B4F72"
HEADER_FG = "FFFFFF"


# ─────────────────────────────────────────────
# TEXT REPORT
# ─────────────────────────────────────────────

def _executive_summary(tables: dict) -> str:
    lines = []
    totals = tables.get("kpi_total_revenue")
    if totals is not None and len(totals) > 0:
        row = totals.iloc[0]
        lines.append(f"Gesamtumsatz:             ${row['total_amount']:>12,.2f}")
        lines.append(f"Zahlungen:                 {int(row['total_transactions']):>12,}")
        lines.append(f"Ø Zahlung:                ${row['avg_transaction_value']:>12,.2f}")

    stats = tables.get("kpi_rental_stats")
    if stats is not None and len(stats) > 0:
        row = stats.iloc[0]
        lines.append(f"Ø Ausleihdauer:            {row['avg_rental_days']:>9,.2f} Tage")

    pareto = tables.get("pareto_analysis")
    if pareto is not None and len(pareto) > 0:
        top = int((pareto["pareto_category"] == TOP_REVENUE).sum())
        lines.append(
            f"Pareto:                    {top:,} von {len(pareto):,} Filmen "
            f"({top / len(pareto) * 100:.1f}%) tragen 80% des Umsatzes"
        )

    return "\n".join(lines) if lines else "  Keine Daten vorhanden."


def generate_text_report(tables: dict, config: PipelineConfig, output_dir: Path) -> Path:
    """
    Generiert strukturierten Text-Report aus allen materialisierten Tabellen.

    Layout: Header → Executive Summary → je Report eine Sektion mit
    den ersten Zeilen (export.preview_rows) → Footer.

    Args:
        tables: {report_name: DataFrame}
        config: Pipeline-Konfiguration
        output_dir: Ausgabe-Pfad

    Returns:
        Pfad zur generierten Report-Datei
    """
    now = datetime.now()
    date_str = now.strftime("%Y-%m-%d")
    time_str = now.strftime("%H:%M:%S")
    preview = config.export.preview_rows

    border = "═" * 72
    thin_line = "─" * 72

    report_text = f"""{border}
{config.company_name.upper()} — {config.report_title.upper()}
Generiert: {date_str} {time_str}
{border}

EXECUTIVE SUMMARY
{thin_line}
{_executive_summary(tables)}
"""

    for name, df in tables.items():
        title = SECTION_TITLES.get(name, name.upper())
        report_text += f"\n{title}  [{name}, {len(df):,} Zeilen]\n{thin_line}\n"
        if df.empty:
            report_text += "  (leer)\n"
        else:
            report_text += df.head(preview).to_string(index=False) + "\n"
            if len(df) > preview:
                report_text += f"  … {len(df) - preview:,} weitere Zeilen\n"

    report_text += f"""
{border}
Ende des Reports — {config.company_name} | {date_str}
{border}
"""

    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / config.export.text_filename.format(date=date_str)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(report_text)

    logger.info(f"Text-Report gespeichert: {output_path.name} ({output_path.stat().st_size / 1024:.1f} KB)")
    return output_path


# ─────────────────────────────────────────────
# EXCEL REPORT
# ─────────────────────────────────────────────

def _header_style(ws, columns: list) -> None:
    """Schreibt eine Header-Zeile mit Formatierung."""
    for col, val in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col, value=val)
        cell.font = Font(bold=True, color=HEADER_FG, name="Calibri", size=10)
        cell.fill = PatternFill(fill_type="solid", fgColor=HEADER_BG)
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _auto_width(ws, min_width: int = 12, max_width: int = 40) -> None:
    for col in ws.columns:
        max_len = max((len(str(cell.value or "")) for cell in col), default=0)
        ws.column_dimensions[get_column_letter(col[0].column)].width = (
            max(min_width, min(max_len + 3, max_width))
        )


def generate_excel_report(tables: dict, config: PipelineConfig, output_dir: Path) -> Path:
    """
    Generiert Excel-Workbook mit einem Sheet je Report-Tabelle.

    Sheet-Name = Report-Name (Excel-Limit 31 Zeichen), Header formatiert,
    erste Zeile fixiert.

    Returns:
        Pfad zur generierten Excel-Datei
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / config.export.excel_filename

    # openpyxl braucht mindestens ein sichtbares Sheet
    sheets = tables or {"info": pd.DataFrame({"hinweis": ["Keine Reports materialisiert"]})}

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for name, df in sheets.items():
            sheet = name[:31]
            df.to_excel(writer, sheet_name=sheet, index=False)
            ws = writer.sheets[sheet]
            _header_style(ws, list(df.columns))
            ws.freeze_panes = "A2"
            _auto_width(ws)

    logger.info(f"Excel-Report gespeichert: {output_path.name} ({output_path.stat().st_size / 1024:.1f} KB)")
    return output_path
