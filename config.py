"""
config.py — Zentrale Konfiguration für die Rental-BI Pipeline.

Alle Parameter an einem Ort: Schwellwerte der Segmentierung, Fenster-
größen, Pfade und Export-Optionen. Umgebungsabhängige Pfade kommen aus
.env / Umgebungsvariablen, alles andere aus den Dataclass-Defaults.
"""

from dataclasses import dataclass, field
from pathlib import Path
from datetime import datetime
from typing import Optional
import os
from dotenv import load_dotenv

load_dotenv()

# ─────────────────────────────────────────────
# Projekt-Pfade
# ─────────────────────────────────────────────
BASE_DIR = Path(__file__).parent
OUTPUT_DIR = BASE_DIR / "output"
DB_PATH = Path(os.getenv("RENTAL_DB_PATH", BASE_DIR / "database" / "rental.db"))
RESULTS_DB_PATH = Path(os.getenv("RESULTS_DB_PATH", OUTPUT_DIR / "reports.db"))


class ConfigurationError(ValueError):
    """Ungültige Konfiguration — wird vor jeder Berechnung gemeldet."""


# ─────────────────────────────────────────────
# Pipeline-Konfiguration als Dataclass
# ─────────────────────────────────────────────
@dataclass
class AnalysisConfig:
    top_n_customers: int = 10
    moving_average_window: int = 2     # Monate, trailing inklusive aktuellem Monat
    customer_tiles: int = 3            # VIP / Regular / Low
    pareto_share: float = 0.80         # 80/20-Regel


@dataclass
class SegmentationConfig:
    # Film-Tiers (strikt ">")
    blockbuster_revenue: float = 5000.0
    blockbuster_rentals: int = 100
    hit_revenue: float = 3000.0
    # Kunden-Tiers nach fixen Grenzen (strikt ">")
    high_spend: float = 1000.0
    medium_spend: float = 500.0


@dataclass
class VisualizationConfig:
    dpi: int = 150
    figsize_single: tuple = (12, 7)
    colors: dict = field(default_factory=lambda: {
        "primary":   "#1B4F72",
        "secondary": "#2E86C1",
        "accent":    "#3498DB",
        "positive":  "#1E8449",
        "negative":  "#922B21",
        "neutral":   "#7F8C8D",
        "tiers": ["#1B4F72", "#2E86C1", "#AED6F1"],
    })
    font_family: str = "DejaVu Sans"


@dataclass
class ExportConfig:
    excel_filename: str = "rental_reports.xlsx"
    text_filename: str = "report_{date}.txt"
    preview_rows: int = 10


@dataclass
class PipelineConfig:
    """Master-Konfiguration — wird an alle Pipeline-Phasen weitergereicht."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    output_dir: Path = OUTPUT_DIR
    db_path: Path = DB_PATH
    results_db_path: Path = RESULTS_DB_PATH
    report_title: str = "Rental Performance Report"
    company_name: str = "DVD Rental Co."

    def validate(self) -> None:
        """
        Prüft alle Parameter, bevor irgendein Report rechnet.

        Raises:
            ConfigurationError: bei ungültigen Fenstern, Tile-Anzahl,
                                Top-N oder Pareto-Anteil
        """
        analysis = self.analysis
        if analysis.customer_tiles <= 0:
            raise ConfigurationError(
                f"customer_tiles muss > 0 sein (ist {analysis.customer_tiles})"
            )
        if analysis.moving_average_window < 1:
            raise ConfigurationError(
                f"moving_average_window muss >= 1 sein (ist {analysis.moving_average_window})"
            )
        if analysis.top_n_customers < 1:
            raise ConfigurationError(
                f"top_n_customers muss >= 1 sein (ist {analysis.top_n_customers})"
            )
        if not 0 < analysis.pareto_share <= 1:
            raise ConfigurationError(
                f"pareto_share muss in (0, 1] liegen (ist {analysis.pareto_share})"
            )


@dataclass
class ReportResult:
    """Status eines einzelnen Report-Laufs."""
    name: str
    success: bool
    row_count: int = 0
    error_message: Optional[str] = None


@dataclass
class PipelineResult:
    """Rückgabe-Objekt der Pipeline — strukturierter Status statt lose Variablen."""
    success: bool
    start_time: datetime
    end_time: Optional[datetime] = None
    phases_completed: list = field(default_factory=list)
    reports: list = field(default_factory=list)
    output_files: dict = field(default_factory=dict)
    error_message: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        if self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return 0.0

    @property
    def failed_reports(self) -> list:
        return [r.name for r in self.reports if not r.success]


# ─────────────────────────────────────────────
# Standard-Konfiguration (wird in main.py genutzt)
# ─────────────────────────────────────────────
DEFAULT_CONFIG = PipelineConfig()
