"""
visualization/charts.py — Business-Charts aus den materialisierten Reports.

Jedes Chart liest ausschließlich eine fertige Report-Tabelle; gerechnet
wird hier nur, was für die Darstellung nötig ist (z.B. Umsatzanteil
kumuliert für die Pareto-Kurve).

Design-Prinzipien:
- Chart-Titel erklärt den Insight, nicht nur "was"
- Konsistente Farbpalette (Corporate Blue)
- Quelle/Datum immer als Fußzeile sichtbar
"""

import logging
import warnings
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")  # Non-interactive backend für headless Execution
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import seaborn as sns
from pathlib import Path
from datetime import datetime

from analysis.segmentation import LONG_TAIL, TOP_REVENUE
from config import VisualizationConfig

logger = logging.getLogger(__name__)
warnings.filterwarnings("ignore", category=FutureWarning)


# ─────────────────────────────────────────────
# GLOBAL STYLE SETUP
# ─────────────────────────────────────────────

def setup_style(config: VisualizationConfig) -> None:
    """Setzt globales Matplotlib/Seaborn-Styling einmal am Pipeline-Start."""
    sns.set_theme(style="whitegrid")
    plt.rcParams.update({
        "font.family":       config.font_family,
        "font.size":         10,
        "axes.titlesize":    13,
        "axes.titleweight":  "bold",
        "axes.labelsize":    10,
        "axes.spines.top":   False,
        "axes.spines.right": False,
        "axes.edgecolor":    "#CCCCCC",
        "grid.color":        "#E8E8E8",
        "grid.linestyle":    "--",
        "savefig.dpi":       config.dpi,
        "savefig.bbox":      "tight",
        "savefig.facecolor": "white",
    })
    logger.info("Chart-Styling konfiguriert")


def _add_chart_footer(ax, source: str = "Rental DB") -> None:
    """Fügt Quelle + Generierungsdatum als Fußzeile ein."""
    date_str = datetime.now().strftime("%d.%m.%Y")
    ax.annotate(
        f"Quelle: {source}  |  Erstellt: {date_str}",
        xy=(1, -0.14), xycoords="axes fraction",
        ha="right", va="bottom",
        fontsize=7, color="#999999",
        style="italic"
    )


def _format_dollar(val: float, pos=None) -> str:
    """Axis-Formatter: Dollar mit K/M-Kürzeln."""
    if abs(val) >= 1_000_000:
        return f"${val/1_000_000:.1f}M"
    elif abs(val) >= 1_000:
        return f"${val/1_000:.0f}K"
    return f"${val:.0f}"


def _save(fig, output_dir: Path, filename: str, config: VisualizationConfig) -> Path:
    output_path = output_dir / filename
    fig.savefig(output_path, dpi=config.dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Chart gespeichert: {output_path.name}")
    return output_path


# ─────────────────────────────────────────────
# CHART 1: MONATSUMSATZ + MOVING AVERAGE
# ─────────────────────────────────────────────

def create_monthly_trend(monthly_df: pd.DataFrame, config: VisualizationConfig, output_dir: Path) -> Path:
    """
    Monatsumsatz als Balken, 2-Monats-Moving-Average als Linie.

    Args:
        monthly_df: adv_monthly_revenue
    """
    colors = config.colors
    fig, ax = plt.subplots(figsize=config.figsize_single)

    x = np.arange(len(monthly_df))
    ax.bar(x, monthly_df["monthly_total"], color=colors["accent"], alpha=0.6,
           label="Monatsumsatz", zorder=2)
    ax.plot(x, monthly_df["two_month_moving_avg"], color=colors["primary"],
            linewidth=2.5, marker="o", label="2-Monats-Moving-Average", zorder=3)

    ax.set_xticks(x)
    ax.set_xticklabels(monthly_df["month_name"], rotation=45, ha="right", fontsize=8)
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(_format_dollar))
    ax.set_title("Monatlicher Umsatzverlauf  |  geglättet über 2 Monate")
    ax.set_ylabel("Umsatz")
    ax.legend(loc="upper left", framealpha=0.9)
    _add_chart_footer(ax)

    return _save(fig, output_dir, "chart_01_monthly_trend.png", config)


# ─────────────────────────────────────────────
# CHART 2: UMSATZ JE KATEGORIE
# ─────────────────────────────────────────────

def create_category_revenue(category_df: pd.DataFrame, config: VisualizationConfig, output_dir: Path) -> Path:
    """
    Horizontaler Balken je Filmkategorie, beschriftet mit Umsatzanteil.

    Args:
        category_df: kpi_revenue_by_category (bereits umsatz-absteigend)
    """
    fig, ax = plt.subplots(figsize=config.figsize_single)

    sns.barplot(
        data=category_df, x="category_revenue", y="category",
        color=config.colors["secondary"], ax=ax
    )
    for i, (revenue, pct) in enumerate(zip(category_df["category_revenue"], category_df["revenue_percentage"])):
        ax.text(revenue * 1.01, i, f"{pct:.2f}%", va="center", fontsize=8, color="#444444")

    ax.xaxis.set_major_formatter(mticker.FuncFormatter(_format_dollar))
    ax.set_xlabel("Umsatz")
    ax.set_ylabel("")
    ax.set_title("Umsatz je Filmkategorie  |  Anteil am Gesamtumsatz")
    _add_chart_footer(ax)

    return _save(fig, output_dir, "chart_02_category_revenue.png", config)


# ─────────────────────────────────────────────
# CHART 3: PARETO-KURVE
# ─────────────────────────────────────────────

def create_pareto_curve(pareto_df: pd.DataFrame, config: VisualizationConfig, output_dir: Path) -> Path:
    """
    Kumulierter Umsatzanteil über Filme (umsatz-absteigend) mit 80%-Linie.

    Args:
        pareto_df: pareto_analysis
    """
    colors = config.colors
    fig, ax = plt.subplots(figsize=config.figsize_single)

    revenue = pareto_df["film_revenue"].astype(float)
    cumulative_pct = revenue.cumsum() / revenue.sum() * 100
    film_pct = np.arange(1, len(pareto_df) + 1) / len(pareto_df) * 100
    is_top = (pareto_df["pareto_category"] == TOP_REVENUE).to_numpy()

    ax.plot(film_pct, cumulative_pct, color=colors["primary"], linewidth=2.5, zorder=3)
    ax.fill_between(film_pct, 0, cumulative_pct, where=is_top,
                    color=colors["accent"], alpha=0.25, label=TOP_REVENUE)
    ax.fill_between(film_pct, 0, cumulative_pct, where=~is_top,
                    color=colors["neutral"], alpha=0.15, label=LONG_TAIL)
    ax.axhline(80, color=colors["negative"], linestyle="--", linewidth=1)

    top_share = is_top.mean() * 100 if len(is_top) else 0.0
    ax.set_title(f"Pareto-Analyse  |  {top_share:.1f}% der Filme tragen 80% des Umsatzes")
    ax.set_xlabel("Anteil Filme (%)")
    ax.set_ylabel("Kumulierter Umsatzanteil (%)")
    ax.set_ylim(0, 105)
    ax.legend(loc="lower right")
    _add_chart_footer(ax)

    return _save(fig, output_dir, "chart_03_pareto_curve.png", config)


# ─────────────────────────────────────────────
# CHART 4: KUNDEN-TIERS
# ─────────────────────────────────────────────

def create_customer_tiers(segments_df: pd.DataFrame, config: VisualizationConfig, output_dir: Path) -> Path:
    """
    Kundenanzahl und Umsatz je Tier (VIP / Regular / Low) nebeneinander.

    Args:
        segments_df: adv_customer_segments
    """
    tiers = ["VIP", "Regular", "Low"]
    summary = (
        segments_df.groupby("customer_tier")["total_spent"]
        .agg(["count", "sum"])
        .reindex(tiers)
        .fillna(0)
    )
    tier_colors = config.colors["tiers"]

    fig, (ax_count, ax_rev) = plt.subplots(1, 2, figsize=(14, 6))

    ax_count.bar(tiers, summary["count"], color=tier_colors)
    ax_count.set_title("Kunden je Tier")
    ax_count.set_ylabel("Anzahl Kunden")

    ax_rev.bar(tiers, summary["sum"], color=tier_colors)
    ax_rev.yaxis.set_major_formatter(mticker.FuncFormatter(_format_dollar))
    ax_rev.set_title("Umsatz je Tier")
    ax_rev.set_ylabel("Umsatz")
    _add_chart_footer(ax_rev)

    fig.tight_layout(pad=3)
    return _save(fig, output_dir, "chart_04_customer_tiers.png", config)


# ─────────────────────────────────────────────
# ALLE CHARTS ERZEUGEN
# ─────────────────────────────────────────────

CHARTS = {
    "monthly_trend":    ("adv_monthly_revenue",     create_monthly_trend),
    "category_revenue": ("kpi_revenue_by_category", create_category_revenue),
    "pareto_curve":     ("pareto_analysis",         create_pareto_curve),
    "customer_tiers":   ("adv_customer_segments",   create_customer_tiers),
}


def create_all_charts(tables: dict, config: VisualizationConfig, output_dir: Path) -> dict:
    """
    Erstellt alle Charts, für deren Report-Tabelle Daten vorliegen.

    Ein fehlgeschlagenes Chart wird geloggt, die übrigen laufen weiter.

    Args:
        tables: {report_name: DataFrame}
        config: Visualisierungs-Konfiguration
        output_dir: Ausgabe-Pfad

    Returns:
        Dict {chart_name: Path} für alle erzeugten Charts
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    setup_style(config)

    chart_paths = {}
    for chart_name, (report_name, create) in CHARTS.items():
        df = tables.get(report_name)
        if df is None or df.empty:
            logger.info(f"Chart {chart_name} übersprungen: {report_name} leer")
            continue
        try:
            chart_paths[chart_name] = create(df, config, output_dir)
        except Exception as e:
            logger.error(f"Chart {chart_name} fehlgeschlagen: {e}")

    logger.info(f"✅ {len(chart_paths)}/{len(CHARTS)} Charts erfolgreich erstellt")
    return chart_paths
