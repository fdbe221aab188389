"""
analysis/reports.py — Die elf Report-Assembler.

Jeder Report ist eine eigenständige, beliebig oft wiederholbare Pipeline:
  Join-Kette wählen (INNER JOIN, nicht verknüpfbare Zeilen fallen weg)
  → group_reduce → Fensterfunktionen → Segmentierung
  → sortieren (fester Tie-Break) → ggf. kürzen → sink.put()

Reports hängen nur von den Quell-Recordsets ab, nie voneinander.
Leere Eingabe ergibt eine leere Ergebnistabelle mit allen Spalten.
"""

import logging
from typing import Callable, Iterable, Optional

import numpy as np
import pandas as pd

from analysis.aggregation import divide_half_up, group_reduce, percentage_of_total, round_series, summarize
from analysis.data_access import SourceData
from analysis.segmentation import film_tiers, pareto_categories, spend_tiers, tile_tiers
from analysis.windowing import assign_tiles, cumulative_sum, moving_average, rank_descending
from config import ConfigurationError, PipelineConfig, ReportResult, DEFAULT_CONFIG

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# Spalten je Ergebnistabelle (Reihenfolge = Ausgabereihenfolge)
REPORT_COLUMNS = {
    "kpi_total_revenue": ["metric", "total_amount", "total_transactions", "avg_transaction_value"],
    "kpi_revenue_by_store": ["store_id", "store_revenue", "total_transactions", "avg_payment_per_store"],
    "kpi_revenue_by_category": [
        "category", "category_revenue", "total_rentals", "avg_payment_per_rental", "revenue_percentage",
    ],
    "kpi_rental_stats": ["avg_rental_hours", "avg_rental_days", "avg_payment_per_rental"],
    "adv_monthly_revenue": ["month_name", "monthly_total", "two_month_moving_avg"],
    "adv_top_customers": ["customer_id", "customer_name", "total_spend", "total_rentals", "spend_rank"],
    "adv_customer_segments": ["customer_id", "total_spent", "customer_tier"],
    "film_segmentation": [
        "film_id", "title", "total_rentals", "total_revenue", "avg_payment_per_rental", "film_segment",
    ],
    "store_performance": [
        "store_id", "total_customers", "total_rentals", "total_revenue", "avg_payment",
        "revenue_per_customer", "rentals_per_customer",
    ],
    "customer_segmentation": ["customer_id", "customer_name", "total_spend", "rental_count", "spend_segment"],
    "pareto_analysis": ["film_id", "title", "film_revenue", "total_rentals", "pareto_category"],
}

TOTAL_REVENUE_METRIC = "Total Revenue (All time)"


# ─────────────────────────────────────────────
# HELPER
# ─────────────────────────────────────────────

def _empty(report_name: str) -> pd.DataFrame:
    return pd.DataFrame(columns=REPORT_COLUMNS[report_name])


def _finish(report_name: str, df: pd.DataFrame) -> pd.DataFrame:
    """Spaltenauswahl + frischer Index — einheitliches Tabellenformat."""
    return df[REPORT_COLUMNS[report_name]].reset_index(drop=True)


def _money(values: pd.Series) -> pd.Series:
    """Geldsummen auf Cent glätten (Float-Artefakte der Summation)."""
    return values.astype(float).round(2)


def _sort_desc(df: pd.DataFrame, value: str, tie_break: str) -> pd.DataFrame:
    """Absteigend nach value, Gleichstand aufsteigend nach tie_break (stabil)."""
    return df.sort_values([value, tie_break], ascending=[False, True], kind="mergesort")


def _inner(left: pd.DataFrame, right: pd.DataFrame, on: str) -> pd.DataFrame:
    return left.merge(right, on=on, how="inner")


def _customer_name(df: pd.DataFrame) -> pd.Series:
    # NULL in Vor- oder Nachname ergibt NULL, nicht "None"
    return df["first_name"] + " " + df["last_name"]


# ─────────────────────────────────────────────
# JOIN-KETTEN
# ─────────────────────────────────────────────

def payments_by_store(source: SourceData) -> pd.DataFrame:
    """payment ⋈ rental ⋈ inventory ⋈ store"""
    df = _inner(source.payments[["payment_id", "rental_id", "amount"]],
                source.rentals[["rental_id", "inventory_id"]], "rental_id")
    df = _inner(df, source.inventory[["inventory_id", "store_id"]], "inventory_id")
    return _inner(df, source.stores[["store_id"]], "store_id")


def payments_by_category(source: SourceData) -> pd.DataFrame:
    """payment ⋈ rental ⋈ inventory ⋈ film ⋈ film_category ⋈ category"""
    df = _inner(source.payments[["payment_id", "rental_id", "amount"]],
                source.rentals[["rental_id", "inventory_id"]], "rental_id")
    df = _inner(df, source.inventory[["inventory_id", "film_id"]], "inventory_id")
    df = _inner(df, source.films[["film_id"]], "film_id")
    df = _inner(df, source.film_categories[["film_id", "category_id"]], "film_id")
    df = _inner(df, source.categories[["category_id", "name"]], "category_id")
    return df.rename(columns={"name": "category"})


def payments_by_film(source: SourceData) -> pd.DataFrame:
    """film ⋈ inventory ⋈ rental ⋈ payment"""
    df = _inner(source.films[["film_id", "title"]],
                source.inventory[["inventory_id", "film_id"]], "film_id")
    df = _inner(df, source.rentals[["rental_id", "inventory_id"]], "inventory_id")
    return _inner(df, source.payments[["rental_id", "amount"]], "rental_id")


def payments_by_renting_customer(source: SourceData) -> pd.DataFrame:
    """customer ⋈ rental ⋈ payment — Kunde der Ausleihe, nicht der Zahlung"""
    df = _inner(source.customers[["customer_id", "first_name", "last_name"]],
                source.rentals[["rental_id", "customer_id"]], "customer_id")
    df = _inner(df, source.payments[["rental_id", "amount"]], "rental_id")
    df["customer_name"] = _customer_name(df)
    return df


def payments_by_paying_customer(source: SourceData) -> pd.DataFrame:
    """customer ⋈ payment über payment.customer_id"""
    return _inner(source.customers[["customer_id"]],
                  source.payments[["customer_id", "amount"]], "customer_id")


# ─────────────────────────────────────────────
# 1. KPI-REPORTS
# ─────────────────────────────────────────────

def build_kpi_total_revenue(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Gesamtumsatz, Anzahl Zahlungen, Ø Zahlung — eine Zeile."""
    totals = summarize(source.payments)
    if totals["count"] == 0:
        return _empty("kpi_total_revenue")

    return pd.DataFrame([{
        "metric": TOTAL_REVENUE_METRIC,
        "total_amount": round(totals["sum"], 2),
        "total_transactions": totals["count"],
        "avg_transaction_value": totals["avg"],
    }], columns=REPORT_COLUMNS["kpi_total_revenue"])


def build_kpi_revenue_by_store(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    joined = payments_by_store(source)
    if joined.empty:
        return _empty("kpi_revenue_by_store")

    df = group_reduce(joined, "store_id")
    df["sum"] = _money(df["sum"])
    df = _sort_desc(df, "sum", "store_id").rename(columns={
        "sum": "store_revenue",
        "count": "total_transactions",
        "avg": "avg_payment_per_store",
    })
    return _finish("kpi_revenue_by_store", df)


def build_kpi_revenue_by_category(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Umsatz je Filmkategorie + Anteil am Gesamtumsatz.

    Nenner ist die Summe ALLER Zahlungen (eigener Pass ohne Join),
    nicht nur der einer Kategorie zuordenbaren.
    """
    joined = payments_by_category(source)
    if joined.empty:
        return _empty("kpi_revenue_by_category")

    grand_total = round(summarize(source.payments)["sum"], 2)

    df = group_reduce(joined, "category")
    df["sum"] = _money(df["sum"])
    df["revenue_percentage"] = percentage_of_total(df["sum"], grand_total)
    df = _sort_desc(df, "sum", "category").rename(columns={
        "sum": "category_revenue",
        "count": "total_rentals",
        "avg": "avg_payment_per_rental",
    })
    return _finish("kpi_revenue_by_category", df)


def build_kpi_rental_stats(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Ø Ausleihdauer (Stunden/Tage) und Ø Zahlung je Ausleihe.

    Nur zurückgegebene Ausleihen; eine Ausleihe mit mehreren Zahlungen
    zählt entsprechend mehrfach.
    """
    returned = source.rentals[source.rentals["return_date"].notna()]
    joined = _inner(returned[["rental_id", "rental_date", "return_date"]],
                    source.payments[["rental_id", "amount"]], "rental_id")
    if joined.empty:
        return _empty("kpi_rental_stats")

    seconds = (joined["return_date"] - joined["rental_date"]).dt.total_seconds()
    return pd.DataFrame([{
        "avg_rental_hours": float(seconds.mean()) / SECONDS_PER_HOUR,
        "avg_rental_days": float(seconds.mean()) / SECONDS_PER_DAY,
        "avg_payment_per_rental": summarize(joined)["avg"],
    }], columns=REPORT_COLUMNS["kpi_rental_stats"])


# ─────────────────────────────────────────────
# 2. ADVANCED ANALYTICS
# ─────────────────────────────────────────────

def build_adv_monthly_revenue(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Monatsumsatz mit trailing Moving Average (Default: 2 Monate)."""
    payments = source.payments
    if payments.empty:
        return _empty("adv_monthly_revenue")

    payments = payments.assign(month_name=payments["payment_date"].dt.strftime("%Y-%m"))
    df = group_reduce(payments, "month_name")
    # "YYYY-MM" sortiert lexikographisch = chronologisch
    df = df.sort_values("month_name", kind="mergesort")
    df["monthly_total"] = _money(df["sum"])
    df["two_month_moving_avg"] = moving_average(
        df["monthly_total"], window=config.analysis.moving_average_window
    )
    return _finish("adv_monthly_revenue", df)


def build_adv_top_customers(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """Top-N Kunden nach Umsatz; Rang wird über ALLE Kunden vergeben, dann gekürzt."""
    joined = payments_by_renting_customer(source)
    if joined.empty:
        return _empty("adv_top_customers")

    df = group_reduce(joined, ["customer_id", "customer_name"])
    df["sum"] = _money(df["sum"])
    df = _sort_desc(df, "sum", "customer_id")
    df["spend_rank"] = rank_descending(df["sum"])
    df = df.head(config.analysis.top_n_customers).rename(columns={
        "sum": "total_spend",
        "count": "total_rentals",
    })
    return _finish("adv_top_customers", df)


def build_adv_customer_segments(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    VIP / Regular / Low über NTILE(3) nach Umsatz.

    Die Tiles werden genau einmal berechnet und für alle Labels genutzt;
    Gleichstand an einer Tile-Grenze entscheidet customer_id aufsteigend.
    """
    n_tiles = config.analysis.customer_tiles
    if n_tiles <= 0:
        raise ConfigurationError(f"customer_tiles muss > 0 sein (ist {n_tiles})")

    joined = payments_by_paying_customer(source)
    if joined.empty:
        return _empty("adv_customer_segments")

    df = group_reduce(joined, "customer_id")
    df["total_spent"] = _money(df["sum"])
    df = _sort_desc(df, "total_spent", "customer_id")
    df["customer_tier"] = tile_tiers(assign_tiles(df["total_spent"], n_tiles))
    return _finish("adv_customer_segments", df)


# ─────────────────────────────────────────────
# 3. SEGMENTIERUNG & TARGETING
# ─────────────────────────────────────────────

def build_film_segmentation(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    joined = payments_by_film(source)
    if joined.empty:
        return _empty("film_segmentation")

    df = group_reduce(joined, ["film_id", "title"])
    df["sum"] = _money(df["sum"])
    df = _sort_desc(df, "sum", "film_id").rename(columns={
        "sum": "total_revenue",
        "count": "total_rentals",
        "avg": "avg_payment_per_rental",
    })
    df["film_segment"] = film_tiers(df["total_revenue"], df["total_rentals"], config.segmentation)
    return _finish("film_segmentation", df)


def build_store_performance(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Filialvergleich inkl. Umsatz und Ausleihen je Kunde.

    rentals_per_customer teilt zwei Zählwerte ganzzahlig (abgerundet)
    und rundet erst danach auf 2 Stellen.
    """
    joined = _inner(source.stores[["store_id"]],
                    source.inventory[["inventory_id", "store_id"]], "store_id")
    joined = _inner(joined, source.rentals[["rental_id", "inventory_id", "customer_id"]], "inventory_id")
    joined = _inner(joined, source.payments[["rental_id", "amount"]], "rental_id")
    joined = _inner(joined, source.customers[["customer_id"]], "customer_id")
    if joined.empty:
        return _empty("store_performance")

    df = group_reduce(joined, "store_id", distinct={"total_customers": "customer_id"})
    df["sum"] = _money(df["sum"])
    customers = df["total_customers"].replace(0, np.nan)
    df["revenue_per_customer"] = divide_half_up(df["sum"], df["total_customers"])
    df["rentals_per_customer"] = round_series(np.floor(df["count"] / customers))
    df = _sort_desc(df, "sum", "store_id").rename(columns={
        "sum": "total_revenue",
        "count": "total_rentals",
        "avg": "avg_payment",
    })
    return _finish("store_performance", df)


def build_customer_segmentation(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """High / Medium / Low nach fixen Umsatzgrenzen (strikt ">")."""
    joined = payments_by_renting_customer(source)
    if joined.empty:
        return _empty("customer_segmentation")

    df = group_reduce(joined, ["customer_id", "customer_name"])
    df["sum"] = _money(df["sum"])
    df = _sort_desc(df, "sum", "customer_id").rename(columns={
        "sum": "total_spend",
        "count": "rental_count",
    })
    df["spend_segment"] = spend_tiers(df["total_spend"], config.segmentation)
    return _finish("customer_segmentation", df)


# ─────────────────────────────────────────────
# 4. PERFORMANCE-ANALYSE
# ─────────────────────────────────────────────

def build_pareto_analysis(source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Pareto: welche Filme tragen die ersten 80% des Umsatzes?

    Kumulative Summe zeilenweise in Umsatz-absteigender Reihenfolge,
    Gesamtsumme unabhängig davon. Ist die Schwelle einmal überschritten,
    sind alle folgenden Filme Long Tail.
    """
    joined = payments_by_film(source)
    if joined.empty:
        return _empty("pareto_analysis")

    df = group_reduce(joined, ["film_id", "title"])
    df["film_revenue"] = _money(df["sum"])
    df = _sort_desc(df, "film_revenue", "film_id")

    running, grand_total = cumulative_sum(df["film_revenue"])
    df["pareto_category"] = pareto_categories(
        running.round(2), round(grand_total, 2), share=config.analysis.pareto_share
    )
    df = df.rename(columns={"count": "total_rentals"})
    return _finish("pareto_analysis", df)


# ─────────────────────────────────────────────
# REGISTRY & AUSFÜHRUNG
# ─────────────────────────────────────────────

REPORTS: dict[str, Callable[[SourceData, PipelineConfig], pd.DataFrame]] = {
    "kpi_total_revenue":       build_kpi_total_revenue,
    "kpi_revenue_by_store":    build_kpi_revenue_by_store,
    "kpi_revenue_by_category": build_kpi_revenue_by_category,
    "kpi_rental_stats":        build_kpi_rental_stats,
    "adv_monthly_revenue":     build_adv_monthly_revenue,
    "adv_top_customers":       build_adv_top_customers,
    "adv_customer_segments":   build_adv_customer_segments,
    "film_segmentation":       build_film_segmentation,
    "store_performance":       build_store_performance,
    "customer_segmentation":   build_customer_segmentation,
    "pareto_analysis":         build_pareto_analysis,
}


def build_report(name: str, source: SourceData, config: PipelineConfig = DEFAULT_CONFIG) -> pd.DataFrame:
    """
    Berechnet einen Report vollständig im Speicher (ohne Sink).

    Raises:
        ConfigurationError: Unbekannter Report oder ungültige Konfiguration
    """
    builder = REPORTS.get(name)
    if builder is None:
        raise ConfigurationError(f"Unbekannter Report: {name!r} (verfügbar: {', '.join(REPORTS)})")
    config.validate()
    return builder(source, config)


def run_report(name: str, source: SourceData, sink, config: PipelineConfig = DEFAULT_CONFIG) -> ReportResult:
    """
    Berechnet einen Report und veröffentlicht ihn per sink.put().

    Erst wenn die Tabelle vollständig im Speicher steht, wird sie
    geschrieben — ein Fehler vorher hinterlässt die alte Tabelle.
    """
    rows = build_report(name, source, config)
    sink.put(name, rows)
    logger.info(f"  ✓ {name:<26}: {len(rows):>6,} Zeilen")
    return ReportResult(name=name, success=True, row_count=len(rows))


def run_reports(
    names: Optional[Iterable[str]],
    source: SourceData,
    sink,
    config: PipelineConfig = DEFAULT_CONFIG
) -> list[ReportResult]:
    """
    Führt mehrere Reports unabhängig voneinander aus.

    Ein fehlgeschlagener Report wird geloggt und im Ergebnis vermerkt;
    die übrigen laufen weiter. Kein Retry — gleiche Daten, gleicher Fehler.

    Args:
        names: Report-Namen; None = alle elf
        source: Quell-Snapshot
        sink: Objekt mit put(report_name, rows)
        config: Pipeline-Konfiguration

    Returns:
        Ein ReportResult je angefragtem Report, in Anfragereihenfolge
    """
    results = []
    for name in (list(names) if names is not None else list(REPORTS)):
        try:
            results.append(run_report(name, source, sink, config))
        except ConfigurationError as e:
            logger.error(f"  ✗ {name}: Konfigurationsfehler — {e}")
            results.append(ReportResult(name=name, success=False, error_message=str(e)))
        except Exception as e:
            logger.exception(f"  ✗ {name}: Fehler beim Berechnen — {e}")
            results.append(ReportResult(name=name, success=False, error_message=str(e)))
    return results
