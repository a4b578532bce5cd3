"""
Aggregation Engine

Enterprise rules:
- Pure functions only
- No I/O
- Always recomputed from the (possibly filtered) record list

Grouping is done on a pandas frame of the records. Group order before
ranking is first appearance in the input; ties in volume keep that order.
"""

from __future__ import annotations

import calendar
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from vehicle_registrations.aggregation.filters import RecordFilter, filter_frame
from vehicle_registrations.aggregation.models import (
    AggregatedSummary,
    Breakdown,
    BreakdownEntry,
    BreakdownResult,
    CompositeRow,
    Dimension,
    ModelVolume,
    MonthlyVolume,
    NoMatchingData,
    RankedCount,
    SummaryResult,
)
from vehicle_registrations.data.records import VehicleRecord, records_to_frame
from vehicle_registrations.utils.config import AnalysisSettings, settings as default_settings

COMPOSITE_SEPARATOR = "\x1f"

RecordsOrFrame = Union[Sequence[VehicleRecord], pd.DataFrame]

# name, dimension, limited to top_n (False = full distribution)
SecondarySpec = Tuple[str, Dimension, bool]

DEFAULT_SECONDARY: Dict[Dimension, Tuple[SecondarySpec, ...]] = {
    Dimension.MANUFACTURER: (
        ("top_models", Dimension.MODEL, True),
        ("fuel_distribution", Dimension.FUEL_TYPE, False),
        ("state_distribution", Dimension.STATE, True),
    ),
    Dimension.FUEL_TYPE: (
        ("manufacturers", Dimension.MANUFACTURER, True),
        ("top_models", Dimension.MODEL, True),
        ("state_distribution", Dimension.STATE, True),
    ),
    Dimension.STATE: (
        ("top_cities", Dimension.CITY, True),
        ("top_manufacturers", Dimension.MANUFACTURER, True),
    ),
    Dimension.CITY: (
        ("top_manufacturers", Dimension.MANUFACTURER, True),
    ),
    Dimension.OFFICE: (
        ("top_manufacturers", Dimension.MANUFACTURER, True),
        ("fuel_distribution", Dimension.FUEL_TYPE, False),
        ("top_models", Dimension.MODEL, True),
    ),
    Dimension.MONTH: (
        ("top_manufacturers", Dimension.MANUFACTURER, True),
        ("top_fuel_types", Dimension.FUEL_TYPE, True),
    ),
}

# Descriptive fields kept per group (last value seen wins)
ATTRIBUTE_COLUMNS: Dict[Dimension, Tuple[Tuple[str, str], ...]] = {
    Dimension.CITY: (("state", "state_name"),),
    Dimension.OFFICE: (
        ("city", "city_name"),
        ("state", "state_name"),
        ("region_class", "region_class"),
    ),
}


# ----------------------------
# Helpers
# ----------------------------

def as_frame(data: RecordsOrFrame, criteria: Optional[RecordFilter] = None) -> pd.DataFrame:
    df = data if isinstance(data, pd.DataFrame) else records_to_frame(list(data))
    return filter_frame(df, criteria)


def _py(value):
    """numpy scalar -> plain python"""
    return value.item() if hasattr(value, "item") else value


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return calendar.month_name[month]
    return f"Month {month}"


def percentage(part: float, whole: float) -> float:
    return 100.0 * part / whole if whole else 0.0


def group_totals(df: pd.DataFrame, column: str) -> pd.Series:
    """Sum of count per key, sorted descending (stable)."""
    totals = df.groupby(column, sort=False)["count"].sum()
    return totals.sort_values(ascending=False, kind="stable")


def ranked_counts(
    df: pd.DataFrame, column: str, limit: Optional[int] = None
) -> List[RankedCount]:
    totals = group_totals(df, column)
    if limit is not None:
        totals = totals.head(limit)
    return [RankedCount(key=_py(k), count=int(v)) for k, v in totals.items()]


def grand_total(data: RecordsOrFrame) -> int:
    df = as_frame(data)
    return int(df["count"].sum()) if not df.empty else 0


# ----------------------------
# Breakdown
# ----------------------------

def _breakdown(
    df: pd.DataFrame,
    dimension: Dimension,
    secondary: Optional[Sequence[SecondarySpec]],
    top_n: int,
    min_share_pct: Optional[float],
) -> Breakdown:
    column = dimension.column
    total = grand_total(df)
    totals = group_totals(df, column)

    groups = {k: g for k, g in df.groupby(column, sort=False)}
    attribute_columns = ATTRIBUTE_COLUMNS.get(dimension, ())

    entries: List[BreakdownEntry] = []
    for key, group_total in totals.items():
        pct = percentage(group_total, total)

        # Threshold compares the share rounded to 2 decimals
        if min_share_pct is not None and round(pct, 2) < min_share_pct:
            continue

        group = groups[key]
        attributes = {name: _py(group[col].iloc[-1]) for name, col in attribute_columns}
        if dimension is Dimension.MONTH:
            attributes["month_name"] = month_name(int(key))

        nested = {
            name: ranked_counts(group, sec.column, top_n if limited else None)
            for name, sec, limited in (secondary or ())
        }

        entries.append(
            BreakdownEntry(
                key=_py(key),
                total=int(group_total),
                percentage=pct,
                rank=len(entries) + 1,
                attributes=attributes,
                secondary=nested,
            )
        )

    return Breakdown(
        dimension=dimension,
        grand_total=total,
        entries=entries,
        min_share_pct=min_share_pct,
    )


def breakdown(
    records: RecordsOrFrame,
    dimension: Dimension,
    criteria: Optional[RecordFilter] = None,
    secondary: Optional[Sequence[SecondarySpec]] = None,
    min_share_pct: Optional[float] = None,
    top_n: Optional[int] = None,
    settings: AnalysisSettings = default_settings,
) -> BreakdownResult:
    """
    Ranked breakdown of `records` along `dimension`.

    secondary defaults to the standard nested tables for the dimension; pass
    an empty tuple to skip them. min_share_pct drops groups whose share of
    the grand total is below the threshold before ranking.
    """
    dimension = Dimension(dimension)

    df = as_frame(records, criteria)

    if df.empty:
        return NoMatchingData(dimension=dimension, criteria=criteria)

    if secondary is None:
        secondary = DEFAULT_SECONDARY.get(dimension, ())

    return _breakdown(
        df,
        dimension,
        secondary,
        top_n if top_n is not None else settings.top_n,
        min_share_pct,
    )


def manufacturer_breakdown(
    records: RecordsOrFrame,
    criteria: Optional[RecordFilter] = None,
    settings: AnalysisSettings = default_settings,
) -> BreakdownResult:
    """Manufacturer breakdown with the minimum-share noise threshold applied."""
    return breakdown(
        records,
        Dimension.MANUFACTURER,
        criteria=criteria,
        min_share_pct=settings.min_manufacturer_share_pct,
        settings=settings,
    )


# ----------------------------
# Composite keys
# ----------------------------

def composite_breakdown(
    records: RecordsOrFrame,
    first: Dimension,
    second: Dimension,
) -> List[CompositeRow]:
    """
    Volume per (first, second) pair, e.g. month x manufacturer.

    Pairs are grouped on one joined key and split back into the two fields.
    Rows come out in first-appearance order.
    """
    first, second = Dimension(first), Dimension(second)
    df = as_frame(records)
    if df.empty:
        return []

    key = (
        df[first.column].astype(str)
        + COMPOSITE_SEPARATOR
        + df[second.column].astype(str)
    )
    totals = df.groupby(key, sort=False)["count"].sum()

    rows: List[CompositeRow] = []
    for joined, total in totals.items():
        a, b = joined.split(COMPOSITE_SEPARATOR, 1)
        rows.append(
            CompositeRow(
                first=int(a) if first is Dimension.MONTH else a,
                second=int(b) if second is Dimension.MONTH else b,
                total=int(total),
            )
        )
    return rows


def monthly_series(records: RecordsOrFrame) -> List[MonthlyVolume]:
    """Total volume and row count per month, ascending by month."""
    df = as_frame(records)
    if df.empty:
        return []

    grouped = df.groupby("sale_month")["count"].agg(["sum", "size"]).sort_index()
    return [
        MonthlyVolume(month=int(m), volume=int(row["sum"]), rows=int(row["size"]))
        for m, row in grouped.iterrows()
    ]


def entity_monthly_series(
    records: RecordsOrFrame, dimension: Dimension
) -> Dict[str, List[MonthlyVolume]]:
    """Per-entity monthly volumes built from month x entity composite keys."""
    series: Dict[str, List[MonthlyVolume]] = {}
    for row in composite_breakdown(records, Dimension.MONTH, dimension):
        series.setdefault(row.second, []).append(
            MonthlyVolume(month=row.first, volume=row.total)
        )
    for entity in series:
        series[entity].sort(key=lambda v: v.month)
    return series


# ----------------------------
# Summary
# ----------------------------

def top_models(df: pd.DataFrame, limit: int) -> List[ModelVolume]:
    """Best-selling models overall; manufacturer is the first one seen."""
    grouped = df.groupby("model", sort=False).agg(
        count=("count", "sum"), manufacturer=("manufacturer", "first")
    )
    grouped = grouped.sort_values("count", ascending=False, kind="stable").head(limit)
    return [
        ModelVolume(model=_py(m), manufacturer=row["manufacturer"], count=int(row["count"]))
        for m, row in grouped.iterrows()
    ]


def classification_breakdown(records: RecordsOrFrame) -> Dict[str, int]:
    """Volume per Metro / Urban / Rural."""
    df = as_frame(records)
    if df.empty:
        return {}
    return {_py(k): int(v) for k, v in group_totals(df, "region_class").items()}


def build_summary(
    records: RecordsOrFrame,
    criteria: Optional[RecordFilter] = None,
    settings: AnalysisSettings = default_settings,
) -> SummaryResult:
    df = as_frame(records, criteria)

    if df.empty:
        return NoMatchingData(criteria=criteria)

    top_n = settings.top_n

    def _b(dimension: Dimension) -> Breakdown:
        return _breakdown(df, dimension, DEFAULT_SECONDARY[dimension], top_n, None)

    cities = _b(Dimension.CITY)
    months = _b(Dimension.MONTH)

    return AggregatedSummary(
        total_vehicles=grand_total(df),
        total_manufacturers=df["manufacturer"].nunique(),
        total_states=df["state_name"].nunique(),
        total_cities=df["city_name"].nunique(),
        total_offices=df["office_name"].nunique(),
        total_fuel_types=df["fuel_type"].nunique(),
        manufacturers=_b(Dimension.MANUFACTURER),
        fuel_types=_b(Dimension.FUEL_TYPE),
        states=_b(Dimension.STATE),
        cities=cities,
        offices=_b(Dimension.OFFICE),
        months=months,
        top_models=top_models(df, settings.top_models_limit),
        top_cities=cities.entries[: settings.top_cities_limit],
        monthly_trends=sorted(months.entries, key=lambda e: e.key),
        region_classes=classification_breakdown(df),
    )

