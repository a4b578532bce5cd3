"""
Competitive analysis across manufacturers.

Only manufacturers at or above the minimum market share take part in the
growth, regional, fuel and model tables; everything below it is treated as
noise from tiny or mislabelled makes.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set, Union

import pandas as pd

from vehicle_registrations.aggregation.engine import (
    RecordsOrFrame,
    as_frame,
    composite_breakdown,
    manufacturer_breakdown,
)
from vehicle_registrations.aggregation.filters import RecordFilter
from vehicle_registrations.aggregation.models import (
    CompetitiveAnalysis,
    CompositeRow,
    Dimension,
    ManufacturerGrowth,
    NoMatchingData,
    PeriodGrowth,
)
from vehicle_registrations.utils.config import AnalysisSettings, settings as default_settings
from vehicle_registrations.utils.logger import get_logger

logger = get_logger(__name__)


def growth_pct(previous: int, current: int) -> float:
    """Percent change; 0 when either side is missing (zero)."""
    if not previous or not current:
        return 0.0
    return (current - previous) / previous * 100


def _trend(growth: float) -> str:
    if growth > 0:
        return "up"
    if growth < 0:
        return "down"
    return "stable"


def manufacturer_growth(
    df: pd.DataFrame,
    manufacturers: Optional[Set[str]] = None,
) -> List[ManufacturerGrowth]:
    """
    Month-over-month growth per manufacturer over the months present in
    `df`, sorted by overall (first -> last month) growth descending.
    """
    months = sorted(int(m) for m in df["sale_month"].unique())

    volumes: Dict[str, Dict[int, int]] = {}
    for row in composite_breakdown(df, Dimension.MONTH, Dimension.MANUFACTURER):
        volumes.setdefault(row.second, {})[row.first] = row.total

    results: List[ManufacturerGrowth] = []
    for manufacturer, by_month in volumes.items():
        if manufacturers is not None and manufacturer not in manufacturers:
            continue

        series = {m: by_month.get(m, 0) for m in months}
        steps = [
            PeriodGrowth(prev, cur, growth_pct(series[prev], series[cur]))
            for prev, cur in zip(months, months[1:])
        ]
        overall = growth_pct(series[months[0]], series[months[-1]]) if months else 0.0

        results.append(
            ManufacturerGrowth(
                manufacturer=manufacturer,
                volumes=series,
                period_growth=steps,
                overall_growth_pct=overall,
                trend=_trend(overall),
            )
        )

    return sorted(results, key=lambda g: g.overall_growth_pct, reverse=True)


def _sorted_desc(rows: List[CompositeRow], limit: Optional[int] = None) -> List[CompositeRow]:
    rows = sorted(rows, key=lambda r: r.total, reverse=True)
    return rows[:limit] if limit is not None else rows


def competitive_analysis(
    records: RecordsOrFrame,
    criteria: Optional[RecordFilter] = None,
    settings: AnalysisSettings = default_settings,
) -> Union[CompetitiveAnalysis, NoMatchingData]:
    df = as_frame(records, criteria)
    if df.empty:
        return NoMatchingData(dimension=Dimension.MANUFACTURER, criteria=criteria)

    market_share = manufacturer_breakdown(df, settings=settings)
    valid = {e.key for e in market_share.entries}

    logger.info(
        "Competitive analysis | manufacturers=%s | above %.1f%% share=%s",
        df["manufacturer"].nunique(),
        settings.min_manufacturer_share_pct,
        len(valid),
    )

    scoped = df[df["manufacturer"].isin(valid)]

    return CompetitiveAnalysis(
        market_share=market_share,
        growth=manufacturer_growth(df, valid),
        state_manufacturer=composite_breakdown(scoped, Dimension.STATE, Dimension.MANUFACTURER),
        fuel_manufacturer=composite_breakdown(scoped, Dimension.FUEL_TYPE, Dimension.MANUFACTURER),
        top_models=_sorted_desc(
            composite_breakdown(scoped, Dimension.MANUFACTURER, Dimension.MODEL),
            settings.top_models_limit,
        ),
    )
