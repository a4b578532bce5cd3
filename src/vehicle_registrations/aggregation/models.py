"""
Aggregation Result Models

Enterprise rules:
- No logic
- No pandas
- No formatting
- Pure data containers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from vehicle_registrations.aggregation.filters import RecordFilter


class Dimension(str, Enum):
    MANUFACTURER = "manufacturer"
    MODEL = "model"
    FUEL_TYPE = "fuel_type"
    STATE = "state"
    CITY = "city"
    OFFICE = "office"
    MONTH = "month"
    REGION_CLASS = "region_class"

    @property
    def column(self) -> str:
        return DIMENSION_COLUMNS[self]


DIMENSION_COLUMNS: Dict[Dimension, str] = {
    Dimension.MANUFACTURER: "manufacturer",
    Dimension.MODEL: "model",
    Dimension.FUEL_TYPE: "fuel_type",
    Dimension.STATE: "state_name",
    Dimension.CITY: "city_name",
    Dimension.OFFICE: "office_name",
    Dimension.MONTH: "sale_month",
    Dimension.REGION_CLASS: "region_class",
}


# -------------------------------------------------
# Breakdown rows
# -------------------------------------------------

@dataclass(frozen=True)
class RankedCount:
    key: Union[str, int]
    count: int


@dataclass(frozen=True)
class BreakdownEntry:
    key: Union[str, int]
    total: int
    percentage: float
    rank: int
    # Descriptive fields carried by the group (e.g. an office's city / state)
    attributes: Dict[str, Union[str, int]] = field(default_factory=dict)
    # Nested breakdowns, e.g. {"top_models": [...], "fuel_distribution": [...]}
    secondary: Dict[str, List[RankedCount]] = field(default_factory=dict)


@dataclass(frozen=True)
class Breakdown:
    dimension: Dimension
    grand_total: int
    entries: List[BreakdownEntry]
    min_share_pct: Optional[float] = None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class NoMatchingData:
    """Nothing matched the filter (distinct from matched-but-zero totals)."""
    dimension: Optional[Dimension] = None
    criteria: Optional[RecordFilter] = None


@dataclass(frozen=True)
class CompositeRow:
    first: Union[str, int]
    second: Union[str, int]
    total: int


@dataclass(frozen=True)
class ModelVolume:
    model: str
    manufacturer: str
    count: int


@dataclass(frozen=True)
class MonthlyVolume:
    month: int
    volume: int
    rows: int = 0


# -------------------------------------------------
# Full dashboard summary
# -------------------------------------------------

@dataclass(frozen=True)
class AggregatedSummary:
    total_vehicles: int
    total_manufacturers: int
    total_states: int
    total_cities: int
    total_offices: int
    total_fuel_types: int

    manufacturers: Breakdown
    fuel_types: Breakdown
    states: Breakdown
    cities: Breakdown
    offices: Breakdown
    months: Breakdown

    top_models: List[ModelVolume]
    top_cities: List[BreakdownEntry]
    # months breakdown re-ordered chronologically
    monthly_trends: List[BreakdownEntry]
    region_classes: Dict[str, int]


BreakdownResult = Union[Breakdown, NoMatchingData]
SummaryResult = Union[AggregatedSummary, NoMatchingData]


# -------------------------------------------------
# Competitive analysis
# -------------------------------------------------

@dataclass(frozen=True)
class PeriodGrowth:
    from_month: int
    to_month: int
    growth_pct: float


@dataclass(frozen=True)
class ManufacturerGrowth:
    manufacturer: str
    volumes: Dict[int, int]
    period_growth: List[PeriodGrowth]
    overall_growth_pct: float
    trend: str  # "up" / "down" / "stable"


@dataclass(frozen=True)
class CompetitiveAnalysis:
    market_share: Breakdown
    growth: List[ManufacturerGrowth]
    state_manufacturer: List[CompositeRow]
    fuel_manufacturer: List[CompositeRow]
    top_models: List[CompositeRow]
