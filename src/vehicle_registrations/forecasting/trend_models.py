"""
Trend / Forecast Models

Enterprise rules:
- No logic
- No pandas
- No formatting
- Pure data containers
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from vehicle_registrations.aggregation.filters import RecordFilter
from vehicle_registrations.aggregation.models import MonthlyVolume


# ------------------------------------------------------------
# Least-squares fit over (period index, volume)
# ------------------------------------------------------------
@dataclass(frozen=True)
class TrendFit:
    slope: float
    intercept: float
    r2: float
    avg_volume: float
    recent_avg: float
    # (last - first) / first, unbounded
    growth: float
    method: str  # "enhanced_linear" / "insufficient_data"


# ------------------------------------------------------------
# One projected period of the global volume forecast
# ------------------------------------------------------------
@dataclass(frozen=True)
class ForecastPoint:
    step: int
    period: str
    volume: int
    confidence: int  # percent


# ------------------------------------------------------------
# One-step projection for a manufacturer / state / fuel type
# ------------------------------------------------------------
@dataclass(frozen=True)
class EntityForecast:
    entity: str
    current_volume: int
    projected_volume: int
    growth_pct: Optional[float]
    slope: float
    r2: float
    confidence: Optional[int] = None   # manufacturers only
    trend: Optional[str] = None        # states / fuel types only


@dataclass(frozen=True)
class GrowthStatistics:
    monthly_growth_pct: float
    annualized_growth_pct: float
    volatility_pct: float


# ------------------------------------------------------------
# Full forecast view
# ------------------------------------------------------------
@dataclass(frozen=True)
class ForecastReport:
    criteria: Optional[RecordFilter]
    horizon: int
    historical: List[MonthlyVolume]
    trend: TrendFit
    volume_forecasts: List[ForecastPoint]
    manufacturer_forecasts: List[EntityForecast]
    state_forecasts: List[EntityForecast]
    fuel_forecasts: List[EntityForecast]
    growth: GrowthStatistics
    total_historical_volume: int
