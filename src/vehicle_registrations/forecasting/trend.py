"""
Trend / Forecast Domain Logic

Enterprise rules:
- Pure functions only
- No data loading
- No printing
- Constants come from AnalysisSettings

This is a heuristic blend, not a validated statistical model. The global
forecast follows the fitted line when the fit is good (R^2 above the
threshold), otherwise compounds a bounded growth rate from the recent
average with a small seasonal wave. Per-entity forecasts are a plain
one-step extension of the fitted line.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import numpy as np

from vehicle_registrations.aggregation.models import MonthlyVolume
from vehicle_registrations.forecasting.trend_models import (
    EntityForecast,
    ForecastPoint,
    GrowthStatistics,
    TrendFit,
)
from vehicle_registrations.utils.config import AnalysisSettings, settings as default_settings


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ----------------------------
# Fit
# ----------------------------

def fit_trend(volumes: Sequence[float]) -> TrendFit:
    """Ordinary least squares over (index, volume) with index = 0..n-1."""
    n = len(volumes)
    if n < 2:
        avg = float(volumes[0]) if n else 0.0
        return TrendFit(
            slope=0.0,
            intercept=0.0,
            r2=0.0,
            avg_volume=avg,
            recent_avg=avg,
            growth=0.0,
            method="insufficient_data",
        )

    y = np.asarray(volumes, dtype=float)
    x = np.arange(n, dtype=float)

    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_total = ((y - y_mean) ** 2).sum()
    ss_residual = ((y - (slope * x + intercept)) ** 2).sum()
    r2 = 1 - ss_residual / ss_total if ss_total > 0 else 0.0

    recent = y[-2:]
    growth = (y[-1] - y[0]) / y[0] if y[0] else 0.0

    return TrendFit(
        slope=float(slope),
        intercept=float(intercept),
        r2=float(min(1.0, max(0.0, r2))),
        avg_volume=float(y_mean),
        recent_avg=float(recent.mean()),
        growth=float(growth),
        method="enhanced_linear",
    )


def bounded_growth_rate(
    volumes: Sequence[float],
    settings: AnalysisSettings = default_settings,
) -> float:
    """Compound per-period growth from first to last volume, clamped."""
    if len(volumes) < 2 or not volumes[0]:
        rate = 0.0
    else:
        rate = (volumes[-1] / volumes[0]) ** (1 / (len(volumes) - 1)) - 1
    return max(settings.growth_floor, min(settings.growth_ceiling, rate))


# ----------------------------
# Global volume forecast
# ----------------------------

def period_labels(last_month: Optional[int], year: Optional[int], horizon: int) -> List[str]:
    """'Mon YYYY' labels for the periods after last_month/year."""
    if last_month is None or year is None:
        return [f"T+{i}" for i in range(1, horizon + 1)]

    labels = []
    for i in range(1, horizon + 1):
        offset = last_month - 1 + i
        labels.append(f"{calendar.month_abbr[offset % 12 + 1]} {year + offset // 12}")
    return labels


def forecast_confidence(
    step: int, r2: float, settings: AnalysisSettings = default_settings
) -> int:
    base = max(settings.min_base_confidence, r2) * 100
    decay = max(settings.min_distance_decay, 1 - step * settings.confidence_decay_per_period)
    return max(settings.min_confidence_pct, round_half_up(base * decay))


def forecast_volumes(
    volumes: Sequence[float],
    horizon: int,
    trend: Optional[TrendFit] = None,
    last_month: Optional[int] = None,
    year: Optional[int] = None,
    settings: AnalysisSettings = default_settings,
) -> List[ForecastPoint]:
    if horizon < 0:
        raise ValueError("horizon must be >= 0")
    if horizon == 0:
        return []

    trend = trend or fit_trend(volumes)
    n = len(volumes)
    base = trend.recent_avg or trend.avg_volume
    growth_rate = bounded_growth_rate(volumes, settings)
    use_line = trend.r2 > settings.r2_confidence_threshold and abs(trend.slope) > 0

    points: List[ForecastPoint] = []
    for i, label in enumerate(period_labels(last_month, year, horizon), start=1):
        if use_line:
            linear = trend.intercept + trend.slope * (n + i - 1)
            volume = max(base * settings.linear_floor_ratio, linear)
        else:
            seasonal = 1 + settings.seasonal_amplitude * math.sin(
                i * math.pi / settings.seasonal_period_divisor
            )
            volume = base * (1 + growth_rate) ** i * seasonal

        volume = max(base * settings.absolute_floor_ratio, volume)

        points.append(
            ForecastPoint(
                step=i,
                period=label,
                volume=round_half_up(volume),
                confidence=forecast_confidence(i, trend.r2, settings),
            )
        )

    return points


# ----------------------------
# Growth statistics
# ----------------------------

def growth_statistics(volumes: Sequence[float]) -> GrowthStatistics:
    """
    Average month-over-month growth, its 12-period annualization and the
    population standard deviation of the step rates. Steps from a zero
    volume are skipped.
    """
    rates = np.array(
        [(cur - prev) / prev * 100 for prev, cur in zip(volumes, volumes[1:]) if prev],
        dtype=float,
    )
    if rates.size == 0:
        return GrowthStatistics(0.0, 0.0, 0.0)

    avg = float(rates.mean())
    annualized = ((1 + avg / 100) ** 12 - 1) * 100
    return GrowthStatistics(
        monthly_growth_pct=avg,
        annualized_growth_pct=float(annualized),
        volatility_pct=float(rates.std()),
    )


# ----------------------------
# Per-entity one-step projections
# ----------------------------

def project_entity(entity: str, series: Sequence[MonthlyVolume]) -> Optional[EntityForecast]:
    """intercept + slope * n, floored at 0; None with fewer than two months."""
    volumes = [v.volume for v in series]
    if len(volumes) < 2:
        return None

    trend = fit_trend(volumes)
    current = volumes[-1]
    projected = max(0.0, trend.intercept + trend.slope * len(volumes))

    return EntityForecast(
        entity=entity,
        current_volume=int(current),
        projected_volume=round_half_up(projected),
        growth_pct=(projected - current) / current * 100 if current else None,
        slope=trend.slope,
        r2=trend.r2,
    )


def _project_all(series_by_entity: Dict[str, List[MonthlyVolume]]) -> List[EntityForecast]:
    projections = [project_entity(e, s) for e, s in series_by_entity.items()]
    projections = [p for p in projections if p is not None]
    return sorted(projections, key=lambda p: p.projected_volume, reverse=True)


def manufacturer_forecasts(
    series_by_entity: Dict[str, List[MonthlyVolume]],
    settings: AnalysisSettings = default_settings,
) -> List[EntityForecast]:
    return [
        replace(p, confidence=round_half_up(max(settings.manufacturer_min_confidence, p.r2) * 100))
        for p in _project_all(series_by_entity)[: settings.manufacturer_forecast_limit]
    ]


def _state_trend(slope: float) -> str:
    if slope > 0:
        return "growing"
    if slope < 0:
        return "declining"
    return "stable"


def state_forecasts(
    series_by_entity: Dict[str, List[MonthlyVolume]],
    settings: AnalysisSettings = default_settings,
) -> List[EntityForecast]:
    return [
        replace(p, trend=_state_trend(p.slope))
        for p in _project_all(series_by_entity)[: settings.state_forecast_limit]
    ]


def fuel_forecasts(
    series_by_entity: Dict[str, List[MonthlyVolume]],
    settings: AnalysisSettings = default_settings,
) -> List[EntityForecast]:
    def market_trend(slope: float) -> str:
        if slope > settings.fuel_accelerating_slope:
            return "accelerating"
        if slope > 0:
            return "growing"
        return "declining"

    return [
        replace(p, trend=market_trend(p.slope))
        for p in _project_all(series_by_entity)
    ]
