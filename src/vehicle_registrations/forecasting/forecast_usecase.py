from __future__ import annotations

from typing import List, Optional, Sequence, Union

from vehicle_registrations.aggregation.engine import (
    as_frame,
    entity_monthly_series,
    monthly_series,
)
from vehicle_registrations.aggregation.filters import RecordFilter
from vehicle_registrations.aggregation.models import Dimension, NoMatchingData
from vehicle_registrations.data.records import VehicleRecord
from vehicle_registrations.forecasting.trend import (
    fit_trend,
    forecast_volumes,
    fuel_forecasts,
    growth_statistics,
    manufacturer_forecasts,
    state_forecasts,
)
from vehicle_registrations.forecasting.trend_models import ForecastReport
from vehicle_registrations.utils.config import AnalysisSettings, config, settings as default_settings
from vehicle_registrations.utils.logger import get_logger

logger = get_logger(__name__)


def _series_year(records: Sequence[VehicleRecord], month: int) -> int:
    """Year of the last observed month, falling back to DATA_YEAR."""
    for r in reversed(records):
        if r.sale_month == month:
            try:
                return int(r.sale_year)
            except ValueError:
                break
    return config.DATA_YEAR


def run_forecast(
    records: Sequence[VehicleRecord],
    criteria: Optional[RecordFilter] = None,
    horizon: int = 6,
    settings: AnalysisSettings = default_settings,
) -> Union[ForecastReport, NoMatchingData]:
    """
    Forecast view over the filtered records:
    - monthly historical series and its trend fit
    - global volume forecast for `horizon` periods
    - one-step manufacturer / state / fuel projections
    - growth statistics
    """
    logger.info("Running forecast | horizon=%s | criteria=%s", horizon, criteria)

    df = as_frame(records, criteria)
    if df.empty:
        return NoMatchingData(criteria=criteria)

    historical = monthly_series(df)
    volumes: List[int] = [h.volume for h in historical]
    trend = fit_trend(volumes)

    last_month = historical[-1].month
    forecasts = forecast_volumes(
        volumes,
        horizon,
        trend=trend,
        last_month=last_month,
        year=_series_year(records, last_month),
        settings=settings,
    )

    return ForecastReport(
        criteria=criteria,
        horizon=horizon,
        historical=historical,
        trend=trend,
        volume_forecasts=forecasts,
        manufacturer_forecasts=manufacturer_forecasts(
            entity_monthly_series(df, Dimension.MANUFACTURER), settings
        ),
        state_forecasts=state_forecasts(entity_monthly_series(df, Dimension.STATE), settings),
        fuel_forecasts=fuel_forecasts(entity_monthly_series(df, Dimension.FUEL_TYPE), settings),
        growth=growth_statistics(volumes),
        total_historical_volume=sum(volumes),
    )
