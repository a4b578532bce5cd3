import pytest

from vehicle_registrations.aggregation.filters import RecordFilter
from vehicle_registrations.aggregation.models import NoMatchingData
from vehicle_registrations.forecasting.forecast_usecase import run_forecast
from vehicle_registrations.forecasting.trend_models import ForecastReport


def test_forecast_report(records):
    report = run_forecast(records, horizon=6)
    assert isinstance(report, ForecastReport)
    assert [h.volume for h in report.historical] == [170, 240, 311]
    assert report.total_historical_volume == 721
    assert report.trend.slope == pytest.approx(70.5)
    assert report.trend.r2 > 0.99

    points = report.volume_forecasts
    assert len(points) == 6
    assert points[0].volume == 381
    assert points[0].period == "Jul 2025"
    assert points[-1].period == "Dec 2025"
    assert points[0].confidence == 95


def test_entity_projections(records):
    report = run_forecast(records, horizon=1)
    makers = report.manufacturer_forecasts
    assert [m.entity for m in makers] == ["HERO", "HONDA", "ATHER"]
    assert makers[0].projected_volume == 250
    assert makers[0].growth_pct == pytest.approx(25)

    states = {s.entity: s for s in report.state_forecasts}
    assert states["TAMIL NADU"].projected_volume == 51
    assert states["MAHARASHTRA"].trend == "growing"

    fuels = {f.entity: f.trend for f in report.fuel_forecasts}
    assert fuels == {"PETROL": "accelerating", "ELECTRIC": "accelerating"}


def test_growth_statistics_in_report(records):
    growth = run_forecast(records).growth
    assert growth.monthly_growth_pct == pytest.approx((70 / 170 + 71 / 240) / 2 * 100)


def test_filtered_forecast(records):
    report = run_forecast(records, RecordFilter(manufacturer="HONDA"), horizon=2)
    assert [h.volume for h in report.historical] == [50, 60, 70]
    assert [p.volume for p in report.volume_forecasts] == [80, 90]


def test_single_month_forecast(records):
    report = run_forecast(records, RecordFilter(month=6), horizon=3)
    assert report.trend.method == "insufficient_data"
    assert report.manufacturer_forecasts == []
    # no slope to follow: flat growth with the seasonal wave
    volumes = [p.volume for p in report.volume_forecasts]
    assert volumes[0] == pytest.approx(311 * 1.05, abs=1)
    assert volumes[1:] == [338, 342]


def test_forecast_no_match(records):
    assert isinstance(run_forecast(records, RecordFilter(city="NOWHERE")), NoMatchingData)
