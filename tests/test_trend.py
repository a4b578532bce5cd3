import pytest

from vehicle_registrations.aggregation.models import MonthlyVolume
from vehicle_registrations.forecasting.trend import (
    bounded_growth_rate,
    fit_trend,
    forecast_confidence,
    forecast_volumes,
    fuel_forecasts,
    growth_statistics,
    manufacturer_forecasts,
    period_labels,
    project_entity,
    round_half_up,
    state_forecasts,
)


def _series(*volumes, start=4):
    return [MonthlyVolume(month=start + i, volume=v) for i, v in enumerate(volumes)]


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-0.5) == 0
    assert round_half_up(94.998) == 95


def test_fit_two_points():
    fit = fit_trend([100, 200])
    assert fit.slope == pytest.approx(100)
    assert fit.intercept == pytest.approx(100)
    assert fit.r2 == pytest.approx(1.0)
    assert fit.recent_avg == 150
    assert fit.growth == pytest.approx(1.0)
    assert fit.method == "enhanced_linear"


@pytest.mark.parametrize("volumes, avg", [([], 0.0), ([42], 42.0)])
def test_fit_insufficient_data(volumes, avg):
    fit = fit_trend(volumes)
    assert fit.method == "insufficient_data"
    assert (fit.slope, fit.intercept, fit.r2) == (0.0, 0.0, 0.0)
    assert fit.avg_volume == avg


def test_flat_series_has_zero_r2():
    fit = fit_trend([100, 100, 100])
    assert fit.slope == 0
    assert fit.r2 == 0.0


def test_r2_is_bounded():
    fit = fit_trend([5, 90, 10, 80, 3])
    assert 0.0 <= fit.r2 <= 1.0


def test_bounded_growth_rate():
    assert bounded_growth_rate([100, 1000]) == pytest.approx(0.2)
    assert bounded_growth_rate([100, 10]) == pytest.approx(-0.1)
    assert bounded_growth_rate([100, 121, 121]) == pytest.approx(0.1)
    assert bounded_growth_rate([0, 50]) == 0.0


def test_period_labels():
    assert period_labels(7, 2025, 2) == ["Aug 2025", "Sep 2025"]
    assert period_labels(12, 2025, 1) == ["Jan 2026"]
    assert period_labels(None, 2025, 2) == ["T+1", "T+2"]


def test_confidence_decays_and_is_floored():
    assert forecast_confidence(1, 0.0) == 48
    assert forecast_confidence(6, 0.0) == 35
    assert forecast_confidence(14, 0.0) == 30
    assert forecast_confidence(1, 1.0) == 95


def test_forecast_follows_good_line():
    points = forecast_volumes([170, 240, 311], 2, last_month=6, year=2025)
    assert [p.volume for p in points] == [381, 452]
    assert [p.period for p in points] == ["Jul 2025", "Aug 2025"]
    assert [p.step for p in points] == [1, 2]


def test_forecast_flat_series_uses_seasonal_growth():
    points = forecast_volumes([100, 100, 100], 6)
    assert [p.volume for p in points][:3] == [105, 109, 110]
    assert points[5].volume == 100
    assert points[0].confidence == 48


def test_declining_line_is_floored():
    points = forecast_volumes([300, 200, 100], 1)
    # base = recent average 150, line floor 0.3 * 150
    assert points[0].volume == 45


@pytest.mark.parametrize("volumes", [[100, 50, 400, 10], [0, 0, 0], [7]])
def test_forecast_never_negative(volumes):
    for p in forecast_volumes(volumes, 12):
        assert p.volume >= 0
        assert 30 <= p.confidence <= 100


def test_forecast_horizon():
    assert forecast_volumes([1, 2, 3], 0) == []
    with pytest.raises(ValueError):
        forecast_volumes([1, 2, 3], -1)


def test_growth_statistics():
    stats = growth_statistics([100, 200])
    assert stats.monthly_growth_pct == pytest.approx(100)
    assert stats.annualized_growth_pct == pytest.approx(409500)
    assert stats.volatility_pct == 0

    stats = growth_statistics([100, 110, 99])
    assert stats.monthly_growth_pct == pytest.approx(0)
    assert stats.volatility_pct == pytest.approx(10)


def test_growth_statistics_skips_zero_base():
    assert growth_statistics([0, 100, 150]).monthly_growth_pct == pytest.approx(50)
    assert growth_statistics([5]).monthly_growth_pct == 0.0


def test_project_entity():
    p = project_entity("HERO", _series(100, 150, 200))
    assert p.projected_volume == 250
    assert p.current_volume == 200
    assert p.growth_pct == pytest.approx(25)
    assert project_entity("ONE", _series(5)) is None


def test_project_entity_floored_and_zero_current():
    p = project_entity("FALLING", _series(200, 100, 0))
    assert p.projected_volume == 0
    assert p.growth_pct is None


def test_entity_forecast_labels():
    series = {
        "A": _series(100, 150, 200),
        "B": _series(50, 52, 54),
        "C": _series(40, 30, 20),
        "D": _series(1),
    }
    makers = manufacturer_forecasts(series)
    assert [m.entity for m in makers] == ["A", "B", "C"]
    assert makers[0].confidence == 100

    states = {s.entity: s.trend for s in state_forecasts(series)}
    assert states == {"A": "growing", "B": "growing", "C": "declining"}

    fuels = {f.entity: f.trend for f in fuel_forecasts(series)}
    assert fuels == {"A": "accelerating", "B": "growing", "C": "declining"}


@pytest.mark.parametrize("volumes", [[170, 240, 311], [100, 100, 100], [300, 200, 100]])
def test_horizon_length_and_confidence_never_rises(volumes):
    points = forecast_volumes(volumes, 20)
    assert len(points) == 20
    confs = [p.confidence for p in points]
    assert confs == sorted(confs, reverse=True)
