from dataclasses import replace

import pytest

from vehicle_registrations.aggregation.engine import (
    breakdown,
    build_summary,
    classification_breakdown,
    composite_breakdown,
    entity_monthly_series,
    manufacturer_breakdown,
    monthly_series,
    grand_total,
    percentage,
)
from vehicle_registrations.aggregation.filters import RecordFilter, apply_filter
from vehicle_registrations.aggregation.models import (
    AggregatedSummary,
    Breakdown,
    CompositeRow,
    Dimension,
    NoMatchingData,
)
from vehicle_registrations.data.records import records_to_frame
from vehicle_registrations.utils.config import AnalysisSettings


@pytest.mark.parametrize("dimension", [d for d in Dimension])
def test_group_totals_sum_to_grand_total(records, dimension):
    result = breakdown(records, dimension)
    assert isinstance(result, Breakdown)
    assert result.grand_total == 721
    assert sum(e.total for e in result.entries) == 721
    assert sum(e.percentage for e in result.entries) == pytest.approx(100.0)


@pytest.mark.parametrize("dimension", [d for d in Dimension])
def test_ranks_are_gap_free_and_sorted(records, dimension):
    entries = breakdown(records, dimension).entries
    assert [e.rank for e in entries] == list(range(1, len(entries) + 1))
    totals = [e.total for e in entries]
    assert totals == sorted(totals, reverse=True)


def test_manufacturer_breakdown(records):
    result = breakdown(records, Dimension.MANUFACTURER)
    assert [e.key for e in result.entries] == ["HERO", "HONDA", "ATHER", "TINYMOTO"]
    hero = result.entries[0]
    assert hero.total == 450
    assert hero.percentage == pytest.approx(100 * 450 / 721)
    assert [(c.key, c.count) for c in hero.secondary["top_models"]] == [("SPLENDOR", 450)]
    assert [c.key for c in hero.secondary["fuel_distribution"]] == ["PETROL"]
    assert [c.key for c in hero.secondary["state_distribution"]] == ["MAHARASHTRA"]


def test_minimum_share_threshold(records):
    result = manufacturer_breakdown(records)
    assert [e.key for e in result.entries] == ["HERO", "HONDA", "ATHER"]
    assert [e.rank for e in result.entries] == [1, 2, 3]
    assert result.grand_total == 721
    assert result.min_share_pct == 0.5


def test_threshold_is_configurable(records):
    result = manufacturer_breakdown(records, settings=AnalysisSettings(min_manufacturer_share_pct=0))
    assert len(result.entries) == 4


def test_secondary_limit(records):
    result = breakdown(records, Dimension.FUEL_TYPE, top_n=1)
    petrol = result.entries[0]
    assert petrol.key == "PETROL"
    assert [c.key for c in petrol.secondary["manufacturers"]] == ["HERO"]


def test_explicit_secondary_can_be_empty(records):
    result = breakdown(records, Dimension.STATE, secondary=())
    assert all(e.secondary == {} for e in result.entries)


def test_office_attributes(records):
    offices = {e.key: e for e in breakdown(records, Dimension.OFFICE).entries}
    pune = offices["PUNE RTO"]
    assert pune.attributes == {"city": "PUNE", "state": "MAHARASHTRA", "region_class": "Metro"}
    assert offices["HOSUR RTO"].attributes["region_class"] == "Rural"


def test_month_keys_and_names(records):
    entries = breakdown(records, Dimension.MONTH).entries
    assert [e.key for e in entries] == [6, 5, 4]
    assert entries[0].attributes["month_name"] == "June"
    assert isinstance(entries[0].key, int)


def test_filter_with_no_match_is_explicit(records):
    result = breakdown(records, Dimension.STATE, criteria=RecordFilter(manufacturer="NOPE"))
    assert isinstance(result, NoMatchingData)
    assert result.dimension is Dimension.STATE
    assert result.criteria.manufacturer == "NOPE"


def test_zero_volume_data_is_not_no_data(records):
    zeroed = [replace(r, count=0) for r in records]
    result = breakdown(zeroed, Dimension.MANUFACTURER)
    assert isinstance(result, Breakdown)
    assert result.grand_total == 0
    assert all(e.percentage == 0 for e in result.entries)


def test_accepts_frame_input(records):
    df = records_to_frame(records)
    result = breakdown(df, Dimension.STATE, criteria=RecordFilter(month=6))
    assert result.grand_total == 311


def test_percentage_of_zero_total():
    assert percentage(5, 0) == 0.0
    assert percentage(1, 4) == 25.0


def test_composite_breakdown(records):
    rows = composite_breakdown(records, Dimension.MONTH, Dimension.MANUFACTURER)
    assert CompositeRow(first=4, second="HERO", total=100) in rows
    assert CompositeRow(first=6, second="TINYMOTO", total=1) in rows
    assert len(rows) == 10
    assert composite_breakdown([], Dimension.MONTH, Dimension.STATE) == []


def test_composite_keys_with_hyphens_split_back(records):
    hyphenated = [replace(r, state_name="JAMMU-KASHMIR") for r in records]
    rows = composite_breakdown(hyphenated, Dimension.STATE, Dimension.MANUFACTURER)
    assert {r.first for r in rows} == {"JAMMU-KASHMIR"}


def test_monthly_series(records):
    series = monthly_series(records)
    assert [(m.month, m.volume, m.rows) for m in series] == [(4, 170, 3), (5, 240, 3), (6, 311, 4)]


def test_entity_monthly_series(records):
    series = entity_monthly_series(records, Dimension.MANUFACTURER)
    assert [v.volume for v in series["HERO"]] == [100, 150, 200]
    assert [v.month for v in series["TINYMOTO"]] == [6]


def test_classification_breakdown(records):
    assert classification_breakdown(records) == {"Metro": 450, "Urban": 180, "Rural": 91}
    assert classification_breakdown([]) == {}


def test_build_summary(records):
    summary = build_summary(records)
    assert isinstance(summary, AggregatedSummary)
    assert summary.total_vehicles == 721
    assert summary.total_manufacturers == 4
    assert summary.total_states == 3
    assert summary.total_offices == 3
    assert summary.total_fuel_types == 2
    assert [e.key for e in summary.monthly_trends] == [4, 5, 6]
    assert summary.top_models[0].model == "SPLENDOR"
    assert summary.top_models[0].manufacturer == "HERO"
    assert summary.top_cities[0].key == "PUNE"
    assert summary.top_cities[0].attributes["state"] == "MAHARASHTRA"
    assert summary.region_classes["Metro"] == 450


def test_build_summary_with_filter(records):
    summary = build_summary(records, RecordFilter(office_classification="Urban"))
    assert summary.total_vehicles == 180
    assert [e.key for e in summary.manufacturers.entries] == ["HONDA"]


def test_build_summary_no_data():
    assert isinstance(build_summary([]), NoMatchingData)


def test_filtered_grand_total_never_exceeds_unfiltered(records):
    full = grand_total(records)
    assert full == 721
    assert grand_total([]) == 0
    for criteria in (RecordFilter(manufacturer="HERO"), RecordFilter(fuel_type="ELECTRIC")):
        assert grand_total(apply_filter(records, criteria)) <= full
