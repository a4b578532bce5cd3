from __future__ import annotations

import io
from typing import List, Sequence

from vehicle_registrations.aggregation.engine import month_name
from vehicle_registrations.aggregation.models import (
    AggregatedSummary,
    Breakdown,
    BreakdownResult,
    CompetitiveAnalysis,
    NoMatchingData,
)
from vehicle_registrations.forecasting.trend_models import EntityForecast, ForecastReport
from vehicle_registrations.reports.formatting import fmt_number, fmt_percent

NO_DATA_MESSAGE = "No matching data for the selected filters."


def _format_table(rows: Sequence[Sequence[object]], headers: List[str], max_rows: int | None = None) -> str:
    output = io.StringIO()
    rows = list(rows)

    if max_rows is not None and len(rows) > max_rows:
        shown = rows[:max_rows]
        omitted = len(rows) - max_rows
    else:
        shown = rows
        omitted = 0

    widths = [len(h) for h in headers]
    for row in shown:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(str(v)))

    def fmt(r):
        return " ".join(str(r[i]).ljust(widths[i]) for i in range(len(headers)))

    print(fmt(headers), file=output)
    print(" ".join("-" * w for w in widths), file=output)
    for row in shown:
        print(fmt(row), file=output)

    if omitted:
        print(f"... ({omitted} more rows omitted) ...", file=output)

    return output.getvalue()


def _nested(entry, name: str) -> str:
    return ", ".join(f"{c.key} ({fmt_number(c.count)})" for c in entry.secondary.get(name, []))


def render_breakdown(result: BreakdownResult, max_rows: int | None = 25) -> str:
    if isinstance(result, NoMatchingData):
        return NO_DATA_MESSAGE + "\n"

    out = io.StringIO()
    title = result.dimension.value.replace("_", " ").upper()
    print(f"== {title} BREAKDOWN (total {fmt_number(result.grand_total)}) ==\n", file=out)

    nested_names = list(result.entries[0].secondary) if result.entries else []
    rows = [
        (
            e.rank,
            e.attributes.get("month_name", e.key),
            fmt_number(e.total),
            fmt_percent(e.percentage, 2),
            *[_nested(e, n) for n in nested_names],
        )
        for e in result.entries
    ]
    print(
        _format_table(rows, ["rank", "key", "total", "share", *nested_names], max_rows=max_rows),
        file=out,
    )
    return out.getvalue()


def render_summary(summary: AggregatedSummary | NoMatchingData) -> str:
    if isinstance(summary, NoMatchingData):
        return NO_DATA_MESSAGE + "\n"

    out = io.StringIO()
    print("\n" + "=" * 80, file=out)
    print("TWO-WHEELER REGISTRATIONS - SUMMARY", file=out)
    print("=" * 80, file=out)
    print(f"Total Vehicles:      {fmt_number(summary.total_vehicles)}", file=out)
    print(f"Manufacturers:       {summary.total_manufacturers}", file=out)
    print(f"States:              {summary.total_states}", file=out)
    print(f"Cities:              {summary.total_cities}", file=out)
    print(f"RTO Offices:         {summary.total_offices}", file=out)
    print(f"Fuel Types:          {summary.total_fuel_types}", file=out)
    print(file=out)

    print("Region Classes:", file=out)
    for name, volume in summary.region_classes.items():
        share = 100.0 * volume / summary.total_vehicles if summary.total_vehicles else 0.0
        print(f"  • {name:<6} {fmt_number(volume):>12} ({fmt_percent(share)})", file=out)
    print(file=out)

    print("Monthly Trend:", file=out)
    for e in summary.monthly_trends:
        print(
            f"  • {e.attributes['month_name']:<10} {fmt_number(e.total):>12} ({fmt_percent(e.percentage)})",
            file=out,
        )
    print(file=out)

    for breakdown in (summary.manufacturers, summary.fuel_types, summary.states):
        print(render_breakdown(breakdown, max_rows=10), file=out)

    print("== TOP MODELS ==\n", file=out)
    print(
        _format_table(
            [(m.model, m.manufacturer, fmt_number(m.count)) for m in summary.top_models],
            ["model", "manufacturer", "count"],
        ),
        file=out,
    )
    return out.getvalue()


def _entity_rows(forecasts: List[EntityForecast]):
    return [
        (
            f.entity,
            fmt_number(f.current_volume),
            fmt_number(f.projected_volume),
            fmt_percent(f.growth_pct),
            f"{f.confidence}%" if f.confidence is not None else (f.trend or ""),
        )
        for f in forecasts
    ]


def render_forecast(report: ForecastReport | NoMatchingData) -> str:
    if isinstance(report, NoMatchingData):
        return NO_DATA_MESSAGE + "\n"

    t = report.trend
    g = report.growth
    out = io.StringIO()

    print("\n" + "=" * 80, file=out)
    print("TWO-WHEELER REGISTRATIONS - FORECAST", file=out)
    print("=" * 80, file=out)
    print(f"Historical Volume:  {fmt_number(report.total_historical_volume)}", file=out)
    print(f"Trend Fit (R^2):    {t.r2 * 100:.0f}%  slope={t.slope:.1f}  method={t.method}", file=out)
    print(f"Monthly Growth:     {fmt_percent(g.monthly_growth_pct)}", file=out)
    print(f"Annualized Growth:  {fmt_percent(g.annualized_growth_pct)}", file=out)
    print(f"Volatility:         {fmt_percent(g.volatility_pct)}", file=out)
    print(file=out)

    print("== Volume Forecast ==\n", file=out)
    print(
        _format_table(
            [(p.period, fmt_number(p.volume), f"{p.confidence}%") for p in report.volume_forecasts],
            ["period", "volume", "confidence"],
        ),
        file=out,
    )

    for title, forecasts, last in (
        ("Manufacturer Projections", report.manufacturer_forecasts, "confidence"),
        ("State Projections", report.state_forecasts, "trend"),
        ("Fuel Type Projections", report.fuel_forecasts, "trend"),
    ):
        print(f"\n== {title} ==\n", file=out)
        print(
            _format_table(
                _entity_rows(forecasts),
                ["entity", "current", "projected", "growth", last],
            ),
            file=out,
        )

    return out.getvalue()


def _composite_rows(rows, limit: int):
    ranked = sorted(rows, key=lambda r: r.total, reverse=True)[:limit]
    return [(r.first, r.second, fmt_number(r.total)) for r in ranked]


def render_competition(analysis: CompetitiveAnalysis | NoMatchingData, max_rows: int = 20) -> str:
    if isinstance(analysis, NoMatchingData):
        return NO_DATA_MESSAGE + "\n"

    out = io.StringIO()
    print("\n" + "=" * 80, file=out)
    print("TWO-WHEELER REGISTRATIONS - COMPETITIVE ANALYSIS", file=out)
    print("=" * 80, file=out)
    print(render_breakdown(analysis.market_share, max_rows=max_rows), file=out)

    months = sorted(analysis.growth[0].volumes) if analysis.growth else []
    print("== Manufacturer Growth ==\n", file=out)
    print(
        _format_table(
            [
                (
                    g.manufacturer,
                    *[fmt_number(g.volumes[m]) for m in months],
                    fmt_percent(g.overall_growth_pct),
                    g.trend,
                )
                for g in analysis.growth
            ],
            ["manufacturer", *[month_name(m) for m in months], "growth", "trend"],
            max_rows=max_rows,
        ),
        file=out,
    )

    for title, rows, headers in (
        ("State x Manufacturer", analysis.state_manufacturer, ["state", "manufacturer", "total"]),
        ("Fuel Type x Manufacturer", analysis.fuel_manufacturer, ["fuel_type", "manufacturer", "total"]),
        ("Top Models", analysis.top_models, ["manufacturer", "model", "total"]),
    ):
        print(f"== {title} ==\n", file=out)
        print(_format_table(_composite_rows(rows, max_rows), headers), file=out)

    return out.getvalue()
