import argparse

from vehicle_registrations.aggregation.competition import competitive_analysis
from vehicle_registrations.aggregation.engine import breakdown, build_summary
from vehicle_registrations.aggregation.filters import RecordFilter, resolve_time_range
from vehicle_registrations.aggregation.models import Dimension
from vehicle_registrations.classification.regions import available_classifications
from vehicle_registrations.data.loader import DatasetLoader
from vehicle_registrations.forecasting.forecast_usecase import run_forecast
from vehicle_registrations.presentation.console import (
    render_breakdown,
    render_competition,
    render_forecast,
    render_summary,
)


def _add_filter_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--manufacturer", default=None)
    parser.add_argument("--model", default=None)
    parser.add_argument("--variant", default=None)
    parser.add_argument("--fuel-type", default=None)
    parser.add_argument("--cc", default=None, help="Engine displacement bucket")
    parser.add_argument("--state", default=None)
    parser.add_argument("--city", default=None)
    parser.add_argument("--office", default=None, help="RTO office name")
    parser.add_argument(
        "--classification",
        choices=available_classifications(),
        default=None,
        help="RTO region class",
    )
    parser.add_argument("--month", type=int, default=None)
    parser.add_argument(
        "--time-range",
        choices=["all", "current_month", "last_month", "quarter"],
        default="all",
        help="Overrides --month when not 'all'",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Two-wheeler registration analytics"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    summary = sub.add_parser("summary", help="Dashboard summary")
    _add_filter_args(summary)

    bd = sub.add_parser("breakdown", help="Ranked breakdown along one dimension")
    bd.add_argument(
        "--dimension",
        choices=[d.value for d in Dimension],
        default=Dimension.MANUFACTURER.value,
    )
    bd.add_argument(
        "--min-share",
        type=float,
        default=None,
        help="Drop groups below this percent of the total",
    )
    _add_filter_args(bd)

    comp = sub.add_parser("competition", help="Manufacturer market share and growth")
    _add_filter_args(comp)

    fc = sub.add_parser("forecast", help="Volume forecast")
    fc.add_argument(
        "--horizon",
        type=int,
        default=6,
        help="Number of future months (default: 6)",
    )
    _add_filter_args(fc)

    return parser


def criteria_from_args(args: argparse.Namespace, months) -> RecordFilter:
    month = resolve_time_range(args.time_range, months)
    return RecordFilter(
        manufacturer=args.manufacturer,
        model=args.model,
        variant=args.variant,
        fuel_type=args.fuel_type,
        engine_cc=args.cc,
        state=args.state,
        city=args.city,
        office=args.office,
        office_classification=args.classification,
        month=month if month is not None else args.month,
    )


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)

    dataset = DatasetLoader().load()
    criteria = criteria_from_args(args, dataset.available_months())
    records = dataset.records

    if args.command == "summary":
        report_text = render_summary(build_summary(records, criteria))
    elif args.command == "breakdown":
        report_text = render_breakdown(
            breakdown(
                records,
                Dimension(args.dimension),
                criteria=criteria,
                min_share_pct=args.min_share,
            ),
            max_rows=None,
        )
    elif args.command == "competition":
        report_text = render_competition(competitive_analysis(records, criteria))
    else:
        report_text = render_forecast(run_forecast(records, criteria, horizon=args.horizon))

    print(report_text, end="")


if __name__ == "__main__":
    main()
