"""Command-line interface for the smartshift scheduling tool."""

import argparse
import json
import logging
import sys
from datetime import date, time, timedelta
from typing import Optional

from smartshift.domain.models import (
    AvailabilityMatrix,
    EngineConfig,
    EngineType,
    ScheduleResult,
    ShiftRequirement,
    ShiftTemplate,
    WeeklyScheduleRequest,
)
from smartshift.exceptions import InputContractError, PreflightError
from smartshift.io.contract import (
    dump_json,
    is_week_request,
    load_json,
    parse_request,
    parse_week_request,
    result_to_dict,
)
from smartshift.logging_config import setup_logging
from smartshift.output.pdf_generator import PDFGenerator
from smartshift.output.records import (
    build_generation_record,
    build_schedule_rows,
    week_bounds,
)
from smartshift.output.report import ReportGenerator
from smartshift.scheduling.diagnostics import sort_warnings
from smartshift.scheduling.preflight import preflight_check
from smartshift.scheduling.scheduler import SmartScheduler
from smartshift.validation.validator import ScheduleValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INPUT = 2

SAMPLE_NAMES = [
    "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
    "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
]


def create_sample_week(
    staff_count: int = 6,
    week_start: Optional[date] = None,
) -> tuple[WeeklyScheduleRequest, dict[str, str]]:
    """Create a sample store week for demos.

    Args:
        staff_count: Number of staff members to create.
        week_start: Monday of the week; defaults to the current week.

    Returns:
        The week request and a staff id -> name map.
    """
    if week_start is None:
        today = date.today()
        week_start = today - timedelta(days=today.weekday())

    templates = [
        ShiftTemplate("morning", "Morning", time(6, 0), time(14, 0), "#4CAF50"),
        ShiftTemplate("lunch", "Lunch Rush", time(11, 0), time(15, 0), "#FF9800"),
        ShiftTemplate("evening", "Evening", time(14, 0), time(22, 0), "#3F51B5"),
    ]

    requirements = []
    for day_of_week in range(7):  # 0 = Sunday
        weekend = day_of_week in (0, 6)
        requirements.append(ShiftRequirement(day_of_week, "morning", 2))
        requirements.append(ShiftRequirement(day_of_week, "lunch", 2 if weekend else 1))
        requirements.append(ShiftRequirement(day_of_week, "evening", 2 if weekend else 1))

    staff_ids = []
    names = {}
    availability = AvailabilityMatrix()
    for i in range(staff_count):
        sid = f"S{i + 1:03d}"
        name = SAMPLE_NAMES[i % len(SAMPLE_NAMES)]
        if i >= len(SAMPLE_NAMES):
            name = f"{name}{i // len(SAMPLE_NAMES) + 1}"
        staff_ids.append(sid)
        names[sid] = name

        for offset in range(7):
            # One day off per person, rotating through the week
            if offset == i % 7:
                continue
            shift_date = week_start + timedelta(days=offset)
            for template in templates:
                # Every third person only works mornings
                if i % 3 == 2 and template.id == "evening":
                    continue
                availability.set_available(sid, shift_date, template.id)

    request = WeeklyScheduleRequest(
        week_start=week_start,
        shift_templates=templates,
        requirements=requirements,
        availability=availability,
        staff_ids=staff_ids,
    )
    return request, names


def build_config(args: argparse.Namespace, request_allows_multiple: Optional[bool] = None) -> EngineConfig:
    """Engine configuration from command-line options.

    ``--single-shift-per-day`` wins over the request's own flag.
    """
    allow_multiple = True if request_allows_multiple is None else request_allows_multiple
    if getattr(args, "single_shift_per_day", False):
        allow_multiple = False
    return EngineConfig(
        max_weekly_hours=getattr(args, "max_weekly_hours", 40.0),
        max_consecutive_days=getattr(args, "max_consecutive_days", 6),
        allow_multiple_shifts_per_day=allow_multiple,
        engine_type=EngineType(args.engine),
    )


def print_summary(result: ScheduleResult) -> None:
    """Print a short summary of a result to stderr."""
    stats = result.stats
    print(
        f"Filled {stats.total_shifts_filled}/{stats.total_shifts_required} shifts "
        f"({stats.coverage_percent}% coverage), fairness {stats.fairness_score}, "
        f"{len(result.warnings)} warnings",
        file=sys.stderr,
    )
    if result.needs_review:
        print("  Needs review", file=sys.stderr)


def run_generate(args: argparse.Namespace) -> int:
    """Generate a schedule from a request file."""
    payload = load_json(args.request)

    week_start = None
    if is_week_request(payload):
        week = parse_week_request(payload)
        config = build_config(args)
        scheduler = SmartScheduler(config)
        normalized = scheduler.normalizer.normalize(
            week.requirements, week.shift_templates, week.week_start
        )
        instances = normalized.instances
        diagnostics = week.diagnostics + normalized.diagnostics
        availability = week.availability
        staff_ids = week.staff_ids
        week_start = week.week_start
    else:
        parsed = parse_request(payload)
        config = build_config(args, parsed.allow_multiple_shifts_per_day)
        scheduler = SmartScheduler(config)
        instances = parsed.instances
        diagnostics = parsed.diagnostics
        availability = parsed.availability
        staff_ids = parsed.staff_ids

    report = preflight_check(instances, availability, staff_ids)
    for label in report.blocked_labels():
        print(f"  No staff available: {label}", file=sys.stderr)

    result = scheduler.generate(instances, availability, staff_ids)
    if diagnostics:
        result.warnings = sort_warnings(result.warnings + diagnostics)

    validation = ScheduleValidator(config).validate(result, instances, availability, staff_ids)
    for error in validation.errors:
        logger.error("Schedule validation failed: %s", error)

    document = result_to_dict(result)
    if args.output:
        dump_json(document, args.output)
        print(f"Wrote {args.output}", file=sys.stderr)
    elif not args.report:
        print(json.dumps(document, indent=2))

    if args.report:
        print(ReportGenerator().generate_to_string(result, instances), end="")

    if args.pdf:
        PDFGenerator().generate(result, instances, args.pdf)
        print(f"Wrote {args.pdf}", file=sys.stderr)

    if args.records:
        if week_start is None:
            week_start = min((i.date for i in instances), default=date.today())
            week_start -= timedelta(days=week_start.weekday())
        first, last = week_bounds(week_start)
        dump_json(
            {
                "replaceRange": {"from": first.isoformat(), "to": last.isoformat()},
                "generation": build_generation_record(
                    result, args.store_id, week_start
                ).to_dict(),
                "schedules": [
                    row.to_dict() for row in build_schedule_rows(result, args.store_id)
                ],
            },
            args.records,
        )
        print(f"Wrote {args.records}", file=sys.stderr)

    print_summary(result)
    return EXIT_OK


def run_demo(args: argparse.Namespace) -> int:
    """Generate and print a sample week."""
    request, names = create_sample_week(args.staff)
    print(
        f"Generating demo schedule for {len(request.staff_ids)} staff, "
        f"week of {request.week_start.isoformat()}...",
        file=sys.stderr,
    )

    scheduler = SmartScheduler(build_config(args))
    normalized = scheduler.normalizer.normalize(
        request.requirements, request.shift_templates, request.week_start
    )
    instances = normalized.instances
    result = scheduler.generate(instances, request.availability, request.staff_ids)
    if normalized.diagnostics:
        result.warnings = sort_warnings(result.warnings + normalized.diagnostics)

    print(ReportGenerator(staff_names=names).generate_to_string(result, instances), end="")

    validation = ScheduleValidator(scheduler.config).validate(
        result, instances, request.availability, request.staff_ids
    )
    if validation.is_valid:
        print("Validation: PASSED")
    else:
        print(f"Validation: FAILED ({len(validation.errors)} errors)")
        for error in validation.errors[:5]:
            print(f"    - {error}")

    if args.pdf:
        PDFGenerator(staff_names=names).generate(result, instances, args.pdf)
        print(f"Wrote {args.pdf}", file=sys.stderr)
    return EXIT_OK


def _add_engine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--engine", "-e",
        type=str,
        default=EngineType.GREEDY.value,
        choices=[e.value for e in EngineType],
        help="Assignment engine (default: greedy)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write logs to this file",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartshift",
        description="smartshift - Weekly Shift Assignment Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s generate week.json                   Print the result JSON
  %(prog)s generate week.json -o result.json    Write the result JSON
  %(prog)s generate week.json --report          Print a text report
  %(prog)s generate week.json --pdf week.pdf    Render a printable PDF
  %(prog)s generate week.json -e min_cost_flow  Use the min-cost-flow engine

  %(prog)s demo                                 Demo week with 6 staff
  %(prog)s demo --staff 12 --pdf demo.pdf       Larger demo with PDF
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    generate_parser = subparsers.add_parser("generate", help="Generate a schedule from a request file")
    generate_parser.add_argument("request", type=str, help="Request JSON file")
    generate_parser.add_argument("--output", "-o", type=str, help="Result JSON file")
    generate_parser.add_argument("--pdf", type=str, help="Output PDF file path")
    generate_parser.add_argument(
        "--report", "-r",
        action="store_true",
        help="Print a text report",
    )
    generate_parser.add_argument(
        "--records",
        type=str,
        help="Write the generation record and schedule rows to this JSON file",
    )
    generate_parser.add_argument(
        "--store-id",
        type=str,
        default="default",
        help="Store id used in --records output (default: default)",
    )
    generate_parser.add_argument(
        "--max-weekly-hours",
        type=float,
        default=40.0,
        help="Overwork threshold in hours (default: 40)",
    )
    generate_parser.add_argument(
        "--max-consecutive-days",
        type=int,
        default=6,
        help="Consecutive working days before a warning (default: 6)",
    )
    generate_parser.add_argument(
        "--single-shift-per-day",
        action="store_true",
        help="Never give anyone more than one shift per day",
    )
    _add_engine_options(generate_parser)

    demo_parser = subparsers.add_parser("demo", help="Run demo schedule generation")
    demo_parser.add_argument(
        "--staff", "-s",
        type=int,
        default=6,
        help="Number of staff to generate (default: 6)",
    )
    demo_parser.add_argument("--pdf", type=str, help="Output PDF file path")
    _add_engine_options(demo_parser)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_USAGE

    setup_logging(args.log_level, args.log_file)

    try:
        if args.command == "generate":
            return run_generate(args)
        return run_demo(args)
    except InputContractError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return EXIT_INPUT
    except PreflightError as e:
        print(f"Cannot generate schedule: {e.message}", file=sys.stderr)
        for detail in e.details:
            print(f"  - {detail}", file=sys.stderr)
        return EXIT_INPUT
    except FileNotFoundError as e:
        print(f"File not found: {e.filename}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
