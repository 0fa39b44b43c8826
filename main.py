import argparse
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from backtracking import BacktrackingScheduler, SearchBudgetExceeded
from config import INPUT_DIR, OUTPUT_DIR, load_settings, setup_logging
from conflict_detector import detect_conflicts
from schedule_printer import export_sessions, print_conflicts, print_grid, print_schedule
from timetable import CatalogError, TimeTable, load_sessions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INCONCLUSIVE = 2


def load_timetable(data_dir: str, csv: bool) -> TimeTable:
    timetable = TimeTable()
    if csv:
        return timetable.load_data_from_csv(data_dir)
    return timetable.load_data_from_files(data_dir)


def solve(args) -> int:
    timetable = load_timetable(args.data_dir, args.csv)
    for issue in timetable.validate():
        print(f"Catalog issue: {issue}")

    settings = load_settings()
    scheduler = BacktrackingScheduler(
        timetable,
        max_steps=args.max_steps if args.max_steps is not None else settings.max_steps,
        time_limit_seconds=args.time_limit if args.time_limit is not None else settings.time_limit,
    )
    try:
        solution = scheduler.run()
    except SearchBudgetExceeded as e:
        print(f"Inconclusive: {e}. Raise the step or time budget and try again.")
        return EXIT_INCONCLUSIVE

    if timetable.total_sessions_required() == 0:
        print("No sessions to schedule.")
        return EXIT_OK
    if not solution:
        print("Failed to generate a valid schedule. Constraints are too tight. "
              "Try adding more rooms or reducing subject sessions.")
        return EXIT_FAILED

    print_schedule(timetable, solution, args.output_dir)
    if args.grid:
        print_grid(timetable, solution, group_id=args.group, instructor_id=args.instructor, room_id=args.room)
    export_sessions(solution, os.path.join(args.output_dir, 'sessions.json'))

    # should always be empty for solver output
    conflicts = detect_conflicts(solution, timetable.subjects, timetable.rooms,
                                 timetable.instructors, timetable.groups)
    print_conflicts(conflicts)
    print(f"\n{len(solution)} sessions scheduled, {scheduler.steps} steps, {scheduler.backtracks} backtracks.")
    return EXIT_FAILED if conflicts else EXIT_OK


def audit(args) -> int:
    timetable = load_timetable(args.data_dir, args.csv)
    sessions = load_sessions(args.schedule)
    conflicts = detect_conflicts(sessions, timetable.subjects, timetable.rooms,
                                 timetable.instructors, timetable.groups, audit_placement=True)
    print_conflicts(conflicts)
    return EXIT_FAILED if conflicts else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Weekly class session scheduler")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    solve_parser = sub.add_parser("solve", help="generate a schedule from a catalog")
    solve_parser.add_argument("--data-dir", default=INPUT_DIR)
    solve_parser.add_argument("--csv", action="store_true", help="read the catalog from CSV files")
    solve_parser.add_argument("--output-dir", default=OUTPUT_DIR)
    solve_parser.add_argument("--max-steps", type=int, default=None)
    solve_parser.add_argument("--time-limit", type=float, default=None)
    solve_parser.add_argument("--grid", action="store_true", help="also print a day x slot grid")
    solve_parser.add_argument("--group", default=None, help="limit the grid to one group id")
    solve_parser.add_argument("--instructor", default=None, help="limit the grid to one instructor id")
    solve_parser.add_argument("--room", default=None, help="limit the grid to one room id")
    solve_parser.set_defaults(func=solve)

    audit_parser = sub.add_parser("audit", help="check an existing schedule for conflicts")
    audit_parser.add_argument("schedule", help="JSON session list")
    audit_parser.add_argument("--data-dir", default=INPUT_DIR)
    audit_parser.add_argument("--csv", action="store_true")
    audit_parser.set_defaults(func=audit)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        setup_logging(args.log_level)
        return args.func(args)
    except ValidationError as e:
        logger.error("Invalid SCHEDULER_* setting: %s", e)
        return EXIT_FAILED
    except CatalogError as e:
        logger.error("%s", e)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
