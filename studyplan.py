#!/usr/bin/env python3
"""Study planner command-line front end.

Weekly class timetable, to-do list and daily study-time log, kept in a
local JSON store.
"""

import argparse
import os
import sys
from datetime import date, datetime
from typing import Optional

from planner import AppState, ClassEntry, Instant, Weekday
from planner.layout import grid_bounds, now_marker, place_blocks
from planner.schedule import (
    classes_for_day,
    current_class,
    next_class,
    progress_fraction,
    tomorrow_preview,
    weekly_timetable,
)
from planner.studylog import goal_progress, longest_day, summary_stats
from planner.timeutil import date_key
from store import JsonFileStore
from store.backup import read_backup, write_backup
from transformer import ICalTransformer

DEFAULT_STORE = "~/.studyplan.json"
BAR_WIDTH = 20


def parse_date(date_str: str) -> date:
    """Parse date string in YYYY-MM-DD format."""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{date_str}'. Expected YYYY-MM-DD."
        )


def parse_now(value: str) -> datetime:
    """Parse a "YYYY-MM-DD HH:MM" override for the current time."""
    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M")
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid time: '{value}'. Expected 'YYYY-MM-DD HH:MM'."
        )


def parse_weekday(value: str) -> Weekday:
    try:
        return Weekday.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def get_default_end_date(today: date) -> date:
    """Calculate default export end date based on the current month.

    Returns June 30 if the month is January-June,
    January 31 of next year if the month is July-December.
    """
    if today.month < 7:
        return date(today.year, 6, 30)
    else:
        return date(today.year + 1, 1, 31)


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60}h {minutes % 60:02d}m"


def format_bar(fraction: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(max(0.0, min(1.0, fraction)) * width))
    return "#" * filled + "." * (width - filled)


def format_class(entry: ClassEntry) -> str:
    return f"{entry.start}-{entry.end}  {entry.name}  [{entry.id}]"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_overview(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    today = classes_for_day(state.classes, now.weekday)
    current = current_class(state.classes, now)
    upcoming = next_class(state.classes, now)

    print(f"{now.weekday.label}, {date_key(now.date)}")
    print("-" * 30)

    if current:
        progress = progress_fraction(current, now.minute)
        print(f"Right now: {current.name} ({current.start}-{current.end})")
        print(f"  [{format_bar(progress / 100)}] {progress}%")
    else:
        print("Right now: no class.")

    if upcoming:
        print(f"Next: {upcoming.name} ({upcoming.start}-{upcoming.end})")
    else:
        print("Next: nothing scheduled soon.")

    print(f"\nToday ({len(today)} classes):")
    if not today:
        print("  Nothing scheduled.")
    for entry in today:
        print(f"  {format_class(entry)}")

    tomorrow = tomorrow_preview(state.classes, now)
    print(f"\nTomorrow ({now.tomorrow.label}):")
    if not tomorrow:
        print("  Nothing scheduled.")
    for entry in tomorrow:
        print(f"  {format_class(entry)}")

    today_minutes = state.study_log.minutes_on(date_key(now.date))
    percent = goal_progress(today_minutes, state.goal)
    print(f"\nStudied today: {format_minutes(today_minutes)} "
          f"of {format_minutes(state.goal)} goal ({percent:.0f}%)")
    print(f"  [{format_bar(percent / 100)}]")

    weekly = state.study_log.weekly_minutes(now.date)
    scale = max(60, *weekly)
    print("\nThis week:")
    for day, minutes in zip(Weekday, weekly):
        print(f"  {day.short_name} [{format_bar(minutes / scale)}] {format_minutes(minutes)}")
    print(f"  Total: {sum(weekly) / 60:.1f}h, longest day: {Weekday(longest_day(weekly)).label}")


def cmd_timetable(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    bounds = grid_bounds(state.classes)
    print(f"Grid: {bounds.start_hour:02d}:00-{bounds.end_hour:02d}:00")

    for day, entries in weekly_timetable(state.classes).items():
        print(f"\n{day.label}")
        if day == now.weekday:
            print(f"  now line at {now_marker(bounds, now.minute):.0%}")
        if not entries:
            print("  -")
            continue
        for block in place_blocks(entries, bounds):
            print(
                f"  {format_class(block.entry)}  "
                f"left={block.left:.0%} width={block.width:.0%} "
                f"top={block.top:.0%} height={block.height:.0%}"
            )


def cmd_class(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    if args.action == "add":
        entry = state.add_class(args.name, args.day, args.start, args.end, args.color)
        print(f"Added class {entry.name} on {Weekday(entry.weekday).label} [{entry.id}]")
    elif args.action == "edit":
        entry = state.edit_class(
            args.id,
            name=args.name,
            weekday=args.day,
            start=args.start,
            end=args.end,
            color=args.color,
        )
        print(f"Updated class {entry.name} [{entry.id}]")
    elif args.action == "delete":
        entry = state.delete_class(args.id)
        print(f"Deleted class {entry.name} [{entry.id}]")
    else:
        for day, entries in weekly_timetable(state.classes).items():
            for entry in entries:
                print(f"{day.short_name}  {format_class(entry)}  {entry.color}")


def cmd_todo(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    if args.action == "add":
        item = state.add_todo(args.text)
        print(f"Added [{item.id}] {item.text}")
    elif args.action == "toggle":
        item = state.toggle_todo(args.id)
        print(f"{'Done' if item.done else 'Reopened'}: {item.text}")
    elif args.action == "remove":
        item = state.remove_todo(args.id)
        print(f"Removed: {item.text}")
    else:
        if not state.todos:
            print("No to-do items.")
        for item in state.todos:
            print(f"[{'x' if item.done else ' '}] {item.text}  [{item.id}]")


def cmd_log(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    key = date_key(args.date) if args.date else date_key(now.date)
    minutes = args.amount * 60 if args.hours else args.amount
    stored = state.set_study_minutes(key, minutes)
    print(f"Logged {format_minutes(stored)} for {key}")


def cmd_history(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    window = state.study_log.history_window(args.days, now.date)
    stats = summary_stats(window)
    scale = max(60, stats.max)
    for day in window:
        print(f"{day.date} [{format_bar(day.minutes / scale)}] {format_minutes(day.minutes)}")
    print(f"\nTotal: {format_minutes(stats.total)}, "
          f"average: {format_minutes(int(stats.average))}, "
          f"best: {format_minutes(stats.max)}, "
          f"active days: {stats.active_days}/{len(window)}")


def cmd_goal(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    if args.minutes is not None:
        state.set_goal(args.minutes)
    print(f"Daily goal: {format_minutes(state.goal)}")


def cmd_theme(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    if args.mode is not None:
        state.set_dark(args.mode == "dark")
    print(f"Theme: {'dark' if state.dark else 'light'}")


def cmd_export(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    write_backup(state, args.output)
    print(f"Backup saved to: {args.output}")


def cmd_import(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    applied = read_backup(state, args.input)
    if not applied:
        print("Warning: Backup contained no usable fields.", file=sys.stderr)
    else:
        print(f"Imported: {', '.join(applied)}")


def cmd_ical(state: AppState, now: Instant, args: argparse.Namespace) -> None:
    output_path = args.output
    if not output_path.lower().endswith(".ics"):
        output_path = f"{output_path}.ics"

    start_date = args.start_date or now.date
    end_date = args.end_date or get_default_end_date(now.date)
    if start_date >= end_date:
        raise ValueError("Start date must be before end date.")

    transformer = ICalTransformer()
    transformer.transform(state.classes, start_date, end_date)
    for entry in transformer.skipped:
        print(f"Warning: Skipping invalid class: {entry.name} ({entry.start}-{entry.end})",
              file=sys.stderr)
    transformer.save(output_path)

    print(f"Timetable saved to: {output_path}")
    print(f"Period: {start_date} to {end_date}")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Weekly timetable, to-do list and study-time log.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 studyplan.py class add Math --day mon --start 09:00 --end 10:00
  python3 studyplan.py log 90
  python3 studyplan.py history --days 30
  python3 studyplan.py ical --start-date 2026-02-23 -o timetable.ics
        """
    )

    parser.add_argument(
        "--store",
        default=os.environ.get("STUDYPLAN_STORE", DEFAULT_STORE),
        help=f"Path of the JSON store (default: $STUDYPLAN_STORE or {DEFAULT_STORE})"
    )

    parser.add_argument(
        "--now",
        type=parse_now,
        default=None,
        help="Override the current time (format: 'YYYY-MM-DD HH:MM')"
    )

    commands = parser.add_subparsers(dest="command")

    overview = commands.add_parser("overview", help="Current and next class, today's study time")
    overview.set_defaults(func=cmd_overview)

    timetable = commands.add_parser("timetable", help="Weekly grid layout")
    timetable.set_defaults(func=cmd_timetable)

    class_cmd = commands.add_parser("class", help="Manage timetable classes")
    class_cmd.set_defaults(func=cmd_class)
    class_actions = class_cmd.add_subparsers(dest="action", required=True)
    class_actions.add_parser("list", help="List all classes")

    class_add = class_actions.add_parser("add", help="Add a class")
    class_add.add_argument("name")
    class_add.add_argument("--day", type=parse_weekday, required=True,
                           help="Weekday name or index (0=Monday)")
    class_add.add_argument("--start", required=True, help="Start time, HH:MM")
    class_add.add_argument("--end", required=True, help="End time, HH:MM")
    class_add.add_argument("--color", default=None, help="Hex color, e.g. #3b82f6")

    class_edit = class_actions.add_parser("edit", help="Edit a class")
    class_edit.add_argument("id")
    class_edit.add_argument("--name", default=None)
    class_edit.add_argument("--day", type=parse_weekday, default=None)
    class_edit.add_argument("--start", default=None)
    class_edit.add_argument("--end", default=None)
    class_edit.add_argument("--color", default=None)

    class_delete = class_actions.add_parser("delete", help="Delete a class")
    class_delete.add_argument("id")

    todo = commands.add_parser("todo", help="Manage the to-do list")
    todo.set_defaults(func=cmd_todo)
    todo_actions = todo.add_subparsers(dest="action", required=True)
    todo_actions.add_parser("list", help="List to-do items")
    todo_add = todo_actions.add_parser("add", help="Add an item")
    todo_add.add_argument("text")
    todo_toggle = todo_actions.add_parser("toggle", help="Mark an item done/undone")
    todo_toggle.add_argument("id")
    todo_remove = todo_actions.add_parser("remove", help="Remove an item")
    todo_remove.add_argument("id")

    log = commands.add_parser("log", help="Set the study time for a day")
    log.set_defaults(func=cmd_log)
    log.add_argument("amount", type=float, help="Study time in minutes (or hours with --hours)")
    log.add_argument("--hours", action="store_true", help="Interpret the amount as hours")
    log.add_argument("--date", type=parse_date, default=None,
                     help="Day to log (format: YYYY-MM-DD, default: today)")

    history = commands.add_parser("history", help="Study time over the last days")
    history.set_defaults(func=cmd_history)
    history.add_argument("--days", type=int, default=7, help="Window length (default: 7)")

    goal = commands.add_parser("goal", help="Show or set the daily study goal")
    goal.set_defaults(func=cmd_goal)
    goal.add_argument("minutes", type=int, nargs="?", default=None)

    theme = commands.add_parser("theme", help="Show or set the theme")
    theme.set_defaults(func=cmd_theme)
    theme.add_argument("mode", choices=["light", "dark"], nargs="?", default=None)

    export = commands.add_parser("export", help="Write a backup file")
    export.set_defaults(func=cmd_export)
    export.add_argument("output")

    import_cmd = commands.add_parser("import", help="Restore a backup file")
    import_cmd.set_defaults(func=cmd_import)
    import_cmd.add_argument("input")

    ical = commands.add_parser("ical", help="Export the timetable as iCalendar")
    ical.set_defaults(func=cmd_ical)
    ical.add_argument("--start-date", type=parse_date, default=None,
                      help="First day of the export (format: YYYY-MM-DD, default: today)")
    ical.add_argument("--end-date", type=parse_date, default=None,
                      help="Last day of the export (format: YYYY-MM-DD). "
                           "Default: June 30 or January 31, whichever comes next")
    ical.add_argument("-o", "--output", default="timetable.ics",
                      help="Output file path (default: timetable.ics)")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the study planner CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        args.func = cmd_overview

    now = Instant.sample(args.now)

    try:
        with JsonFileStore(args.store) as store:
            state = AppState.load(store)
            args.func(state, now, args)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: An unexpected error occurred: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
