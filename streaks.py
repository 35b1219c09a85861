#!/usr/bin/env python3
import argparse
from datetime import date, timedelta
from typing import List, Optional

from streaks_calendar import (
    WEEKDAYS,
    format_date_key,
    normalize_weekday,
    parse_date_input,
    today_local,
    week_header,
)
from streaks_engine import habit_summary
from streaks_store import open_store


def _get_habit(store, number: int) -> Optional[str]:
    habits = store.habits()
    if number < 1 or number > len(habits):
        print(f"Invalid streak number: {number}.")
        return None
    return habits[number - 1]


def _resolve_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return today_local()
    parsed = parse_date_input(value)
    if parsed is None:
        print("Invalid date format. Use YYYY-MM-DD or MM-DD.")
    return parsed


def _parse_weekdays(values: Optional[str]) -> Optional[List[str]]:
    if not values:
        return []
    tokens = []
    for raw in values.split(","):
        if not raw.strip():
            continue
        token = normalize_weekday(raw)
        if token is None:
            print(f"Unknown weekday '{raw.strip()}'. Use {', '.join(WEEKDAYS)}.")
            return None
        if token not in tokens:
            tokens.append(token)
    return tokens


def cmd_list(args: argparse.Namespace) -> None:
    target_date = _resolve_date(args.date)
    if target_date is None:
        return
    store = open_store()
    if store is None:
        return
    habits = store.habits()
    if not habits:
        print("No streaks yet.")
        return
    print(f"   {week_header(target_date)}")
    for number, name in enumerate(habits, start=1):
        summary = habit_summary(store, name, target_date)
        print(f"{number}. {summary['strip']} {summary['streak']}d {name}")


def cmd_add(args: argparse.Namespace) -> None:
    store = open_store()
    if store is None:
        return
    name = args.name.strip()
    if not name:
        print("Streak name cannot be empty.")
        return
    if not store.add_habit(name):
        print(f"Streak '{name}' already exists.")
        return
    store.save()
    print(f"Added {name}")


def cmd_delete(args: argparse.Namespace) -> None:
    store = open_store()
    if store is None:
        return
    name = _get_habit(store, args.number)
    if name is None:
        return
    store.delete_habit(name)
    store.save()
    print(f"Deleted {name}")


def cmd_rename(args: argparse.Namespace) -> None:
    store = open_store()
    if store is None:
        return
    name = _get_habit(store, args.number)
    if name is None:
        return
    new_name = args.name.strip()
    if not store.rename_habit(name, new_name):
        print(f"Cannot rename {name} to '{new_name}'.")
        return
    store.save()
    print(f"Renamed: {name} -> {new_name}")


def cmd_toggle(args: argparse.Namespace) -> None:
    target_date = _resolve_date(args.date)
    if target_date is None:
        return
    store = open_store()
    if store is None:
        return
    name = _get_habit(store, args.number)
    if name is None:
        return
    date_key = format_date_key(target_date)
    present = store.toggle_marker(name, date_key)
    store.save()
    if present:
        print(f"Marked {name} on {date_key}")
    else:
        print(f"Unmarked {name} on {date_key}")


def cmd_since(args: argparse.Namespace) -> None:
    if args.days <= 0:
        print("Days must be at least 1.")
        return
    today = today_local()
    max_days = (today - date.min).days + 1
    if args.days > max_days:
        print(f"Days must be at most {max_days}.")
        return
    store = open_store()
    if store is None:
        return
    name = _get_habit(store, args.number)
    if name is None:
        return
    date_keys = [format_date_key(today - timedelta(days=offset)) for offset in range(args.days)]
    added = store.add_markers(name, date_keys)
    store.save()
    print(f"Marked {added} new day(s) for {name} from {date_keys[-1]} to {date_keys[0]}")


def cmd_days(args: argparse.Namespace) -> None:
    weekdays = _parse_weekdays(args.values)
    if weekdays is None:
        return
    store = open_store()
    if store is None:
        return
    name = _get_habit(store, args.number)
    if name is None:
        return
    store.set_excluded_days(name, weekdays)
    store.save()
    if not weekdays:
        print(f"Cleared excluded days for {name}")
        return
    ordered = [day for day in WEEKDAYS if day in weekdays]
    print(f"Excluded days for {name}: {', '.join(ordered)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streaks",
        description="Track daily habit streaks",
        epilog="Without a command, all streaks are listed.",
    )
    parser.set_defaults(func=cmd_list, date=None)
    sub = parser.add_subparsers(dest="command")

    list_cmd = sub.add_parser("list", aliases=["ls"], help="List all streaks")
    list_cmd.add_argument("--date", help="Override today (YYYY-MM-DD or MM-DD)")
    list_cmd.set_defaults(func=cmd_list)

    add = sub.add_parser("add", aliases=["a"], help="Add a new streak with the given name")
    add.add_argument("name", help="Streak name")
    add.set_defaults(func=cmd_add)

    delete = sub.add_parser("delete", aliases=["rm", "del"], help="Delete a streak")
    delete.add_argument("number", type=int, help="Streak number")
    delete.set_defaults(func=cmd_delete)

    rename = sub.add_parser("rename", aliases=["r"], help="Rename a streak")
    rename.add_argument("number", type=int, help="Streak number")
    rename.add_argument("name", help="New streak name")
    rename.set_defaults(func=cmd_rename)

    toggle = sub.add_parser(
        "toggle", aliases=["t"], help="Toggle streak completion for a date (default: today)"
    )
    toggle.add_argument("number", type=int, help="Streak number")
    toggle.add_argument("date", nargs="?", help="Date (YYYY-MM-DD or MM-DD)")
    toggle.set_defaults(func=cmd_toggle)

    since = sub.add_parser("since", aliases=["s"], help="Import an existing streak")
    since.add_argument("number", type=int, help="Streak number")
    since.add_argument("days", type=int, help="Days to mark, counting back from today")
    since.set_defaults(func=cmd_since)

    days = sub.add_parser("days", help="Weekdays to exclude (e.g. 'f,sa,su')")
    days.add_argument("number", type=int, help="Streak number")
    days.add_argument("values", nargs="?", default="", help="Comma-separated weekdays; empty clears")
    days.set_defaults(func=cmd_days)

    help_cmd = sub.add_parser("help", aliases=["h"], help="Show this help message")
    help_cmd.set_defaults(func=lambda _: parser.print_help())

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
