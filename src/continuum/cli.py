"""Command-line access to day progress, notifications, journal and schedule."""
from __future__ import annotations

import argparse
import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from continuum.clock import ParseError, format_time_of_day, parse_time_of_day
from continuum.config import Settings, get_settings
from continuum.logging_utils import log_event, setup_logging
from continuum.models import AVAILABLE_THRESHOLDS
from continuum.notifications import InMemoryDispatcher, NotificationManager, build_requests
from continuum.progress import (
    DayConfig,
    PeriodKind,
    classify,
    period_end_instant,
    sleep_to_wake_ratio,
    waking_minutes,
)
from continuum.schedule import ScheduleService
from continuum.storage.file_store import FileStore
from continuum.storage.journal import JournalStore
from continuum.storage.preferences import PreferencesStore
from continuum.time_utils import get_now, get_timezone
from continuum.widget import build_timeline

WATCH_INTERVAL_SECONDS = 60


@dataclass(slots=True)
class Runtime:
    settings: Settings
    tz: ZoneInfo
    preferences: PreferencesStore
    journal: JournalStore
    now: Callable[[], datetime]


def build_runtime(settings: Optional[Settings] = None) -> Runtime:
    settings = settings or get_settings()
    tz = get_timezone(settings.timezone)
    file_store = FileStore(settings.data_dir)
    return Runtime(
        settings=settings,
        tz=tz,
        preferences=PreferencesStore(file_store),
        journal=JournalStore(file_store),
        now=lambda: get_now(tz),
    )


def _time_arg(value: str) -> str:
    try:
        return format_time_of_day(parse_time_of_day(value))
    except ParseError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def format_status(config: DayConfig, now: datetime) -> str:
    sample = classify(config, now)
    ends_at = period_end_instant(config, now)
    if sample.period_kind is PeriodKind.DAY:
        headline = f"{sample.percent_remaining}% of your day remains"
    else:
        headline = f"{sample.percent_complete}% through the night"
    return f"{headline} (ends at {ends_at.strftime('%H:%M')})"


def _print_status(runtime: Runtime) -> None:
    config = runtime.preferences.day_config()
    print(format_status(config, runtime.now()))


def _print_config(runtime: Runtime) -> None:
    config = runtime.preferences.day_config()
    start, end = config.as_strings()
    ratio = sleep_to_wake_ratio(config)
    print(f"Start of day: {start}")
    print(f"End of day: {end}")
    print(f"Waking time: {waking_minutes(config)} minutes")
    if ratio is not None:
        print(f"Sleep-to-wake ratio: {ratio:.2f}")


async def _run(args: argparse.Namespace, runtime: Runtime) -> int:
    preferences = runtime.preferences
    command = args.command

    if command == "status":
        _print_status(runtime)
    elif command == "config":
        _print_config(runtime)
    elif command == "configure":
        current = preferences.day_config()
        start = args.start or format_time_of_day(current.start)
        end = args.end or format_time_of_day(current.end)
        await preferences.set_day_config(DayConfig.from_strings(start, end))
        log_event({"event": "day_config_changed", "start": start, "end": end})
        _print_config(runtime)
    elif command == "forecast":
        timeline = build_timeline(
            preferences.day_config(),
            runtime.now(),
            horizon_minutes=int(args.hours * 60) if args.hours is not None else None,
            max_samples=args.max_samples,
        )
        for entry in timeline.entries:
            print(f"{entry.date.strftime('%Y-%m-%d %H:%M')}  {entry.mode.value:<5}  {entry.progress:3d}%")
    elif command == "notifications":
        requests = build_requests(preferences.day_config(), preferences.notification_settings(), runtime.now())
        if not requests:
            print("No notifications scheduled")
        for request in requests:
            print(f"{request.fire_at.strftime('%Y-%m-%d %H:%M')}  {request.identifier}  {request.body}")
    elif command == "thresholds":
        manager = NotificationManager(preferences, InMemoryDispatcher())
        now = runtime.now()
        for threshold in args.add or []:
            await manager.set_threshold(threshold, True, now)
        for threshold in args.remove or []:
            await manager.set_threshold(threshold, False, now)
        if args.enable is not None:
            await manager.set_enabled(args.enable, now)
        settings = manager.settings
        state = "enabled" if settings.enabled else "disabled"
        print(f"Notifications {state}: {sorted(settings.thresholds, reverse=True)}")
    elif command == "journal":
        if args.journal_command == "add":
            entry = await runtime.journal.add(runtime.now(), args.text)
            print(f"Saved entry {entry.id}")
        else:
            content = runtime.journal.today_content(runtime.now())
            print(content or "No journal entry today")
    elif command == "schedule":
        service = ScheduleService(preferences)
        for share in service.shares(preferences.day_config()):
            info = share.item.display_time_info
            print(f"{share.item.order:2d}. {share.item.name} ({info}) {share.percent_of_waking}%")
    elif command == "watch":
        while True:
            _print_status(runtime)
            await asyncio.sleep(WATCH_INTERVAL_SECONDS)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="continuum", description="Track how much of your waking day is left")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Show the current period and percentage")
    sub.add_parser("config", help="Show the configured waking day")
    sub.add_parser("watch", help="Print the status every minute")
    sub.add_parser("notifications", help="List milestone notifications that would be installed")
    sub.add_parser("schedule", help="List schedule items with their share of the day")

    configure = sub.add_parser("configure", help="Set the start and end of the waking day")
    configure.add_argument("--start", type=_time_arg, help="Start of day, HH:MM")
    configure.add_argument("--end", type=_time_arg, help="End of day, HH:MM")

    forecast = sub.add_parser("forecast", help="Print the widget timeline")
    forecast.add_argument("--hours", type=float, help="Horizon in hours")
    forecast.add_argument("--max-samples", type=int, help="Upper bound on the number of entries")

    thresholds = sub.add_parser(
        "thresholds",
        help="Save milestone notification settings; list the resulting fire times with `notifications`",
    )
    toggle = thresholds.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enable", action="store_true", default=None)
    toggle.add_argument("--disable", dest="enable", action="store_false")
    thresholds.add_argument("--add", type=int, action="append", choices=AVAILABLE_THRESHOLDS)
    thresholds.add_argument("--remove", type=int, action="append", choices=AVAILABLE_THRESHOLDS)
    thresholds.set_defaults(enable=None)

    journal = sub.add_parser("journal", help="Read or write journal entries")
    journal_sub = journal.add_subparsers(dest="journal_command", required=True)
    journal_add = journal_sub.add_parser("add", help="Add an entry for now")
    journal_add.add_argument("text")
    journal_sub.add_parser("today", help="Show today's entry")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()
    runtime = build_runtime()
    try:
        return asyncio.run(_run(args, runtime))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
