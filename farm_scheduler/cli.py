"""Command-line interface for the farm schedule engine."""

from __future__ import annotations

import argparse
import sys
from typing import Tuple

import pandas as pd

from farm_scheduler.config import FarmSchedulerConfig, load_config
from farm_scheduler.domain.db import init_database
from farm_scheduler.engine.loader import ScheduleLoader
from farm_scheduler.engine.publisher import StagingPublisher
from farm_scheduler.engine.reporting import AutoReportTrigger, ReportDecision, ReportStatus, StoreReportBuilder
from farm_scheduler.engine.weekly import WeeklyAggregator
from farm_scheduler.errors import ScheduleError
from farm_scheduler.store import SqlRecordStore, build_store


def report_message(decision: ReportDecision) -> Tuple[str, int]:
    """Console line and exit code for an auto-report decision."""
    status = decision.status
    if status == ReportStatus.CREATED:
        return f"Daily report created: {decision.report_id}", 0
    if status == ReportStatus.PENDING:
        return f"Report time has not arrived yet. Next run at {decision.next_run}.", 0
    if status == ReportStatus.EXISTS:
        return "Report already exists for the current schedule.", 0
    if status == ReportStatus.NO_SCHEDULE:
        return "No schedule assigned; skipping auto-report.", 0
    if status == ReportStatus.NO_AUTO_TIME:
        return "No report time configured; skipping auto-report.", 0
    if status == ReportStatus.ERROR:
        return f"Auto-report failed: {decision.error}", 1
    return f"Auto-report failed: unexpected status {status}", 1


def run_daily_report(cfg: FarmSchedulerConfig, store=None, clock=None) -> int:
    """Load the current schedule, evaluate the auto-report trigger, print one line."""
    store = store or build_store(cfg)
    schedule = ScheduleLoader(store, cfg).load()
    trigger = AutoReportTrigger(StoreReportBuilder(store, cfg), timezone=cfg.timezone, clock=clock)
    message, code = report_message(trigger.decide(schedule))
    print(message, file=sys.stderr if code else sys.stdout)
    return code


def _cmd_init_db(args: argparse.Namespace, cfg: FarmSchedulerConfig) -> None:
    """Initialize the local store and optionally create the schedule root page."""
    init_database(cfg.database_url)
    print(f"[INFO] Database initialized: {cfg.database_url}")
    if args.root_title:
        store = build_store(cfg)
        if not isinstance(store, SqlRecordStore):
            raise SystemExit("--root-title requires store_backend: sql")
        print(f"[OK] Created schedule root page: {store.create_page(args.root_title)}")


def _cmd_show(args: argparse.Namespace, cfg: FarmSchedulerConfig) -> None:
    """Print a day's schedule matrix."""
    matrix = ScheduleLoader(build_store(cfg), cfg).load(date_label=args.date, staging=args.staging)
    if matrix.message:
        print(matrix.message)
        return
    print(f"Schedule {matrix.schedule_date or ''}".rstrip())
    print(matrix.to_frame().to_string())


def _cmd_list(args: argparse.Namespace, cfg: FarmSchedulerConfig) -> None:
    """List dated schedules with their live/staging containers."""
    publisher = StagingPublisher(build_store(cfg), cfg)
    if args.ensure_staging:
        pairs = publisher.ensure_staging()
    else:
        pairs = list(publisher.registry_pairs().values())
    if not pairs:
        print("No schedules found.")
        return
    df = pd.DataFrame(
        [{"date": p.date_label, "live": p.live_id or "-", "staging": p.staging_id or "-"} for p in pairs]
    )
    print(df.to_string(index=False))


def _cmd_create(args: argparse.Namespace, cfg: FarmSchedulerConfig) -> None:
    """Create the live/staging pair for a date."""
    pair = StagingPublisher(build_store(cfg), cfg).create_pair(args.date)
    print(f"[OK] {pair.date_label}: live={pair.live_id} staging={pair.staging_id}")


def _cmd_publish(args: argparse.Namespace, cfg: FarmSchedulerConfig) -> None:
    """Publish a date's staging schedule to live."""
    StagingPublisher(build_store(cfg), cfg).publish(args.date)


def _cmd_weekly(args: argparse.Namespace, cfg: FarmSchedulerConfig) -> None:
    """Print the weekly overview and weekend task schedule."""
    view = WeeklyAggregator(build_store(cfg), cfg).load_week(args.date)
    if view.message:
        print(view.message)
        return
    print(f"Week of {view.week_label}")
    print(view.overview_frame().to_string())
    print("")
    print("Weekend schedule:")
    print(view.weekend_frame().to_string())


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="farm-scheduler",
        description="Farm operations schedule resolution and publishing",
    )
    parser.add_argument("--config", help="Path to config YAML or JSON (environment overrides apply)")

    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-db", help="Initialize the local SQL store")
    init.add_argument("--root-title", help="Also create a schedule root page with this title")
    init.set_defaults(func=_cmd_init_db)

    show = sub.add_parser("show", help="Show a day's schedule")
    show.add_argument("--date", help="Schedule date (default: selected date)")
    show.add_argument("--staging", action="store_true", help="Show the staging copy")
    show.set_defaults(func=_cmd_show)

    lst = sub.add_parser("list", help="List schedules by date")
    lst.add_argument("--ensure-staging", action="store_true", help="Create missing staging copies")
    lst.set_defaults(func=_cmd_list)

    create = sub.add_parser("create", help="Create live and staging schedules for a date")
    create.add_argument("--date", required=True)
    create.set_defaults(func=_cmd_create)

    publish = sub.add_parser("publish", help="Publish staging to live for a date")
    publish.add_argument("--date", required=True)
    publish.set_defaults(func=_cmd_publish)

    weekly = sub.add_parser("weekly", help="Show the weekly schedule")
    weekly.add_argument("--date", help="Any date in the week (default: selected date)")
    weekly.set_defaults(func=_cmd_weekly)

    report = sub.add_parser("report", help="Create the daily report if it is due")
    report.set_defaults(func=None)

    args = parser.parse_args(argv)

    try:
        cfg = load_config(args.config)
        if args.func is None:
            return run_daily_report(cfg)
        args.func(args, cfg)
    except ScheduleError as e:
        print(f"[ERROR] {args.command} failed: {e}", file=sys.stderr)
        return 1
    return 0


def daily_report_main() -> int:
    """Scheduled, argument-free entry point for the auto-report."""
    try:
        return run_daily_report(load_config())
    except ScheduleError as e:
        print(f"Unexpected failure while creating scheduled report: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
