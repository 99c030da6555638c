"""Automatic daily report trigger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import pandas as pd

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.dates import ISLAND_TZ, format_date_label, now_in, parse_schedule_date
from farm_scheduler.domain.schedule import ScheduleMatrix, ScheduleSettings
from farm_scheduler.store.base import RecordStore


REPORT_TITLE_PREFIX = "Daily Report - "
REPORT_DATE_FIELD = "Schedule Date"


class ReportStatus(str, Enum):
    NO_SCHEDULE = "no-schedule"
    NO_AUTO_TIME = "no-auto-time"
    PENDING = "pending"
    EXISTS = "exists"
    CREATED = "created"
    ERROR = "error"


@dataclass(frozen=True)
class ReportDecision:
    status: ReportStatus
    next_run: Optional[str] = None
    report_id: Optional[str] = None
    error: Optional[str] = None


class ReportBuilder(ABC):
    """Creates and finds daily report documents, keyed by schedule date."""

    @abstractmethod
    def find_report(self, date_label: str) -> Optional[str]:
        """Return the id of the report for ``date_label``, or None."""

    @abstractmethod
    def create_report(self, matrix: ScheduleMatrix, date_label: str) -> str:
        """Create the report for ``date_label`` and return its id."""


class StoreReportBuilder(ReportBuilder):
    """Reports are rows of the configured reports container, titled by date."""

    def __init__(self, store: RecordStore, cfg: FarmSchedulerConfig):
        self.store = store
        self.container_id = cfg.require_reports_container()

    @staticmethod
    def title_for(date_label: str) -> str:
        return f"{REPORT_TITLE_PREFIX}{date_label}"

    def find_report(self, date_label: str) -> Optional[str]:
        meta = self.store.retrieve_container(self.container_id)
        rows = self.store.query_container(
            self.container_id,
            filter={"property": fv.title_field_key(meta), "title": {"equals": self.title_for(date_label)}},
            page_size=1,
        )
        return rows[0]["id"] if rows else None

    def create_report(self, matrix: ScheduleMatrix, date_label: str) -> str:
        meta = self.store.retrieve_container(self.container_id)
        values = {fv.title_field_key(meta): fv.title_value(self.title_for(date_label))}
        day = parse_schedule_date(date_label)
        if day is not None and fv.field_kind(meta, REPORT_DATE_FIELD) == fv.DATE:
            values[REPORT_DATE_FIELD] = fv.date_value(day.isoformat())
        return self.store.create_row(self.container_id, values)


def _clock_time(value: str) -> tuple:
    hour, minute = value.split(":")
    return int(hour), int(minute)


class AutoReportTrigger:
    """
    Decides whether the daily report should be produced now.

    Safe to call repeatedly: once a report exists for the schedule date every
    later call reports ``exists``.
    """

    def __init__(
        self,
        builder: ReportBuilder,
        timezone: str = ISLAND_TZ,
        clock: Callable[[], pd.Timestamp] | None = None,
    ):
        self.builder = builder
        self.timezone = timezone
        self.clock = clock or (lambda: now_in(self.timezone))

    def decide(self, matrix: ScheduleMatrix, settings: ScheduleSettings | None = None) -> ReportDecision:
        settings = settings or matrix.settings
        if matrix.is_empty:
            return ReportDecision(ReportStatus.NO_SCHEDULE)
        if not settings.report_time:
            return ReportDecision(ReportStatus.NO_AUTO_TIME)

        now = self.clock().tz_convert(self.timezone)
        hour, minute = _clock_time(settings.report_time)
        due = now.replace(hour=hour, minute=minute, second=0, microsecond=0, nanosecond=0)
        if now < due:
            return ReportDecision(ReportStatus.PENDING, next_run=due.isoformat())

        date_label = settings.selected_date or format_date_label(now.date())
        try:
            existing = self.builder.find_report(date_label)
            if existing:
                return ReportDecision(ReportStatus.EXISTS, report_id=existing)
            report_id = self.builder.create_report(matrix, date_label)
        except Exception as e:
            print(f"[ERROR] Auto-report failed for {date_label}: {e}")
            return ReportDecision(ReportStatus.ERROR, error=str(e))
        print(f"[OK] Created daily report for {date_label}")
        return ReportDecision(ReportStatus.CREATED, report_id=report_id)
