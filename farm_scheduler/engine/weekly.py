"""Weekly schedule aggregation.

A weekly container is titled ``"<Monday MM/DD/YYYY> - Weekly"``. Rows named
after a weekday hold that day's assignments per column; every other row is a
weekend task with assignments in the Saturday/Sunday AM/PM columns.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.dates import format_schedule_date_label, to_monday_date_label, weekly_title_for_date
from farm_scheduler.domain.schedule import (
    WeekdayRow,
    WeekendRow,
    WeekendSchedule,
    WeeklyScheduleView,
    WeekOverview,
)
from farm_scheduler.errors import NotFoundError, TransientStoreError
from farm_scheduler.store.base import RecordStore

from .resolver import ScheduleResolver


DAY_ORDER = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
WEEKEND_COLUMNS = ["Saturday AM", "Saturday PM", "Sunday AM", "Sunday PM"]
WEEKLY_UNAVAILABLE_MESSAGE = "Unable to load weekly schedule."

_DAY_INDEX = {day.lower(): i for i, day in enumerate(DAY_ORDER)}


def split_columns(column_keys: List[str]) -> Tuple[List[str], List[Tuple[str, str]]]:
    """
    Partition schema columns into weekday columns and (label, key) weekend columns.

    Weekend columns come out in fixed Saturday AM -> Sunday PM order; any the
    schema lacks are omitted. Columns naming the weekend never count as
    weekday columns.
    """
    by_lower = {key.lower(): key for key in column_keys}
    weekend = [(label, by_lower[label.lower()]) for label in WEEKEND_COLUMNS if label.lower() in by_lower]
    weekend_keys = {key for _, key in weekend}
    weekday = [key for key in column_keys if key not in weekend_keys and "weekend" not in key.lower()]
    return weekday, weekend


class WeeklyAggregator:
    def __init__(self, store: RecordStore, cfg: FarmSchedulerConfig, resolver: ScheduleResolver | None = None):
        self.store = store
        self.cfg = cfg
        self.resolver = resolver or ScheduleResolver(store, cfg)

    def load_week(self, date_label: Optional[str] = None) -> WeeklyScheduleView:
        """
        Load the weekly view for the week containing ``date_label``.

        Weekday rows carry the canonical day name (``"Monday"``), whatever the
        casing of the stored row title.

        Args:
            date_label: Any date in the week; defaults to the selected schedule date

        Returns:
            WeeklyScheduleView; an empty view with ``message`` on store failure

        Raises:
            NotFoundError: If the date cannot be determined or the weekly container is missing
        """
        week_label = ""
        try:
            page = self.resolver.require_page()
            if date_label:
                base = format_schedule_date_label(date_label)
            else:
                settings = self.resolver.read_settings(page, include_times=False)
                base = self.resolver.effective_date(None, settings)

            week_label = to_monday_date_label(base)
            expected_title = weekly_title_for_date(week_label)
            target = page.find(expected_title)
            if target is None:
                raise NotFoundError(f"No weekly schedule database found for {expected_title}")

            meta = self.store.retrieve_container(target.id)
            rows = self.store.query_all_container_rows(target.id)
        except TransientStoreError as e:
            print(f"[ERROR] Failed to fetch weekly schedule: {e}")
            return WeeklyScheduleView(week_label=week_label, message=WEEKLY_UNAVAILABLE_MESSAGE)

        title_key = fv.title_field_key(meta)
        columns = [key for key in fv.schema_keys(meta) if key != title_key]
        weekday_columns, weekend_columns = split_columns(columns)

        day_rows: List[WeekdayRow] = []
        task_rows: List[WeekendRow] = []

        for row in rows:
            props = row.get("properties") or {}
            name = fv.plain_text(props.get(title_key))
            if not name:
                continue

            index = _DAY_INDEX.get(name.lower())
            if index is not None:
                assignments: Dict[str, List[str]] = {
                    column: fv.split_names(fv.plain_text(props.get(column))) for column in weekday_columns
                }
                day_rows.append(WeekdayRow(day=DAY_ORDER[index], assignments=assignments))
                continue

            assignments = {
                label: fv.split_names(fv.plain_text(props.get(key))) for label, key in weekend_columns
            }
            task_rows.append(WeekendRow(task=name, assignments=assignments))

        day_rows.sort(key=lambda r: _DAY_INDEX[r.day.lower()])

        return WeeklyScheduleView(
            week_label=week_label,
            week_overview=WeekOverview(columns=weekday_columns, rows=day_rows),
            weekend_schedule=WeekendSchedule(columns=[label for label, _ in weekend_columns], rows=task_rows),
        )
