"""Schedule registry resolution.

The configured schedule root is either a single queryable container, or a
page whose child containers are titled by date (``MM/DD/YYYY`` for live,
``Staging - MM/DD/YYYY`` for staging) next to a ``Settings`` container.
"""

from __future__ import annotations

from typing import List, Optional

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.dates import (
    format_schedule_date_label,
    parse_schedule_date,
    parse_schedule_title,
    schedule_title_for_date,
    to_island_clock_time,
)
from farm_scheduler.domain.schedule import (
    ChildContainer,
    DirectContainer,
    Discovery,
    PageWithChildren,
    ScheduleContainer,
    ScheduleRegistry,
    ScheduleResolution,
    ScheduleSettings,
)
from farm_scheduler.errors import NotFoundError
from farm_scheduler.store.base import RecordStore


SETTINGS_ROW = "Settings"
REPORT_TIME_ROW = "Report Time"
TASK_RESET_TIME_ROW = "Task Reset Time"


class ScheduleResolver:
    """Finds the container holding a given day's schedule and reads global settings."""

    def __init__(self, store: RecordStore, cfg: FarmSchedulerConfig):
        self.store = store
        self.cfg = cfg
        self.root_id = cfg.require_schedule_root()

    def discover(self) -> Discovery:
        """Classify the root once: a direct container, or a page with child containers."""
        try:
            meta = self.store.retrieve_container(self.root_id)
            return DirectContainer(container_id=self.root_id, meta=meta)
        except NotFoundError:
            print("[INFO] Schedule root is a page, reading its child databases")

        children = [
            ChildContainer(
                id=block["id"],
                title=((block.get("child_database") or {}).get("title") or "").strip(),
            )
            for block in self.store.list_children(self.root_id)
            if block.get("type") == "child_database"
        ]
        return PageWithChildren(page_id=self.root_id, children=children)

    def require_page(self, discovery: Discovery | None = None) -> PageWithChildren:
        discovery = discovery or self.discover()
        if isinstance(discovery, DirectContainer):
            raise NotFoundError("Schedule root is a single database, not a page of schedules")
        return discovery

    def _settings_row(self, settings_id: str, title_key: str, name: str) -> Optional[dict]:
        rows = self.store.query_container(
            settings_id,
            filter={"property": title_key, "title": {"equals": name}},
            sorts=[{"property": self.cfg.settings_date_field, "direction": "descending"}],
            page_size=1,
        )
        return rows[0] if rows else None

    def read_settings(self, page: PageWithChildren, include_times: bool = True) -> ScheduleSettings:
        """
        Read the selected schedule date and the report/task-reset clock times.

        Args:
            page: Discovered schedule page
            include_times: Skip the two clock-time queries when False

        Raises:
            NotFoundError: If the page has no Settings container
        """
        settings = page.find_settings()
        if settings is None:
            raise NotFoundError("Could not find Settings database under the schedule page")

        meta = self.store.retrieve_container(settings.id)
        title_key = fv.title_field_key(meta)
        date_field = self.cfg.settings_date_field

        def _start(row: Optional[dict]) -> Optional[str]:
            return fv.date_start(((row or {}).get("properties") or {}).get(date_field))

        selected = _start(self._settings_row(settings.id, title_key, SETTINGS_ROW))
        report_time = task_reset_time = None
        if include_times:
            report_time = to_island_clock_time(
                _start(self._settings_row(settings.id, title_key, REPORT_TIME_ROW)), self.cfg.timezone
            )
            task_reset_time = to_island_clock_time(
                _start(self._settings_row(settings.id, title_key, TASK_RESET_TIME_ROW)), self.cfg.timezone
            )

        return ScheduleSettings(
            selected_date=format_schedule_date_label(selected) if selected else None,
            report_time=report_time,
            task_reset_time=task_reset_time,
        )

    @staticmethod
    def effective_date(date_label: Optional[str], settings: ScheduleSettings) -> str:
        if date_label:
            return format_schedule_date_label(date_label)
        if settings.selected_date:
            return settings.selected_date
        raise NotFoundError("Selected Schedule date is not configured")

    def resolve(self, date_label: Optional[str] = None, staging: bool = False) -> ScheduleResolution:
        """
        Locate the container for a date.

        Args:
            date_label: Explicit date; defaults to the globally selected date
            staging: Resolve the staging copy instead of the live one

        Returns:
            ScheduleResolution with container id/schema and the settings in effect

        Raises:
            NotFoundError: If settings, the selected date, or the container is missing
        """
        discovery = self.discover()
        if isinstance(discovery, DirectContainer):
            return ScheduleResolution(
                container_id=discovery.container_id,
                container_meta=discovery.meta,
                schedule_date=format_schedule_date_label(date_label) if date_label else None,
            )

        settings = self.read_settings(discovery)
        schedule_date = self.effective_date(date_label, settings)
        expected_title = schedule_title_for_date(schedule_date, staging)

        target = discovery.find(expected_title)
        if target is None:
            raise NotFoundError(f"No schedule database found for {expected_title}")

        return ScheduleResolution(
            container_id=target.id,
            container_meta=self.store.retrieve_container(target.id),
            schedule_date=schedule_date,
            report_time=settings.report_time,
            task_reset_time=settings.task_reset_time,
        )

    def list(self) -> ScheduleRegistry:
        """All dated schedule containers under the root, sorted chronologically."""
        discovery = self.discover()
        if isinstance(discovery, DirectContainer):
            return ScheduleRegistry(mode="direct")

        entries: List[ScheduleContainer] = []
        for child in discovery.children:
            if not child.title or child.title.lower() == "settings":
                continue
            parsed = parse_schedule_title(child.title)
            if parsed is None:
                continue
            date_label, is_staging = parsed
            entries.append(
                ScheduleContainer(
                    id=child.id,
                    raw_title=child.title,
                    date_label=date_label,
                    is_staging=is_staging,
                )
            )

        entries.sort(key=lambda e: (parse_schedule_date(e.date_label), e.date_label, e.is_staging))

        settings = discovery.find_settings()
        return ScheduleRegistry(
            mode="paged",
            entries=entries,
            settings_container_id=settings.id if settings else None,
        )
