"""Schedule data loading: container rows -> people x slot matrix."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.dates import parse_schedule_title
from farm_scheduler.domain.schedule import ScheduleMatrix, ScheduleResolution
from farm_scheduler.errors import NotFoundError, TransientStoreError
from farm_scheduler.slots import build_slots
from farm_scheduler.store.base import RecordStore

from .resolver import ScheduleResolver


NO_SCHEDULE_MESSAGE = "No schedule has been assigned yet."
NO_TASK = "-"
DEFAULT_PERSON_FIELD = "Person"


def normalize_task_value(task: str) -> str:
    """
    First line of a cell, with a bare ``-`` meaning no assignment.

    Both conventions are specific to how the farm fills in its schedules.
    """
    trimmed = (task or "").strip()
    if not trimmed:
        return ""
    first_line = trimmed.split("\n")[0].strip()
    if first_line == NO_TASK:
        return ""
    return first_line


class ScheduleLoader:
    """Builds a ScheduleMatrix for the live or staging schedule of a date."""

    def __init__(self, store: RecordStore, cfg: FarmSchedulerConfig, resolver: ScheduleResolver | None = None):
        self.store = store
        self.cfg = cfg
        self.resolver = resolver or ScheduleResolver(store, cfg)

    def load(self, date_label: Optional[str] = None, staging: bool = False) -> ScheduleMatrix:
        """
        Resolve and load a schedule, degrading to an empty matrix on failure.

        Returns:
            ScheduleMatrix; on any store failure an empty matrix with ``message`` set
        """
        try:
            resolution = self.resolver.resolve(date_label=date_label, staging=staging)
            return self.read_matrix(resolution)
        except (NotFoundError, TransientStoreError) as e:
            print(f"[ERROR] Failed to fetch schedule: {e}")
            return ScheduleMatrix.empty(message=NO_SCHEDULE_MESSAGE)

    def load_container(self, container_id: str) -> ScheduleMatrix:
        """Load a container by id; store errors propagate."""
        return self.read_matrix(ScheduleResolution(container_id=container_id, container_meta=None))

    def _schema(self, resolution: ScheduleResolution, rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        if resolution.container_meta is not None:
            return resolution.container_meta
        try:
            return self.store.retrieve_container(resolution.container_id)
        except TransientStoreError as e:
            print(f"[WARN] Failed to retrieve database metadata, falling back to first row: {e}")
            first = (rows[0].get("properties") or {}) if rows else {}
            return {
                "properties": {
                    key: {"type": (value or {}).get("type")} for key, value in first.items()
                }
            }

    def read_matrix(self, resolution: ScheduleResolution) -> ScheduleMatrix:
        """
        Build the matrix for a resolved container. Store errors propagate.

        Slots are every schema field except the person (title) field and the
        report checkbox, sorted by explicit order then label. Rows without a
        person name are skipped; a repeated name keeps its first row.
        """
        rows = self.store.query_all_container_rows(resolution.container_id)
        schedule_date = resolution.schedule_date

        if not rows:
            return ScheduleMatrix(
                schedule_date=schedule_date,
                report_time=resolution.report_time,
                task_reset_time=resolution.task_reset_time,
            )

        meta = self._schema(resolution, rows)
        person_key = fv.title_field_key(meta, default=DEFAULT_PERSON_FIELD)
        report_key = self.cfg.report_field
        slots = build_slots(fv.schema_keys(meta), reserved=(person_key, report_key))
        if not schedule_date:
            parsed = parse_schedule_title(fv.container_title(meta))
            schedule_date = parsed[0] if parsed else None

        people: List[str] = []
        cells: List[List[str]] = []
        report_flags: List[bool] = []
        seen = set()

        for row in rows:
            props = row.get("properties") or {}
            person = fv.plain_text(props.get(person_key))
            if not person:
                continue
            if person in seen:
                print(f"[WARN] Duplicate schedule row for {person}, keeping the first")
                continue
            seen.add(person)

            people.append(person)
            report_flags.append(fv.checkbox_value(props.get(report_key)))
            cells.append([normalize_task_value(fv.plain_text(props.get(slot.key))) for slot in slots])

        return ScheduleMatrix(
            people=people,
            slots=slots,
            cells=cells,
            report_flags=report_flags,
            schedule_date=schedule_date,
            report_time=resolution.report_time,
            task_reset_time=resolution.task_reset_time,
        )
