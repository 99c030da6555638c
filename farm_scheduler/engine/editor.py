"""Editing individual schedule cells and rows."""

from __future__ import annotations

from typing import List, Optional, Union

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.errors import NotFoundError
from farm_scheduler.store.base import RecordStore

from .loader import DEFAULT_PERSON_FIELD
from .resolver import ScheduleResolver


def join_tasks(tasks: List[str]) -> str:
    return ", ".join(tasks)


class ScheduleEditor:
    def __init__(self, store: RecordStore, cfg: FarmSchedulerConfig, resolver: ScheduleResolver | None = None):
        self.store = store
        self.cfg = cfg
        self.resolver = resolver or ScheduleResolver(store, cfg)

    def _context(self, date_label: Optional[str], staging: bool):
        resolution = self.resolver.resolve(date_label=date_label, staging=staging)
        meta = resolution.container_meta or self.store.retrieve_container(resolution.container_id)
        return resolution.container_id, meta, fv.title_field_key(meta, default=DEFAULT_PERSON_FIELD)

    def add_person(self, name: str, date_label: Optional[str] = None, staging: bool = False) -> str:
        """Insert a row holding only the person's name; returns the row id."""
        container_id, _, title_key = self._context(date_label, staging)
        return self.store.create_row(container_id, {title_key: fv.title_value(name)})

    def update_cell(
        self,
        person: str,
        slot_key: str,
        add_task: Optional[str] = None,
        remove_task: Optional[str] = None,
        replace_value: Optional[str] = None,
        report_value: Optional[bool] = None,
        date_label: Optional[str] = None,
        staging: bool = False,
    ) -> Union[bool, str, List[str]]:
        """
        Edit one person's value in one field.

        Checkbox fields take ``report_value``. Text fields are treated as a
        comma/newline separated task list: ``remove_task`` is dropped and
        ``add_task`` appended (both case-insensitive, no duplicates). Multi-select
        fields get any new option names added to the schema before the write.

        Returns:
            The value written (bool, joined text, or list of option names)

        Raises:
            NotFoundError: If the person has no row in the resolved schedule
        """
        container_id, meta, title_key = self._context(date_label, staging)
        rows = self.store.query_container(
            container_id,
            filter={"property": title_key, "title": {"equals": person}},
            page_size=1,
        )
        if not rows:
            raise NotFoundError(f"Person row not found: {person}")
        row = rows[0]
        kind = fv.field_kind(meta, slot_key)

        if kind == fv.CHECKBOX:
            value = bool(report_value)
            self.store.update_row(row["id"], {slot_key: fv.checkbox_field(value)})
            return value

        current = fv.plain_text((row.get("properties") or {}).get(slot_key))
        base = replace_value if replace_value is not None else current
        if kind == fv.MULTI_SELECT:
            base = base.split("\n")[0]
        tasks = fv.split_names(base)

        if remove_task:
            removed = str(remove_task).strip().lower()
            tasks = [t for t in tasks if t.lower() != removed]
        if add_task:
            added = str(add_task).strip()
            if added and added.lower() not in {t.lower() for t in tasks}:
                tasks.append(added)

        if kind == fv.MULTI_SELECT:
            options = fv.multi_select_options(meta, slot_key)
            known = {(opt.get("name") or "").lower() for opt in options}
            missing = [t for t in tasks if t.lower() not in known]
            if missing:
                self.store.update_container_schema(
                    container_id,
                    {slot_key: {fv.MULTI_SELECT: {"options": options + [{"name": n} for n in missing]}}},
                )
            self.store.update_row(row["id"], {slot_key: fv.multi_select_value(tasks)})
            return tasks

        value = join_tasks(tasks)
        self.store.update_row(row["id"], {slot_key: fv.rich_text_value(value)})
        return value
