"""Record store adapter backed by SQLAlchemy.

Mirrors the hosted store's object shapes closely enough for the engine to run
unchanged against a local database, and serves as the store in tests.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from farm_scheduler import fields as fv
from farm_scheduler.domain.models import ContainerRecord, RowRecord
from farm_scheduler.domain.repositories import ContainerRepository, PageRepository, RowRepository
from farm_scheduler.errors import NotFoundError, TransientStoreError

from .base import RecordStore


_EMPTY_VALUES = {
    fv.TITLE: list,
    fv.RICH_TEXT: list,
    fv.MULTI_SELECT: list,
    fv.SELECT: lambda: None,
    fv.CHECKBOX: lambda: False,
    fv.DATE: lambda: None,
}


def _split_shape(shape: Dict[str, Any]) -> Tuple[str, Any]:
    """Return ``(kind, payload)`` for a write shape such as ``{"rich_text": [...]}``."""
    kind = shape.get("type")
    if kind is None:
        keys = [key for key in shape if key != "type"]
        if len(keys) != 1:
            raise TransientStoreError(f"Ambiguous field value: {shape!r}")
        kind = keys[0]
    return kind, shape.get(kind)


def _with_plain_text(runs: List[Dict[str, Any]] | None) -> List[Dict[str, Any]]:
    out = []
    for run in runs or []:
        content = run.get("plain_text")
        if content is None:
            content = (run.get("text") or {}).get("content", "")
        out.append({"type": "text", "text": {"content": content}, "plain_text": content})
    return out


def _sort_value(prop: Dict[str, Any] | None) -> Optional[Any]:
    if not prop:
        return None
    if prop.get("type") == fv.DATE:
        start = fv.date_start(prop)
        if not start:
            return None
        ts = pd.Timestamp(start)
        return ts.tz_convert("UTC").tz_localize(None) if ts.tzinfo else ts
    text = fv.plain_text(prop)
    return text or None


class SqlRecordStore(RecordStore):
    """RecordStore over the pages/containers/rows tables."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _guard(self) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            raise TransientStoreError(f"Local store failure: {e}") from e

    # ------------------------------------------------------------------ helpers

    def _container(self, container_id: str) -> ContainerRecord:
        container = ContainerRepository.get_by_uid(self.session, container_id)
        if container is None:
            raise NotFoundError(f"Could not find database with ID: {container_id}")
        return container

    def _row(self, row_id: str) -> RowRecord:
        row = RowRepository.get_by_uid(self.session, row_id)
        if row is None:
            raise NotFoundError(f"Could not find page with ID: {row_id}")
        return row

    def _row_dict(self, row: RowRecord, schema: Dict[str, Any]) -> Dict[str, Any]:
        properties: Dict[str, Any] = {}
        stored = row.properties or {}
        for name, definition in schema.items():
            kind = definition.get("type")
            if name in stored:
                properties[name] = stored[name]
            else:
                properties[name] = {"type": kind, kind: _EMPTY_VALUES.get(kind, lambda: None)()}
        return {
            "object": "page",
            "id": row.uid,
            "archived": bool(row.archived),
            "created_time": row.created_at.isoformat() if row.created_at else None,
            "properties": properties,
        }

    def _encode_fields(self, container: ContainerRecord, fields: Dict[str, Any]) -> Dict[str, Any]:
        schema = container.schema or {}
        encoded: Dict[str, Any] = {}
        for name, shape in fields.items():
            definition = schema.get(name)
            if definition is None:
                raise TransientStoreError(f"{name} is not a property that exists.")
            kind, payload = _split_shape(shape)
            if kind != definition.get("type"):
                raise TransientStoreError(
                    f"{name} is expected to be {definition.get('type')}, got {kind}."
                )
            if kind in (fv.TITLE, fv.RICH_TEXT):
                payload = _with_plain_text(payload)
            elif kind == fv.MULTI_SELECT:
                known = {
                    (opt.get("name") or "").lower()
                    for opt in (definition.get(fv.MULTI_SELECT) or {}).get("options") or []
                }
                for option in payload or []:
                    if (option.get("name") or "").lower() not in known:
                        raise TransientStoreError(
                            f"Option '{option.get('name')}' does not exist for {name}."
                        )
            encoded[name] = {"type": kind, kind: payload}
        return encoded

    @staticmethod
    def _matches(row: Dict[str, Any], filter: Dict[str, Any]) -> bool:
        prop = row["properties"].get(filter.get("property"))
        for kind, condition in filter.items():
            if kind == "property" or not isinstance(condition, dict):
                continue
            if "equals" not in condition:
                raise TransientStoreError(f"Unsupported filter condition: {condition!r}")
            expected = condition["equals"]
            if kind == fv.CHECKBOX:
                return fv.checkbox_value(prop) == bool(expected)
            return fv.plain_text(prop) == str(expected)
        return True

    @staticmethod
    def _apply_sorts(rows: List[Dict[str, Any]], sorts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        for sort in reversed(sorts):
            name = sort.get("property")
            descending = sort.get("direction") == "descending"
            present = [r for r in rows if _sort_value(r["properties"].get(name)) is not None]
            missing = [r for r in rows if _sort_value(r["properties"].get(name)) is None]
            present.sort(key=lambda r: _sort_value(r["properties"].get(name)), reverse=descending)
            rows = present + missing
        return rows

    # ---------------------------------------------------------------- contract

    def create_page(self, title: str, uid: str | None = None) -> str:
        """Create a plain page (e.g. the schedule root). Not part of RecordStore."""
        with self._guard():
            return PageRepository.create(self.session, title, uid).uid

    def retrieve_container(self, container_id: str) -> Dict[str, Any]:
        with self._guard():
            container = self._container(container_id)
            return {
                "object": "database",
                "id": container.uid,
                "title": _with_plain_text([{"text": {"content": container.title}}]),
                "properties": dict(container.schema or {}),
            }

    def retrieve_page(self, page_id: str) -> Dict[str, Any]:
        with self._guard():
            row = self._row(page_id)
            return self._row_dict(row, row.container.schema or {})

    def query_container(
        self,
        container_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
        page_size: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        rows = self.query_all_container_rows(container_id)
        if filter:
            rows = [row for row in rows if self._matches(row, filter)]
        if sorts:
            rows = self._apply_sorts(rows, sorts)
        if page_size is not None:
            rows = rows[:page_size]
        return rows

    def query_all_container_rows(self, container_id: str) -> List[Dict[str, Any]]:
        with self._guard():
            container = self._container(container_id)
            schema = container.schema or {}
            return [self._row_dict(row, schema) for row in RowRepository.get_active(self.session, container)]

    def list_children(self, page_id: str) -> List[Dict[str, Any]]:
        with self._guard():
            if PageRepository.get_by_uid(self.session, page_id) is None:
                raise NotFoundError(f"Could not find block with ID: {page_id}")
            return [
                {
                    "object": "block",
                    "id": child.uid,
                    "type": "child_database",
                    "child_database": {"title": child.title},
                }
                for child in ContainerRepository.get_children(self.session, page_id)
            ]

    def create_container(self, parent_id: str, title: str, schema: Dict[str, Any]) -> str:
        with self._guard():
            if PageRepository.get_by_uid(self.session, parent_id) is None:
                raise NotFoundError(f"Could not find page with ID: {parent_id}")
            stored = {}
            for name, shape in schema.items():
                kind, config = _split_shape(shape)
                stored[name] = {"name": name, "type": kind, kind: config or {}}
            if sum(1 for d in stored.values() if d["type"] == fv.TITLE) != 1:
                raise TransientStoreError("A database must have exactly one title property.")
            return ContainerRepository.create(self.session, title, stored, parent_uid=parent_id).uid

    def create_row(self, container_id: str, fields: Dict[str, Any]) -> str:
        with self._guard():
            container = self._container(container_id)
            encoded = self._encode_fields(container, fields)
            return RowRepository.create(self.session, container, encoded).uid

    def update_row(self, row_id: str, fields: Dict[str, Any]) -> None:
        with self._guard():
            row = self._row(row_id)
            encoded = self._encode_fields(row.container, fields)
            merged = dict(row.properties or {})
            merged.update(encoded)
            RowRepository.update_properties(self.session, row, merged)

    def update_container_schema(self, container_id: str, schema_patch: Dict[str, Any]) -> None:
        with self._guard():
            container = self._container(container_id)
            schema = dict(container.schema or {})
            for name, shape in schema_patch.items():
                kind, config = _split_shape(shape)
                schema[name] = {"name": name, "type": kind, kind: config or {}}
            ContainerRepository.update_schema(self.session, container, schema)

    def archive_row(self, row_id: str, archived: bool = True) -> None:
        with self._guard():
            RowRepository.set_archived(self.session, self._row(row_id), archived)
