"""Field value shapes exchanged with the record store.

Reads accept the store's typed property objects; writes build the exact
shapes the store expects for each field kind.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Dict, List, Optional


TITLE = "title"
RICH_TEXT = "rich_text"
SELECT = "select"
MULTI_SELECT = "multi_select"
CHECKBOX = "checkbox"
DATE = "date"

TEXT_KINDS = (TITLE, RICH_TEXT, SELECT, MULTI_SELECT)

_NAME_SEPARATORS = re.compile(r"[\n,]+")


def _runs_text(runs: List[Dict[str, Any]] | None) -> str:
    parts = []
    for run in runs or []:
        text = run.get("plain_text")
        if text is None:
            text = (run.get("text") or {}).get("content", "")
        parts.append(text or "")
    return "".join(parts)


def plain_text(prop: Dict[str, Any] | None) -> str:
    """Text content of a title, rich-text, select or multi-select value."""
    if not prop:
        return ""
    kind = prop.get("type")
    if kind in (TITLE, RICH_TEXT):
        return _runs_text(prop.get(kind)).strip()
    if kind == SELECT:
        return ((prop.get(SELECT) or {}).get("name") or "").strip()
    if kind == MULTI_SELECT:
        names = [(opt or {}).get("name") or "" for opt in prop.get(MULTI_SELECT) or []]
        return ", ".join(names).strip()
    return ""


def checkbox_value(prop: Dict[str, Any] | None) -> bool:
    if not prop:
        return False
    return bool(prop.get(CHECKBOX))


def date_start(prop: Dict[str, Any] | None) -> Optional[str]:
    if not prop:
        return None
    return (prop.get(DATE) or {}).get("start")


def split_names(value: str) -> List[str]:
    """Split comma/newline separated text into trimmed, non-empty names."""
    if not value:
        return []
    return [name.strip() for name in _NAME_SEPARATORS.split(value) if name.strip()]


def _text_runs(text: str) -> List[Dict[str, Any]]:
    return [{"type": "text", "text": {"content": text}}]


def title_value(text: str) -> Dict[str, Any]:
    return {TITLE: _text_runs(text)}


def rich_text_value(text: str) -> Dict[str, Any]:
    return {RICH_TEXT: _text_runs(text)}


def select_value(name: str) -> Dict[str, Any]:
    return {SELECT: {"name": name} if name else None}


def multi_select_value(names: List[str]) -> Dict[str, Any]:
    return {MULTI_SELECT: [{"name": name} for name in names]}


def checkbox_field(checked: bool) -> Dict[str, Any]:
    return {CHECKBOX: bool(checked)}


def date_value(start: str) -> Dict[str, Any]:
    return {DATE: {"start": start}}


def value_for_kind(kind: str | None, text: str) -> Dict[str, Any]:
    """Write shape for ``text`` in a field of the given kind (rich text by default)."""
    if kind == TITLE:
        return title_value(text)
    if kind == SELECT:
        return select_value(text.strip())
    if kind == MULTI_SELECT:
        return multi_select_value(split_names(text))
    return rich_text_value(text)


def text_matches(kind: str | None, prop: Dict[str, Any] | None, text: str) -> bool:
    """True when writing ``text`` to a field of ``kind`` would not change it."""
    if kind == MULTI_SELECT:
        return split_names(plain_text(prop)) == split_names(text)
    return plain_text(prop) == text.strip()


def title_field_key(meta: Dict[str, Any] | None, default: str = "Name") -> str:
    """Name of the first title-kind field in a container schema."""
    for key, value in ((meta or {}).get("properties") or {}).items():
        if (value or {}).get("type") == TITLE:
            return key
    return default


def field_kind(meta: Dict[str, Any] | None, key: str) -> Optional[str]:
    return (((meta or {}).get("properties") or {}).get(key) or {}).get("type")


def schema_keys(meta: Dict[str, Any] | None) -> List[str]:
    return list(((meta or {}).get("properties") or {}).keys())


def container_title(meta: Dict[str, Any] | None) -> str:
    title = (meta or {}).get("title")
    if isinstance(title, str):
        return title.strip()
    return _runs_text(title).strip()


def multi_select_options(meta: Dict[str, Any] | None, key: str) -> List[Dict[str, Any]]:
    prop = ((meta or {}).get("properties") or {}).get(key) or {}
    return list((prop.get(MULTI_SELECT) or {}).get("options") or [])


def clone_schema(meta: Dict[str, Any] | None) -> Dict[str, Dict[str, Any]]:
    """Copy a container schema verbatim: same name, kind and kind configuration."""
    schema: Dict[str, Dict[str, Any]] = {}
    for name, prop in ((meta or {}).get("properties") or {}).items():
        kind = (prop or {}).get("type")
        if not kind:
            continue
        schema[name] = {kind: copy.deepcopy(prop.get(kind) or {})}
    return schema
