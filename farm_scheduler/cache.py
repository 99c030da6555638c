"""In-process TTL caches for task lookups.

Entries expire lazily: an expired entry is dropped on the next ``get`` and
reported as a miss. There is no background sweep. Not safe for concurrent
mutation from several threads or processes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

LIST_TTL_SECONDS = 60.0
DETAIL_TTL_SECONDS = 30.0

_LIST_KEY = "__task_list__"


def normalize_key(name: str) -> str:
    return name.strip().lower()


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """Key/value store with a fixed time-to-live per entry."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def get(self, name: str) -> Optional[T]:
        key = normalize_key(name)
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, name: str, value: T) -> None:
        self._entries[normalize_key(name)] = CacheEntry(
            value=value,
            expires_at=self._clock() + self.ttl_seconds,
        )

    def clear(self, name: str) -> None:
        self._entries.pop(normalize_key(name), None)

    def clear_all(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class TaskCache:
    """List-level (60s) and per-task detail (30s) caches, kept independent."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        list_ttl: float = LIST_TTL_SECONDS,
        detail_ttl: float = DETAIL_TTL_SECONDS,
    ):
        self.lists: TTLCache[Any] = TTLCache(list_ttl, clock)
        self.details: TTLCache[Any] = TTLCache(detail_ttl, clock)

    def get_task_list(self) -> Optional[Any]:
        return self.lists.get(_LIST_KEY)

    def set_task_list(self, value: Any) -> None:
        self.lists.set(_LIST_KEY, value)

    def clear_task_list(self) -> None:
        self.lists.clear(_LIST_KEY)

    def get_task_detail(self, name: str) -> Optional[Any]:
        return self.details.get(name)

    def set_task_detail(self, name: str, value: Any) -> None:
        self.details.set(name, value)

    def clear_task_detail(self, name: str) -> None:
        self.details.clear(name)

    def clear_all_task_details(self) -> None:
        self.details.clear_all()

    def get_comment_count(self, name: str) -> Optional[int]:
        cached = self.details.get(name)
        if isinstance(cached, dict):
            return cached.get("comment_count")
        return None

    def set_comment_count(self, name: str, count: int) -> None:
        entry = self.details.get(name)
        detail = dict(entry) if isinstance(entry, dict) else {}
        detail["comment_count"] = count
        self.details.set(name, detail)
