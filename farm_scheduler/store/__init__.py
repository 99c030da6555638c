"""Record store adapters."""

from __future__ import annotations

from sqlalchemy.orm import Session

from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.domain.db import open_session

from .base import RecordStore
from .notion_store import NotionRecordStore
from .sql_store import SqlRecordStore


def build_store(cfg: FarmSchedulerConfig, session: Session | None = None) -> RecordStore:
    """Create the store adapter selected by ``cfg.store_backend``."""
    if cfg.store_backend == "sql":
        return SqlRecordStore(session or open_session(cfg.database_url))
    return NotionRecordStore.from_config(cfg)


__all__ = ["RecordStore", "NotionRecordStore", "SqlRecordStore", "build_store"]
