"""Configuration loading (YAML or JSON file, then environment overrides)."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError


ENV_OVERRIDES = {
    "NOTION_SCHEDULE_DATABASE_ID": "schedule_root_id",
    "NOTION_REPORTS_DATABASE_ID": "reports_container_id",
    "NOTION_TASKS_DATABASE_ID": "tasks_container_id",
    "NOTION_TOKEN": "api_token",
    "FARM_SCHEDULER_STORE": "store_backend",
    "FARM_SCHEDULER_DB_URL": "database_url",
}


@dataclass(frozen=True)
class FarmSchedulerConfig:
    schedule_root_id: Optional[str] = None
    reports_container_id: Optional[str] = None
    tasks_container_id: Optional[str] = None
    store_backend: str = "notion"  # notion | sql
    api_token: Optional[str] = None
    api_base_url: str = "https://api.notion.com/v1"
    api_version: str = "2022-06-28"
    request_timeout: float = 30.0
    database_url: str = "sqlite:///farm_scheduler.db"
    timezone: str = "Pacific/Honolulu"
    report_field: str = "Report"
    settings_date_field: str = "Selected Schedule"

    def require_schedule_root(self) -> str:
        if not self.schedule_root_id:
            raise ConfigurationError("NOTION_SCHEDULE_DATABASE_ID is not set")
        return self.schedule_root_id

    def require_reports_container(self) -> str:
        if not self.reports_container_id:
            raise ConfigurationError("NOTION_REPORTS_DATABASE_ID is not set")
        return self.reports_container_id

    def require_api_token(self) -> str:
        if not self.api_token:
            raise ConfigurationError("NOTION_TOKEN is not set")
        return self.api_token


def _read_file(path: Path) -> Dict:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def load_config(
    path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> FarmSchedulerConfig:
    """
    Build an immutable configuration value.

    Args:
        path: Optional YAML or JSON file; unknown keys are rejected
        env: Environment mapping for overrides (default: os.environ)

    Returns:
        FarmSchedulerConfig with file values, then environment overrides applied
    """
    known = {f.name for f in fields(FarmSchedulerConfig)}
    values: Dict = {}

    if path is not None:
        raw = _read_file(Path(path))
        unknown = sorted(set(raw) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        values.update(raw)

    cfg = FarmSchedulerConfig(**values)

    env = os.environ if env is None else env
    overrides = {
        attr: env[name]
        for name, attr in ENV_OVERRIDES.items()
        if env.get(name)
    }
    if overrides:
        cfg = replace(cfg, **overrides)

    if cfg.store_backend not in ("notion", "sql"):
        raise ConfigurationError(f"Unknown store backend: {cfg.store_backend}")
    return cfg
