"""Pytest configuration and shared fixtures."""

from typing import Dict, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.domain.db import open_session
from farm_scheduler.domain.models import Base
from farm_scheduler.store.sql_store import SqlRecordStore


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )


class FarmBuilder:
    """Builds a schedule page with Settings, dated schedules and weekly containers."""

    def __init__(self, store: SqlRecordStore):
        self.store = store
        self.root_id = store.create_page("Farm Schedule")
        self.reports_id: Optional[str] = None
        self.db_url = "sqlite:///:memory:"

    def config(self, **overrides) -> FarmSchedulerConfig:
        values = dict(
            schedule_root_id=self.root_id,
            reports_container_id=self.reports_id,
            store_backend="sql",
            database_url=self.db_url,
        )
        values.update(overrides)
        return FarmSchedulerConfig(**values)

    def add_settings(
        self,
        selected: Optional[str] = "2025-03-04",
        report_time: Optional[str] = "2025-01-01T17:30:00.000-10:00",
        task_reset_time: Optional[str] = "2025-01-01T04:00:00.000-10:00",
    ) -> str:
        settings_id = self.store.create_container(
            self.root_id,
            "Settings",
            {"Name": {"title": {}}, "Selected Schedule": {"date": {}}},
        )
        for name, value in (
            ("Settings", selected),
            ("Report Time", report_time),
            ("Task Reset Time", task_reset_time),
        ):
            if value is None:
                continue
            self.store.create_row(
                settings_id,
                {"Name": fv.title_value(name), "Selected Schedule": fv.date_value(value)},
            )
        return settings_id

    def add_schedule(
        self,
        title: str,
        slot_keys: List[str],
        people: Dict[str, Dict[str, str]],
        reported: Optional[List[str]] = None,
        extra_schema: Optional[Dict] = None,
    ) -> str:
        schema = {"Person": {"title": {}}, "Report": {"checkbox": {}}}
        for key in slot_keys:
            schema[key] = {"rich_text": {}}
        schema.update(extra_schema or {})
        container_id = self.store.create_container(self.root_id, title, schema)
        for person, tasks in people.items():
            values = {"Person": fv.title_value(person)}
            for key, text in tasks.items():
                values[key] = fv.rich_text_value(text)
            if person in (reported or []):
                values["Report"] = fv.checkbox_field(True)
            self.store.create_row(container_id, values)
        return container_id

    def add_weekly(self, title: str, columns: List[str], rows: Dict[str, Dict[str, str]]) -> str:
        schema = {"Day": {"title": {}}}
        for column in columns:
            schema[column] = {"rich_text": {}}
        container_id = self.store.create_container(self.root_id, title, schema)
        for name, values in rows.items():
            fields = {"Day": fv.title_value(name)}
            for column, text in values.items():
                fields[column] = fv.rich_text_value(text)
            self.store.create_row(container_id, fields)
        return container_id

    def add_reports(self) -> str:
        self.reports_id = self.store.create_container(
            self.root_id,
            "Reports",
            {"Name": {"title": {}}, "Schedule Date": {"date": {}}},
        )
        return self.reports_id


@pytest.fixture
def db_session():
    """Create in-memory database session for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def store(db_session):
    return SqlRecordStore(db_session)


@pytest.fixture
def farm(store):
    return FarmBuilder(store)


SLOTS = ["1 | Breakfast (6:00-7:00)", "2 | Morning Chores (7:00-11:00)", "3 | Lunch (11:00-12:00)", "Evening Chores"]


def _seed(farm: FarmBuilder) -> FarmBuilder:
    """Settings, a live and a staging schedule for 03/04/2025, and a reports container."""
    farm.add_settings()
    farm.add_reports()
    farm.add_schedule(
        "03/04/2025",
        SLOTS,
        {
            "Ana": {SLOTS[0]: "Cook", SLOTS[1]: "Feed goats", SLOTS[3]: "-"},
            "Ben": {SLOTS[1]: "Weed beds\nbring gloves", SLOTS[2]: "Dishes"},
        },
        reported=["Ben"],
    )
    farm.add_schedule(
        "Staging - 03/04/2025",
        SLOTS,
        {
            "Ana": {SLOTS[0]: "Cook", SLOTS[1]: "Milk goats"},
            "Cy": {SLOTS[2]: "Dishes", SLOTS[3]: "Close coop"},
        },
    )
    return farm


@pytest.fixture
def slot_keys():
    return list(SLOTS)


@pytest.fixture
def seeded_farm(farm):
    return _seed(farm)


@pytest.fixture
def file_farm(tmp_path):
    """Seeded farm in a SQLite file, for code that opens its own sessions."""
    db_url = f"sqlite:///{tmp_path / 'farm.db'}"
    session = open_session(db_url)
    farm = _seed(FarmBuilder(SqlRecordStore(session)))
    farm.db_url = db_url
    yield farm
    session.close()
