"""Tests for the weekly schedule view."""

import pytest

from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.domain.repositories import ContainerRepository
from farm_scheduler.engine.weekly import WEEKLY_UNAVAILABLE_MESSAGE, WeeklyAggregator, split_columns
from farm_scheduler.errors import NotFoundError, TransientStoreError
from farm_scheduler.store.sql_store import SqlRecordStore


class FlakyStore(SqlRecordStore):
    def query_all_container_rows(self, container_id):
        raise TransientStoreError("timeout")


@pytest.fixture
def weekly_farm(farm):
    farm.add_settings()
    farm.add_weekly(
        "03/03/2025 - Weekly",
        ["Field Crew", "Kitchen", "Weekend Notes", "Saturday AM", "Sunday pm", "Saturday PM"],
        {
            "Wednesday": {"Field Crew": "Ana, Ben", "Kitchen": "Cy"},
            "monday": {"Field Crew": "Dee\nEli"},
            "Feed animals": {"Saturday AM": "Ana", "Sunday pm": "Ben, Cy"},
            "Sunday": {"Kitchen": "Ana"},
            "Mulch beds": {"Saturday PM": "Dee"},
        },
    )
    return farm


def test_split_columns():
    weekday, weekend = split_columns(["Kitchen", "sunday am", "Weekend Notes", "Saturday AM", "Field"])
    assert weekday == ["Kitchen", "Field"]
    assert weekend == [("Saturday AM", "Saturday AM"), ("Sunday AM", "sunday am")]


def test_week_from_selected_date(store, weekly_farm):
    view = WeeklyAggregator(store, weekly_farm.config()).load_week()

    assert view.week_label == "03/03/2025"
    assert view.message is None
    overview = view.week_overview
    assert overview.columns == ["Field Crew", "Kitchen"]
    assert [row.day for row in overview.rows] == ["Monday", "Wednesday", "Sunday"]
    assert overview.rows[0].assignments == {"Field Crew": ["Dee", "Eli"], "Kitchen": []}
    assert overview.rows[1].assignments == {"Field Crew": ["Ana", "Ben"], "Kitchen": ["Cy"]}


def test_weekend_tasks_keep_store_order(store, weekly_farm):
    view = WeeklyAggregator(store, weekly_farm.config()).load_week()

    weekend = view.weekend_schedule
    assert weekend.columns == ["Saturday AM", "Saturday PM", "Sunday PM"]
    assert [row.task for row in weekend.rows] == ["Feed animals", "Mulch beds"]
    assert weekend.rows[0].assignments == {"Saturday AM": ["Ana"], "Saturday PM": [], "Sunday PM": ["Ben", "Cy"]}
    assert weekend.rows[1].assignments["Saturday PM"] == ["Dee"]


@pytest.mark.parametrize("day", ["03/03/2025", "2025-03-06", "3/9/2025"])
def test_any_date_in_the_week_finds_the_same_view(store, weekly_farm, day):
    view = WeeklyAggregator(store, weekly_farm.config()).load_week(day)
    assert view.week_label == "03/03/2025"
    assert len(view.week_overview.rows) == 3


def test_frames(store, weekly_farm):
    view = WeeklyAggregator(store, weekly_farm.config()).load_week()
    assert view.overview_frame().loc["Wednesday", "Field Crew"] == "Ana, Ben"
    assert view.weekend_frame().loc["Feed animals", "Sunday PM"] == "Ben, Cy"


def test_missing_weekly_container(store, weekly_farm):
    with pytest.raises(NotFoundError):
        WeeklyAggregator(store, weekly_farm.config()).load_week("03/10/2025")


def test_store_failure_degrades_to_empty_view(db_session, weekly_farm):
    view = WeeklyAggregator(FlakyStore(db_session), weekly_farm.config()).load_week("03/04/2025")

    assert view.message == WEEKLY_UNAVAILABLE_MESSAGE
    assert view.week_label == "03/03/2025"
    assert view.week_overview.rows == []
    assert view.weekend_schedule.rows == []


def test_direct_root_has_no_weekly_view(store, db_session):
    ContainerRepository.create(
        db_session,
        "Schedule",
        {"Person": {"name": "Person", "type": "title", "title": {}}},
        uid="direct-root",
    )
    cfg = FarmSchedulerConfig(schedule_root_id="direct-root", store_backend="sql")
    with pytest.raises(NotFoundError):
        WeeklyAggregator(store, cfg).load_week("03/04/2025")


def test_weekday_rows_use_canonical_day_names(store, farm):
    farm.add_settings()
    farm.add_weekly("03/03/2025 - Weekly", ["Kitchen"], {"FRIDAY": {"Kitchen": "Ana"}, "tuesday": {}})

    view = WeeklyAggregator(store, farm.config()).load_week()

    assert [row.day for row in view.week_overview.rows] == ["Tuesday", "Friday"]
