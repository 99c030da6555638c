"""Tests for staging -> live publishing and pair management."""

import pytest

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.domain.repositories import ContainerRepository
from farm_scheduler.engine.loader import ScheduleLoader
from farm_scheduler.engine.publisher import StagingPublisher
from farm_scheduler.engine.resolver import ScheduleResolver
from farm_scheduler.errors import ConfigurationError, NotFoundError
from farm_scheduler.store.sql_store import SqlRecordStore


class CountingStore(SqlRecordStore):
    """Counts write calls."""

    def __init__(self, session):
        super().__init__(session)
        self.writes = []

    def create_container(self, parent_id, title, schema):
        self.writes.append(("create_container", title))
        return super().create_container(parent_id, title, schema)

    def create_row(self, container_id, fields):
        self.writes.append(("create_row", container_id))
        return super().create_row(container_id, fields)

    def update_row(self, row_id, fields):
        self.writes.append(("update_row", row_id))
        return super().update_row(row_id, fields)

    def update_container_schema(self, container_id, schema_patch):
        self.writes.append(("update_container_schema", container_id))
        return super().update_container_schema(container_id, schema_patch)

    def archive_row(self, row_id, archived=True):
        self.writes.append(("archive_row", row_id))
        return super().archive_row(row_id, archived)


def _titles(store, root_id):
    return [child["child_database"]["title"] for child in store.list_children(root_id)]


def _live(store, cfg, date_label="03/04/2025"):
    return ScheduleLoader(store, cfg).load(date_label)


def test_publish_converges_live_to_staging(store, seeded_farm):
    cfg = seeded_farm.config()
    staging = ScheduleLoader(store, cfg).load("03/04/2025", staging=True)

    result = StagingPublisher(store, cfg).publish("2025-03-04")

    assert result.date_label == "03/04/2025"
    assert result.created_container is False
    assert (result.inserted, result.updated, result.archived) == (1, 1, 1)

    live = _live(store, cfg)
    assert live.people == staging.people == ["Ana", "Cy"]
    assert live.cells == staging.cells
    assert live.row_for("Ana") == ["Cook", "Milk goats", "", ""]


def test_republish_writes_nothing(db_session, seeded_farm):
    store = CountingStore(db_session)
    cfg = seeded_farm.config()
    publisher = StagingPublisher(store, cfg)
    publisher.publish("03/04/2025")
    store.writes.clear()

    result = publisher.publish("03/04/2025")

    assert (result.inserted, result.updated, result.archived) == (0, 0, 0)
    assert result.changed is False
    assert store.writes == []


def test_archived_people_do_not_come_back(store, seeded_farm):
    cfg = seeded_farm.config()
    StagingPublisher(store, cfg).publish("03/04/2025")

    assert "Ben" not in _live(store, cfg).people
    live_rows = store.query_all_container_rows(ScheduleResolver(store, cfg).resolve("03/04/2025").container_id)
    assert len(live_rows) == 2


def test_publish_creates_live_container_from_staging_schema(store, farm, slot_keys):
    farm.add_settings()
    staging_id = farm.add_schedule(
        "Staging - 03/06/2025",
        slot_keys,
        {"Dee": {slot_keys[1]: "Harvest taro"}},
    )
    cfg = farm.config()

    result = StagingPublisher(store, cfg).publish("03/06/2025")

    assert result.created_container is True
    assert result.inserted == 1
    assert "03/06/2025" in _titles(store, farm.root_id)
    live_meta = store.retrieve_container(result.live_id)
    staging_meta = store.retrieve_container(staging_id)
    assert fv.clone_schema(live_meta) == fv.clone_schema(staging_meta)
    assert _live(store, cfg, "03/06/2025").row_for("Dee") == ["", "Harvest taro", "", ""]


def test_publish_without_staging_fails(store, seeded_farm):
    with pytest.raises(NotFoundError):
        StagingPublisher(store, seeded_farm.config()).publish("03/05/2025")


def test_publish_adds_missing_slot_fields_and_options(store, farm, slot_keys):
    farm.add_settings()
    crew_options = {"options": [{"name": "Ana"}]}
    farm.add_schedule(
        "03/04/2025",
        slot_keys,
        {"Ana": {slot_keys[0]: "Cook"}},
        extra_schema={"Crew": {"multi_select": crew_options}},
    )
    staging_id = farm.add_schedule(
        "Staging - 03/04/2025",
        slot_keys + ["5 | Evening Meeting"],
        {"Ana": {slot_keys[0]: "Cook", "5 | Evening Meeting": "Lead"}},
        extra_schema={"Crew": {"multi_select": {"options": [{"name": "Ana"}, {"name": "Dee"}]}}},
    )
    ana = store.query_all_container_rows(staging_id)[0]
    store.update_row(ana["id"], {"Crew": fv.multi_select_value(["Ana", "Dee"])})
    cfg = farm.config()

    result = StagingPublisher(store, cfg).publish("03/04/2025")

    assert result.updated == 1
    live_meta = store.retrieve_container(result.live_id)
    assert fv.field_kind(live_meta, "5 | Evening Meeting") == "rich_text"
    assert [opt["name"] for opt in fv.multi_select_options(live_meta, "Crew")] == ["Ana", "Dee"]
    live = _live(store, cfg)
    crew_index = [slot.key for slot in live.slots].index("Crew")
    assert live.row_for("Ana")[crew_index] == "Ana, Dee"
    assert "Lead" in live.row_for("Ana")


def test_direct_mode_cannot_publish(store, db_session):
    ContainerRepository.create(
        db_session,
        "Schedule",
        {"Person": {"name": "Person", "type": "title", "title": {}}},
        uid="direct-root",
    )
    cfg = FarmSchedulerConfig(schedule_root_id="direct-root", store_backend="sql")
    with pytest.raises(ConfigurationError):
        StagingPublisher(store, cfg).publish("03/04/2025")


def test_create_pair_copies_template_schema(store, seeded_farm):
    cfg = seeded_farm.config()
    publisher = StagingPublisher(store, cfg)

    pair = publisher.create_pair("2025-03-05")

    assert pair.date_label == "03/05/2025"
    assert pair.live_id and pair.staging_id
    titles = _titles(store, seeded_farm.root_id)
    assert "03/05/2025" in titles
    assert "Staging - 03/05/2025" in titles
    template = ScheduleResolver(store, cfg).resolve("03/04/2025").container_meta
    assert fv.clone_schema(store.retrieve_container(pair.live_id)) == fv.clone_schema(template)
    assert store.query_all_container_rows(pair.live_id) == []


def test_create_pair_only_fills_the_missing_side(db_session, seeded_farm, slot_keys):
    store = CountingStore(db_session)
    seeded_farm.add_schedule("03/05/2025", slot_keys, {})
    pair = StagingPublisher(store, seeded_farm.config()).create_pair("03/05/2025")

    assert store.writes == [("create_container", "Staging - 03/05/2025")]
    assert pair.staging_id


def test_create_pair_needs_a_template(store, farm):
    farm.add_settings()
    with pytest.raises(NotFoundError):
        StagingPublisher(store, farm.config()).create_pair("03/04/2025")


def test_ensure_staging_creates_missing_copies(store, farm, slot_keys):
    farm.add_settings()
    farm.add_schedule("03/04/2025", slot_keys, {"Ana": {slot_keys[0]: "Cook"}})
    farm.add_schedule("03/05/2025", slot_keys, {})
    farm.add_schedule("Staging - 03/05/2025", slot_keys, {})

    pairs = StagingPublisher(store, farm.config()).ensure_staging()

    assert all(pair.staging_id for pair in pairs)
    titles = _titles(store, farm.root_id)
    assert titles.count("Staging - 03/04/2025") == 1
    assert titles.count("Staging - 03/05/2025") == 1
    staging = ScheduleLoader(store, farm.config()).load("03/04/2025", staging=True)
    assert staging.people == []
