"""Staging -> live publishing and schedule pair management."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from farm_scheduler import fields as fv
from farm_scheduler.config import FarmSchedulerConfig
from farm_scheduler.dates import format_schedule_date_label, schedule_title_for_date
from farm_scheduler.domain.schedule import SchedulePair, ScheduleResolution
from farm_scheduler.errors import ConfigurationError, NotFoundError
from farm_scheduler.store.base import RecordStore

from .loader import DEFAULT_PERSON_FIELD, ScheduleLoader
from .resolver import ScheduleResolver


@dataclass
class PublishResult:
    date_label: str
    live_id: str
    created_container: bool = False
    inserted: int = 0
    updated: int = 0
    archived: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.created_container or self.inserted or self.updated or self.archived)


class StagingPublisher:
    """
    Converges a date's live container to its staging container.

    Row writes are issued one at a time. Overlapping publishes for the same
    date are not coordinated and can lose updates.
    """

    def __init__(
        self,
        store: RecordStore,
        cfg: FarmSchedulerConfig,
        resolver: ScheduleResolver | None = None,
        loader: ScheduleLoader | None = None,
    ):
        self.store = store
        self.cfg = cfg
        self.resolver = resolver or ScheduleResolver(store, cfg)
        self.loader = loader or ScheduleLoader(store, cfg, self.resolver)

    def registry_pairs(self) -> Dict[str, SchedulePair]:
        registry = self.resolver.list()
        if registry.mode == "direct":
            raise ConfigurationError("Schedule root is not a page")
        return registry.pairs()

    # ------------------------------------------------------------------ publish

    def _sync_live_schema(self, live_id: str, live_meta: Dict[str, Any], staging_meta: Dict[str, Any],
                          slot_keys: List[str], patches: List[Dict[str, str]]) -> Dict[str, Any]:
        """Add slot fields missing from live and extend multi-select options; return the live schema."""
        staging_schema = fv.clone_schema(staging_meta)
        live_props = (live_meta or {}).get("properties") or {}
        schema_patch: Dict[str, Any] = {}

        for key in slot_keys:
            if key not in live_props and key in staging_schema:
                schema_patch[key] = staging_schema[key]

        for key, prop in live_props.items():
            if prop.get("type") != fv.MULTI_SELECT or key not in slot_keys:
                continue
            options = fv.multi_select_options(live_meta, key)
            known = {(opt.get("name") or "").lower() for opt in options}
            missing: List[str] = []
            for patch in patches:
                for name in fv.split_names(patch.get(key, "")):
                    if name.lower() not in known:
                        known.add(name.lower())
                        missing.append(name)
            if missing:
                schema_patch[key] = {fv.MULTI_SELECT: {"options": options + [{"name": n} for n in missing]}}

        if not schema_patch:
            return live_meta
        self.store.update_container_schema(live_id, schema_patch)
        print(f"[INFO] Updated live schema fields: {', '.join(sorted(schema_patch))}")
        return self.store.retrieve_container(live_id)

    def publish(self, date_label: str) -> PublishResult:
        """
        Make the live schedule for ``date_label`` match its staging schedule.

        Creates the live container (cloning the staging schema) if needed,
        updates or inserts one row per staging person, then archives live rows
        whose person is no longer on the staging roster. Re-publishing an
        unchanged staging schedule writes nothing.

        Raises:
            NotFoundError: If no staging schedule exists for the date
        """
        formatted = format_schedule_date_label(date_label)
        target = self.registry_pairs().get(formatted)
        if target is None or not target.staging_id:
            raise NotFoundError(f"No staging schedule found for {formatted}")

        staging_meta = self.store.retrieve_container(target.staging_id)
        result = PublishResult(date_label=formatted, live_id=target.live_id or "")

        if not target.live_id:
            title = schedule_title_for_date(formatted, staging=False)
            result.live_id = self.store.create_container(
                self.resolver.root_id, title, fv.clone_schema(staging_meta)
            )
            result.created_container = True
            print(f"[INFO] Created live schedule database {title}")

        staging = self.loader.read_matrix(
            ScheduleResolution(
                container_id=target.staging_id,
                container_meta=staging_meta,
                schedule_date=formatted,
            )
        )

        slot_keys = [slot.key for slot in staging.slots]
        patches = [dict(zip(slot_keys, row)) for row in staging.cells]

        live_meta = self.store.retrieve_container(result.live_id)
        live_meta = self._sync_live_schema(result.live_id, live_meta, staging_meta, slot_keys, patches)
        title_key = fv.title_field_key(live_meta, default=DEFAULT_PERSON_FIELD)
        writable = [key for key in slot_keys if fv.field_kind(live_meta, key) in fv.TEXT_KINDS]

        live_rows = self.store.query_all_container_rows(result.live_id)
        live_by_name: Dict[str, Dict[str, Any]] = {}
        for row in live_rows:
            name = fv.plain_text((row.get("properties") or {}).get(title_key))
            if name and name not in live_by_name:
                live_by_name[name] = row

        for person, patch in zip(staging.people, patches):
            existing = live_by_name.get(person)
            if existing is not None:
                current = existing.get("properties") or {}
                changed = {
                    key: fv.value_for_kind(fv.field_kind(live_meta, key), patch[key])
                    for key in writable
                    if not fv.text_matches(fv.field_kind(live_meta, key), current.get(key), patch[key])
                }
                if changed:
                    self.store.update_row(existing["id"], changed)
                    result.updated += 1
                    print(f"[INFO] Updated {person}: {', '.join(changed)}")
            else:
                values = {key: fv.value_for_kind(fv.field_kind(live_meta, key), patch[key]) for key in writable}
                values[title_key] = fv.title_value(person)
                self.store.create_row(result.live_id, values)
                result.inserted += 1
                print(f"[INFO] Inserted {person}")

        staging_names: Set[str] = set(staging.people)
        for row in live_rows:
            name = fv.plain_text((row.get("properties") or {}).get(title_key))
            if name and name not in staging_names:
                self.store.archive_row(row["id"], True)
                result.archived += 1
                print(f"[INFO] Archived {name}")

        print(
            f"[OK] Published {formatted}: {result.inserted} inserted, "
            f"{result.updated} updated, {result.archived} archived"
        )
        return result

    # ------------------------------------------------------------- pair setup

    def _first_template(self, pairs: Dict[str, SchedulePair]) -> Optional[str]:
        for pair in pairs.values():
            if pair.live_id:
                return pair.live_id
        for pair in pairs.values():
            if pair.staging_id:
                return pair.staging_id
        return None

    def create_pair(self, date_label: str) -> SchedulePair:
        """
        Create whichever of the live/staging containers for a date is missing.

        Raises:
            NotFoundError: If there is no existing schedule to copy the schema from
        """
        formatted = format_schedule_date_label(date_label)
        pairs = self.registry_pairs()
        target = pairs.get(formatted) or SchedulePair(formatted)

        template_id = self._first_template(pairs)
        if template_id is None:
            raise NotFoundError("No template schedule database found to copy schema.")
        schema = fv.clone_schema(self.store.retrieve_container(template_id))

        if not target.live_id:
            title = schedule_title_for_date(formatted, staging=False)
            target.live_id = self.store.create_container(self.resolver.root_id, title, schema)
            print(f"[INFO] Created {title}")
        if not target.staging_id:
            title = schedule_title_for_date(formatted, staging=True)
            target.staging_id = self.store.create_container(self.resolver.root_id, title, schema)
            print(f"[INFO] Created {title}")
        return target

    def ensure_staging(self) -> List[SchedulePair]:
        """Create a staging copy for every live schedule that lacks one."""
        pairs = self.registry_pairs()
        for pair in pairs.values():
            if pair.live_id and not pair.staging_id:
                schema = fv.clone_schema(self.store.retrieve_container(pair.live_id))
                title = schedule_title_for_date(pair.date_label, staging=True)
                pair.staging_id = self.store.create_container(self.resolver.root_id, title, schema)
                print(f"[INFO] Created {title}")
        return list(pairs.values())
