"""Value types for resolved schedules, loaded matrices and weekly views."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import pandas as pd


@dataclass(frozen=True)
class SlotDescriptor:
    """One schedulable period, parsed from a raw schema field name."""

    key: str  # raw field name, used for reads and writes
    label: str
    time_range: str = ""
    is_meal: bool = False
    order: float = math.inf


@dataclass(frozen=True)
class ScheduleContainer:
    id: str
    raw_title: str
    date_label: str
    is_staging: bool


@dataclass
class SchedulePair:
    """Live and staging containers sharing one date label."""

    date_label: str
    live_id: Optional[str] = None
    staging_id: Optional[str] = None


@dataclass(frozen=True)
class ChildContainer:
    id: str
    title: str


@dataclass(frozen=True)
class DirectContainer:
    """The configured root is itself the only schedule container."""

    container_id: str
    meta: Dict[str, Any]


@dataclass(frozen=True)
class PageWithChildren:
    """The configured root is a page holding dated child containers."""

    page_id: str
    children: List[ChildContainer]

    def find(self, title: str) -> Optional[ChildContainer]:
        for child in self.children:
            if child.title.strip() == title:
                return child
        return None

    def find_settings(self) -> Optional[ChildContainer]:
        for child in self.children:
            if child.title.strip().lower() == "settings":
                return child
        return None


Discovery = Union[DirectContainer, PageWithChildren]


@dataclass(frozen=True)
class ScheduleSettings:
    """Global settings read from the Settings container."""

    selected_date: Optional[str] = None
    report_time: Optional[str] = None  # HH:MM, island time
    task_reset_time: Optional[str] = None


@dataclass(frozen=True)
class ScheduleResolution:
    container_id: str
    container_meta: Optional[Dict[str, Any]]
    schedule_date: Optional[str] = None
    report_time: Optional[str] = None
    task_reset_time: Optional[str] = None


@dataclass(frozen=True)
class ScheduleRegistry:
    mode: str  # "direct" | "paged"
    entries: List[ScheduleContainer] = field(default_factory=list)
    settings_container_id: Optional[str] = None

    def pairs(self) -> Dict[str, SchedulePair]:
        """Group entries into live/staging pairs keyed by date label."""
        by_date: Dict[str, SchedulePair] = {}
        for entry in self.entries:
            pair = by_date.setdefault(entry.date_label, SchedulePair(entry.date_label))
            if entry.is_staging:
                pair.staging_id = entry.id
            else:
                pair.live_id = entry.id
        return by_date


@dataclass
class ScheduleMatrix:
    """
    People x slot assignment matrix for one schedule container.

    ``cells[i][j]`` is the task text for ``people[i]`` in ``slots[j]``; missing
    values are empty strings.
    """

    people: List[str] = field(default_factory=list)
    slots: List[SlotDescriptor] = field(default_factory=list)
    cells: List[List[str]] = field(default_factory=list)
    report_flags: Optional[List[bool]] = None
    schedule_date: Optional[str] = None
    report_time: Optional[str] = None
    task_reset_time: Optional[str] = None
    message: Optional[str] = None

    def __post_init__(self) -> None:
        if len(self.cells) != len(self.people):
            raise ValueError(
                f"Matrix has {len(self.cells)} rows for {len(self.people)} people"
            )
        for row in self.cells:
            if len(row) != len(self.slots):
                raise ValueError(
                    f"Matrix row has {len(row)} cells for {len(self.slots)} slots"
                )

    @classmethod
    def empty(cls, message: Optional[str] = None, schedule_date: Optional[str] = None) -> "ScheduleMatrix":
        return cls(message=message, schedule_date=schedule_date)

    @property
    def is_empty(self) -> bool:
        return not self.people or not self.slots

    @property
    def settings(self) -> ScheduleSettings:
        return ScheduleSettings(
            selected_date=self.schedule_date,
            report_time=self.report_time,
            task_reset_time=self.task_reset_time,
        )

    def row_for(self, person: str) -> List[str]:
        return self.cells[self.people.index(person)]

    def to_frame(self) -> pd.DataFrame:
        columns = [
            f"{slot.label} ({slot.time_range})" if slot.time_range else slot.label
            for slot in self.slots
        ]
        return pd.DataFrame(self.cells, index=pd.Index(self.people, name="Person"), columns=columns)


@dataclass
class WeekdayRow:
    day: str
    assignments: Dict[str, List[str]]


@dataclass
class WeekendRow:
    task: str
    assignments: Dict[str, List[str]]


@dataclass
class WeekOverview:
    columns: List[str] = field(default_factory=list)
    rows: List[WeekdayRow] = field(default_factory=list)


@dataclass
class WeekendSchedule:
    columns: List[str] = field(default_factory=list)
    rows: List[WeekendRow] = field(default_factory=list)


@dataclass
class WeeklyScheduleView:
    week_label: str
    week_overview: WeekOverview = field(default_factory=WeekOverview)
    weekend_schedule: WeekendSchedule = field(default_factory=WeekendSchedule)
    message: Optional[str] = None

    def overview_frame(self) -> pd.DataFrame:
        data = {
            row.day: {col: ", ".join(row.assignments.get(col, [])) for col in self.week_overview.columns}
            for row in self.week_overview.rows
        }
        return pd.DataFrame.from_dict(data, orient="index", columns=self.week_overview.columns)

    def weekend_frame(self) -> pd.DataFrame:
        data = {
            row.task: {col: ", ".join(row.assignments.get(col, [])) for col in self.weekend_schedule.columns}
            for row in self.weekend_schedule.rows
        }
        return pd.DataFrame.from_dict(data, orient="index", columns=self.weekend_schedule.columns)
