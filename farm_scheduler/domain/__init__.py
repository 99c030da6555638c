"""Domain value types and the local store's data access layer."""

from .models import Base, ContainerRecord, PageRecord, RowRecord
from .repositories import ContainerRepository, PageRepository, RowRepository
from .schedule import (
    ScheduleContainer,
    ScheduleMatrix,
    ScheduleRegistry,
    ScheduleResolution,
    ScheduleSettings,
    SlotDescriptor,
    WeeklyScheduleView,
)

__all__ = [
    "Base",
    "PageRecord",
    "ContainerRecord",
    "RowRecord",
    "PageRepository",
    "ContainerRepository",
    "RowRepository",
    "ScheduleContainer",
    "ScheduleMatrix",
    "ScheduleRegistry",
    "ScheduleResolution",
    "ScheduleSettings",
    "SlotDescriptor",
    "WeeklyScheduleView",
]
