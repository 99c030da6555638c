"""Schedule resolution and synchronization engine."""

from .editor import ScheduleEditor
from .loader import ScheduleLoader, normalize_task_value
from .publisher import PublishResult, StagingPublisher
from .reporting import AutoReportTrigger, ReportBuilder, ReportDecision, ReportStatus, StoreReportBuilder
from .resolver import ScheduleResolver
from .weekly import WeeklyAggregator

__all__ = [
    "ScheduleResolver",
    "ScheduleLoader",
    "normalize_task_value",
    "StagingPublisher",
    "PublishResult",
    "ScheduleEditor",
    "WeeklyAggregator",
    "AutoReportTrigger",
    "ReportBuilder",
    "ReportDecision",
    "ReportStatus",
    "StoreReportBuilder",
]
