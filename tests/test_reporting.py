"""Tests for the automatic daily report trigger."""

import pandas as pd
import pytest

from farm_scheduler import fields as fv
from farm_scheduler.domain.schedule import ScheduleMatrix, ScheduleSettings
from farm_scheduler.engine.loader import ScheduleLoader
from farm_scheduler.engine.reporting import (
    AutoReportTrigger,
    ReportBuilder,
    ReportStatus,
    StoreReportBuilder,
)
from farm_scheduler.errors import ConfigurationError
from farm_scheduler.slots import parse_slot_key


class FakeBuilder(ReportBuilder):
    def __init__(self, existing=None, fail=False):
        self.reports = dict(existing or {})
        self.fail = fail
        self.lookups = []

    def find_report(self, date_label):
        self.lookups.append(date_label)
        if self.fail:
            raise RuntimeError("reports store unavailable")
        return self.reports.get(date_label)

    def create_report(self, matrix, date_label):
        report_id = f"report-{len(self.reports) + 1}"
        self.reports[date_label] = report_id
        return report_id


def island_clock(text):
    return lambda: pd.Timestamp(text, tz="Pacific/Honolulu")


def make_matrix(report_time="17:30", schedule_date="03/04/2025"):
    return ScheduleMatrix(
        people=["Ana"],
        slots=[parse_slot_key("3 | Lunch (11:00-12:00)")],
        cells=[["Cook"]],
        report_flags=[False],
        schedule_date=schedule_date,
        report_time=report_time,
    )


def test_no_schedule():
    builder = FakeBuilder()
    trigger = AutoReportTrigger(builder, clock=island_clock("2025-03-04 18:00"))

    decision = trigger.decide(ScheduleMatrix.empty(message="No schedule has been assigned yet."))

    assert decision.status == ReportStatus.NO_SCHEDULE
    assert builder.lookups == []


def test_no_report_time():
    trigger = AutoReportTrigger(FakeBuilder(), clock=island_clock("2025-03-04 18:00"))
    assert trigger.decide(make_matrix(report_time=None)).status == ReportStatus.NO_AUTO_TIME


def test_pending_before_report_time():
    builder = FakeBuilder()
    trigger = AutoReportTrigger(builder, clock=island_clock("2025-03-04 17:00"))

    decision = trigger.decide(make_matrix())

    assert decision.status == ReportStatus.PENDING
    assert decision.next_run == "2025-03-04T17:30:00-10:00"
    assert builder.lookups == []


def test_clock_in_another_zone_is_converted():
    utc_now = lambda: pd.Timestamp("2025-03-05 03:00", tz="UTC")  # 17:00 in Honolulu
    decision = AutoReportTrigger(FakeBuilder(), clock=utc_now).decide(make_matrix())
    assert decision.status == ReportStatus.PENDING


def test_existing_report():
    builder = FakeBuilder(existing={"03/04/2025": "report-9"})
    decision = AutoReportTrigger(builder, clock=island_clock("2025-03-04 18:00")).decide(make_matrix())

    assert decision.status == ReportStatus.EXISTS
    assert decision.report_id == "report-9"


def test_created_at_report_time_then_exists():
    builder = FakeBuilder()
    trigger = AutoReportTrigger(builder, clock=island_clock("2025-03-04 17:30"))

    first = trigger.decide(make_matrix())
    second = trigger.decide(make_matrix())

    assert first.status == ReportStatus.CREATED
    assert first.report_id == "report-1"
    assert second.status == ReportStatus.EXISTS
    assert second.report_id == "report-1"
    assert builder.lookups == ["03/04/2025", "03/04/2025"]


def test_report_keyed_by_today_without_selected_date():
    builder = FakeBuilder()
    trigger = AutoReportTrigger(builder, clock=island_clock("2025-03-06 08:00"))

    decision = trigger.decide(make_matrix(schedule_date=None), ScheduleSettings(report_time="06:00"))

    assert decision.status == ReportStatus.CREATED
    assert builder.reports == {"03/06/2025": "report-1"}


def test_builder_failure_is_reported_as_error():
    decision = AutoReportTrigger(FakeBuilder(fail=True), clock=island_clock("2025-03-04 18:00")).decide(
        make_matrix()
    )
    assert decision.status == ReportStatus.ERROR
    assert "reports store unavailable" in decision.error


def test_store_builder_creates_one_report_per_date(store, seeded_farm):
    cfg = seeded_farm.config()
    builder = StoreReportBuilder(store, cfg)
    trigger = AutoReportTrigger(builder, clock=island_clock("2025-03-04 18:00"))
    matrix = ScheduleLoader(store, cfg).load()

    first = trigger.decide(matrix)
    second = trigger.decide(matrix)

    assert first.status == ReportStatus.CREATED
    assert second.status == ReportStatus.EXISTS
    assert second.report_id == first.report_id
    rows = store.query_all_container_rows(seeded_farm.reports_id)
    assert len(rows) == 1
    assert fv.plain_text(rows[0]["properties"]["Name"]) == "Daily Report - 03/04/2025"
    assert fv.date_start(rows[0]["properties"]["Schedule Date"]) == "2025-03-04"


def test_store_builder_requires_reports_container(store, seeded_farm):
    with pytest.raises(ConfigurationError):
        StoreReportBuilder(store, seeded_farm.config(reports_container_id=None))
