"""Date label helpers and island-time conversion.

Schedule containers are titled with canonical ``MM/DD/YYYY`` labels. Settings
rows carry full timestamps which are read as wall-clock times in the farm's
time zone (no daylight adjustment for Pacific/Honolulu).
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Optional, Tuple

import pandas as pd


ISLAND_TZ = "Pacific/Honolulu"
LABEL_FORMAT = "%m/%d/%Y"

_US_DATE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_STAGING_TITLE = re.compile(r"^staging\s*-\s*(.+)$", re.IGNORECASE)

STAGING_PREFIX = "Staging - "
WEEKLY_SUFFIX = " - Weekly"


def parse_schedule_date(value: str | None) -> Optional[date]:
    """Parse a ``MM/DD/YYYY`` label or an ISO date/timestamp into a calendar date."""
    text = (value or "").strip()
    if not text:
        return None
    if _US_DATE.match(text):
        ts = pd.to_datetime(text, format=LABEL_FORMAT, errors="coerce")
    elif _ISO_DATE.match(text):
        try:
            ts = pd.Timestamp(text)
        except ValueError:
            return None
    else:
        return None
    if pd.isna(ts):
        return None
    # Date as written, ignoring any offset.
    return date(ts.year, ts.month, ts.day)


def format_date_label(day: date) -> str:
    return day.strftime(LABEL_FORMAT)


def format_schedule_date_label(value: str) -> str:
    """Canonicalize to ``MM/DD/YYYY``; unparseable input is returned unchanged."""
    parsed = parse_schedule_date(value)
    if parsed is None:
        return value
    return format_date_label(parsed)


def schedule_title_for_date(date_label: str, staging: bool = False) -> str:
    formatted = format_schedule_date_label(date_label)
    return f"{STAGING_PREFIX}{formatted}" if staging else formatted


def parse_schedule_title(title: str) -> Optional[Tuple[str, bool]]:
    """Split a container title into ``(date_label, is_staging)``, or None."""
    trimmed = (title or "").strip()
    if not trimmed:
        return None
    match = _STAGING_TITLE.match(trimmed)
    raw = match.group(1).strip() if match else trimmed
    parsed = parse_schedule_date(raw)
    if parsed is None:
        return None
    return format_date_label(parsed), bool(match)


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def to_monday_date_label(date_label: str) -> str:
    parsed = parse_schedule_date(date_label)
    if parsed is None:
        return date_label
    return format_date_label(monday_of(parsed))


def weekly_title_for_date(date_label: str) -> str:
    return f"{format_schedule_date_label(date_label)}{WEEKLY_SUFFIX}"


def to_island_clock_time(value: str | None, tz: str = ISLAND_TZ) -> Optional[str]:
    """
    Convert a timestamp string to a 24-hour ``HH:MM`` wall-clock time in ``tz``.

    Naive timestamps are taken as UTC. Returns None when the value is missing
    or cannot be parsed.
    """
    if not value:
        return None
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert(tz).strftime("%H:%M")


def now_in(tz: str = ISLAND_TZ) -> pd.Timestamp:
    return pd.Timestamp.now(tz=tz)
