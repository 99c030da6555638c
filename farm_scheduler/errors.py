"""Error taxonomy shared by the store adapters and the scheduling engine."""

from __future__ import annotations


class ScheduleError(Exception):
    """Base class for all scheduling errors."""


class ConfigurationError(ScheduleError):
    """A required external identifier or setting is missing."""


class NotFoundError(ScheduleError):
    """An expected container, settings row or schedule row does not exist."""


class TransientStoreError(ScheduleError):
    """The record store failed for a reason other than a missing object."""
