"""Slot metadata parsing.

Schedule containers encode each schedulable period in the field name itself,
e.g. ``"3 | Lunch (11:00-12:00)"``: an optional explicit order, a label and an
optional time range in parentheses.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, List

from .domain.schedule import SlotDescriptor


_ORDER_PREFIX = re.compile(r"^(\d+)\s*\|\s*(.+)$")
_TIME_RANGE = re.compile(r"^(.+?)\s*\((.+)\)\s*$")
_MEAL = re.compile(r"breakfast|lunch|dinner", re.IGNORECASE)


def parse_slot_key(key: str) -> SlotDescriptor:
    """Parse a raw schema field name into a SlotDescriptor."""
    order_match = _ORDER_PREFIX.match(key)
    order = float(int(order_match.group(1))) if order_match else math.inf
    remainder = (order_match.group(2) if order_match else key).strip()

    range_match = _TIME_RANGE.match(remainder)
    label = (range_match.group(1) if range_match else remainder).strip()
    time_range = (range_match.group(2) if range_match else "").strip()

    return SlotDescriptor(
        key=key,
        label=label,
        time_range=time_range,
        is_meal=bool(_MEAL.search(label)),
        order=order,
    )


def build_slots(keys: Iterable[str], reserved: Iterable[str] = ()) -> List[SlotDescriptor]:
    """Parse every non-reserved key and sort by order, then label ignoring case."""
    skip = set(reserved)
    slots = [parse_slot_key(key) for key in keys if key not in skip]
    slots.sort(key=lambda slot: (slot.order, slot.label.casefold(), slot.label))
    return slots
