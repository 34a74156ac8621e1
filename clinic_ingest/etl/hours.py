"""Operating-hours normalization for provider payloads.

Two shapes are understood:

* named-day entries, ``{"day": "Monday", "open": "8:00 AM", "close": "5:00 PM"}``
  or ``{"day": "monday", "is_closed": true}``;
* numeric-day entries, ``{"day": 0, "start": "0900", "end": "1700"}`` with
  ``day`` counted from Sunday (0) to Saturday (6) and times in 24-hour ``HHMM``,
  or ``{"day": 3, "is_overnight": true}``.

Both produce a ``{day_name: value}`` mapping where value is ``"closed"``,
``"24 hours"`` or ``"<start> - <end>"``. Several ranges for one day, such as a
lunch break, are joined in input order: ``"9:00 AM - 12:00 PM, 1:00 PM - 5:00 PM"``.
An open range or ``"24 hours"`` wins over ``"closed"`` for the same day. Days
missing from the input are missing from the output, and an input without any
usable day yields ``None``.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from clinic_ingest.models import DAY_NAMES

logger = logging.getLogger(__name__)

CLOSED = "closed"
OPEN_24_HOURS = "24 hours"

# Numeric day index -> day name, Sunday first.
_NUMERIC_DAYS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def format_military_time(value: Any) -> str:
    """Render a 24-hour ``HHMM`` value as ``h:mm AM/PM``.

    Values that are not integers are returned unchanged as strings.
    """
    try:
        time = int(str(value).strip())
    except (TypeError, ValueError):
        logger.debug("Leaving unparseable time value as-is: %r", value)
        return str(value)

    hours, minutes = divmod(time, 100)
    period = "PM" if hours >= 12 else "AM"
    if hours > 12:
        display_hours = hours - 12
    elif hours == 0:
        display_hours = 12
    else:
        display_hours = hours
    return f"{display_hours}:{minutes:02d} {period}"


def _merge(hours: Dict[str, str], day: str, value: str) -> None:
    current = hours.get(day)
    if current is None or current == CLOSED:
        hours[day] = value
    elif value == CLOSED or current == OPEN_24_HOURS:
        return
    elif value == OPEN_24_HOURS:
        hours[day] = value
    else:
        hours[day] = f"{current}, {value}"


def normalize_named_day_hours(entries: Any) -> Optional[Dict[str, str]]:
    if not isinstance(entries, list):
        return None

    hours: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        day = entry.get("day")
        if not isinstance(day, str) or day.lower() not in DAY_NAMES:
            continue
        day = day.lower()
        if entry.get("is_closed"):
            _merge(hours, day, CLOSED)
        elif entry.get("open") and entry.get("close"):
            _merge(hours, day, f"{entry['open']} - {entry['close']}")

    return hours or None


def normalize_numeric_day_hours(entries: Any) -> Optional[Dict[str, str]]:
    if not isinstance(entries, list):
        return None

    hours: Dict[str, str] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        day = entry.get("day")
        if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
            continue
        day_name = _NUMERIC_DAYS[day]
        if entry.get("is_overnight"):
            _merge(hours, day_name, OPEN_24_HOURS)
        elif entry.get("start") and entry.get("end"):
            _merge(hours, day_name, f"{format_military_time(entry['start'])} - {format_military_time(entry['end'])}")
        else:
            _merge(hours, day_name, CLOSED)

    return hours or None


def flatten_open_blocks(hours: Iterable[Any]) -> List[Dict[str, Any]]:
    """Unwrap ``[{"open": [...]}]`` blocks into a flat list of day entries.

    Entries that are already flat pass through untouched.
    """
    flat: List[Dict[str, Any]] = []
    for block in hours or []:
        if not isinstance(block, dict):
            continue
        nested = block.get("open")
        if isinstance(nested, list):
            flat.extend(item for item in nested if isinstance(item, dict))
        else:
            flat.append(block)
    return flat


def periods_to_day_entries(periods: Iterable[Any]) -> List[Dict[str, Any]]:
    """Convert Google ``opening_hours.periods`` into numeric-day entries.

    A period with no ``close`` marks a place that never closes.
    """
    entries: List[Dict[str, Any]] = []
    for period in periods or []:
        if not isinstance(period, dict):
            continue
        opening = period.get("open")
        closing = period.get("close")
        if not isinstance(opening, dict) or (closing is not None and not isinstance(closing, dict)):
            logger.debug("Skipping malformed opening period: %r", period)
            continue
        entry: Dict[str, Any] = {"day": opening.get("day")}
        if not closing:
            entry["is_overnight"] = True
        else:
            entry["start"] = opening.get("time")
            entry["end"] = closing.get("time")
        entries.append(entry)
    return entries
