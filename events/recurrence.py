"""
Recurrence rules for repeating events.

Only a small RRULE subset is accepted:

* ``FREQ=WEEKLY;BYDAY=TH``, every Thursday
* ``FREQ=WEEKLY;INTERVAL=2;BYDAY=TH``, every other Thursday
* ``FREQ=MONTHLY;BYDAY=1TH``, first Thursday of the month (``-1TH`` = last)

Dates are expanded with ``dateutil.rrule``.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from itertools import islice
from typing import List, Optional

from dateutil.relativedelta import relativedelta
from dateutil.rrule import MONTHLY, WEEKLY, rrule, weekday

DEFAULT_HORIZON_DAYS = 90
MAX_OCCURRENCES = 52

DAY_CODES = ["MO", "TU", "WE", "TH", "FR", "SA", "SU"]
DAY_NAMES = {
    "MO": "Monday",
    "TU": "Tuesday",
    "WE": "Wednesday",
    "TH": "Thursday",
    "FR": "Friday",
    "SA": "Saturday",
    "SU": "Sunday",
}
POSITION_NAMES = {1: "First", 2: "Second", 3: "Third", 4: "Fourth", -1: "Last"}

FREQUENCY_CHOICES = [
    ("", "Does not repeat"),
    ("weekly", "Weekly"),
    ("biweekly", "Every other week"),
    ("monthly", "Monthly"),
]
DAY_CHOICES = [(code, DAY_NAMES[code]) for code in DAY_CODES]
POSITION_CHOICES = [(str(pos), name) for pos, name in POSITION_NAMES.items()]

_BYDAY_RE = re.compile(r"^(-?\d)?([A-Z]{2})$")


class RecurrenceError(ValueError):
    """Raised for rule strings outside the supported subset."""


@dataclass(frozen=True)
class RecurrenceRule:
    freq: str = "WEEKLY"
    interval: int = 1
    by_day: Optional[str] = None
    position: Optional[int] = None

    def serialize(self) -> str:
        parts = [f"FREQ={self.freq}"]
        if self.interval > 1:
            parts.append(f"INTERVAL={self.interval}")
        if self.by_day:
            prefix = str(self.position) if self.freq == "MONTHLY" and self.position else ""
            parts.append(f"BYDAY={prefix}{self.by_day}")
        return ";".join(parts)


def parse_rule(rule: str) -> Optional[RecurrenceRule]:
    """
    Parse a rule string. Returns ``None`` for an empty rule.

    Raises:
        RecurrenceError: unsupported frequency or malformed part
    """
    if not rule or not rule.strip():
        return None

    freq, interval, by_day, position = "WEEKLY", 1, None, None
    for part in rule.strip().upper().split(";"):
        if not part:
            continue
        key, _, value = part.partition("=")
        if key == "FREQ":
            if value not in ("WEEKLY", "MONTHLY"):
                raise RecurrenceError(f"Unsupported frequency: {value or '(empty)'}")
            freq = value
        elif key == "INTERVAL":
            try:
                interval = max(int(value), 1)
            except ValueError:
                raise RecurrenceError(f"Invalid interval: {value}") from None
        elif key == "BYDAY":
            match = _BYDAY_RE.match(value)
            if not match or match.group(2) not in DAY_NAMES:
                raise RecurrenceError(f"Invalid BYDAY value: {value}")
            if match.group(1):
                position = int(match.group(1))
                if position not in POSITION_NAMES:
                    raise RecurrenceError(f"Invalid week position: {position}")
            by_day = match.group(2)

    if freq == "MONTHLY" and by_day and position is None:
        position = 1
    return RecurrenceRule(freq=freq, interval=interval, by_day=by_day, position=position)


def build_rule(frequency: str, day: str, position: Optional[int] = None) -> str:
    """Rule string from the event form's frequency/day/position selects."""
    if not frequency:
        return ""
    if day not in DAY_NAMES:
        raise RecurrenceError(f"Invalid day: {day}")
    if frequency == "weekly":
        return RecurrenceRule("WEEKLY", 1, day).serialize()
    if frequency == "biweekly":
        return RecurrenceRule("WEEKLY", 2, day).serialize()
    if frequency == "monthly":
        return RecurrenceRule("MONTHLY", 1, day, int(position or 1)).serialize()
    raise RecurrenceError(f"Unsupported frequency: {frequency}")


def rule_to_form_values(rule: str) -> dict:
    """Inverse of ``build_rule`` for pre-filling the form."""
    parsed = parse_rule(rule)
    if parsed is None:
        return {"frequency": "", "day": "", "position": ""}
    if parsed.freq == "MONTHLY":
        frequency = "monthly"
    else:
        frequency = "biweekly" if parsed.interval == 2 else "weekly"
    return {
        "frequency": frequency,
        "day": parsed.by_day or "",
        "position": str(parsed.position) if parsed.position else "",
    }


def describe_rule(rule: str) -> str:
    """Human text such as "Every other Thursday" or "Last Friday of every month"."""
    try:
        parsed = parse_rule(rule)
    except RecurrenceError:
        return ""
    if parsed is None:
        return ""

    day = DAY_NAMES.get(parsed.by_day, "day")
    if parsed.freq == "WEEKLY":
        if parsed.interval == 1:
            return f"Every {day}"
        if parsed.interval == 2:
            return f"Every other {day}"
        return f"Every {parsed.interval} weeks on {day}"

    position = POSITION_NAMES.get(parsed.position or 1, "")
    if parsed.interval == 1:
        return f"{position} {day} of every month"
    return f"{position} {day} every {parsed.interval} months"


def _weekday(code: str, n: Optional[int] = None) -> weekday:
    return weekday(DAY_CODES.index(code), n)


def generate_occurrences(
    rule: str,
    start: date,
    end: Optional[date] = None,
    max_occurrences: int = MAX_OCCURRENCES,
) -> List[date]:
    """
    Dates a rule produces from ``start`` (inclusive) up to ``end``.

    Args:
        rule: Rule string
        start: First date considered
        end: Last date considered; defaults to 90 days after ``start``
        max_occurrences: Hard cap on the number of dates returned

    Returns:
        Sorted list of dates. Weekly rules count their interval from the
        first matching day on or after ``start``.
    """
    parsed = parse_rule(rule)
    if parsed is None:
        return []
    if isinstance(start, datetime):
        start = start.date()
    if isinstance(end, datetime):
        end = end.date()
    end = end or start + timedelta(days=DEFAULT_HORIZON_DAYS)
    if end < start:
        return []

    day_code = parsed.by_day or DAY_CODES[start.weekday()]
    until = datetime.combine(end, datetime.min.time())

    if parsed.freq == "WEEKLY":
        first = start + relativedelta(weekday=_weekday(day_code))
        rules = rrule(
            WEEKLY,
            interval=parsed.interval,
            byweekday=_weekday(day_code),
            dtstart=datetime.combine(first, datetime.min.time()),
            until=until,
        )
    else:
        rules = rrule(
            MONTHLY,
            interval=parsed.interval,
            byweekday=_weekday(day_code, parsed.position or 1),
            dtstart=datetime.combine(start.replace(day=1), datetime.min.time()),
            until=until,
        )

    dates = (moment.date() for moment in rules)
    return list(islice((d for d in dates if d >= start), max_occurrences))
