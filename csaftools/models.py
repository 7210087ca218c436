"""Time ranges and the parsing of relative durations and partial dates."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from fractions import Fraction

_MAX_INT = 2**63 - 1

_RFC3339_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})")
_PARTIAL_RE = re.compile(r"\d{4}(?:-\d{2}(?:-\d{2}(?:T\d{2}(?::\d{2}(?::\d{2})?)?)?)?)?")
_PARTIAL_FORMATS = {4: "%Y", 7: "%Y-%m", 10: "%Y-%m-%d", 13: "%Y-%m-%dT%H",
                    16: "%Y-%m-%dT%H:%M", 19: "%Y-%m-%dT%H:%M:%S"}

_YEARS_MONTHS_DAYS = re.compile(r"[-+]?[0-9]+[yMd]")
_DURATION_PART = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]+)")
_UNITS = {"ns": 1, "us": 10**3, "\u00b5s": 10**3, "\u03bcs": 10**3, "ms": 10**6,
          "s": 10**9, "m": 60 * 10**9, "h": 3600 * 10**9}


@dataclass(frozen=True)
class TimeRange:
    """A closed interval of time from start to end."""

    start: datetime
    end: datetime

    @classmethod
    def parse(cls, s: str) -> TimeRange:
        """Parse a duration back from now, a start date until now, or 'start, end'."""
        s = s.strip()
        now = datetime.now(timezone.utc)
        try:
            return new_time_interval(now - parse_duration(s, now), now)
        except ValueError:
            pass
        a, found, b = (part.strip() for part in s.partition(","))
        start = guess_date(a)
        if start is None:
            raise ValueError(f"{json.dumps(a)} is not a valid RFC date time")
        if not found:
            return new_time_interval(start, now)
        end = guess_date(b)
        if end is None:
            raise ValueError(f"{json.dumps(b)} is not a valid RFC date time")
        return new_time_interval(start, end)

    def to_json(self) -> str:
        """Return the range as a JSON array of two RFC 3339 strings."""
        return json.dumps([_rfc3339(self.start), _rfc3339(self.end)])

    def contains(self, t: datetime) -> bool:
        """Tell whether t lies inside the range, bounds included."""
        return not (t < self.start or t > self.end)

    def intersects(self, other: TimeRange) -> bool:
        """Tell whether the two ranges share at least one point in time."""
        return not (other.end < self.start or self.end < other.start)


def new_time_interval(a: datetime, b: datetime) -> TimeRange:
    """Create a time range from two points in time in either order."""
    return TimeRange(b, a) if b < a else TimeRange(a, b)


def _rfc3339(t: datetime) -> str:
    s = t.isoformat(timespec="seconds")
    if t.utcoffset() in (None, timedelta(0)):
        return t.replace(tzinfo=None).isoformat(timespec="seconds") + "Z"
    return s


def guess_date(s: str) -> datetime | None:
    """Read an RFC 3339 date time or a truncated form of it (taken as UTC); else None."""
    try:
        if _RFC3339_RE.fullmatch(s):
            return datetime.fromisoformat(s.replace("Z", "+00:00"))
        if _PARTIAL_RE.fullmatch(s):
            return datetime.strptime(s, _PARTIAL_FORMATS[len(s)]).replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    return None


def _add_date(t: datetime, years: int, months: int, days: int) -> datetime:
    year, month = divmod(t.month - 1 + months, 12)
    try:
        first = t.replace(year=t.year + years + year, month=month + 1, day=1)
        return first + timedelta(days=t.day - 1 + days)
    except (ValueError, OverflowError) as err:
        raise ValueError(f"date out of range: {err}") from err


def _parse_std_duration(s: str) -> timedelta:
    invalid = ValueError(f"invalid duration {json.dumps(s)}")
    body = s[1:] if s[:1] in ("+", "-") else s
    if body == "0":
        return timedelta(0)
    if not body:
        raise invalid
    total = Fraction(0)
    pos = 0
    while pos < len(body):
        m = _DURATION_PART.match(body, pos)
        if m is None or not (m[1] or m[2]):
            raise invalid
        if m[3] not in _UNITS:
            raise ValueError(f"unknown unit {json.dumps(m[3])} in duration {json.dumps(s)}")
        value = Fraction(int(m[1] or "0"))
        if m[2]:
            value += Fraction(int(m[2]), 10 ** len(m[2]))
        total += value * _UNITS[m[3]]
        pos = m.end()
    if total > _MAX_INT:
        raise invalid
    micros = int(total) / 1000
    return timedelta(microseconds=-micros if s.startswith("-") else micros)


def parse_duration(s: str, reference: datetime) -> timedelta:
    """Parse a duration that may also hold years 'y', months 'M' and days 'd'.

    Calendar parts count backwards from reference; the rest uses the units
    'h', 'm', 's', 'ms', 'us' and 'ns'.
    """
    extra = timedelta(0)
    for m in _YEARS_MONTHS_DAYS.finditer(s):
        value = -int(m[0][:-1])
        if not -_MAX_INT - 1 <= value <= _MAX_INT:
            raise ValueError(f"value out of range: {m[0][:-1]!r}")
        shift = {"y": (value, 0, 0), "M": (0, value, 0), "d": (0, 0, value)}[m[0][-1]]
        extra += reference - _add_date(reference, *shift)
    remainder = _YEARS_MONTHS_DAYS.sub("", s)
    if remainder == "" and remainder != s:
        return extra
    return _parse_std_duration(remainder) + extra