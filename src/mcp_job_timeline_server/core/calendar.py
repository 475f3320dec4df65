"""Date helpers: Buddhist-era years, inline appointments and day counting."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, tzinfo

# Years above this are Buddhist Era (B.E. = C.E. + 543)
BUDDHIST_YEAR_THRESHOLD = 2500
BUDDHIST_ERA_OFFSET = 543

_ONE_DAY = timedelta(days=1)

# "วันที่ 23/01/2568 เวลา 09:30 น." or "วันที่ 23/01/2568 | 09:30"
_INLINE_RE = re.compile(
    r"(?:วันที่|date)\s+(?P<d>[0-9]{2})/(?P<m>[0-9]{2})/(?P<y>[0-9]{4})"
    r"\s*(?:\|\s*|(?:เวลา|time|at)\s*)(?P<hh>[0-9]{2}):(?P<mm>[0-9]{2})",
    re.IGNORECASE,
)


def to_gregorian_year(year: int) -> int:
    """Convert a Buddhist-era year to Gregorian; Gregorian years pass through."""
    if year > BUDDHIST_YEAR_THRESHOLD:
        return year - BUDDHIST_ERA_OFFSET
    return year


def parse_inline_appointment(text: str, *, tzinfo: tzinfo = UTC) -> datetime | None:
    """Return the appointment date embedded in a log message, if any."""
    m = _INLINE_RE.search(text)
    if not m:
        return None
    try:
        return datetime(
            to_gregorian_year(int(m.group("y"))),
            int(m.group("m")),
            int(m.group("d")),
            int(m.group("hh")),
            int(m.group("mm")),
            tzinfo=tzinfo,
        )
    except ValueError:
        return None


def ensure_aware(dt: datetime, *, default_tz: tzinfo = UTC) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=default_tz)
    return dt


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, floored (negative when end < start)."""
    return (end - start) // _ONE_DAY


def parse_iso_dt(s: str, *, default_tz: tzinfo = UTC) -> datetime:
    """Parse ISO8601 datetime. If tz is missing, assume default_tz."""
    dt = datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
    return ensure_aware(dt, default_tz=default_tz)
