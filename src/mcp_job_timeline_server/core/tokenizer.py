"""Split a raw job history into timestamped entries."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Protocol

from .models import LogEntry

logger = logging.getLogger(__name__)


class HistoryParser(Protocol):
    """Parser interface: return LogEntry if line matches, else None."""

    def parse(self, line_no: int, line: str) -> LogEntry | None:
        """Parse a history line into a LogEntry if recognized."""
        ...


@dataclass(frozen=True, slots=True)
class HistoryLineParser:
    """Parse '[DD/MM/YYYY HH:MM] <message>' lines."""

    default_tz: tzinfo = UTC

    _re = re.compile(
        r"^\[(?P<d>[0-9]{2})/(?P<m>[0-9]{2})/(?P<y>[0-9]{4})"
        r"\s+(?P<hh>[0-9]{2}):(?P<mm>[0-9]{2})\]\s*(?P<msg>.+)$"
    )

    def parse(self, line_no: int, line: str) -> LogEntry | None:
        """Parse a history line into a LogEntry."""
        m = self._re.match(line.strip())
        if not m:
            return None
        try:
            ts = datetime(
                int(m.group("y")),
                int(m.group("m")),
                int(m.group("d")),
                int(m.group("hh")),
                int(m.group("mm")),
                tzinfo=self.default_tz,
            )
        except ValueError:
            return None
        return LogEntry(line_no=line_no, timestamp=ts, text=m.group("msg").strip(), raw=line)


def tokenize_history(
    raw_log: str | None,
    *,
    default_tz: tzinfo = UTC,
    parser: HistoryParser | None = None,
) -> list[LogEntry]:
    """Return entries in source order; unparseable lines are dropped."""
    if not raw_log or not raw_log.strip():
        return []

    parser = parser or HistoryLineParser(default_tz=default_tz)
    entries: list[LogEntry] = []
    dropped = 0
    for line_no, line in enumerate(raw_log.splitlines(), start=1):
        if not line.strip():
            continue
        entry = parser.parse(line_no, line)
        if entry is None:
            dropped += 1
            continue
        entries.append(entry)

    if dropped:
        logger.debug("Dropped %s history line(s) without a timestamp", dropped)
    return entries
