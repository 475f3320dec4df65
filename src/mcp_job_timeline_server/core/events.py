"""Classify history entries into domain events.

Classification is driven by an ordered rule table: each entry is tested
against the rules in order and the first match wins. Adding a category means
adding a rule, not another branch.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from .calendar import parse_inline_appointment
from .models import DomainEvent, EventKind, LogEntry

logger = logging.getLogger(__name__)

ActorExtractor = Callable[[str], str | None]

# "เพิ่มทีมผู้ให้บริการ <name> เข้าใบงาน", "เปลี่ยนทีมผู้ให้บริการเป็น <name> เข้าใบงาน"
_ACTOR_RES = (
    re.compile(r"(?:เพิ่ม|เปลี่ยน)ทีมผู้ให้บริการ(?:เป็น)?\s+(?P<name>.+?)\s+เข้าใบงาน"),
    re.compile(
        r"(?:add|change)\s+service\s+team(?:\s+to)?\s+(?P<name>.+?)\s+(?:to|into)\s+the\s+job",
        re.IGNORECASE,
    ),
)


def extract_assignee(text: str) -> str | None:
    """Return the service team named in an assignment message."""
    for rx in _ACTOR_RES:
        m = rx.search(text)
        if m:
            name = m.group("name").strip()
            return name or None
    return None


@dataclass(frozen=True, slots=True)
class EventRule:
    """Maps a message pattern to an event kind and its extractors."""

    kind: EventKind
    pattern: re.Pattern[str]
    extract_actor: ActorExtractor | None = None
    uses_appointment: bool = False

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _rx(*alternatives: str) -> re.Pattern[str]:
    return re.compile("|".join(alternatives), re.IGNORECASE)


def default_event_rules() -> tuple[EventRule, ...]:
    """Default rule table in priority order."""
    return (
        EventRule(
            kind=EventKind.ASSIGN,
            pattern=_rx(
                r"เพิ่มทีมผู้ให้บริการ",
                r"เปลี่ยนทีมผู้ให้บริการ",
                r"add\s+service\s+team",
                r"change\s+service\s+team",
            ),
            extract_actor=extract_assignee,
        ),
        EventRule(
            kind=EventKind.SCHEDULE_ASSESSMENT,
            pattern=_rx(r"เลือกวันที่นัดเข้าประเมิน", r"select\s+assessment\s+appointment\s+date"),
            uses_appointment=True,
        ),
        EventRule(
            kind=EventKind.CONFIRM_ASSESSMENT,
            pattern=_rx(r"ยืนยัน.*ประเมิน", r"confirm.*assessment"),
        ),
        EventRule(
            kind=EventKind.SCHEDULE_SERVICE,
            pattern=_rx(r"เลือกวันที่นัดเข้าให้บริการ", r"select\s+service\s+appointment\s+date"),
            uses_appointment=True,
        ),
        EventRule(
            kind=EventKind.CONFIRM_SERVICE,
            pattern=_rx(r"ยืนยัน.*ให้บริการ", r"confirm.*service"),
        ),
        EventRule(kind=EventKind.CLOSE, pattern=_rx(r"ปิดงาน", r"close\s+job")),
        EventRule(kind=EventKind.CANCEL, pattern=_rx(r"ยกเลิก", r"cancel")),
    )


_DEFAULT_RULES = default_event_rules()


def _event_from_rule(rule: EventRule, entry: LogEntry) -> DomainEvent:
    effective: datetime | None = None
    if rule.uses_appointment:
        effective = parse_inline_appointment(entry.text, tzinfo=entry.timestamp.tzinfo)
    actor = rule.extract_actor(entry.text) if rule.extract_actor else None
    return DomainEvent(
        kind=rule.kind,
        occurred_at=entry.timestamp,
        effective_at=effective or entry.timestamp,
        actor=actor,
        line_no=entry.line_no,
    )


def extract_event(
    entry: LogEntry, rules: Sequence[EventRule] | None = None
) -> DomainEvent | None:
    """Return the event for the first matching rule, or None."""
    for rule in _DEFAULT_RULES if rules is None else rules:
        if rule.matches(entry.text):
            return _event_from_rule(rule, entry)
    return None


def extract_events(
    entries: Iterable[LogEntry], rules: Sequence[EventRule] | None = None
) -> list[DomainEvent]:
    """Classify entries, keeping source order and skipping unrecognised lines."""
    events: list[DomainEvent] = []
    for entry in entries:
        event = extract_event(entry, rules)
        if event is not None:
            events.append(event)
    logger.debug("Extracted %s event(s)", len(events))
    return events
