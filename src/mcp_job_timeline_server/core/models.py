"""Core data models for job timeline reconstruction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class EventKind(str, Enum):
    """Domain events recognised in a job's audit log."""

    ASSIGN = "assign"
    SCHEDULE_ASSESSMENT = "scheduleAssessment"
    CONFIRM_ASSESSMENT = "confirmAssessment"
    SCHEDULE_SERVICE = "scheduleService"
    CONFIRM_SERVICE = "confirmService"
    CLOSE = "close"
    CANCEL = "cancel"


class StepKey(str, Enum):
    """Canonical lifecycle stages, in display order."""

    OPENED = "opened"
    ASSIGNED = "assigned"
    ASSESSED = "assessed"
    SERVICED = "serviced"
    CLOSED_OR_CANCELLED = "closedOrCancelled"
    REVIEWED = "reviewed"


STEP_ORDER: tuple[StepKey, ...] = tuple(StepKey)


class JobStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self is not JobStatus.OPEN


class Severity(str, Enum):
    """How overdue a waiting period is."""

    NORMAL = "normal"
    ELEVATED = "elevated"
    SEVERE = "severe"
    CRITICAL = "critical"  # stuck indicator only


class AgingBucket(str, Enum):
    """SLA aging buckets keyed by total open days."""

    DAYS_0_30 = "0-30"
    DAYS_31_45 = "31-45"
    DAYS_46_60 = "46-60"
    DAYS_61_120 = "61-120"
    DAYS_120_PLUS = "120+"


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One timestamped audit-trail line."""

    line_no: int
    timestamp: datetime
    text: str
    raw: str | None = None  # original line, kept for history views


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Classified occurrence extracted from a LogEntry."""

    kind: EventKind
    occurred_at: datetime  # log-write time
    effective_at: datetime  # appointment date for schedule events, else occurred_at
    actor: str | None = None
    line_no: int | None = None


@dataclass(frozen=True, slots=True)
class TimelineStep:
    key: StepKey
    date: datetime | None = None
    actor: str | None = None

    @property
    def reached(self) -> bool:
        return self.date is not None


@dataclass(frozen=True, slots=True)
class JobTimeline:
    """Six canonical steps plus the index where the job is waiting."""

    steps: tuple[TimelineStep, ...]
    stuck_at_index: int

    def step(self, key: StepKey) -> TimelineStep:
        return self.steps[STEP_ORDER.index(key)]

    @property
    def stuck_step(self) -> TimelineStep | None:
        if self.stuck_at_index < 0:
            return None
        return self.steps[self.stuck_at_index]


@dataclass(frozen=True, slots=True)
class Gap:
    """Elapsed whole days between two adjacent steps."""

    from_step: StepKey
    to_step: StepKey
    days: int
    is_ongoing: bool  # measured against the evaluation instant
    severity: Severity


@dataclass(frozen=True, slots=True)
class AgingAssessment:
    gaps: tuple[Gap, ...]
    bucket: AgingBucket
    days_open: int
    stuck_days: int | None = None
    stuck_severity: Severity | None = None


@dataclass(frozen=True, slots=True)
class JobInput:
    """Job record fields the engine needs besides the raw log."""

    raw_log: str
    opened_at: datetime | None
    status: JobStatus | str = JobStatus.OPEN  # or a status name
    days_open: int | None = None  # derived from the timeline when missing
    assigned_at_fallback: datetime | None = None
    closed_at_fallback: datetime | None = None
    reviewed_at: datetime | None = None
    review_score: float | None = None
    assignee_fallback_name: str | None = None


@dataclass(frozen=True, slots=True)
class JobAnalysis:
    timeline: JobTimeline
    aging: AgingAssessment
