"""Fold domain events into the six-step canonical timeline."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from functools import reduce

from .config import EngineConfig
from .models import (
    DomainEvent,
    EventKind,
    JobStatus,
    JobTimeline,
    StepKey,
    TimelineStep,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Candidate:
    date: datetime
    actor: str | None = None


@dataclass(frozen=True, slots=True)
class FoldState:
    """Current candidate per event category."""

    assignment: Candidate | None = None
    assessment: Candidate | None = None
    service: Candidate | None = None
    close: Candidate | None = None
    cancel: Candidate | None = None


# kind -> (state field, only set when empty)
_FOLD_RULES: dict[EventKind, tuple[str, bool]] = {
    EventKind.ASSIGN: ("assignment", False),
    EventKind.SCHEDULE_ASSESSMENT: ("assessment", False),
    EventKind.CONFIRM_ASSESSMENT: ("assessment", True),
    EventKind.SCHEDULE_SERVICE: ("service", False),
    EventKind.CONFIRM_SERVICE: ("service", True),
    EventKind.CLOSE: ("close", False),
    EventKind.CANCEL: ("cancel", False),
}

_SCHEDULE_KINDS = frozenset({EventKind.SCHEDULE_ASSESSMENT, EventKind.SCHEDULE_SERVICE})


def apply_event(state: FoldState, event: DomainEvent) -> FoldState:
    """Reducer: return the state after one event (last write wins per category)."""
    field_name, only_if_empty = _FOLD_RULES[event.kind]
    if only_if_empty and getattr(state, field_name) is not None:
        return state
    date = event.effective_at if event.kind in _SCHEDULE_KINDS else event.occurred_at
    return replace(state, **{field_name: Candidate(date=date, actor=event.actor)})


def fold_events(events: Iterable[DomainEvent]) -> FoldState:
    """Fold events in log order, then let the service date stand in for assessment.

    An assessment only really happens once the technician is on site, so when a
    service appointment exists the assessed step tracks it.
    """
    state = reduce(apply_event, events, FoldState())
    if state.service is not None:
        actor = state.assessment.actor if state.assessment is not None else None
        state = replace(state, assessment=Candidate(date=state.service.date, actor=actor))
    return state


def usable_assignee(name: str | None, *, config: EngineConfig) -> str | None:
    """Return the on-record assignee unless it is a placeholder."""
    if name is None:
        return None
    name = name.strip()
    placeholders = {p.casefold() for p in config.assignee_placeholders}
    if name.casefold() in placeholders:
        return None
    return name


def format_review_label(score: float, *, config: EngineConfig) -> str:
    shown: float | int = int(score) if float(score).is_integer() else score
    return config.review_label_format.format(score=shown)


def compute_stuck_index(steps: Sequence[TimelineStep]) -> int:
    """Index of the first undated step after the completed prefix, -1 if none."""
    for i, step in enumerate(steps):
        if not step.reached:
            return i
    return -1


def _date(candidate: Candidate | None) -> datetime | None:
    return candidate.date if candidate is not None else None


def build_timeline(
    events: Iterable[DomainEvent],
    *,
    opened_at: datetime | None,
    status: JobStatus = JobStatus.OPEN,
    assigned_at_fallback: datetime | None = None,
    closed_at_fallback: datetime | None = None,
    reviewed_at: datetime | None = None,
    review_score: float | None = None,
    assignee_fallback_name: str | None = None,
    config: EngineConfig | None = None,
) -> JobTimeline:
    """Assemble the canonical timeline from events and job-record fallbacks."""
    cfg = config or EngineConfig()
    state = fold_events(events)
    fallback_actor = usable_assignee(assignee_fallback_name, config=cfg)
    assigned_actor = (state.assignment.actor if state.assignment else None) or fallback_actor

    assigned_at = _date(state.assignment) or assigned_at_fallback
    if status is JobStatus.CANCELLED:
        finished = _date(state.cancel) or closed_at_fallback
    else:
        finished = _date(state.close) or closed_at_fallback

    review_actor = (
        format_review_label(review_score, config=cfg) if review_score is not None else None
    )

    steps = (
        TimelineStep(StepKey.OPENED, opened_at),
        TimelineStep(StepKey.ASSIGNED, assigned_at, assigned_actor),
        TimelineStep(StepKey.ASSESSED, _date(state.assessment)),
        TimelineStep(StepKey.SERVICED, _date(state.service), assigned_actor),
        TimelineStep(StepKey.CLOSED_OR_CANCELLED, finished),
        TimelineStep(StepKey.REVIEWED, reviewed_at, review_actor),
    )
    stuck = compute_stuck_index(steps)
    logger.debug("Timeline built (stuck_at_index=%s)", stuck)
    return JobTimeline(steps=steps, stuck_at_index=stuck)
