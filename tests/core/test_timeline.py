from __future__ import annotations

from datetime import UTC, datetime, timedelta

from mcp_job_timeline_server.core.config import EngineConfig
from mcp_job_timeline_server.core.models import (
    DomainEvent,
    EventKind,
    JobStatus,
    StepKey,
    TimelineStep,
)
from mcp_job_timeline_server.core.timeline import (
    FoldState,
    apply_event,
    build_timeline,
    compute_stuck_index,
    fold_events,
    usable_assignee,
)

OPENED = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)


def _at(days: int) -> datetime:
    return OPENED + timedelta(days=days)


def _event(
    kind: EventKind,
    day: int,
    *,
    effective_day: int | None = None,
    actor: str | None = None,
) -> DomainEvent:
    occurred = _at(day)
    effective = _at(effective_day) if effective_day is not None else occurred
    return DomainEvent(kind=kind, occurred_at=occurred, effective_at=effective, actor=actor)


def test_apply_event_does_not_mutate_state() -> None:
    state = FoldState()
    new_state = apply_event(state, _event(EventKind.CLOSE, 3))
    assert state.close is None
    assert new_state.close is not None
    assert new_state.close.date == _at(3)


def test_last_assign_wins() -> None:
    timeline = build_timeline(
        [
            _event(EventKind.ASSIGN, 1, actor="ทีม A"),
            _event(EventKind.ASSIGN, 2, actor="ทีม B"),
        ],
        opened_at=OPENED,
    )
    assigned = timeline.step(StepKey.ASSIGNED)
    assert assigned.actor == "ทีม B"
    assert assigned.date == _at(2)


def test_schedule_uses_effective_date() -> None:
    state = fold_events([_event(EventKind.SCHEDULE_ASSESSMENT, 2, effective_day=5)])
    assert state.assessment is not None
    assert state.assessment.date == _at(5)


def test_service_overrides_assessment_date() -> None:
    timeline = build_timeline(
        [
            _event(EventKind.SCHEDULE_ASSESSMENT, 1),
            _event(EventKind.SCHEDULE_SERVICE, 4),
        ],
        opened_at=OPENED,
    )
    assert timeline.step(StepKey.ASSESSED).date == _at(4)
    assert timeline.step(StepKey.SERVICED).date == _at(4)


def test_confirmation_is_a_fallback_only() -> None:
    only_confirm = fold_events([_event(EventKind.CONFIRM_ASSESSMENT, 3)])
    assert only_confirm.assessment is not None
    assert only_confirm.assessment.date == _at(3)

    scheduled_first = fold_events(
        [
            _event(EventKind.SCHEDULE_ASSESSMENT, 2, effective_day=6),
            _event(EventKind.CONFIRM_ASSESSMENT, 3),
        ]
    )
    assert scheduled_first.assessment is not None
    assert scheduled_first.assessment.date == _at(6)


def test_schedule_overrides_earlier_confirmation() -> None:
    state = fold_events(
        [
            _event(EventKind.CONFIRM_SERVICE, 2),
            _event(EventKind.SCHEDULE_SERVICE, 3, effective_day=8),
        ]
    )
    assert state.service is not None
    assert state.service.date == _at(8)


def test_assigned_falls_back_to_job_record() -> None:
    timeline = build_timeline(
        [],
        opened_at=OPENED,
        assigned_at_fallback=_at(1),
        assignee_fallback_name="ช่างเอ",
    )
    assigned = timeline.step(StepKey.ASSIGNED)
    assert assigned.date == _at(1)
    assert assigned.actor == "ช่างเอ"
    assert timeline.step(StepKey.SERVICED).actor == "ช่างเอ"


def test_placeholder_assignee_is_ignored() -> None:
    cfg = EngineConfig()
    assert usable_assignee("-", config=cfg) is None
    assert usable_assignee(" Unassigned ", config=cfg) is None
    assert usable_assignee(None, config=cfg) is None
    assert usable_assignee("ช่างบี", config=cfg) == "ช่างบี"


def test_closed_step_by_status() -> None:
    events = [_event(EventKind.CLOSE, 5), _event(EventKind.CANCEL, 6)]
    closed = build_timeline(events, opened_at=OPENED, status=JobStatus.CLOSED)
    cancelled = build_timeline(events, opened_at=OPENED, status=JobStatus.CANCELLED)
    assert closed.step(StepKey.CLOSED_OR_CANCELLED).date == _at(5)
    assert cancelled.step(StepKey.CLOSED_OR_CANCELLED).date == _at(6)


def test_closed_step_falls_back_to_record() -> None:
    timeline = build_timeline(
        [], opened_at=OPENED, status=JobStatus.CANCELLED, closed_at_fallback=_at(9)
    )
    assert timeline.step(StepKey.CLOSED_OR_CANCELLED).date == _at(9)


def test_review_label() -> None:
    timeline = build_timeline([], opened_at=OPENED, reviewed_at=_at(10), review_score=5.0)
    reviewed = timeline.step(StepKey.REVIEWED)
    assert reviewed.date == _at(10)
    assert reviewed.actor == "★ 5 คะแนน"

    half = build_timeline([], opened_at=OPENED, reviewed_at=_at(10), review_score=4.5)
    assert half.step(StepKey.REVIEWED).actor == "★ 4.5 คะแนน"


def test_steps_have_fixed_order() -> None:
    timeline = build_timeline([], opened_at=OPENED)
    assert [s.key for s in timeline.steps] == list(StepKey)
    assert len(timeline.steps) == 6


def test_empty_events_stuck_at_assigned() -> None:
    timeline = build_timeline(
        [],
        opened_at=OPENED,
        status=JobStatus.CLOSED,
        closed_at_fallback=_at(3),
        reviewed_at=_at(4),
    )
    assert timeline.stuck_at_index == 1
    assert timeline.stuck_step is not None
    assert timeline.stuck_step.key == StepKey.ASSIGNED


def test_stuck_index_rules() -> None:
    full = [TimelineStep(k, OPENED) for k in StepKey]
    assert compute_stuck_index(full) == -1

    no_open = [TimelineStep(k) for k in StepKey]
    assert compute_stuck_index(no_open) == 0

    partial = [TimelineStep(k, OPENED if i < 3 else None) for i, k in enumerate(StepKey)]
    assert compute_stuck_index(partial) == 3


def test_prefix_invariant_holds() -> None:
    timeline = build_timeline(
        [_event(EventKind.ASSIGN, 1), _event(EventKind.SCHEDULE_ASSESSMENT, 2)],
        opened_at=OPENED,
    )
    k = timeline.stuck_at_index
    assert k == 3
    assert all(s.date is not None for s in timeline.steps[:k])
    assert all(s.date is None for s in timeline.steps[k:])
