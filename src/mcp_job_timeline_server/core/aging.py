"""Gap durations, severities and SLA aging buckets."""

from __future__ import annotations

from datetime import datetime

from .calendar import days_between
from .config import EngineConfig
from .models import (
    AgingAssessment,
    AgingBucket,
    Gap,
    JobStatus,
    JobTimeline,
    Severity,
    StepKey,
)

# Inclusive upper bounds
BUCKET_BOUNDS: tuple[tuple[int, AgingBucket], ...] = (
    (30, AgingBucket.DAYS_0_30),
    (45, AgingBucket.DAYS_31_45),
    (60, AgingBucket.DAYS_46_60),
    (120, AgingBucket.DAYS_61_120),
)


def classify_bucket(days_open: int) -> AgingBucket:
    for upper, bucket in BUCKET_BOUNDS:
        if days_open <= upper:
            return bucket
    return AgingBucket.DAYS_120_PLUS


def gap_severity(days: int, config: EngineConfig | None = None) -> Severity:
    cfg = config or EngineConfig()
    if days > cfg.severe_after_days:
        return Severity.SEVERE
    if days > cfg.elevated_after_days:
        return Severity.ELEVATED
    return Severity.NORMAL


def stuck_severity(days: int, config: EngineConfig | None = None) -> Severity:
    """Gap severity plus a critical tier for long-stuck jobs."""
    cfg = config or EngineConfig()
    if days > cfg.critical_after_days:
        return Severity.CRITICAL
    return gap_severity(days, cfg)


def compute_gaps(
    timeline: JobTimeline,
    *,
    status: JobStatus,
    now: datetime,
    config: EngineConfig | None = None,
) -> list[Gap]:
    """Gaps between adjacent steps, opened through closed/cancelled."""
    cfg = config or EngineConfig()
    # Review is an optional appendage and never part of the resolution flow.
    flow = [s for s in timeline.steps if s.key is not StepKey.REVIEWED]

    gaps: list[Gap] = []
    for cur, nxt in zip(flow, flow[1:]):
        if cur.date is None:
            continue
        if nxt.date is not None:
            days = days_between(cur.date, nxt.date)
            ongoing = False
        elif status.is_finished:
            continue
        else:
            days = days_between(cur.date, now)
            ongoing = True
        gaps.append(
            Gap(
                from_step=cur.key,
                to_step=nxt.key,
                days=days,
                is_ongoing=ongoing,
                severity=gap_severity(days, cfg),
            )
        )
    return gaps


def derive_days_open(timeline: JobTimeline, *, status: JobStatus, now: datetime) -> int:
    """Whole days the job has been open (until closing for finished jobs)."""
    opened = timeline.step(StepKey.OPENED).date
    if opened is None:
        return 0
    end = now
    finished = timeline.step(StepKey.CLOSED_OR_CANCELLED).date
    if status.is_finished and finished is not None:
        end = finished
    return max(days_between(opened, end), 0)


def assess_aging(
    timeline: JobTimeline,
    *,
    status: JobStatus,
    now: datetime,
    days_open: int | None = None,
    config: EngineConfig | None = None,
) -> AgingAssessment:
    cfg = config or EngineConfig()
    if days_open is None:
        days_open = derive_days_open(timeline, status=status, now=now)

    stuck_days: int | None = None
    stuck_sev: Severity | None = None
    if not status.is_finished and timeline.stuck_at_index > 0:
        waiting_since = timeline.steps[timeline.stuck_at_index - 1].date
        if waiting_since is not None:
            stuck_days = days_between(waiting_since, now)
            stuck_sev = stuck_severity(stuck_days, cfg)

    return AgingAssessment(
        gaps=tuple(compute_gaps(timeline, status=status, now=now, config=cfg)),
        bucket=classify_bucket(days_open),
        days_open=days_open,
        stuck_days=stuck_days,
        stuck_severity=stuck_sev,
    )
