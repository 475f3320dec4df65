from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from mcp_job_timeline_server.core.aging import (
    assess_aging,
    classify_bucket,
    compute_gaps,
    gap_severity,
    stuck_severity,
)
from mcp_job_timeline_server.core.config import EngineConfig
from mcp_job_timeline_server.core.models import (
    AgingBucket,
    JobStatus,
    Severity,
    StepKey,
)
from mcp_job_timeline_server.core.timeline import build_timeline

OPENED = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("days", "bucket"),
    [
        (0, AgingBucket.DAYS_0_30),
        (30, AgingBucket.DAYS_0_30),
        (31, AgingBucket.DAYS_31_45),
        (45, AgingBucket.DAYS_31_45),
        (46, AgingBucket.DAYS_46_60),
        (60, AgingBucket.DAYS_46_60),
        (61, AgingBucket.DAYS_61_120),
        (120, AgingBucket.DAYS_61_120),
        (121, AgingBucket.DAYS_120_PLUS),
    ],
)
def test_bucket_boundaries(days: int, bucket: AgingBucket) -> None:
    assert classify_bucket(days) == bucket


def test_gap_severity_thresholds() -> None:
    assert gap_severity(7) == Severity.NORMAL
    assert gap_severity(8) == Severity.ELEVATED
    assert gap_severity(14) == Severity.ELEVATED
    assert gap_severity(15) == Severity.SEVERE
    assert gap_severity(100) == Severity.SEVERE


def test_stuck_severity_adds_critical_tier() -> None:
    assert stuck_severity(30) == Severity.SEVERE
    assert stuck_severity(31) == Severity.CRITICAL
    assert stuck_severity(3) == Severity.NORMAL


def test_severity_respects_config() -> None:
    cfg = EngineConfig(elevated_after_days=2, severe_after_days=4, critical_after_days=6)
    assert gap_severity(3, cfg) == Severity.ELEVATED
    assert gap_severity(5, cfg) == Severity.SEVERE
    assert stuck_severity(7, cfg) == Severity.CRITICAL


def test_ongoing_gap_measures_from_last_reached_step() -> None:
    assigned = OPENED + timedelta(days=10)
    now = assigned + timedelta(days=5)
    timeline = build_timeline([], opened_at=OPENED, assigned_at_fallback=assigned)

    gaps = compute_gaps(timeline, status=JobStatus.OPEN, now=now)

    ongoing = [g for g in gaps if g.is_ongoing]
    assert len(ongoing) == 1
    assert ongoing[0].from_step == StepKey.ASSIGNED
    assert ongoing[0].to_step == StepKey.ASSESSED
    assert ongoing[0].days == 5
    assert [(g.from_step, g.days, g.is_ongoing) for g in gaps] == [
        (StepKey.OPENED, 10, False),
        (StepKey.ASSIGNED, 5, True),
    ]


def test_no_ongoing_gap_for_finished_jobs() -> None:
    timeline = build_timeline(
        [],
        opened_at=OPENED,
        status=JobStatus.CANCELLED,
        assigned_at_fallback=OPENED + timedelta(days=1),
    )
    gaps = compute_gaps(timeline, status=JobStatus.CANCELLED, now=OPENED + timedelta(days=40))
    assert [(g.from_step, g.is_ongoing) for g in gaps] == [(StepKey.OPENED, False)]


def test_review_step_is_excluded_from_gaps() -> None:
    timeline = build_timeline(
        [],
        opened_at=OPENED,
        status=JobStatus.CLOSED,
        closed_at_fallback=OPENED + timedelta(days=3),
        reviewed_at=OPENED + timedelta(days=20),
    )
    gaps = compute_gaps(timeline, status=JobStatus.CLOSED, now=OPENED + timedelta(days=30))
    assert all(g.to_step != StepKey.REVIEWED for g in gaps)
    assert all(g.from_step != StepKey.REVIEWED for g in gaps)


def test_gap_severity_is_attached() -> None:
    timeline = build_timeline(
        [], opened_at=OPENED, assigned_at_fallback=OPENED + timedelta(days=20)
    )
    gaps = compute_gaps(timeline, status=JobStatus.OPEN, now=OPENED + timedelta(days=23))
    assert gaps[0].severity == Severity.SEVERE
    assert gaps[1].severity == Severity.NORMAL


def test_assess_aging_stuck_days() -> None:
    assigned = OPENED + timedelta(days=2)
    timeline = build_timeline([], opened_at=OPENED, assigned_at_fallback=assigned)
    aging = assess_aging(
        timeline,
        status=JobStatus.OPEN,
        now=assigned + timedelta(days=40),
        days_open=42,
    )
    assert aging.bucket == AgingBucket.DAYS_31_45
    assert aging.days_open == 42
    assert aging.stuck_days == 40
    assert aging.stuck_severity == Severity.CRITICAL


def test_assess_aging_derives_days_open() -> None:
    open_timeline = build_timeline([], opened_at=OPENED)
    aging = assess_aging(open_timeline, status=JobStatus.OPEN, now=OPENED + timedelta(days=50))
    assert aging.days_open == 50
    assert aging.bucket == AgingBucket.DAYS_46_60

    closed_timeline = build_timeline(
        [],
        opened_at=OPENED,
        status=JobStatus.CLOSED,
        closed_at_fallback=OPENED + timedelta(days=12),
    )
    closed = assess_aging(closed_timeline, status=JobStatus.CLOSED, now=OPENED + timedelta(days=90))
    assert closed.days_open == 12
    assert closed.stuck_days is None
    assert closed.stuck_severity is None
