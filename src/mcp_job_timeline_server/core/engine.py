"""Job timeline engine.

Runs tokenizer -> event extractor -> timeline builder -> aging classifier for
one job. Stateless: the evaluation instant is always passed in by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from .aging import assess_aging
from .calendar import ensure_aware
from .config import EngineConfig
from .events import EventRule, extract_events
from .models import JobAnalysis, JobInput, JobStatus
from .status import lookup_job_status
from .timeline import build_timeline
from .tokenizer import tokenize_history

logger = logging.getLogger(__name__)


def analyze_job(
    job: JobInput,
    *,
    now: datetime,
    config: EngineConfig | None = None,
    rules: Sequence[EventRule] | None = None,
) -> JobAnalysis:
    """Reconstruct the timeline and aging assessment for a job."""
    if job.opened_at is None:
        raise ValueError("opened_at is required to build a job timeline")
    status = lookup_job_status(job.status)
    if status is None:
        allowed = ", ".join(s.value for s in JobStatus)
        raise ValueError(f"Unknown job status '{job.status}', expected one of: {allowed}")

    cfg = config or EngineConfig()
    tz = cfg.default_tz

    def aware(dt: datetime | None) -> datetime | None:
        return ensure_aware(dt, default_tz=tz) if dt is not None else None

    entries = tokenize_history(job.raw_log, default_tz=tz)
    events = extract_events(entries, rules)
    timeline = build_timeline(
        events,
        opened_at=aware(job.opened_at),
        status=status,
        assigned_at_fallback=aware(job.assigned_at_fallback),
        closed_at_fallback=aware(job.closed_at_fallback),
        reviewed_at=aware(job.reviewed_at),
        review_score=job.review_score,
        assignee_fallback_name=job.assignee_fallback_name,
        config=cfg,
    )
    aging = assess_aging(
        timeline,
        status=status,
        now=ensure_aware(now, default_tz=tz),
        days_open=job.days_open,
        config=cfg,
    )
    logger.debug(
        "Analyzed job: %s entries, %s events, stuck_at_index=%s, bucket=%s",
        len(entries),
        len(events),
        timeline.stuck_at_index,
        aging.bucket.value,
    )
    return JobAnalysis(timeline=timeline, aging=aging)
