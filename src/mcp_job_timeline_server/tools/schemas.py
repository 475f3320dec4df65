"""Response models for the timeline tool."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from mcp_job_timeline_server.core.history_feed import FeedItem
from mcp_job_timeline_server.core.models import JobAnalysis, JobStatus

StepName = Literal["opened", "assigned", "assessed", "serviced", "closedOrCancelled", "reviewed"]
SeverityName = Literal["normal", "elevated", "severe", "critical"]


class StepOut(BaseModel):
    key: StepName
    date: datetime | None = Field(default=None, description="When the step happened; null if not yet.")
    actor: str | None = Field(default=None, description="Person, vendor or review label.")


class GapOut(BaseModel):
    from_step: StepName
    to_step: StepName
    days: int = Field(description="Whole days between the steps (or until now when ongoing).")
    is_ongoing: bool = Field(description="True when still waiting for to_step.")
    severity: SeverityName


class AgingOut(BaseModel):
    bucket: Literal["0-30", "31-45", "46-60", "61-120", "120+"]
    days_open: int
    stuck_days: int | None = Field(
        default=None, description="Days waiting at the stuck step (open jobs only)."
    )
    stuck_severity: SeverityName | None = None
    gaps: list[GapOut] = Field(default_factory=list)


class FeedItemOut(BaseModel):
    line_no: int
    timestamp: datetime
    text: str
    category: str
    gap_label: str | None = Field(default=None, description="Time since previous entry, e.g. '+2d 3h'.")


class TimelineResponse(BaseModel):
    status: Literal["open", "closed", "cancelled"]
    evaluated_at: datetime
    steps: list[StepOut]
    stuck_at_index: int = Field(description="First step not yet reached; -1 when fully resolved.")
    stuck_step: StepName | None = None
    aging: AgingOut
    history: list[FeedItemOut] | None = None


def to_response(
    analysis: JobAnalysis,
    *,
    status: JobStatus,
    now: datetime,
    feed: list[FeedItem] | None = None,
) -> TimelineResponse:
    """Convert engine output into the tool response model."""
    tl = analysis.timeline
    aging = analysis.aging
    stuck = tl.stuck_step
    return TimelineResponse(
        status=status.value,
        evaluated_at=now,
        steps=[StepOut(key=s.key.value, date=s.date, actor=s.actor) for s in tl.steps],
        stuck_at_index=tl.stuck_at_index,
        stuck_step=stuck.key.value if stuck is not None else None,
        aging=AgingOut(
            bucket=aging.bucket.value,
            days_open=aging.days_open,
            stuck_days=aging.stuck_days,
            stuck_severity=aging.stuck_severity.value if aging.stuck_severity else None,
            gaps=[
                GapOut(
                    from_step=g.from_step.value,
                    to_step=g.to_step.value,
                    days=g.days,
                    is_ongoing=g.is_ongoing,
                    severity=g.severity.value,
                )
                for g in aging.gaps
            ],
        ),
        history=(
            [
                FeedItemOut(
                    line_no=item.entry.line_no,
                    timestamp=item.entry.timestamp,
                    text=item.entry.text,
                    category=item.category.value,
                    gap_label=item.gap_label,
                )
                for item in feed
            ]
            if feed is not None
            else None
        ),
    )
