"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any

from mcp_job_timeline_server.core.calendar import parse_iso_dt
from mcp_job_timeline_server.core.config import EngineConfig, resolve_engine_config
from mcp_job_timeline_server.core.engine import analyze_job
from mcp_job_timeline_server.core.history_feed import build_history_feed
from mcp_job_timeline_server.core.history_io import read_history
from mcp_job_timeline_server.core.models import JobInput, JobStatus
from mcp_job_timeline_server.core.status import lookup_job_status
from mcp_job_timeline_server.core.tokenizer import tokenize_history
from mcp_job_timeline_server.tools.schemas import to_response


def _parse_status(status: str | None) -> JobStatus:
    """Parse a status name; back-office sub-statuses (e.g. 'Completed') are accepted."""
    if status is None or not status.strip():
        return JobStatus.OPEN
    parsed = lookup_job_status(status)
    if parsed is None:
        allowed = ", ".join(s.value for s in JobStatus)
        raise ValueError(
            f"Unknown status '{status}'. Use one of: {allowed} (or e.g. 'Completed')."
        )
    return parsed


def _parse_dt(name: str, value: str | None, *, default_tz: tzinfo) -> datetime | None:
    """Parse an optional ISO-8601 argument, naming it in errors."""
    if value is None or not value.strip():
        return None
    try:
        return parse_iso_dt(value, default_tz=default_tz)
    except ValueError as e:
        raise ValueError(
            f"{name} must be an ISO-8601 datetime (e.g., 2025-01-23T09:30:00+07:00), got '{value}'"
        ) from e


async def build_job_timeline_impl(
    *,
    opened_at: str,
    history: str | None = None,
    history_path: str | None = None,
    status: str | None = None,
    days_open: int | None = None,
    assigned_at: str | None = None,
    closed_at: str | None = None,
    reviewed_at: str | None = None,
    review_score: float | None = None,
    assignee: str | None = None,
    now: str | None = None,
    include_feed: bool = False,
    config: EngineConfig | None = None,
) -> dict[str, Any]:
    """Implementation for the `build_job_timeline` MCP tool.

    Notes
    -----
    - Exactly one of history / history_path must be given.
    - now defaults to the current time; pass it explicitly for reproducible output.
    - Datetimes without an offset use the configured default time zone.
    """
    if (history is None) == (history_path is None):
        raise ValueError("Provide exactly one of history or history_path.")
    if days_open is not None and days_open < 0:
        raise ValueError("days_open must be >= 0")

    cfg = resolve_engine_config(config)
    tz = cfg.default_tz

    opened = _parse_dt("opened_at", opened_at, default_tz=tz)
    if opened is None:
        raise ValueError("opened_at is required")
    evaluated_at = _parse_dt("now", now, default_tz=tz) or datetime.now(tz)
    job_status = _parse_status(status)

    raw_log = history if history is not None else await read_history(history_path)

    job = JobInput(
        raw_log=raw_log,
        opened_at=opened,
        status=job_status,
        days_open=days_open,
        assigned_at_fallback=_parse_dt("assigned_at", assigned_at, default_tz=tz),
        closed_at_fallback=_parse_dt("closed_at", closed_at, default_tz=tz),
        reviewed_at=_parse_dt("reviewed_at", reviewed_at, default_tz=tz),
        review_score=review_score,
        assignee_fallback_name=assignee,
    )
    analysis = analyze_job(job, now=evaluated_at, config=cfg)

    feed = None
    if include_feed:
        feed = build_history_feed(tokenize_history(raw_log, default_tz=tz))

    resp = to_response(analysis, status=job_status, now=evaluated_at, feed=feed)
    return resp.model_dump(mode="json")
