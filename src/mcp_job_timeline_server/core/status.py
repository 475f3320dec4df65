"""Normalize back-office job status strings."""

from __future__ import annotations

from .models import JobStatus

_CLOSED = {"completed", "complete", "closed", "done"}
_CANCELLED = {"cancel", "cancelled", "canceled"}
# Sub-statuses of a job that is still in progress
_OPEN = {
    "open",
    "new",
    "pending",
    "assigned",
    "inprogress",
    "in_progress",
    "waitingassess",
    "waitingservice",
    "waitingclose",
}


def lookup_job_status(raw: str | JobStatus) -> JobStatus | None:
    """Return the JobStatus for a known status name, or None if unrecognized."""
    if isinstance(raw, JobStatus):
        return raw
    s = raw.strip().lower()
    if s in _CLOSED:
        return JobStatus.CLOSED
    if s in _CANCELLED:
        return JobStatus.CANCELLED
    if s in _OPEN:
        return JobStatus.OPEN
    return None

