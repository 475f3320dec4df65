"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: callable actions (e.g., build a job timeline)
- Resources: addressable data blobs (e.g., a job history via URI)
- Prompts: reusable conversation templates that clients can invoke

Run locally (stdio):
    python -m mcp_job_timeline_server.server.timeline_server
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_job_timeline_server.prompts.registry import register_prompts
from mcp_job_timeline_server.resources.registry import register_resources
from mcp_job_timeline_server.tools.timeline import build_job_timeline_impl

LOGGER = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv("JOB_TIMELINE_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


mcp = FastMCP("job-timeline", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def build_job_timeline(
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
) -> dict[str, Any]:
    """Reconstruct a maintenance job's lifecycle timeline from its audit log.

    Parameters
    ----------
    opened_at:
        ISO-8601 datetime the job was opened (required).
    history/history_path:
        The raw job history text, or a path to a plain-text/.gz export.
        Provide exactly one. Lines look like "[23/01/2025 09:30] <message>".
    status:
        open, closed or cancelled (back-office values such as "Completed" or
        "cancel" are accepted).
    days_open:
        Total open days from the job record; derived from the timeline if omitted.
    assigned_at/closed_at/reviewed_at:
        ISO-8601 fallbacks recorded on the job itself.
    review_score:
        Customer rating; shown as the reviewed step's actor.
    assignee:
        On-record assignee used when the log names nobody ("-" means none).
    now:
        Evaluation instant (ISO-8601). Defaults to the current time.
    include_feed:
        When true, also return the categorized per-line history.

    Returns
    -------
    dict:
        {"steps": [...], "stuck_at_index": int, "aging": {...}, ...}
    """
    return await build_job_timeline_impl(
        opened_at=opened_at,
        history=history,
        history_path=history_path,
        status=status,
        days_open=days_open,
        assigned_at=assigned_at,
        closed_at=closed_at,
        reviewed_at=reviewed_at,
        review_score=review_score,
        assignee=assignee,
        now=now,
        include_feed=include_feed,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    _configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
