"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def explain_job_timeline_messages(
    history_path: str,
    opened_at: str,
    status: str = "open",
    now: str | None = None,
) -> list[dict[str, Any]]:
    """Build the messages for the explain_job_timeline prompt."""
    call_lines = [
        f"- history_path: {history_path}",
        f"- opened_at: {opened_at}",
        f"- status: {status}",
    ]
    if now is not None:
        call_lines.append(f"- now: {now}")
    call_lines.append("- include_feed: true")
    call_block = "\n".join(call_lines)
    return [
        {
            "role": "system",
            "content": (
                "You are a maintenance operations analyst. Explain where a repair job "
                "stands and what is delaying it, using only tool output. "
                "Do not invent dates or people; if a step has no date, say it has not happened."
            ),
        },
        {
            "role": "user",
            "content": (
                "Explain this job's timeline using build_job_timeline. Follow this workflow:\n"
                "- Always call build_job_timeline first with the parameters below.\n"
                "- Report the stuck step (stuck_step) and how long it has waited (stuck_days).\n"
                "- List gaps with severity 'elevated' or 'severe' and the steps they connect.\n"
                "- Mention the aging bucket.\n"
                "- Quote at most 3 history lines as evidence (include line_no).\n\n"
                "Call build_job_timeline with:\n"
                f"{call_block}\n\n"
                "Return this structure:\n"
                "1) Current state (1-2 sentences)\n"
                "2) Delays (bullets)\n"
                "3) Evidence (quoted lines)\n"
                "4) Suggested follow-up (1-3 bullets)\n"
            ),
        },
        {
            "role": "user",
            "content": [
                {
                    "type": "text",
                    "text": "Optional: if you need the full history, you can read it via:",
                },
                {"type": "resource", "uri": f"history://{history_path}"},
            ],
        },
    ]


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def summarize_resource(uri: str) -> list[dict[str, Any]]:
        """Build a prompt that summarizes a resource URI."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a precise assistant. Summarize the provided resource clearly and "
                    "concisely. Extract key points, risks, and actionable items."
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Summarize this resource:"},
                    {"type": "resource", "uri": uri},
                ],
            },
        ]

    @mcp.prompt()
    def explain_job_timeline(
        history_path: str,
        opened_at: str,
        status: str = "open",
        now: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt that explains where a job is stuck."""
        return explain_job_timeline_messages(history_path, opened_at, status=status, now=now)
