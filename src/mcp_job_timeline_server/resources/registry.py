"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_job_timeline_server.core.aging import BUCKET_BOUNDS
from mcp_job_timeline_server.core.config import resolve_engine_config
from mcp_job_timeline_server.core.events import default_event_rules
from mcp_job_timeline_server.core.history_io import read_history
from mcp_job_timeline_server.tools.schemas import TimelineResponse

ALLOWED_FILE_SUFFIXES = {".log", ".txt"}
BASE_DIR_ENV = "JOB_TIMELINE_BASE_DIR"

SAMPLE_HISTORY = (
    "[02/01/2025 08:15] เปิดใบงาน\n"
    "[02/01/2025 10:40] เพิ่มทีมผู้ให้บริการ ช่างสมชาย เข้าใบงาน\n"
    "[03/01/2025 09:05] เลือกวันที่นัดเข้าประเมิน วันที่ 06/01/2568 เวลา 09:30 น.\n"
    "[06/01/2025 13:20] เลือกวันที่นัดเข้าให้บริการ วันที่ 10/01/2568 | 10:00\n"
    "[10/01/2025 16:45] ปิดงาน\n"
)


def _base_dir() -> Path:
    """Return the resolved base directory for file resources."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _safe_resolve(path: str) -> Path:
    """Resolve a path under the configured base directory."""
    base = _base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    return p


def _allowed_suffix(path: Path) -> str:
    """Return the effective suffix for allowlist checks."""
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def _resolve_history_path(path: str) -> Path:
    """Resolve and validate a history file path."""
    resolved = _safe_resolve(path)
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    if _allowed_suffix(resolved) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed}.")
    return resolved


def event_rules_summary() -> list[dict[str, str]]:
    """Return the event rule table in priority order."""
    return [
        {"kind": rule.kind.value, "pattern": rule.pattern.pattern} for rule in default_event_rules()
    ]


def engine_settings() -> dict[str, Any]:
    """Return the effective engine thresholds after env overrides."""
    cfg = resolve_engine_config()
    return {
        "elevated_after_days": cfg.elevated_after_days,
        "severe_after_days": cfg.severe_after_days,
        "critical_after_days": cfg.critical_after_days,
        "default_tz": str(cfg.default_tz),
        "bucket_upper_bounds": {bucket.value: upper for upper, bucket in BUCKET_BOUNDS},
    }


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://job-timeline/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs."""
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        base = _base_dir()
        return (
            "Resources:\n"
            "- app://job-timeline/help\n"
            "- app://job-timeline/examples/sample-history\n"
            "- app://job-timeline/config/event-rules\n"
            "- app://job-timeline/config/engine\n"
            "- app://job-timeline/schemas/timeline-response\n"
            f"- history://{{path}} (restricted to {BASE_DIR_ENV}; allowed: {allowed}, .gz)\n"
            f"\nBase directory: {base}\n"
        )

    @mcp.resource("app://job-timeline/examples/sample-history")
    def sample_history() -> str:
        """Return a tiny job history for demos and tests."""
        return SAMPLE_HISTORY

    @mcp.resource("app://job-timeline/config/event-rules")
    def event_rules() -> list[dict[str, str]]:
        """Return the event classification rules in priority order."""
        return event_rules_summary()

    @mcp.resource("app://job-timeline/config/engine")
    def engine_config() -> dict[str, Any]:
        """Return severity thresholds and aging bucket bounds."""
        return engine_settings()

    @mcp.resource("app://job-timeline/schemas/timeline-response")
    def timeline_schema() -> dict[str, Any]:
        """Return the JSON schema for timeline responses."""
        return TimelineResponse.model_json_schema()

    @mcp.resource("history://{path}")
    async def job_history(path: str) -> str:
        """Return a job history file from within JOB_TIMELINE_BASE_DIR."""
        p = _resolve_history_path(path)
        return await read_history(p)
