"""Engine configuration and environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import UTC, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True, slots=True)
class EngineConfig:
    # Gap severity thresholds (strictly greater than)
    elevated_after_days: int = 7
    severe_after_days: int = 14
    # Extra tier for the stuck indicator
    critical_after_days: int = 30

    # Applied to naive datetimes (log timestamps, caller inputs)
    default_tz: tzinfo = UTC

    # Assignee values that mean "nobody"; compared case-insensitively
    assignee_placeholders: tuple[str, ...] = ("", "-", "unassigned", "ไม่ระบุ")

    review_label_format: str = "★ {score} คะแนน"


def _env_days(name: str) -> int | None:
    env = os.getenv(name)
    if env is None or env == "":
        return None
    try:
        value = int(env)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < 0:
        raise ValueError(f"{name} must be >= 0")
    return value


def _env_tz(name: str) -> tzinfo | None:
    env = os.getenv(name)
    if not env:
        return None
    try:
        return ZoneInfo(env)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"{name} must be an IANA time zone name (e.g., Asia/Bangkok)") from exc


def resolve_engine_config(cfg: EngineConfig | None = None) -> EngineConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = EngineConfig()

    overrides: dict[str, object] = {}
    for field_name, env_name in (
        ("elevated_after_days", "JOB_TIMELINE_ELEVATED_DAYS"),
        ("severe_after_days", "JOB_TIMELINE_SEVERE_DAYS"),
        ("critical_after_days", "JOB_TIMELINE_CRITICAL_DAYS"),
    ):
        value = _env_days(env_name)
        if value is not None and value != getattr(cfg, field_name):
            overrides[field_name] = value

    tz = _env_tz("JOB_TIMELINE_DEFAULT_TZ")
    if tz is not None:
        overrides["default_tz"] = tz

    if overrides:
        cfg = replace(cfg, **overrides)

    if not cfg.elevated_after_days <= cfg.severe_after_days <= cfg.critical_after_days:
        raise ValueError("severity thresholds must satisfy elevated <= severe <= critical")
    return cfg
