"""Per-line history view: category and time since the previous entry."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from .models import LogEntry


class FeedCategory(str, Enum):
    OPENED = "opened"
    ASSIGNMENT = "assignment"
    ASSESSMENT = "assessment"
    SERVICE = "service"
    CLOSED = "closed"
    REVIEW = "review"
    CANCELLED = "cancelled"
    STATUS = "status"
    OTHER = "other"


# Checked in order; first keyword hit wins.
DEFAULT_FEED_KEYWORDS: tuple[tuple[FeedCategory, tuple[str, ...]], ...] = (
    (FeedCategory.OPENED, ("เปิดใบงาน", "open job")),
    (
        FeedCategory.ASSIGNMENT,
        ("เพิ่มทีมผู้ให้บริการ", "เปลี่ยนทีมผู้ให้บริการ", "add service team", "change service team"),
    ),
    (FeedCategory.ASSESSMENT, ("ประเมิน", "assessment")),
    (FeedCategory.SERVICE, ("ให้บริการ", "ซ่อม", "service", "repair")),
    (FeedCategory.CLOSED, ("ปิดงาน", "close job")),
    (FeedCategory.REVIEW, ("รีวิว", "review")),
    (FeedCategory.CANCELLED, ("ยกเลิก", "cancel")),
    (FeedCategory.STATUS, ("ประกัน", "สถานะ", "warranty", "status")),
)


@dataclass(frozen=True, slots=True)
class FeedItem:
    entry: LogEntry
    category: FeedCategory
    gap: timedelta | None  # None for the first entry

    @property
    def gap_label(self) -> str | None:
        return format_gap_label(self.gap)


def categorize(
    text: str,
    keywords: Sequence[tuple[FeedCategory, Sequence[str]]] = DEFAULT_FEED_KEYWORDS,
) -> FeedCategory:
    lower = text.lower()
    for category, keys in keywords:
        if any(k in lower for k in keys):
            return category
    return FeedCategory.OTHER


def format_gap_label(gap: timedelta | None) -> str | None:
    """'+3d 4h', '+3d', '+5h'; None for gaps of an hour or less."""
    if gap is None:
        return None
    days, rem = divmod(gap, timedelta(days=1))
    hours = rem // timedelta(hours=1)
    if days > 0:
        return f"+{days}d {hours}h" if hours > 0 else f"+{days}d"
    if gap > timedelta(hours=1):
        return f"+{hours}h"
    return None


def build_history_feed(
    entries: Iterable[LogEntry],
    keywords: Sequence[tuple[FeedCategory, Sequence[str]]] = DEFAULT_FEED_KEYWORDS,
) -> list[FeedItem]:
    items: list[FeedItem] = []
    prev: LogEntry | None = None
    for entry in entries:
        gap = entry.timestamp - prev.timestamp if prev is not None else None
        items.append(FeedItem(entry=entry, category=categorize(entry.text, keywords), gap=gap))
        prev = entry
    return items
