from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pytest

HISTORY_LINES = [
    "[02/01/2025 08:15] เปิดใบงาน",
    "[02/01/2025 10:40] เพิ่มทีมผู้ให้บริการ ช่างสมชาย เข้าใบงาน",
    "[03/01/2025 09:05] เลือกวันที่นัดเข้าประเมิน วันที่ 06/01/2568 เวลา 09:30 น.",
    "[06/01/2025 13:20] เลือกวันที่นัดเข้าให้บริการ วันที่ 10/01/2568 | 10:00",
    "[10/01/2025 16:45] ปิดงาน",
]


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 2, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def history() -> str:
    return "\n".join(HISTORY_LINES) + "\n"


@pytest.fixture
def write_history() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text("\n".join(HISTORY_LINES) + "\n", encoding="utf-8")

    return _write
