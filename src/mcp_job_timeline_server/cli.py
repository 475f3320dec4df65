from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from typing import Any

from mcp_job_timeline_server.tools.timeline import build_job_timeline_impl


def _non_negative_int(s: str) -> int:
    try:
        value = int(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError("must be an integer") from e
    if value < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return value


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="job-timeline",
        description="Reconstruct a maintenance job's timeline from its history export.",
    )
    p.add_argument("history_path", help="Plain-text or .gz history export")
    p.add_argument("--opened-at", required=True, help="ISO8601 open time of the job")
    p.add_argument("--status", default="open", help="open, closed, cancelled (or back-office status)")
    p.add_argument("--days-open", type=_non_negative_int, default=None, help="Total open days (derived if omitted)")
    p.add_argument("--assigned-at", default=None, help="ISO8601 assignment time from the job record")
    p.add_argument("--closed-at", default=None, help="ISO8601 close time from the job record")
    p.add_argument("--reviewed-at", default=None, help="ISO8601 review time")
    p.add_argument("--review-score", type=float, default=None, help="Customer rating")
    p.add_argument("--assignee", default=None, help="On-record assignee ('-' means none)")
    p.add_argument("--now", default=None, help="Evaluation time (ISO8601, default: current time)")
    p.add_argument("--feed", action="store_true", help="Also print the per-line history")
    p.add_argument("--json", dest="as_json", action="store_true", help="Print the JSON response")
    return p


def _print_report(out: dict[str, Any]) -> None:
    for i, step in enumerate(out["steps"]):
        marker = ">" if i == out["stuck_at_index"] else " "
        date = step["date"] or "-"
        actor = f"  ({step['actor']})" if step["actor"] else ""
        print(f"{marker} {step['key']:<18} {date}{actor}")

    aging = out["aging"]
    print()
    for g in aging["gaps"]:
        suffix = " (waiting)" if g["is_ongoing"] else ""
        print(f"  {g['from_step']} -> {g['to_step']}: {g['days']}d [{g['severity']}]{suffix}")

    stuck = out["stuck_step"] or "resolved"
    print(f"\nStuck at: {stuck}", end="")
    if aging["stuck_days"] is not None:
        print(f" for {aging['stuck_days']}d [{aging['stuck_severity']}]", end="")
    print(f"\nAging: {aging['days_open']}d open, bucket {aging['bucket']}")

    if out.get("history"):
        print()
        for item in out["history"]:
            gap = f" {item['gap_label']}" if item["gap_label"] else ""
            print(f"{item['line_no']} {item['timestamp']}{gap} [{item['category']}] {item['text']}")


def main(argv: Sequence[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)

    try:
        out = asyncio.run(
            build_job_timeline_impl(
                opened_at=args.opened_at,
                history_path=args.history_path,
                status=args.status,
                days_open=args.days_open,
                assigned_at=args.assigned_at,
                closed_at=args.closed_at,
                reviewed_at=args.reviewed_at,
                review_score=args.review_score,
                assignee=args.assignee,
                now=args.now,
                include_feed=args.feed,
            )
        )
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    if args.as_json:
        print(json.dumps(out, ensure_ascii=False, indent=2))
        return
    _print_report(out)


if __name__ == "__main__":
    main()
