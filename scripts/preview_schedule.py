"""Preview the notification triggers for a JSON snapshot or routine CSV."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from reminder_engine.adapters import csv_adapter, json_adapter
from reminder_engine.log import setup_logger
from reminder_engine.schema import Snapshot
from reminder_engine.simulation import preview_schedule, simulate_deliveries


def _load_snapshot(path: Path) -> Snapshot:
    suffix = path.suffix.lower()
    if suffix == ".json":
        return json_adapter.parse(str(path))
    if suffix == ".csv":
        return Snapshot(routines=csv_adapter.parse(str(path)))
    raise ValueError("Unsupported input format, expected .csv or .json")


def main() -> None:
    parser = argparse.ArgumentParser(description="Preview reminder-engine notification triggers")
    parser.add_argument("--data", required=True, help="Path to a JSON snapshot or routine CSV file")
    parser.add_argument("--now", help="ISO timestamp to schedule from (defaults to the snapshot or wall clock)")
    parser.add_argument("--hours", type=float, default=0, help="Also play deliveries forward for this many hours")
    parser.add_argument("--verbose", action="store_true", help="Log scheduling decisions")
    parser.add_argument("--out", help="Optional path to write the JSON report to")
    args = parser.parse_args()

    setup_logger("reminder_engine", level=logging.DEBUG if args.verbose else logging.WARNING)

    snapshot = _load_snapshot(Path(args.data))
    now = datetime.fromisoformat(args.now) if args.now else None
    report = preview_schedule(snapshot, now=now)
    if args.hours > 0:
        report["deliveries"] = simulate_deliveries(snapshot, hours=args.hours, now=now)

    print(json.dumps(report, indent=2))

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Saved schedule preview to {out_path}")


if __name__ == "__main__":
    main()
