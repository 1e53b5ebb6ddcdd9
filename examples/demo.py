"""Demo script for reminder-engine."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from reminder_engine.adapters.json_adapter import parse
from reminder_engine.simulation import preview_schedule, simulate_inactivity_chain


def main() -> None:
    snapshot = parse("examples/sample_snapshot.json")
    preview = preview_schedule(snapshot)
    print("Counts:", preview["counts"])
    for trigger in preview["triggers"]:
        print(f"  {trigger['fire_at']}  {trigger['repeat']:<6}  {trigger['id']}")
    print("Inactivity chain:", simulate_inactivity_chain(snapshot, firings=3))


if __name__ == "__main__":
    main()
