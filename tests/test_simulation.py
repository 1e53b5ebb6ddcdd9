from datetime import datetime

from reminder_engine.schema import RoutineSchedule, RunningSession, Snapshot
from reminder_engine.simulation import preview_schedule, simulate_deliveries, simulate_inactivity_chain

NOW = datetime(2026, 1, 2, 10, 0)


def sample_snapshot():
    return Snapshot(
        settings={"noTimerReminderMinutes": 15},
        routines=[
            RoutineSchedule("morning", "Morning", "daily", "07:30", "weekdays"),
            RoutineSchedule("morning", "Morning", "daily", "07:00", 1),
            RoutineSchedule("reading", "Reading", "daily", "21:15", "all"),
            RoutineSchedule("broken", "Broken", "daily", "25:99", "all"),
        ],
        now=NOW,
    )


def test_preview_schedule_counts():
    report = preview_schedule(sample_snapshot())
    assert report["now"] == "2026-01-02T10:00"
    assert report["counts"] == {"timer": 0, "inactivity": 1, "routine": 6}
    monday = [t for t in report["triggers"] if t["id"] == "routine-start-morning-1"][0]
    assert monday["fire_at"] == "2026-01-05T07:00"
    assert monday["repeat"] == "weekly"


def test_preview_with_running_timer():
    snapshot = sample_snapshot()
    snapshot.running_sessions.append(RunningSession("s1", "Write", NOW, expected_minutes=60))
    report = preview_schedule(snapshot)
    assert report["counts"] == {"timer": 2, "inactivity": 0, "routine": 6}


def test_inactivity_chain_repeats_at_interval():
    assert simulate_inactivity_chain(sample_snapshot(), firings=3) == [
        "2026-01-02T10:15",
        "2026-01-02T10:30",
        "2026-01-02T10:45",
    ]


def test_simulated_deliveries_include_routine_and_inactivity():
    delivered = simulate_deliveries(sample_snapshot(), hours=12)
    kinds = {record["kind"] for record in delivered}
    assert kinds == {"inactivity", "routine"}
    assert [r["id"] for r in delivered if r["kind"] == "routine"] == ["routine-start-reading-daily"]
