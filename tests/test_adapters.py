import json

import pytest

from reminder_engine.adapters.csv_adapter import parse as parse_csv
from reminder_engine.adapters.json_adapter import parse as parse_json


def test_csv_parse_success(tmp_path):
    path = tmp_path / "routines.csv"
    path.write_text(
        "routine_id,routine_name,routine_type,scheduled_time,day_filter\n"
        "r1,Morning,daily,07:30,weekdays\n"
        "r2,Long run,weekly,,3\n",
        encoding="utf-8",
    )
    schedules = parse_csv(str(path))
    assert len(schedules) == 2
    assert schedules[0].day_filter == "weekdays"
    assert schedules[1].scheduled_time is None
    assert schedules[1].day_filter == "3"


def test_csv_parse_invalid_row(tmp_path):
    path = tmp_path / "routines.csv"
    path.write_text("routine_id,routine_name,routine_type\nr1,Morning,monthly\n", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_csv(str(path))


def test_csv_parse_empty_file(tmp_path):
    path = tmp_path / "routines.csv"
    path.write_text("", encoding="utf-8")
    assert parse_csv(str(path)) == []


def test_json_parse_success(tmp_path):
    path = tmp_path / "snapshot.json"
    payload = {
        "now": "2026-01-02T10:00:00",
        "settings": {"noTimerReminderMinutes": 15},
        "running_sessions": [
            {"session_id": "s1", "activity_name": "Write", "start_time": "2026-01-02T09:50:00", "expected_minutes": 30}
        ],
        "routines": [
            {"routine_id": "r1", "routine_name": "Morning", "scheduled_time": "07:30", "day_filter": 1},
            {"routine_id": "r2", "routine_name": "Evening", "scheduled_time": "21:00"},
        ],
    }
    path.write_text(json.dumps(payload), encoding="utf-8")
    snapshot = parse_json(str(path))
    assert snapshot.now.hour == 10
    assert snapshot.running_sessions[0].expected_minutes == 30.0
    assert snapshot.routines[0].day_filter == 1
    assert snapshot.routines[1].day_filter == "all"
    assert snapshot.routines[1].routine_type == "daily"


def test_json_parse_malformed(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps({"running_sessions": [{"session_id": "s1", "activity_name": "Write", "start_time": "bad"}]}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        parse_json(str(path))


def test_json_parse_rejects_unknown_day_filter(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps({"routines": [{"routine_id": "r1", "routine_name": "Morning", "day_filter": "fortnightly"}]}),
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        parse_json(str(path))


def test_json_parse_requires_object(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError):
        parse_json(str(path))


def test_json_parse_accepts_numeric_day_filter_string(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text(
        json.dumps({"routines": [{"routine_id": "r1", "routine_name": "Long run", "day_filter": "3"}]}),
        encoding="utf-8",
    )
    snapshot = parse_json(str(path))
    assert snapshot.routines[0].day_filter == "3"
