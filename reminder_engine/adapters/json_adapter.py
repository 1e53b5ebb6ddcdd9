"""JSON adapter for scheduler snapshots."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

from reminder_engine.schema import RoutineSchedule, RunningSession, Snapshot

_SESSION_FIELDS = {"session_id", "activity_name", "start_time"}
_ROUTINE_FIELDS = {"routine_id", "routine_name"}
_VALID_TYPES = {"daily", "weekly"}
_VALID_DAY_FILTERS = {"all", "weekdays", "weekend", "0", "1", "2", "3", "4", "5", "6"}


def _parse_datetime(value, label: str) -> datetime:
    try:
        return datetime.fromisoformat(str(value))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{label}: malformed timestamp") from exc


def _parse_session(item: dict, index: int) -> RunningSession:
    missing = sorted(field for field in _SESSION_FIELDS if not item.get(field))
    if missing:
        raise ValueError(f"Session {index}: missing required fields {missing}")

    expected_raw = item.get("expected_minutes")
    expected_minutes: Optional[float] = None
    if expected_raw is not None:
        try:
            expected_minutes = float(expected_raw)
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Session {index}: invalid expected_minutes") from exc

    return RunningSession(
        session_id=str(item["session_id"]).strip(),
        activity_name=str(item["activity_name"]).strip(),
        start_time=_parse_datetime(item["start_time"], f"Session {index}"),
        expected_minutes=expected_minutes,
        source=str(item.get("source") or "manual"),
    )


def _parse_day_filter(value, index: int):
    if value is None:
        return "all"
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6:
        return value
    if isinstance(value, str) and value.strip().lower() in _VALID_DAY_FILTERS:
        return value.strip().lower()
    raise ValueError(f"Routine {index}: invalid day_filter '{value}'")


def _parse_routine(item: dict, index: int) -> RoutineSchedule:
    missing = sorted(field for field in _ROUTINE_FIELDS if not item.get(field))
    if missing:
        raise ValueError(f"Routine {index}: missing required fields {missing}")

    routine_type = str(item.get("routine_type") or "daily").strip().lower()
    if routine_type not in _VALID_TYPES:
        raise ValueError(f"Routine {index}: invalid routine_type '{routine_type}'")

    day_filter = _parse_day_filter(item.get("day_filter"), index)

    scheduled_time = item.get("scheduled_time")
    return RoutineSchedule(
        routine_id=str(item["routine_id"]).strip(),
        routine_name=str(item["routine_name"]).strip(),
        routine_type=routine_type,
        scheduled_time=str(scheduled_time) if scheduled_time is not None else None,
        day_filter=day_filter,
    )


def parse(file_path: str) -> Snapshot:
    """Parse a JSON snapshot of settings, running sessions and routines."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object")

    settings = payload.get("settings") or {}
    if not isinstance(settings, dict):
        raise ValueError("'settings' must be an object")

    now = payload.get("now")
    return Snapshot(
        settings=dict(settings),
        running_sessions=[
            _parse_session(item, i) for i, item in enumerate(payload.get("running_sessions") or [], start=1)
        ],
        routines=[_parse_routine(item, i) for i, item in enumerate(payload.get("routines") or [], start=1)],
        now=_parse_datetime(now, "now") if now else None,
    )
