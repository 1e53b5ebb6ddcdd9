"""CSV adapter for routine schedules."""

from __future__ import annotations

import csv

from reminder_engine.schema import RoutineSchedule

_REQUIRED_FIELDS = {"routine_id", "routine_name"}
_VALID_TYPES = {"daily", "weekly"}
_VALID_DAY_FILTERS = {"all", "weekdays", "weekend", "0", "1", "2", "3", "4", "5", "6"}


def _parse_row(row: dict, row_number: int) -> RoutineSchedule:
    missing = sorted(field for field in _REQUIRED_FIELDS if not (row.get(field) or "").strip())
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")

    routine_type = (row.get("routine_type") or "daily").strip().lower()
    if routine_type not in _VALID_TYPES:
        raise ValueError(f"Row {row_number}: invalid routine_type '{routine_type}'")

    day_filter = (row.get("day_filter") or "all").strip().lower()
    if day_filter not in _VALID_DAY_FILTERS:
        raise ValueError(f"Row {row_number}: invalid day_filter '{day_filter}'")

    scheduled_raw = row.get("scheduled_time")
    scheduled_time = scheduled_raw.strip() if scheduled_raw and scheduled_raw.strip() else None

    return RoutineSchedule(
        routine_id=row["routine_id"].strip(),
        routine_name=row["routine_name"].strip(),
        routine_type=routine_type,
        scheduled_time=scheduled_time,
        day_filter=day_filter,
    )


def parse(file_path: str) -> list[RoutineSchedule]:
    """Parse a CSV file of routine start times.

    Start times are kept verbatim; malformed ones are dropped later by the
    scheduler rather than rejected here.
    """

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        schedules: list[RoutineSchedule] = []
        for row_number, row in enumerate(reader, start=2):
            schedules.append(_parse_row(row, row_number))
        return schedules
