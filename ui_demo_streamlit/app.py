"""Streamlit demo UI for reminder-engine."""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from reminder_engine.adapters import csv_adapter, json_adapter
from reminder_engine.config import (
    SETTING_NO_TIMER_REMINDER_ENABLED,
    SETTING_NO_TIMER_REMINDER_MINUTES,
    SETTING_NOTIFICATIONS_ENABLED,
    SETTING_REMINDER_ROUTINE_START,
)
from reminder_engine.schema import RunningSession, Snapshot
from reminder_engine.simulation import preview_schedule, simulate_deliveries, simulate_inactivity_chain

DEMO_SNAPSHOT = "examples/sample_snapshot.json"


def _parse_snapshot_from_path(file_path: str) -> Snapshot:
    suffix = Path(file_path).suffix.lower()
    if suffix == ".json":
        return json_adapter.parse(file_path)
    if suffix == ".csv":
        return Snapshot(routines=csv_adapter.parse(file_path))
    raise ValueError("Unsupported file type. Please use .csv or .json")


def _parse_uploaded(uploaded_file) -> Snapshot:
    suffix = Path(uploaded_file.name).suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return _parse_snapshot_from_path(temp_path)


def run_engine(snapshot: Snapshot, now: datetime, hours: float) -> dict[str, Any]:
    """Run every preview step and return a UI-friendly result payload."""

    preview = preview_schedule(snapshot, now=now)
    return {
        "preview": preview,
        "deliveries": simulate_deliveries(snapshot, hours=hours, now=now),
        "inactivity_chain": simulate_inactivity_chain(snapshot, firings=4, now=now),
    }


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Reminder Engine Demo", layout="wide")
    st.title("Reminder Engine: Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload snapshot or routines", type=["csv", "json"])
        use_demo = st.checkbox("Load demo snapshot", value=True)
        notifications_enabled = st.checkbox("Notifications enabled", value=True)
        routine_reminders = st.checkbox("Routine start reminders", value=True)
        inactivity_enabled = st.checkbox("No-timer reminder", value=True)
        inactivity_minutes = st.number_input("No-timer reminder minutes", min_value=0, max_value=240, value=15)
        timer_running = st.checkbox("A timer is running", value=False)
        expected_minutes = st.number_input("Timer budget (minutes)", min_value=0, max_value=600, value=30)
        now_date = st.date_input("Now (date)", value=datetime(2026, 1, 2).date())
        now_time = st.time_input("Now (time)", value=datetime(2026, 1, 2, 10, 0).time())
        hours = st.slider("Simulate hours", min_value=1, max_value=72, value=24)
        run = st.button("Run engine", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Run engine**.")
        return

    try:
        if use_demo:
            snapshot = json_adapter.parse(DEMO_SNAPSHOT)
            data_source = f"demo snapshot ({DEMO_SNAPSHOT})"
        elif uploaded is not None:
            snapshot = _parse_uploaded(uploaded)
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a CSV/JSON file or enable 'Load demo snapshot'.")
            return

        now = datetime.combine(now_date, now_time)
        snapshot.settings.update(
            {
                SETTING_NOTIFICATIONS_ENABLED: notifications_enabled,
                SETTING_REMINDER_ROUTINE_START: routine_reminders,
                SETTING_NO_TIMER_REMINDER_ENABLED: inactivity_enabled,
                SETTING_NO_TIMER_REMINDER_MINUTES: int(inactivity_minutes),
            }
        )
        if timer_running:
            snapshot.running_sessions.append(
                RunningSession("ui-demo-session", "Demo activity", now, expected_minutes=float(expected_minutes))
            )

        result = run_engine(snapshot, now, hours)

        st.success(f"Loaded {len(snapshot.routines)} routine rows from {data_source}.")

        st.subheader("A) Pending Triggers")
        counts = result["preview"]["counts"]
        c1, c2, c3 = st.columns(3)
        c1.metric("Timer", counts["timer"])
        c2.metric("Inactivity", counts["inactivity"])
        c3.metric("Routine", counts["routine"])
        if result["preview"]["triggers"]:
            st.table(result["preview"]["triggers"])
        else:
            st.write("No triggers would be installed.")

        st.subheader("B) Inactivity Self-Renewal")
        st.write(result["inactivity_chain"] or "The inactivity reminder is not pending.")

        st.subheader("C) Simulated Deliveries")
        deliveries = result["deliveries"]
        st.write(f"{len(deliveries)} deliveries over {hours} hours.")
        if deliveries:
            st.table([{key: d[key] for key in ("fire_at", "kind", "id")} for d in deliveries])

    except ValueError as exc:
        st.error(f"Input error: {exc}")
    except Exception:
        st.error("Something went wrong while running the demo. Please verify the input format.")


if __name__ == "__main__":
    main()
