import asyncio
from datetime import datetime, timedelta

from reminder_engine.adapters.memory import (
    InMemoryNotificationCenter,
    InMemoryRoutines,
    InMemorySessions,
    InMemorySettings,
    ManualClock,
)
from reminder_engine.config import INACTIVITY_NOTIFICATION_ID, ROUTINE_NOTIFICATION_PREFIX
from reminder_engine.schema import RoutineSchedule, RunningSession
from reminder_engine.service import NotificationService

NOW = datetime(2026, 1, 2, 10, 0)


def make_service(settings=None, sessions=(), routines=(), permission_granted=True):
    clock = ManualClock(NOW)
    center = InMemoryNotificationCenter(permission_granted=permission_granted)
    session_port = InMemorySessions(sessions)
    service = NotificationService(
        notifications=center,
        settings=InMemorySettings(settings),
        sessions=session_port,
        routines=InMemoryRoutines(routines),
        clock=clock,
    )
    return service, center, session_port, clock


def test_init_sets_up_channels_and_resyncs_idle_state():
    routines = [RoutineSchedule("r1", "Morning", "daily", "08:00", "all")]
    service, center, *_ = make_service(routines=routines)
    asyncio.run(service.init())

    assert sorted(center.channels) == ["inactivity-notifications", "routine-notifications", "timer-notifications"]
    assert center.pending_ids() == [INACTIVITY_NOTIFICATION_ID, "routine-start-r1-daily"]
    assert service.initialized
    assert service.listener.registered


def test_init_restores_timer_warnings_for_running_sessions():
    session = RunningSession("s1", "Write", NOW - timedelta(minutes=10), expected_minutes=30)
    service, center, *_ = make_service(sessions=[session])
    asyncio.run(service.init())

    assert center.pending_ids() == ["timer-5min-s1", "timer-timeup-s1"]


def test_init_continues_without_permission():
    service, center, *_ = make_service(permission_granted=False)
    asyncio.run(service.init())
    assert INACTIVITY_NOTIFICATION_ID in center.triggers


def test_timer_start_and_stop_lifecycle():
    service, center, sessions, clock = make_service()
    asyncio.run(service.init())
    assert INACTIVITY_NOTIFICATION_ID in center.triggers

    session = RunningSession("s1", "Write", NOW, expected_minutes=45)
    sessions.start(session)
    installed = asyncio.run(service.on_timer_started(session))

    assert installed == ["timer-5min-s1", "timer-timeup-s1"]
    assert INACTIVITY_NOTIFICATION_ID not in center.triggers
    assert center.displayed["timer-start-s1"].title == "Timer Started"

    clock.advance(minutes=20)
    sessions.stop("s1")
    fire_at = asyncio.run(service.on_timer_stopped("s1"))

    assert center.pending_ids("timer-") == []
    assert fire_at == NOW + timedelta(minutes=25)


def test_settings_change_refreshes_reminders():
    routines = [RoutineSchedule("r1", "Morning", "daily", "08:00", "all")]
    settings = InMemorySettings()
    center = InMemoryNotificationCenter()
    service = NotificationService(center, settings, InMemorySessions(), InMemoryRoutines(routines), clock=ManualClock(NOW))
    asyncio.run(service.init())

    settings.set("notificationsEnabled", False)
    asyncio.run(service.on_settings_changed())
    assert center.triggers == {}

    settings.set("notificationsEnabled", True)
    asyncio.run(service.on_settings_changed(override_interval_minutes=9))
    assert center.triggers[INACTIVITY_NOTIFICATION_ID].trigger.timestamp == NOW + timedelta(minutes=9)
    assert center.pending_ids(ROUTINE_NOTIFICATION_PREFIX) == ["routine-start-r1-daily"]


def test_routine_change_rebuilds():
    routines = InMemoryRoutines()
    center = InMemoryNotificationCenter()
    service = NotificationService(center, InMemorySettings(), InMemorySessions(), routines, clock=ManualClock(NOW))
    asyncio.run(service.init())
    assert center.pending_ids(ROUTINE_NOTIFICATION_PREFIX) == []

    routines.schedules.append(RoutineSchedule("r1", "Morning", "weekly", "08:00", "weekend"))
    assert asyncio.run(service.on_routine_changed()) == ["routine-start-r1-0", "routine-start-r1-6"]


def test_show_inactivity_notification_names_interval():
    service, center, *_ = make_service(settings={"noTimerReminderMinutes": 15})
    asyncio.run(service.init())
    asyncio.run(service.show_inactivity_notification())
    assert "last 15 minutes" in center.displayed[INACTIVITY_NOTIFICATION_ID].body

    service.set_inactivity_interval(1)
    asyncio.run(service.show_inactivity_notification())
    assert "last 1 minute." in center.displayed[INACTIVITY_NOTIFICATION_ID].body


def test_cancel_inactivity_notification_clears_displayed_and_pending():
    service, center, *_ = make_service()
    asyncio.run(service.init())
    asyncio.run(service.show_inactivity_notification())

    asyncio.run(service.cancel_inactivity_notification())
    asyncio.run(service.cancel_inactivity_notification())
    assert INACTIVITY_NOTIFICATION_ID not in center.triggers
    assert INACTIVITY_NOTIFICATION_ID not in center.displayed


def test_shutdown_stops_self_renewal():
    service, center, _, clock = make_service()
    asyncio.run(service.init())
    asyncio.run(service.shutdown())

    clock.advance(minutes=5)
    asyncio.run(center.deliver(INACTIVITY_NOTIFICATION_ID))
    assert INACTIVITY_NOTIFICATION_ID not in center.triggers
    assert not service.initialized


def test_cancel_all_notifications():
    service, center, *_ = make_service(routines=[RoutineSchedule("r1", "Morning", "daily", "08:00", "all")])
    asyncio.run(service.init())
    asyncio.run(service.cancel_all_notifications())
    assert center.triggers == {}


def test_init_twice_keeps_one_set_of_channels_and_triggers():
    service, center, _, clock = make_service()
    asyncio.run(service.init())
    asyncio.run(service.init())

    assert len(center.channels) == 3
    assert center.pending_ids(INACTIVITY_NOTIFICATION_ID) == [INACTIVITY_NOTIFICATION_ID]

    clock.advance(minutes=5)
    asyncio.run(center.deliver(INACTIVITY_NOTIFICATION_ID))
    assert center.triggers[INACTIVITY_NOTIFICATION_ID].trigger.timestamp == NOW + timedelta(minutes=10)
