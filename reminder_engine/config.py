"""Channel ids, trigger keys and settings defaults."""

from __future__ import annotations

from dataclasses import dataclass

TIMER_CHANNEL_ID = "timer-notifications"
INACTIVITY_CHANNEL_ID = "inactivity-notifications"
ROUTINE_CHANNEL_ID = "routine-notifications"

TIMER_WARNING_PREFIX = "timer-5min-"
TIMER_TIMEUP_PREFIX = "timer-timeup-"
INACTIVITY_NOTIFICATION_ID = "inactivity-reminder"
ROUTINE_NOTIFICATION_PREFIX = "routine-start-"
DAILY_KEY_SUFFIX = "daily"

SETTING_NOTIFICATIONS_ENABLED = "notificationsEnabled"
SETTING_REMINDER_ROUTINE_START = "reminderRoutineStart"
SETTING_NO_TIMER_REMINDER_ENABLED = "noTimerReminderEnabled"
SETTING_NO_TIMER_REMINDER_MINUTES = "noTimerReminderMinutes"

DEFAULT_INACTIVITY_MINUTES = 5
DEFAULT_WARNING_LEAD_MINUTES = 5

SETTING_DEFAULTS = {
    SETTING_NOTIFICATIONS_ENABLED: True,
    SETTING_REMINDER_ROUTINE_START: True,
    SETTING_NO_TIMER_REMINDER_ENABLED: True,
    SETTING_NO_TIMER_REMINDER_MINUTES: DEFAULT_INACTIVITY_MINUTES,
}


@dataclass(frozen=True)
class SchedulerConfig:
    """Tunables injected into the trigger scheduler."""

    default_inactivity_minutes: int = DEFAULT_INACTIVITY_MINUTES
    timer_warning_lead_minutes: int = DEFAULT_WARNING_LEAD_MINUTES


def timer_warning_key(session_id: str) -> str:
    return f"{TIMER_WARNING_PREFIX}{session_id}"


def timer_timeup_key(session_id: str) -> str:
    return f"{TIMER_TIMEUP_PREFIX}{session_id}"


def routine_trigger_key(routine_id: str, day_of_week: int | None) -> str:
    day = DAILY_KEY_SUFFIX if day_of_week is None else str(day_of_week)
    return f"{ROUTINE_NOTIFICATION_PREFIX}{routine_id}-{day}"
