"""Trigger scheduler for timer warnings, inactivity nudges and routine starts.

Every public coroutine recomputes the desired trigger set from the injected
ports and applies it by cancelling and reinstalling keyed triggers. Failures
from the ports are logged and turn the call into a no-op; they are never
raised to the caller.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from reminder_engine.config import (
    INACTIVITY_CHANNEL_ID,
    INACTIVITY_NOTIFICATION_ID,
    ROUTINE_CHANNEL_ID,
    ROUTINE_NOTIFICATION_PREFIX,
    SETTING_NO_TIMER_REMINDER_ENABLED,
    SETTING_NO_TIMER_REMINDER_MINUTES,
    SETTING_NOTIFICATIONS_ENABLED,
    SETTING_DEFAULTS,
    SETTING_REMINDER_ROUTINE_START,
    TIMER_CHANNEL_ID,
    SchedulerConfig,
    routine_trigger_key,
    timer_timeup_key,
    timer_warning_key,
)
from reminder_engine.errors import NotificationNotFoundError
from reminder_engine.ports import NotificationPort, RoutinePort, SessionPort, SettingsPort
from reminder_engine.schema import (
    Importance,
    Notification,
    RoutineSchedule,
    RoutineTrigger,
    TimerWarningSet,
    Trigger,
)
from reminder_engine.time_utils import expand_day_filter, next_occurrence, parse_time_of_day

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def collapse_routine_schedules(schedules: Iterable[RoutineSchedule]) -> list[RoutineTrigger]:
    """Reduce schedules to one trigger per (routine, weekday), keeping the earliest time.

    Ties keep the schedule seen first. Rows with a malformed start time or an
    unknown day filter are dropped.
    """

    grouped: dict[tuple[str, Optional[int]], RoutineTrigger] = {}
    for schedule in schedules:
        parsed = parse_time_of_day(schedule.scheduled_time)
        if parsed is None:
            logger.warning(
                "Skipping routine %s: malformed start time %r", schedule.routine_id, schedule.scheduled_time
            )
            continue

        days = expand_day_filter(schedule.day_filter)
        if not days:
            logger.warning("Skipping routine %s: unknown day filter %r", schedule.routine_id, schedule.day_filter)

        for day in days:
            key = (schedule.routine_id, day)
            existing = grouped.get(key)
            if existing is not None and parsed.total_minutes >= existing.time_of_day.total_minutes:
                continue
            grouped[key] = RoutineTrigger(
                routine_id=schedule.routine_id,
                routine_name=schedule.routine_name,
                routine_type=schedule.routine_type,
                time_of_day=parsed,
                day_of_week=day,
            )

    return list(grouped.values())


def _warning_notification(warnings: TimerWarningSet) -> Notification:
    name = warnings.activity_name
    lead = int(warnings.lead_minutes)
    return Notification(
        notification_id=timer_warning_key(warnings.session_id),
        title=f"{lead} minutes remaining",
        body=f'"{name}" budget ends in {lead} minutes',
        channel_id=TIMER_CHANNEL_ID,
        importance=Importance.HIGH,
        data={"sessionId": warnings.session_id, "kind": "warning"},
    )


def _timeup_notification(warnings: TimerWarningSet) -> Notification:
    return Notification(
        notification_id=timer_timeup_key(warnings.session_id),
        title="Time is up!",
        body=f'"{warnings.activity_name}" has exceeded its budget',
        channel_id=TIMER_CHANNEL_ID,
        importance=Importance.HIGH,
        data={"sessionId": warnings.session_id, "kind": "timeup"},
    )


def inactivity_notification(body: Optional[str] = None, interval_minutes: Optional[int] = None) -> Notification:
    return Notification(
        notification_id=INACTIVITY_NOTIFICATION_ID,
        title="No timer running",
        body=body or "You haven't tracked any activity. Start a timer?",
        channel_id=INACTIVITY_CHANNEL_ID,
        importance=Importance.DEFAULT,
        data={} if interval_minutes is None else {"intervalMinutes": interval_minutes},
    )


def _routine_notification(routine_trigger: RoutineTrigger) -> Notification:
    return Notification(
        notification_id=routine_trigger_key(routine_trigger.routine_id, routine_trigger.day_of_week),
        title="Routine starting",
        body=f'It\'s time to start your "{routine_trigger.routine_name}" routine.',
        channel_id=ROUTINE_CHANNEL_ID,
        importance=Importance.HIGH,
        data={
            "routineId": routine_trigger.routine_id,
            "routineType": routine_trigger.routine_type,
            "dayOfWeek": routine_trigger.day_of_week,
        },
    )


class TriggerScheduler:
    """Owns every scheduled notification the app installs."""

    def __init__(
        self,
        notifications: NotificationPort,
        settings: SettingsPort,
        sessions: SessionPort,
        routines: RoutinePort,
        clock: Clock = datetime.now,
        config: Optional[SchedulerConfig] = None,
    ):
        self._notifications = notifications
        self._settings = settings
        self._sessions = sessions
        self._routines = routines
        self._clock = clock
        self.config = config or SchedulerConfig()
        self.current_interval_minutes: Optional[int] = None

    def now(self) -> datetime:
        return self._clock()

    async def _all_enabled(self, *keys: str) -> bool:
        for key in keys:
            if not await self._settings.get_setting_boolean(key, SETTING_DEFAULTS[key]):
                return False
        return True

    async def _cancel_quietly(self, notification_id: str, trigger_only: bool = True) -> bool:
        try:
            if trigger_only:
                await self._notifications.cancel_trigger_notification(notification_id)
            else:
                await self._notifications.cancel_notification(notification_id)
        except NotificationNotFoundError:
            return False
        return True

    # Timer warnings

    async def schedule_timer_warnings(
        self,
        session_id: str,
        activity_name: str,
        expected_minutes: Optional[float],
        start_time: datetime,
    ) -> list[str]:
        """Install the lead-time warning and the time's-up alert that are still ahead.

        Returns the keys that were installed.
        """

        if not expected_minutes or expected_minutes <= 0:
            return []

        warnings = TimerWarningSet(
            session_id=session_id,
            activity_name=activity_name,
            expected_minutes=expected_minutes,
            start_time=start_time,
            lead_minutes=self.config.timer_warning_lead_minutes,
        )
        now = self.now()
        installed: list[str] = []
        try:
            if warnings.warn_at > now:
                installed.append(
                    await self._notifications.create_trigger_notification(
                        _warning_notification(warnings), Trigger(timestamp=warnings.warn_at)
                    )
                )
            if warnings.due_at > now:
                installed.append(
                    await self._notifications.create_trigger_notification(
                        _timeup_notification(warnings), Trigger(timestamp=warnings.due_at)
                    )
                )
        except Exception:
            logger.exception("Failed to schedule timer warnings for session %s", session_id)
        return installed

    async def cancel_timer_warnings(self, session_id: str) -> None:
        for key in (timer_warning_key(session_id), timer_timeup_key(session_id)):
            try:
                await self._cancel_quietly(key, trigger_only=False)
            except Exception:
                logger.exception("Failed to cancel timer notification %s", key)

    # Inactivity reminder

    async def _resolve_inactivity_minutes(self, override_interval_minutes: Optional[int]) -> Optional[int]:
        if not await self._all_enabled(SETTING_NOTIFICATIONS_ENABLED, SETTING_NO_TIMER_REMINDER_ENABLED):
            logger.debug("Inactivity reminder disabled by settings")
            return None

        if await self._sessions.get_running_sessions():
            logger.debug("Inactivity reminder skipped: a session is running")
            return None

        if override_interval_minutes is not None and override_interval_minutes > 0:
            minutes = int(override_interval_minutes)
        else:
            minutes = await self._settings.get_setting_number(
                SETTING_NO_TIMER_REMINDER_MINUTES, self.config.default_inactivity_minutes
            )
        if minutes <= 0:
            logger.debug("Inactivity reminder skipped: interval is %s", minutes)
            return None
        return minutes

    async def reconcile_inactivity(
        self, has_running_timers: bool, override_interval_minutes: Optional[int] = None
    ) -> Optional[datetime]:
        """Bring the single inactivity reminder in line with settings and timers.

        ``has_running_timers`` is the caller's view and only short-circuits;
        the session query decides before anything is installed. Returns the
        fire time of the installed reminder, or None when none is pending.
        """

        if has_running_timers:
            await self.stop_inactivity_reminder()
            return None

        try:
            minutes = await self._resolve_inactivity_minutes(override_interval_minutes)
            if minutes is None:
                self.current_interval_minutes = None
                await self._cancel_quietly(INACTIVITY_NOTIFICATION_ID)
                return None

            fire_at = self.now() + timedelta(minutes=minutes)
            await self._cancel_quietly(INACTIVITY_NOTIFICATION_ID)
            await self._notifications.create_trigger_notification(
                inactivity_notification(interval_minutes=minutes),
                Trigger(timestamp=fire_at, exact=True),
            )
        except Exception:
            logger.exception("Failed to reconcile the inactivity reminder")
            return None

        self.current_interval_minutes = minutes
        logger.info("Inactivity reminder set for %s (%d min)", fire_at.isoformat(timespec="minutes"), minutes)
        return fire_at

    async def stop_inactivity_reminder(self) -> None:
        self.current_interval_minutes = None
        try:
            await self._cancel_quietly(INACTIVITY_NOTIFICATION_ID)
        except Exception:
            logger.exception("Failed to cancel the inactivity reminder")

    async def handle_inactivity_delivered(self) -> Optional[datetime]:
        """Schedule the next nudge after one was delivered, re-reading the interval."""

        return await self.reconcile_inactivity(False)

    # Routine start reminders

    async def _clear_routine_triggers(self) -> int:
        scheduled = await self._notifications.get_trigger_notifications()
        cleared = 0
        for entry in scheduled:
            if not entry.notification_id.startswith(ROUTINE_NOTIFICATION_PREFIX):
                continue
            if await self._cancel_quietly(entry.notification_id, trigger_only=False):
                cleared += 1
        return cleared

    async def rebuild_routine_reminders(self) -> list[str]:
        """Tear down every routine start reminder and install the current set.

        Returns the installed keys.
        """

        try:
            if not await self._all_enabled(SETTING_NOTIFICATIONS_ENABLED, SETTING_REMINDER_ROUTINE_START):
                cleared = await self._clear_routine_triggers()
                logger.debug("Routine reminders disabled; cleared %d", cleared)
                return []

            routine_triggers = collapse_routine_schedules(await self._routines.get_routine_schedules())
            await self._clear_routine_triggers()
            if not routine_triggers:
                return []

            now = self.now()
            installed = []
            for routine_trigger in routine_triggers:
                trigger = Trigger(
                    timestamp=next_occurrence(routine_trigger.time_of_day, routine_trigger.day_of_week, now),
                    repeat=routine_trigger.repeat,
                    exact=True,
                )
                installed.append(
                    await self._notifications.create_trigger_notification(
                        _routine_notification(routine_trigger), trigger
                    )
                )
        except Exception:
            logger.exception("Failed to rebuild routine reminders")
            return []

        logger.info("Installed %d routine start reminders", len(installed))
        return installed
