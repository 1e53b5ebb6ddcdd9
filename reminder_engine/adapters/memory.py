"""In-memory implementations of every scheduler port.

Used by the preview tooling and the test suite in place of the app's stores
and the device notification platform.
"""

from __future__ import annotations

import inspect
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from reminder_engine.errors import ChannelNotFoundError, NotificationNotFoundError
from reminder_engine.ports import NotificationPort, RoutinePort, SessionPort, SettingsPort
from reminder_engine.schema import (
    Channel,
    DeliveryEvent,
    EventHandler,
    EventType,
    Notification,
    RoutineSchedule,
    RunningSession,
    ScheduledNotification,
    Trigger,
)

logger = logging.getLogger(__name__)


class ManualClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


def encode_setting(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class InMemorySettings(SettingsPort):
    def __init__(self, values: Optional[dict] = None):
        self._values = {key: encode_setting(value) for key, value in (values or {}).items()}

    async def get_setting(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value) -> None:
        self._values[key] = encode_setting(value)


class InMemorySessions(SessionPort):
    def __init__(self, sessions: Iterable[RunningSession] = ()):
        self._sessions = {session.session_id: session for session in sessions}

    async def get_running_sessions(self) -> list[RunningSession]:
        return list(self._sessions.values())

    def start(self, session: RunningSession) -> None:
        self._sessions[session.session_id] = session

    def stop(self, session_id: str) -> Optional[RunningSession]:
        return self._sessions.pop(session_id, None)


class InMemoryRoutines(RoutinePort):
    def __init__(self, schedules: Iterable[RoutineSchedule] = ()):
        self.schedules = list(schedules)

    async def get_routine_schedules(self) -> list[RoutineSchedule]:
        return list(self.schedules)


class InMemoryNotificationCenter(NotificationPort):
    """Trigger store that mimics a device notification platform.

    Triggers are keyed by notification id, so installing the same id twice
    keeps only the latest. Delivering a recurring trigger re-arms it one
    interval later; one-shot triggers are removed before handlers run.
    """

    def __init__(self, permission_granted: bool = True):
        self.channels: dict[str, Channel] = {}
        self.triggers: dict[str, ScheduledNotification] = {}
        self.displayed: dict[str, Notification] = {}
        self.permission_granted = permission_granted
        self._foreground_handlers: list[EventHandler] = []
        self._background_handlers: list[EventHandler] = []

    async def create_channel(self, channel: Channel) -> None:
        self.channels[channel.channel_id] = channel

    def _require_channel(self, notification: Notification) -> None:
        if notification.channel_id not in self.channels:
            raise ChannelNotFoundError(notification.channel_id)

    async def create_trigger_notification(self, notification: Notification, trigger: Trigger) -> str:
        self._require_channel(notification)
        self.triggers[notification.notification_id] = ScheduledNotification(notification, trigger)
        return notification.notification_id

    async def display_notification(self, notification: Notification) -> str:
        self._require_channel(notification)
        self.displayed[notification.notification_id] = notification
        return notification.notification_id

    async def cancel_trigger_notification(self, notification_id: str) -> None:
        if self.triggers.pop(notification_id, None) is None:
            raise NotificationNotFoundError(notification_id)

    async def cancel_notification(self, notification_id: str) -> None:
        removed_trigger = self.triggers.pop(notification_id, None)
        removed_display = self.displayed.pop(notification_id, None)
        if removed_trigger is None and removed_display is None:
            raise NotificationNotFoundError(notification_id)

    async def get_trigger_notifications(self) -> list[ScheduledNotification]:
        return list(self.triggers.values())

    async def cancel_all_notifications(self) -> None:
        self.triggers.clear()
        self.displayed.clear()

    async def request_permission(self) -> bool:
        return self.permission_granted

    def on_foreground_event(self, handler: EventHandler) -> None:
        self._foreground_handlers.append(handler)

    def on_background_event(self, handler: EventHandler) -> None:
        self._background_handlers.append(handler)

    def pending_ids(self, prefix: str = "") -> list[str]:
        return sorted(key for key in self.triggers if key.startswith(prefix))

    async def deliver(self, notification_id: str, background: bool = False) -> DeliveryEvent:
        """Fire a pending trigger now and dispatch the delivery event."""

        scheduled = self.triggers.get(notification_id)
        if scheduled is None:
            raise NotificationNotFoundError(notification_id)

        interval = scheduled.trigger.repeat.interval
        if interval is None:
            del self.triggers[notification_id]
        else:
            scheduled.trigger.timestamp = scheduled.trigger.timestamp + interval

        logger.debug("Delivering %s", notification_id)
        self.displayed[notification_id] = scheduled.notification
        event = DeliveryEvent(EventType.DELIVERED, scheduled.notification)
        handlers = self._background_handlers if background else self._foreground_handlers
        for handler in list(handlers):
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        return event

    async def deliver_due(self, now: datetime, background: bool = False) -> list[str]:
        """Deliver every trigger due at or before ``now``, earliest first."""

        delivered = []
        due = sorted(
            (s for s in self.triggers.values() if s.trigger.timestamp <= now),
            key=lambda s: (s.trigger.timestamp, s.notification_id),
        )
        for scheduled in due:
            if self.triggers.get(scheduled.notification_id) is not scheduled:
                continue
            await self.deliver(scheduled.notification_id, background=background)
            delivered.append(scheduled.notification_id)
        return delivered
