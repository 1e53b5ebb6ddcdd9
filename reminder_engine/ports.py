"""Ports consumed by the scheduler.

Settings, sessions and routines are read-only views over the app's stores.
The notification port is the platform's trigger store, addressed by key.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Optional

from reminder_engine.schema import (
    Channel,
    EventHandler,
    Notification,
    RoutineSchedule,
    RunningSession,
    ScheduledNotification,
    Trigger,
)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def decode_boolean(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("true", "1")


def decode_number(value: Optional[str], default: int) -> int:
    """Decode a leading integer, so ``"10 min"`` reads as 10."""

    if value is None:
        return default
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else default


class SettingsPort(ABC):
    """Read-only access to string-encoded user preferences."""

    @abstractmethod
    async def get_setting(self, key: str) -> Optional[str]:
        """Return the raw stored value, or None when the key is unset."""

    async def get_setting_boolean(self, key: str, default: bool) -> bool:
        return decode_boolean(await self.get_setting(key), default)

    async def get_setting_number(self, key: str, default: int) -> int:
        return decode_number(await self.get_setting(key), default)


class SessionPort(ABC):
    @abstractmethod
    async def get_running_sessions(self) -> list[RunningSession]:
        """Return every session currently running; empty when idle."""


class RoutinePort(ABC):
    @abstractmethod
    async def get_routine_schedules(self) -> list[RoutineSchedule]:
        """Return start-time rows for active routines that have items."""


class NotificationPort(ABC):
    """Platform notification store.

    Installing a trigger under an existing key replaces it. Cancelling an
    unknown key raises ``NotificationNotFoundError``.
    """

    @abstractmethod
    async def create_channel(self, channel: Channel) -> None:
        pass

    @abstractmethod
    async def create_trigger_notification(self, notification: Notification, trigger: Trigger) -> str:
        """Install a future notification and return its key."""

    @abstractmethod
    async def display_notification(self, notification: Notification) -> str:
        """Show a notification immediately and return its key."""

    @abstractmethod
    async def cancel_trigger_notification(self, notification_id: str) -> None:
        """Remove a pending trigger, leaving any displayed copy alone."""

    @abstractmethod
    async def cancel_notification(self, notification_id: str) -> None:
        """Remove both the displayed notification and any pending trigger."""

    @abstractmethod
    async def get_trigger_notifications(self) -> list[ScheduledNotification]:
        pass

    @abstractmethod
    async def cancel_all_notifications(self) -> None:
        pass

    @abstractmethod
    async def request_permission(self) -> bool:
        pass

    @abstractmethod
    def on_foreground_event(self, handler: EventHandler) -> None:
        pass

    @abstractmethod
    def on_background_event(self, handler: EventHandler) -> None:
        pass
