"""Delivery listener driving the inactivity reminder's self-renewal."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from reminder_engine.config import INACTIVITY_NOTIFICATION_ID
from reminder_engine.ports import NotificationPort
from reminder_engine.scheduler import TriggerScheduler
from reminder_engine.schema import DeliveryEvent, EventType

logger = logging.getLogger(__name__)


class ReminderState(Enum):
    IDLE = "idle"
    PENDING = "pending"


class DeliveryListener:
    """Re-arms the inactivity reminder each time it is delivered.

    The reminder has one live state, PENDING. A delivery recomputes it from
    current settings and sessions and either re-enters PENDING or drops to
    IDLE. Timer and routine notifications need no follow-up and are ignored.
    """

    def __init__(self, notifications: NotificationPort, scheduler: TriggerScheduler):
        self._notifications = notifications
        self._scheduler = scheduler
        self._registered = False
        self._active = False
        self.state = ReminderState.IDLE
        self.next_fire_at: Optional[datetime] = None

    @property
    def registered(self) -> bool:
        return self._registered

    def register(self) -> bool:
        """Subscribe to foreground and background events; returns False if already done."""

        if self._registered:
            self._active = True
            return False
        self._notifications.on_foreground_event(self.handle_event)
        self._notifications.on_background_event(self.handle_event)
        self._registered = True
        self._active = True
        logger.debug("Delivery listener registered")
        return True

    def unregister(self) -> None:
        # The platform offers no unsubscribe; stay subscribed but go quiet.
        self._active = False

    async def handle_event(self, event: DeliveryEvent) -> None:
        if not self._active:
            return
        if event.event_type is not EventType.DELIVERED:
            return
        if event.notification.notification_id != INACTIVITY_NOTIFICATION_ID:
            return

        self.next_fire_at = await self._scheduler.handle_inactivity_delivered()
        self.state = ReminderState.PENDING if self.next_fire_at else ReminderState.IDLE
        logger.debug("Inactivity reminder delivered; state is now %s", self.state.value)
