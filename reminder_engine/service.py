"""Composition root for the notification subsystem.

``NotificationService`` wires the scheduler and the delivery listener to one
set of ports and gives the rest of the app a single object to call from its
timer, settings and routine flows.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from uuid import uuid4

from reminder_engine.channels import setup_channels
from reminder_engine.config import INACTIVITY_NOTIFICATION_ID, TIMER_CHANNEL_ID, SchedulerConfig
from reminder_engine.errors import NotificationNotFoundError
from reminder_engine.listener import DeliveryListener
from reminder_engine.ports import NotificationPort, RoutinePort, SessionPort, SettingsPort
from reminder_engine.scheduler import Clock, TriggerScheduler, inactivity_notification
from reminder_engine.schema import Importance, Notification, RunningSession

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        notifications: NotificationPort,
        settings: SettingsPort,
        sessions: SessionPort,
        routines: RoutinePort,
        clock: Clock = datetime.now,
        config: Optional[SchedulerConfig] = None,
    ):
        self.notifications = notifications
        self.sessions = sessions
        self.scheduler = TriggerScheduler(notifications, settings, sessions, routines, clock=clock, config=config)
        self.listener = DeliveryListener(notifications, self.scheduler)
        self.initialized = False

    async def init(self) -> None:
        """Start-up sequence: channels, permission, listener, then a full resync.

        Triggers may have been lost across a reboot, so every keyed trigger is
        recomputed from the stores.
        """

        await self.setup_channels()
        if not await self.request_permissions():
            logger.warning("Notification permission not granted; triggers may not be shown")
        self.register_delivery_listener()
        self.initialized = True

        try:
            running = await self.sessions.get_running_sessions()
        except Exception:
            logger.exception("Could not read running sessions during start-up")
            running = []

        for session in running:
            await self.scheduler.schedule_timer_warnings(
                session.session_id, session.activity_name, session.expected_minutes, session.start_time
            )
        await self.scheduler.reconcile_inactivity(bool(running))
        await self.scheduler.rebuild_routine_reminders()

    async def shutdown(self) -> None:
        """Stop reacting to deliveries. Installed triggers stay with the platform."""

        self.listener.unregister()
        self.scheduler.current_interval_minutes = None
        self.initialized = False

    async def setup_channels(self) -> list[str]:
        return await setup_channels(self.notifications)

    def register_delivery_listener(self) -> bool:
        return self.listener.register()

    async def request_permissions(self) -> bool:
        try:
            return await self.notifications.request_permission()
        except Exception:
            logger.exception("Permission request failed")
            return False

    # Scheduler passthroughs

    async def schedule_timer_warnings(
        self, session_id: str, activity_name: str, expected_minutes: Optional[float], start_time: datetime
    ) -> list[str]:
        return await self.scheduler.schedule_timer_warnings(session_id, activity_name, expected_minutes, start_time)

    async def cancel_timer_warnings(self, session_id: str) -> None:
        await self.scheduler.cancel_timer_warnings(session_id)

    async def reconcile_inactivity(
        self, has_running_timers: bool, override_interval_minutes: Optional[int] = None
    ) -> Optional[datetime]:
        return await self.scheduler.reconcile_inactivity(has_running_timers, override_interval_minutes)

    async def stop_inactivity_reminder(self) -> None:
        await self.scheduler.stop_inactivity_reminder()

    async def rebuild_routine_reminders(self) -> list[str]:
        return await self.scheduler.rebuild_routine_reminders()

    # App lifecycle hooks

    async def on_timer_started(self, session: RunningSession) -> list[str]:
        installed = await self.scheduler.schedule_timer_warnings(
            session.session_id, session.activity_name, session.expected_minutes, session.start_time
        )
        await self.cancel_inactivity_notification()
        await self.show_timer_start_notification(session.activity_name, session.session_id)
        return installed

    async def on_timer_stopped(self, session_id: str) -> Optional[datetime]:
        await self.scheduler.cancel_timer_warnings(session_id)
        return await self.scheduler.reconcile_inactivity(False)

    async def on_settings_changed(self, override_interval_minutes: Optional[int] = None) -> None:
        await self.scheduler.reconcile_inactivity(False, override_interval_minutes)
        await self.scheduler.rebuild_routine_reminders()

    async def on_routine_changed(self) -> list[str]:
        """Call after any routine or routine item mutation."""

        return await self.scheduler.rebuild_routine_reminders()

    # Immediate notifications

    async def show_timer_start_notification(self, activity_name: str, session_id: Optional[str] = None) -> None:
        notification = Notification(
            notification_id=f"timer-start-{session_id or uuid4().hex}",
            title="Timer Started",
            body=f'Tracking "{activity_name}"',
            channel_id=TIMER_CHANNEL_ID,
            importance=Importance.DEFAULT,
        )
        try:
            await self.notifications.display_notification(notification)
        except Exception:
            logger.exception("Failed to show timer start notification")

    def set_inactivity_interval(self, minutes: int) -> None:
        self.scheduler.current_interval_minutes = minutes

    async def show_inactivity_notification(self) -> None:
        minutes = self.scheduler.current_interval_minutes or self.scheduler.config.default_inactivity_minutes
        plural = "" if minutes == 1 else "s"
        body = f"You haven't tracked any activity in the last {minutes} minute{plural}. Start a timer?"
        try:
            await self.notifications.display_notification(inactivity_notification(body, minutes))
        except Exception:
            logger.exception("Failed to show inactivity notification")

    async def cancel_inactivity_notification(self) -> None:
        """Remove the inactivity reminder whether it is displayed, pending or both."""

        self.scheduler.current_interval_minutes = None
        try:
            await self.notifications.cancel_notification(INACTIVITY_NOTIFICATION_ID)
        except NotificationNotFoundError:
            pass
        except Exception:
            logger.exception("Failed to cancel inactivity notification")

    async def cancel_all_notifications(self) -> None:
        await self.notifications.cancel_all_notifications()
