"""Notification channel registry."""

from __future__ import annotations

import logging

from reminder_engine.config import INACTIVITY_CHANNEL_ID, ROUTINE_CHANNEL_ID, TIMER_CHANNEL_ID
from reminder_engine.ports import NotificationPort
from reminder_engine.schema import Channel, Importance

logger = logging.getLogger(__name__)

CHANNELS = (
    Channel(
        channel_id=TIMER_CHANNEL_ID,
        name="Timer Notifications",
        description="Notifications for timer warnings and completions",
        importance=Importance.HIGH,
        vibration=True,
    ),
    Channel(
        channel_id=INACTIVITY_CHANNEL_ID,
        name="Inactivity Notifications",
        description="Reminders when no timer is running",
        importance=Importance.DEFAULT,
    ),
    Channel(
        channel_id=ROUTINE_CHANNEL_ID,
        name="Routine Notifications",
        description="Notifications for scheduled routine starts",
        importance=Importance.HIGH,
    ),
)


async def setup_channels(notifications: NotificationPort) -> list[str]:
    """Create the timer, inactivity and routine channels.

    Creating a channel that already exists updates it in place, so this is
    safe to call on every start.
    """

    for channel in CHANNELS:
        await notifications.create_channel(channel)
    logger.debug("Registered %d notification channels", len(CHANNELS))
    return [channel.channel_id for channel in CHANNELS]
