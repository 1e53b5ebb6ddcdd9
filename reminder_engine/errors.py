"""Exceptions raised by notification platform adapters."""


class NotificationError(Exception):
    """Base class for failures reported by the notification platform."""


class NotificationNotFoundError(NotificationError):
    """Raised when cancelling a key the platform does not know about."""

    def __init__(self, key: str):
        super().__init__(f"No notification with id '{key}'")
        self.key = key


class ChannelNotFoundError(NotificationError):
    """Raised when a notification targets a channel that was never created."""

    def __init__(self, channel_id: str):
        super().__init__(f"Unknown notification channel '{channel_id}'")
        self.channel_id = channel_id
