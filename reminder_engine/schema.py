"""Core data schema for sessions, routines and scheduled notifications."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, IntEnum
from typing import Any, Callable, Optional, Union


class Importance(IntEnum):
    """Delivery importance of a channel or notification."""

    LOW = 2
    DEFAULT = 3
    HIGH = 4


class RepeatFrequency(Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"

    @property
    def interval(self) -> Optional[timedelta]:
        if self is RepeatFrequency.DAILY:
            return timedelta(days=1)
        if self is RepeatFrequency.WEEKLY:
            return timedelta(days=7)
        return None


class EventType(Enum):
    DELIVERED = "delivered"
    PRESS = "press"
    DISMISSED = "dismissed"


@dataclass(frozen=True)
class TimeOfDay:
    hours: int
    minutes: int

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes


@dataclass
class RunningSession:
    """A timer session that has started and not stopped yet."""

    session_id: str
    activity_name: str
    start_time: datetime
    expected_minutes: Optional[float] = None
    source: str = "manual"


@dataclass(frozen=True)
class TimerWarningSet:
    """The two deadline instants derived from a running session."""

    session_id: str
    activity_name: str
    expected_minutes: float
    start_time: datetime
    lead_minutes: float = 5

    @property
    def due_at(self) -> datetime:
        return self.start_time + timedelta(minutes=self.expected_minutes)

    @property
    def warn_at(self) -> datetime:
        return self.due_at - timedelta(minutes=self.lead_minutes)


@dataclass
class RoutineSchedule:
    """Start-time row for one active routine, as returned by the routine query."""

    routine_id: str
    routine_name: str
    routine_type: str
    scheduled_time: Optional[str]
    day_filter: Union[str, int, None] = "all"


@dataclass(frozen=True)
class RoutineTrigger:
    """One collapsed routine start reminder, before installation."""

    routine_id: str
    routine_name: str
    routine_type: str
    time_of_day: TimeOfDay
    day_of_week: Optional[int]

    @property
    def repeat(self) -> RepeatFrequency:
        return RepeatFrequency.DAILY if self.day_of_week is None else RepeatFrequency.WEEKLY


@dataclass(frozen=True)
class Channel:
    channel_id: str
    name: str
    description: str
    importance: Importance
    sound: Optional[str] = "default"
    vibration: bool = False


@dataclass
class Notification:
    notification_id: str
    title: str
    body: str
    channel_id: str
    importance: Importance = Importance.DEFAULT
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class Trigger:
    """When a notification fires, and whether it re-arms afterwards."""

    timestamp: datetime
    repeat: RepeatFrequency = RepeatFrequency.NONE
    exact: bool = False


@dataclass
class ScheduledNotification:
    notification: Notification
    trigger: Trigger

    @property
    def notification_id(self) -> str:
        return self.notification.notification_id


@dataclass(frozen=True)
class DeliveryEvent:
    event_type: EventType
    notification: Notification


EventHandler = Callable[[DeliveryEvent], Any]


@dataclass
class Snapshot:
    """Everything the scheduler reads, captured at one instant."""

    settings: dict[str, Any] = field(default_factory=dict)
    running_sessions: list[RunningSession] = field(default_factory=list)
    routines: list[RoutineSchedule] = field(default_factory=list)
    now: Optional[datetime] = None
