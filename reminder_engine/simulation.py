"""Deterministic previews of the trigger set for a snapshot."""

from __future__ import annotations

import asyncio
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional

from reminder_engine.adapters.memory import (
    InMemoryNotificationCenter,
    InMemoryRoutines,
    InMemorySessions,
    InMemorySettings,
    ManualClock,
)
from reminder_engine.config import INACTIVITY_NOTIFICATION_ID, ROUTINE_NOTIFICATION_PREFIX
from reminder_engine.schema import ScheduledNotification, Snapshot
from reminder_engine.service import NotificationService


def build_service(snapshot: Snapshot, clock: ManualClock) -> tuple[NotificationService, InMemoryNotificationCenter]:
    """Wire a service to in-memory ports loaded from ``snapshot``."""

    center = InMemoryNotificationCenter()
    service = NotificationService(
        notifications=center,
        settings=InMemorySettings(snapshot.settings),
        sessions=InMemorySessions(snapshot.running_sessions),
        routines=InMemoryRoutines(snapshot.routines),
        clock=clock,
    )
    return service, center


def _kind(notification_id: str) -> str:
    if notification_id == INACTIVITY_NOTIFICATION_ID:
        return "inactivity"
    if notification_id.startswith(ROUTINE_NOTIFICATION_PREFIX):
        return "routine"
    return "timer"


def describe_trigger(scheduled: ScheduledNotification) -> dict:
    return {
        "id": scheduled.notification_id,
        "kind": _kind(scheduled.notification_id),
        "title": scheduled.notification.title,
        "body": scheduled.notification.body,
        "channel": scheduled.notification.channel_id,
        "fire_at": scheduled.trigger.timestamp.isoformat(timespec="minutes"),
        "repeat": scheduled.trigger.repeat.value,
    }


def _describe_all(center: InMemoryNotificationCenter) -> list[dict]:
    ordered = sorted(center.triggers.values(), key=lambda s: (s.trigger.timestamp, s.notification_id))
    return [describe_trigger(scheduled) for scheduled in ordered]


def preview_schedule(snapshot: Snapshot, now: Optional[datetime] = None) -> dict:
    """Return the triggers a fresh start-up would install for ``snapshot``."""

    clock = ManualClock(now or snapshot.now or datetime.now().replace(second=0, microsecond=0))

    async def run() -> list[dict]:
        service, center = build_service(snapshot, clock)
        await service.init()
        return _describe_all(center)

    triggers = asyncio.run(run())
    counts = Counter(trigger["kind"] for trigger in triggers)
    return {
        "now": clock().isoformat(timespec="minutes"),
        "triggers": triggers,
        "counts": {kind: counts.get(kind, 0) for kind in ("timer", "inactivity", "routine")},
    }


def simulate_deliveries(
    snapshot: Snapshot,
    hours: float = 24,
    now: Optional[datetime] = None,
    max_deliveries: int = 500,
) -> list[dict]:
    """Play deliveries forward for ``hours``, letting listeners react to each one.

    Returns one record per delivered notification, in delivery order.
    """

    clock = ManualClock(now or snapshot.now or datetime.now().replace(second=0, microsecond=0))
    horizon = clock() + timedelta(hours=hours)

    async def run() -> list[dict]:
        service, center = build_service(snapshot, clock)
        await service.init()
        delivered: list[dict] = []
        while len(delivered) < max_deliveries and center.triggers:
            fire_at = min(s.trigger.timestamp for s in center.triggers.values())
            if fire_at > horizon:
                break
            clock.set(max(fire_at, clock()))
            # Recurring triggers are re-armed on delivery, so describe them first.
            records = {
                scheduled.notification_id: describe_trigger(scheduled)
                for scheduled in center.triggers.values()
                if scheduled.trigger.timestamp <= clock()
            }
            for notification_id in await center.deliver_due(clock()):
                delivered.append(records[notification_id])
        del delivered[max_deliveries:]
        await service.shutdown()
        return delivered

    return asyncio.run(run())


def simulate_inactivity_chain(snapshot: Snapshot, firings: int = 3, now: Optional[datetime] = None) -> list[str]:
    """Deliver the inactivity reminder ``firings`` times and return each fire time."""

    clock = ManualClock(now or snapshot.now or datetime.now().replace(second=0, microsecond=0))

    async def run() -> list[str]:
        service, center = build_service(snapshot, clock)
        await service.init()
        fired: list[str] = []
        for _ in range(firings):
            pending = center.triggers.get(INACTIVITY_NOTIFICATION_ID)
            if pending is None:
                break
            clock.set(pending.trigger.timestamp)
            fired.append(clock().isoformat(timespec="minutes"))
            await center.deliver(INACTIVITY_NOTIFICATION_ID)
        return fired

    return asyncio.run(run())
