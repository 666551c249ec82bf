"""Notification fan-out for reservation and moderation events.

Delivery is fire-and-forget from the caller's point of view: a failing channel
is logged and never propagates back into the operation that triggered it.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)


class NotificationEvent(str, enum.Enum):
    NEW_USER_RESERVATION = "new_user_reservation"
    NEW_HOST_RESERVATION = "new_host_reservation"
    OFFICE_PENDING_APPROVAL = "office_pending_approval"
    USER_RESERVATION_STARTING = "user_reservation_starting"
    HOST_RESERVATION_STARTING = "host_reservation_starting"


@dataclass(slots=True)
class Notification:
    recipient_id: str
    event: NotificationEvent
    payload: dict[str, Any] = field(default_factory=dict)


Channel = Callable[[Notification], Awaitable[None]]


class NotificationDispatcher:
    """Deliver notifications to every registered channel."""

    def __init__(self, channels: Iterable[Channel] | None = None) -> None:
        self._channels: list[Channel] = list(channels or [])

    def register(self, channel: Channel) -> None:
        if channel not in self._channels:
            self._channels.append(channel)

    def unregister(self, channel: Channel) -> None:
        if channel in self._channels:
            self._channels.remove(channel)

    async def notify(
        self,
        recipients: Iterable[str],
        event: NotificationEvent,
        payload: dict[str, Any] | None = None,
    ) -> int:
        """Send ``event`` to each distinct recipient and return how many were addressed."""

        notifications = [
            Notification(recipient_id=recipient, event=event, payload=dict(payload or {}))
            for recipient in dict.fromkeys(recipients)
        ]
        if not notifications:
            return 0

        tasks = [channel(notification) for notification in notifications for channel in self._channels]
        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error("Notification channel failed for %s", event.value, exc_info=result)
        return len(notifications)


async def log_channel(notification: Notification) -> None:
    """Default channel: record the delivery in the application log."""

    logger.info(
        "Notify %s of %s %s",
        notification.recipient_id,
        notification.event.value,
        notification.payload,
    )


dispatcher = NotificationDispatcher([log_channel])
