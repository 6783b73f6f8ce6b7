"""
Notification dispatch for lifecycle events.

Services call the dispatcher only after a successful commit. Delivery
channels (email, SMS, push) live outside this package; the default
dispatcher records each event in the structured event log.
"""

from enum import Enum
from typing import Any, Dict, List, Protocol, runtime_checkable

from dockit.core.logging import get_event_logger


class NotificationEvent(str, Enum):
    """Events vendors and users are told about."""

    VENDOR_VERIFIED = "vendor_verified"
    SETTLEMENT_COMPLETED = "settlement_completed"
    REFUND_PROCESSED = "refund_processed"
    REFUND_REJECTED = "refund_rejected"
    SUBSCRIPTION_UPGRADED = "subscription_upgraded"
    SUBSCRIPTION_RENEWED = "subscription_renewed"
    SUBSCRIPTION_EXTENDED = "subscription_extended"
    SUBSCRIPTION_MODIFIED = "subscription_modified"
    SUBSCRIPTION_EXPIRED = "subscription_expired"
    SUBSCRIPTION_EXPIRING_SOON = "subscription_expiring_soon"
    PREMIUM_ACTIVATED = "premium_activated"
    PREMIUM_EXTENDED = "premium_extended"
    PREMIUM_DEACTIVATED = "premium_deactivated"


@runtime_checkable
class NotificationDispatcher(Protocol):
    def notify(
        self,
        event: NotificationEvent,
        recipient_id: str,
        title: str,
        message: str,
        payload: Dict[str, Any],
    ) -> None:
        ...


class LoggingNotificationDispatcher:
    """Writes every notification to the event log."""

    def __init__(self, logger_name: str = "dockit.notifications"):
        self._events = get_event_logger(logger_name)

    def notify(
        self,
        event: NotificationEvent,
        recipient_id: str,
        title: str,
        message: str,
        payload: Dict[str, Any],
    ) -> None:
        self._events.info(
            "notification",
            notification_event=event.value,
            recipient_id=recipient_id,
            title=title,
            body=message,
            payload=payload,
        )


class RecordingNotificationDispatcher:
    """Keeps notifications in memory; used by tests and local tooling."""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []

    def notify(
        self,
        event: NotificationEvent,
        recipient_id: str,
        title: str,
        message: str,
        payload: Dict[str, Any],
    ) -> None:
        self.sent.append(
            {
                "event": event,
                "recipient_id": recipient_id,
                "title": title,
                "message": message,
                "payload": payload,
            }
        )

    def events(self) -> List[NotificationEvent]:
        return [item["event"] for item in self.sent]

    def clear(self) -> None:
        self.sent.clear()


__all__ = [
    "NotificationEvent",
    "NotificationDispatcher",
    "LoggingNotificationDispatcher",
    "RecordingNotificationDispatcher",
]
