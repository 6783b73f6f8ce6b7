from dockit.services.base.base_service import BaseService
from dockit.services.base.notification_dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    NotificationEvent,
    RecordingNotificationDispatcher,
)
from dockit.services.base.service_result import ErrorSeverity, ServiceError, ServiceResult

__all__ = [
    "BaseService",
    "ErrorSeverity",
    "LoggingNotificationDispatcher",
    "NotificationDispatcher",
    "NotificationEvent",
    "RecordingNotificationDispatcher",
    "ServiceError",
    "ServiceResult",
]
