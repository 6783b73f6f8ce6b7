"""
Shared FastAPI dependencies.

Route functions receive the request-scoped session, the notification
dispatcher and the caller's audit context from here:

    @router.post("/")
    def create(db: Session = Depends(deps.get_db), audit = Depends(deps.get_audit_context)):
        ...
"""

from typing import Optional

from fastapi import Header, Request

from dockit.core.database import get_db
from dockit.repositories.base.base_repository import AuditContext
from dockit.schemas.common.enums import ActorType
from dockit.services.base.notification_dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
)
from dockit.utils.string_utils import clean_text

_notifier = LoggingNotificationDispatcher()


def get_notifier() -> NotificationDispatcher:
    return _notifier


def get_audit_context(
    request: Request,
    x_actor_id: Optional[str] = Header(None),
    x_actor_type: ActorType = Header(ActorType.SYSTEM),
) -> AuditContext:
    """Actor identity forwarded by the gateway in X-Actor-Id / X-Actor-Type."""
    return AuditContext(
        actor_id=clean_text(x_actor_id),
        actor_type=x_actor_type,
        ip_address=request.client.host if request.client else None,
        metadata={"request_id": getattr(request.state, "request_id", None)},
    )


__all__ = ["get_db", "get_notifier", "get_audit_context"]
