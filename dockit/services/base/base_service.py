"""
Base service class providing common functionality for all services.
"""

from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from dockit.core.exceptions import BaseAppException, ErrorCode
from dockit.core.logging import get_logger
from dockit.services.base.notification_dispatcher import (
    LoggingNotificationDispatcher,
    NotificationDispatcher,
    NotificationEvent,
)
from dockit.services.base.service_result import ErrorSeverity, ServiceError, ServiceResult


class BaseService:
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    - Post-commit notifications
    """

    def __init__(self, db_session: Session, notifier: Optional[NotificationDispatcher] = None):
        """
        Initialize base service.

        Args:
            db_session: SQLAlchemy database session
            notifier: Notification collaborator, logging-only by default
        """
        self.db: Session = db_session
        self.notifier: NotificationDispatcher = notifier or LoggingNotificationDispatcher()
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        severity: ErrorSeverity = ErrorSeverity.CRITICAL,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with comprehensive logging.

        Application exceptions are expected rejections and are logged at
        WARNING; anything else is a defect and is logged with a traceback.
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }

        if additional_context:
            context.update(additional_context)

        if isinstance(exception, BaseAppException):
            context["error_code"] = exception.error_code.value
            self._logger.warning(f"{operation} rejected: {exception.message}", extra=context)
            return ServiceResult.from_app_exception(exception)

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )

        return ServiceResult.failure(
            ServiceError(
                code=self._map_exception_to_error_code(exception),
                message=f"Failed to {operation}",
                details={
                    "error": str(exception),
                    "entity_ref": str(entity_ref) if entity_ref is not None else None,
                },
                severity=severity,
            )
        )

    def _map_exception_to_error_code(self, exception: Exception) -> ErrorCode:
        exception_mapping = {
            StaleDataError: ErrorCode.CONCURRENT_MODIFICATION,
            ValueError: ErrorCode.VALIDATION_ERROR,
            SQLAlchemyError: ErrorCode.DATABASE_ERROR,
        }

        for exc_type, error_code in exception_mapping.items():
            if isinstance(exception, exc_type):
                return error_code

        return ErrorCode.INTERNAL_ERROR

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.repository.create(entity)
                # automatic commit on success, rollback on exception
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception:
            self._rollback()
            raise

    def _commit(self) -> None:
        """Commit the current transaction with error handling."""
        try:
            self.db.commit()
            self._logger.debug("Transaction committed successfully")
        except Exception as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, suppressing rollback errors."""
        try:
            self.db.rollback()
            self._logger.debug("Transaction rolled back")
        except SQLAlchemyError as e:
            # Rollback errors must not mask the original error
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    def _notify(
        self,
        event: NotificationEvent,
        recipient_id: Any,
        title: str,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Send a notification after commit; delivery failures never fail the operation."""
        try:
            self.notifier.notify(event, str(recipient_id), title, message, payload or {})
        except Exception as e:
            self._logger.warning(
                f"Notification delivery failed: {e}",
                extra={"event": event.value, "recipient_id": str(recipient_id)},
            )
