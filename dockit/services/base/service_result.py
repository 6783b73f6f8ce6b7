"""
Result type returned by every service operation.

Services never raise across their boundary. A rule rejection or lookup miss
becomes a failed ``ServiceResult`` carrying a ``ServiceError`` whose code maps
to an HTTP status; the API layer renders it with ``ServiceError.to_dict``.
"""

from dataclasses import dataclass, field as dc_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from dockit.core.exceptions import BaseAppException, ErrorCode, status_code_for


class ErrorSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ServiceError:
    """
    Structured failure.

    Expected rejections (business rules, missing entities) are WARNING;
    unexpected failures are CRITICAL and carry the exception text in
    ``details``.
    """

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    timestamp: datetime = dc_field(default_factory=_utcnow)

    @property
    def status_code(self) -> int:
        return status_code_for(self.code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details,
            "field": self.field,
            "timestamp": self.timestamp.isoformat(),
        }


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Success or failure of a service operation.

    ``metadata`` carries side values that are not part of the entity, such
    as the generated payment transaction id of a premium activation.
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = dc_field(default_factory=dict)

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message, metadata=metadata or {})

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def from_app_exception(
        cls,
        exception: BaseAppException,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
    ) -> "ServiceResult[TData]":
        details = dict(exception.details or {})
        return cls.failure(
            ServiceError(
                code=exception.error_code,
                message=exception.message,
                severity=severity,
                details=details or None,
                field=details.get("field"),
            )
        )

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    def unwrap(self) -> TData:
        """Return the data of a successful result, or raise ``ValueError``."""
        if not self.is_success:
            code = self.error.code.value if self.error else "UNKNOWN"
            message = self.error.message if self.error else "no error recorded"
            raise ValueError(f"Cannot unwrap failed result [{code}]: {message}")
        return self.data

    def __bool__(self) -> bool:
        return self.is_success

    def __repr__(self) -> str:
        if self.is_success:
            return f"ServiceResult(success: {self.message or type(self.data).__name__})"
        return f"ServiceResult(failure: {self.error_code.value if self.error_code else '?'})"


__all__ = [
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
