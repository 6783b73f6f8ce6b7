"""
Custom Exceptions for the Dockit licensing core

This module defines the error codes and exception classes used by the
business rules, repositories and services.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    INVALID_STATE = "INVALID_STATE"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    DATABASE_ERROR = "DATABASE_ERROR"

    # Station premium
    ALREADY_ACTIVE = "ALREADY_ACTIVE"
    NOT_ACTIVE = "NOT_ACTIVE"

    # Vendor subscription
    NO_DURATION_SPECIFIED = "NO_DURATION_SPECIFIED"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    ALREADY_YEARLY = "ALREADY_YEARLY"
    SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"
    STATION_LIMIT_REACHED = "STATION_LIMIT_REACHED"

    # Settlement initiation
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    NOTHING_TO_SETTLE = "NOTHING_TO_SETTLE"
    SETTLEMENT_ALREADY_IN_PROGRESS = "SETTLEMENT_ALREADY_IN_PROGRESS"
    MISSING_BANK_DETAILS = "MISSING_BANK_DETAILS"

    # Settlement completion
    INVALID_REFERENCE = "INVALID_REFERENCE"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"

    # Refunds
    MISSING_TRANSACTION_ID = "MISSING_TRANSACTION_ID"
    REFUND_NOT_ELIGIBLE = "REFUND_NOT_ELIGIBLE"


# HTTP status used by the API layer for each error code
ERROR_STATUS_CODES: Dict[ErrorCode, int] = {
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.MISSING_REQUIRED_FIELD: 422,
    ErrorCode.NO_DURATION_SPECIFIED: 422,
    ErrorCode.INVALID_DATE_RANGE: 422,
    ErrorCode.INVALID_REFERENCE: 422,
    ErrorCode.MISSING_TRANSACTION_ID: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ALREADY_EXISTS: 409,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.CONCURRENT_MODIFICATION: 409,
    ErrorCode.ALREADY_ACTIVE: 409,
    ErrorCode.NOT_ACTIVE: 409,
    ErrorCode.ALREADY_YEARLY: 409,
    ErrorCode.ALREADY_COMPLETED: 409,
    ErrorCode.SETTLEMENT_ALREADY_IN_PROGRESS: 409,
}


def status_code_for(error_code: ErrorCode) -> int:
    """HTTP status for an error code, 400 for business rule rejections."""
    return ERROR_STATUS_CODES.get(error_code, 400)


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code or status_code_for(error_code)
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# General Application Exceptions
# ========================================

class ResourceNotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.NOT_FOUND, details)


class BusinessRuleViolation(BaseAppException):
    """Exception raised when a lifecycle or ledger rule rejects a transition"""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class ConcurrentModificationError(BaseAppException):
    """Exception raised when an optimistic-lock check fails"""

    def __init__(
        self,
        message: str = "Record was modified by another request; reload and retry",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorCode.CONCURRENT_MODIFICATION, details)


# ========================================
# Database Exceptions
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised for database-related errors"""

    def __init__(
        self,
        message: str = "Database operation failed",
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details)


class DuplicateEntryError(DatabaseError):
    """Exception raised when attempting to create duplicate entries"""

    def __init__(self, message: str = "Duplicate entry", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.ALREADY_EXISTS, details)


__all__ = [
    "ErrorCode",
    "ERROR_STATUS_CODES",
    "status_code_for",
    "BaseAppException",
    "ResourceNotFoundError",
    "BusinessRuleViolation",
    "ConcurrentModificationError",
    "DatabaseError",
    "DuplicateEntryError",
]
