"""
Core infrastructure: configuration, logging, exceptions and database access.
"""

from dockit.core.config import Settings, get_settings, settings
from dockit.core.exceptions import (
    BaseAppException,
    BusinessRuleViolation,
    ConcurrentModificationError,
    ErrorCode,
    ResourceNotFoundError,
)
from dockit.core.logging import get_logger

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "BaseAppException",
    "BusinessRuleViolation",
    "ConcurrentModificationError",
    "ErrorCode",
    "ResourceNotFoundError",
    "get_logger",
]
