"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "TimestampMixin",
    "ApiResponse",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All application-facing schemas inherit from this to ensure
    consistent behaviour.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseCreateSchema(BaseSchema):
    """Base for request payloads; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")


class BaseResponseSchema(BaseSchema, TimestampMixin):
    """Base for entity responses built from ORM objects."""


class ApiResponse(BaseSchema):
    """Envelope returned by every REST endpoint."""

    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
