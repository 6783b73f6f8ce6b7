"""
SQLAlchemy model mixins for reusable functionality.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dockit.models.base.types import UTCDateTime
from dockit.utils.date_utils import now_utc


class UUIDMixin:
    """
    Mixin for UUID primary key.

    Provides UUID-based primary key with automatic
    generation using uuid4.
    """

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
        comment="Unique identifier (UUID v4)",
    )


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.

    Provides created_at and updated_at fields with
    timezone-aware UTC values.
    """

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=now_utc,
        index=True,
        comment="Record creation timestamp (UTC)",
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
        comment="Record last update timestamp (UTC)",
    )

