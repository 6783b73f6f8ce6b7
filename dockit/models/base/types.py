"""
Custom SQLAlchemy types for specialized data handling.

Money columns with fixed precision, timezone-aware UTC timestamps that
behave the same on PostgreSQL and SQLite, and string-backed enums.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Type

from sqlalchemy import DateTime, Enum as SQLEnum, Numeric, TypeDecorator


class MoneyType(TypeDecorator):
    """
    Money type with fixed precision (2 decimal places).
    """

    impl = Numeric(12, 2)
    cache_ok = True

    def process_bind_param(self, value: Optional[Decimal], dialect) -> Optional[Decimal]:
        """Validate and round monetary value."""
        if value is None:
            return value

        if not isinstance(value, Decimal):
            value = Decimal(str(value))

        return value.quantize(Decimal('0.01'))

    def process_result_value(self, value, dialect) -> Optional[Decimal]:
        if value is None:
            return value
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return value.quantize(Decimal('0.01'))


class UTCDateTime(TypeDecorator):
    """
    Timestamp stored in UTC and always returned timezone-aware.

    SQLite has no timezone support, so values are stored there as naive UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def enum_column(enum_cls: Type[Enum], name: str) -> SQLEnum:
    """String-backed enum storing member values (``'processing'``), not names."""
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=32,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )
