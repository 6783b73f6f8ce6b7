"""
Base model configuration for SQLAlchemy ORM.

Provides the declarative base and the abstract model every table
inherits from.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Deterministic constraint names keep migrations reviewable
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Root SQLAlchemy base class."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class BaseModel(Base):
    """
    Abstract base model with common methods.
    """

    __abstract__ = True

    def to_dict(self, exclude: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Convert model instance to a JSON-friendly dictionary.

        Args:
            exclude: List of column names to exclude
        """
        exclude = exclude or []
        result = {}

        for column in self.__table__.columns:
            if column.key in exclude:
                continue
            value = getattr(self, column.key)

            if isinstance(value, datetime):
                result[column.key] = value.isoformat()
            elif isinstance(value, UUID):
                result[column.key] = str(value)
            elif isinstance(value, Decimal):
                result[column.key] = str(value)
            elif isinstance(value, Enum):
                result[column.key] = value.value
            else:
                result[column.key] = value

        return result

    def __repr__(self) -> str:
        ident = getattr(self, "id", None)
        return f"<{self.__class__.__name__}(id={ident})>"
