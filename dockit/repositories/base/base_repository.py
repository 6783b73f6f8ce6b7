"""
Base repository with standardized CRUD operations and error handling.

Repositories only flush; the calling service owns the transaction and
decides when to commit or roll back.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.sql import Select

from dockit.core.exceptions import (
    ConcurrentModificationError,
    DatabaseError,
    DuplicateEntryError,
    ResourceNotFoundError,
)
from dockit.core.logging import get_logger
from dockit.models.base import BaseModel
from dockit.schemas.common.enums import ActorType
from dockit.utils.date_utils import now_utc

logger = get_logger(__name__)

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=BaseModel)


class AuditContext:
    """Who is performing an operation, recorded on audit rows."""

    def __init__(
        self,
        actor_id: Optional[str] = None,
        actor_type: ActorType = ActorType.SYSTEM,
        ip_address: Optional[str] = None,
        action: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.actor_id = actor_id
        self.actor_type = actor_type
        self.ip_address = ip_address
        self.action = action
        self.metadata = metadata or {}
        self.timestamp: datetime = now_utc()

    @classmethod
    def system(cls, action: Optional[str] = None) -> "AuditContext":
        return cls(actor_id=None, actor_type=ActorType.SYSTEM, action=action)

    @property
    def actor(self) -> str:
        """Identifier written to ``changed_by`` / ``processed_by`` columns."""
        return self.actor_id or self.actor_type.value

    def __repr__(self) -> str:
        return f"AuditContext(actor={self.actor}, type={self.actor_type.value})"


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.

    Provides create/read/update helpers and maps SQLAlchemy failures onto
    application exceptions.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # ==================== Create Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add an entity and flush it so generated values are available.

        Raises:
            DuplicateEntryError: If a unique constraint rejects the row
        """
        try:
            self.db.add(entity)
            self.db.flush()
            logger.debug(f"Created {self.model.__name__}", extra={"entity_id": str(entity.id)})
            return entity
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateEntryError(
                f"{self.model.__name__} already exists",
                details={"constraint": str(e.orig)},
            ) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(f"Create failed: {str(e)}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: UUID) -> Optional[ModelType]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Find by ID failed: {str(e)}") from e

    def get_by_id(self, id: UUID) -> ModelType:
        """
        Get entity by ID or raise.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if entity is None:
            raise ResourceNotFoundError(self.model.__name__, str(id))
        return entity

    # ==================== Update Operations ====================

    def update(
        self,
        entity: ModelType,
        data: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> ModelType:
        """
        Apply field changes to a loaded entity and flush.

        Args:
            entity: Loaded entity
            data: Column values to set
            expected_version: Version the caller read; mismatch fails fast

        Raises:
            ConcurrentModificationError: On version mismatch or stale write
        """
        self.check_version(entity, expected_version)

        for key, value in data.items():
            if hasattr(entity, key):
                setattr(entity, key, value)

        self.flush()
        return entity

    def check_version(self, entity: ModelType, expected_version: Optional[int]) -> None:
        if expected_version is None or not hasattr(entity, "version"):
            return
        if entity.version != expected_version:
            raise ConcurrentModificationError(
                details={
                    "entity": self.model.__name__,
                    "expected_version": expected_version,
                    "current_version": entity.version,
                }
            )

    def flush(self) -> None:
        """Flush pending changes; version conflicts surface here."""
        try:
            self.db.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError(details={"entity": self.model.__name__}) from e

    # ==================== Pagination ====================

    def paginate(self, stmt: Select, page: int = 1, page_size: int = 20) -> Tuple[List[Any], int]:
        """
        Run an ordered select one page at a time.

        Returns:
            Tuple of (items on the page, total matching rows)
        """
        page = max(page, 1)
        total = self.db.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
        items = list(self.db.scalars(stmt.offset((page - 1) * page_size).limit(page_size)))
        return items, total
