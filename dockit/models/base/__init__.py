from dockit.models.base.base_model import Base, BaseModel
from dockit.models.base.mixins import TimestampMixin, UUIDMixin
from dockit.models.base.types import MoneyType, UTCDateTime, enum_column

__all__ = [
    "Base",
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    "MoneyType",
    "UTCDateTime",
    "enum_column",
]
