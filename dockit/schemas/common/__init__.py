from dockit.schemas.common.base import (
    ApiResponse,
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    TimestampMixin,
)
from dockit.schemas.common.enums import *  # noqa: F401,F403
from dockit.schemas.common.enums import __all__ as _enum_names

__all__ = [
    "ApiResponse",
    "BaseCreateSchema",
    "BaseResponseSchema",
    "BaseSchema",
    "TimestampMixin",
    *_enum_names,
]
