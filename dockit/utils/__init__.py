from dockit.utils.date_utils import (
    UTC,
    now_utc,
    resolve_now,
    to_utc,
    utc_date,
)
from dockit.utils.string_utils import clean_text, generate_reference, is_blank

__all__ = [
    "UTC",
    "now_utc",
    "resolve_now",
    "to_utc",
    "utc_date",
    "clean_text",
    "generate_reference",
    "is_blank",
]
