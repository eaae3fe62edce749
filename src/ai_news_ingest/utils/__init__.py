"""Text and date helpers shared across the pipeline."""

from .common import (
    clamp_text,
    parse_datetime_utc,
    safe_id_from_name,
    sanitize_text,
    strip_cdata,
    struct_time_to_iso,
    to_iso_date,
    word_count,
)

__all__ = [
    "clamp_text",
    "parse_datetime_utc",
    "safe_id_from_name",
    "sanitize_text",
    "strip_cdata",
    "struct_time_to_iso",
    "to_iso_date",
    "word_count",
]
