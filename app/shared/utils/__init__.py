"""Shared utilities: datetime, generators, sanitization."""

from app.shared.utils.datetime import ensure_utc, to_iso_utc, utc_now, utc_now_iso
from app.shared.utils.generators import generate_cuid, object_name
from app.shared.utils.sanitization import InputSanitizer

__all__ = [
    "generate_cuid",
    "object_name",
    "utc_now",
    "utc_now_iso",
    "ensure_utc",
    "to_iso_utc",
    "InputSanitizer",
]
