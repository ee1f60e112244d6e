"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import (
    ensure_utc,
    generate_cuid,
    object_name,
    to_iso_utc,
    utc_now,
    utc_now_iso,
)

__all__ = [
    "generate_cuid",
    "object_name",
    "utc_now",
    "utc_now_iso",
    "ensure_utc",
    "to_iso_utc",
]
