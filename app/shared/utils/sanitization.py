"""Input sanitization for user-provided listing text and storage paths."""

import re
from typing import Any, ClassVar

import nh3


class InputSanitizer:
    """Strip markup from free text and validate identifiers.

    Listing titles and descriptions are rendered by other clients and in
    HTML emails, so markup is removed before values are written upstream.
    """

    ALLOWED_TAGS: ClassVar[set[str]] = set()
    IDENTIFIER_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_-]+$")
    FILENAME_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"^[a-zA-Z0-9_.-]+$")

    @classmethod
    def sanitize_html(cls, value: str) -> str:
        """Remove all HTML tags with nh3 (strict by default)."""
        if not value:
            return value
        return nh3.clean(value, tags=cls.ALLOWED_TAGS, attributes={})

    @classmethod
    def sanitize_identifier(cls, value: str) -> str:
        """Return value if it is alphanumeric with underscore/hyphen.

        Raises:
            ValueError: If format is invalid.
        """
        if not value or not cls.IDENTIFIER_PATTERN.match(value):
            raise ValueError("Invalid identifier format")
        return value

    @classmethod
    def sanitize_storage_path(cls, path: str) -> str:
        """Validate an object path of '/'-separated safe segments.

        Rejects empty segments, '.' and '..' so a path cannot escape its prefix.

        Raises:
            ValueError: If any segment is unsafe.
        """
        segments = path.split("/")
        for segment in segments:
            if segment in ("", ".", "..") or not cls.FILENAME_PATTERN.match(segment):
                raise ValueError(f"Invalid storage path: {path!r}")
        return path

    @classmethod
    def sanitize_dict(cls, data: dict[str, Any], max_depth: int = 20) -> dict[str, Any]:
        """Recursively strip markup from string values in a dict.

        Raises:
            ValueError: If nesting exceeds max_depth.
        """
        if max_depth <= 0:
            raise ValueError("Maximum recursion depth exceeded or invalid max_depth")
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, str):
                sanitized[key] = cls.sanitize_html(value)
            elif isinstance(value, dict):
                sanitized[key] = cls.sanitize_dict(value, max_depth=max_depth - 1)
            elif isinstance(value, list):
                sanitized[key] = [
                    cls.sanitize_html(v) if isinstance(v, str) else v for v in value
                ]
            else:
                sanitized[key] = value
        return sanitized

