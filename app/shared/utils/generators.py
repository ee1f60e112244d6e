"""ID and value generators (CUIDs for object names and row ids, one-time codes)."""

import secrets

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def object_name(extension: str | None) -> str:
    """Return a fresh storage object name, keeping a normalized file extension."""
    ext = (extension or "").lower().lstrip(".")
    if ext and ext.isalnum() and len(ext) <= 5:
        return f"{generate_cuid()}.{ext}"
    return generate_cuid()


def verification_code(digits: int = 6) -> str:
    """Random numeric one-time code without a leading zero."""
    low = 10 ** (digits - 1)
    return str(low + secrets.randbelow(9 * low))
