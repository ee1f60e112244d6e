"""DTOs for transactional email."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    """Rendered email ready for the relay."""

    to: str
    subject: str
    html: str
    text: str = ""
