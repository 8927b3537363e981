"""Field types and normalizers shared by the request schemas."""

from typing import Annotated

from pydantic import StringConstraints


# Trimmed, non-empty, bounded strings
TaskTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
ProjectName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=320)]


def normalize_description(value: str | None) -> str | None:
    """Trim a description; blank becomes None."""
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None
