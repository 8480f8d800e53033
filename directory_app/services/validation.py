"""
Input checks for administrator-managed records.

All checks are local: they run before any write and raise ValidationError
naming the offending field.
"""

from typing import Optional
from urllib.parse import urlsplit

from directory_app.config import settings
from directory_app.errors import ValidationError

CATEGORY_NAME_MAX = 50
CATEGORY_DESCRIPTION_MAX = 500
TOOL_NAME_MAX = 100
URL_SCHEMES = ("http", "https")


def require_text(field: str, value: Optional[str], max_length: Optional[int] = None) -> str:
    """Return value stripped; reject blank or over-long input."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field, f"{field.capitalize()} must not be empty")
    if max_length is not None and len(cleaned) > max_length:
        raise ValidationError(field, f"{field.capitalize()} must be at most {max_length} characters")
    return cleaned


def optional_text(field: str, value: Optional[str], max_length: int) -> Optional[str]:
    if value is None:
        return None
    if len(value) > max_length:
        raise ValidationError(field, f"{field.capitalize()} must be at most {max_length} characters")
    return value


def absolute_url(field: str, value: Optional[str]) -> str:
    """Accept only full URLs including scheme and host, e.g. https://example.com."""
    cleaned = require_text(field, value)
    try:
        parts = urlsplit(cleaned)
    except ValueError:
        parts = None
    if parts is None or parts.scheme.lower() not in URL_SCHEMES or not parts.netloc:
        raise ValidationError(
            field,
            "URL must be a complete address including http:// or https://",
        )
    return cleaned


def reserved_labels():
    """Names the catalog already uses for its built-in buckets."""
    return {
        label.lower()
        for label in (
            settings.all_tools_bucket,
            settings.favorites_bucket,
            settings.uncategorized_label,
        )
    }


def validate_category(name: Optional[str], description: Optional[str]):
    name = require_text("name", name, CATEGORY_NAME_MAX)
    if name.lower() in reserved_labels():
        raise ValidationError("name", f"\"{name}\" is reserved by the catalog")
    return name, optional_text("description", description, CATEGORY_DESCRIPTION_MAX)


def validate_tool(name: Optional[str], url: Optional[str], category_id: Optional[str]):
    name = require_text("name", name, TOOL_NAME_MAX)
    if not category_id:
        raise ValidationError("category_id", "A category must be selected")
    return name, absolute_url("url", url)
