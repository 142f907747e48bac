import re
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

SURROGATE_KEY_DISALLOWED = re.compile(r"[^a-zA-Z0-9_\-]")
API_KEY_DISALLOWED = re.compile(r"[^a-zA-Z0-9]")
SLUG_DISALLOWED = re.compile(r"[^a-z0-9_\-]")

DEFAULT_TIMEOUT = 10.0


def sanitize_surrogate_key(key: Any) -> str:
    """
    Restrict a surrogate key to a-z, A-Z, 0-9, "-" and "_".

    Anything else is stripped, so "abc def!" becomes "abcdef".
    """
    if key is None:
        return ""
    return SURROGATE_KEY_DISALLOWED.sub("", str(key))


def sanitize_api_key(value: Any) -> str:
    """Restrict a Fastly API key or service id to alphanumerics."""
    if value is None:
        return ""
    return API_KEY_DISALLOWED.sub("", str(value))


def sanitize_checkbox(value: Any) -> bool:
    return value in ("1", 1, "true", True)


def absint(value: Any) -> int:
    """Convert a value to a non-negative integer, 0 if it can't be converted."""
    try:
        return abs(int(value))
    except (TypeError, ValueError, OverflowError):
        try:
            return abs(int(float(value)))
        except (TypeError, ValueError, OverflowError):
            return 0


def sanitize_slug(value: Any) -> str:
    if value is None:
        return ""
    return SLUG_DISALLOWED.sub("", str(value).lower())


def sanitize_url(value: Any) -> str:
    """Return the URL unchanged if it validates, otherwise an empty string."""
    if not value:
        return ""
    value = str(value).strip()
    try:
        URLValidator(schemes=["http", "https"])(value)
    except ValidationError:
        return ""
    return value


def sanitize_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT
    return timeout if timeout > 0 else DEFAULT_TIMEOUT


def sanitize_dotted_path(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def sanitize_dotted_paths(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [path for path in (sanitize_dotted_path(v) for v in value) if path]
