from typing import Callable, Iterable, Optional, Union

from django.http import HttpRequest

from .utils import sanitize_surrogate_key

KeySource = Callable[[HttpRequest], Union[str, Iterable[str], None]]


class SurrogateKeySet:
    """
    Represents a set of surrogate keys for a cached response.

    Surrogate keys are tags that allow bulk invalidation of related cache entries.
    Keys keep the order they were first added in and are deduplicated after
    sanitization.
    """

    def __init__(self, keys: Optional[Iterable[str]] = None) -> None:
        self._keys: list[str] = []
        if isinstance(keys, str):
            keys = [keys]
        if keys:
            self.add(*keys)

    def add(self, *keys: str) -> "SurrogateKeySet":
        """Add one or more surrogate keys."""
        for key in keys:
            normalized = self._normalize_key(key)
            if normalized and normalized not in self._keys:
                self._keys.append(normalized)
        return self

    def _normalize_key(self, key: str) -> Optional[str]:
        """
        Normalize a surrogate key.

        - Strips every character outside a-z, A-Z, 0-9, "-" and "_"
        - Returns None for keys that end up empty
        """
        if key is None or key == "":
            return None
        normalized = sanitize_surrogate_key(key)
        return normalized if normalized else None

    @property
    def keys(self) -> list[str]:
        """Return list of surrogate keys."""
        return self._keys.copy()

    def __iter__(self):
        return iter(self._keys)

    def __len__(self):
        return len(self._keys)

    def __bool__(self):
        return bool(self._keys)


def collect_keys(
    sources: Iterable[KeySource],
    context: HttpRequest,
) -> SurrogateKeySet:
    """
    Run each key source against the current view and collect the keys.

    A source may return a single key, an iterable of keys, or None.
    """
    result = SurrogateKeySet()
    for source in sources:
        keys = source(context)
        if isinstance(keys, str):
            result.add(keys)
        elif keys:
            result.add(*keys)
    return result


def surrogate_from_path(request: HttpRequest) -> str:
    """
    Generate surrogate key from request path.

    Example: /api/products/123/ -> "path-api-products-123"
    """
    path = request.path.strip("/").replace("/", "-") or "root"
    return f"path-{path}"


def surrogate_from_view(view_name: str) -> str:
    """
    Create a surrogate key for a specific view name.

    Usage: keys=[surrogate_from_view("product_detail")]
    """
    return f"view-{view_name}"


def surrogate_from_model(
    model_name: str,
    pk: Optional[Union[str, int]] = None,
) -> str:
    """
    Create surrogate key for a model, optionally with specific PK.

    Usage:
        surrogate_from_model("Post")           -> "model-post"
        surrogate_from_model("Post", 5)        -> "model-post-5"
    """
    key = f"model-{model_name.lower()}"
    if pk is not None:
        key = f"{key}-{pk}"
    return key


def surrogate_from_user(request: HttpRequest) -> Optional[str]:
    """
    Generate surrogate key from authenticated user.

    Returns None for anonymous users.
    """
    user = getattr(request, "user", None)
    if user is not None and getattr(user, "is_authenticated", False):
        return f"user-{user.pk}"
    return None


def surrogate_from_query_params(
    request: HttpRequest,
    params: Optional[list[str]] = None,
) -> list[str]:
    """
    Generate surrogate keys from query parameters.

    Args:
        request: The HTTP request
        params: Specific params to include (None = all params)

    Example: ?category=shoes&brand=nike -> ["param-category-shoes", "param-brand-nike"]
    """
    keys = []
    target_params = params if params is not None else list(request.GET.keys())

    for param in target_params:
        value = request.GET.get(param)
        if value:
            keys.append(f"param-{param}-{value}")

    return keys
