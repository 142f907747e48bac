from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from .utils import (
    absint,
    sanitize_api_key,
    sanitize_checkbox,
    sanitize_dotted_path,
    sanitize_dotted_paths,
    sanitize_slug,
    sanitize_timeout,
    sanitize_url,
)

if TYPE_CHECKING:
    from .backends.base import BasePurgeBackend

BUILTIN_BACKENDS = {
    "fastly": "surrogate_cache.backends.fastly.FastlyBackend",
    "locmem": "surrogate_cache.backends.locmem.LocMemBackend",
}


@dataclass(frozen=True)
class Setting:
    """A recognized setting with its default and the sanitizer applied to it."""

    name: str
    default: Any
    sanitizer: Callable[[Any], Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "default", self.sanitizer(self.default))

    def clean(self, value: Any) -> Any:
        return self.sanitizer(value)


def _register(*items: Setting) -> dict[str, Setting]:
    return {item.name: item for item in items}


REGISTERED_SETTINGS: dict[str, Setting] = _register(
    Setting("fastly_key", "", sanitize_api_key),
    Setting("fastly_service_id", "", sanitize_api_key),
    Setting("allow_purge_all", False, sanitize_checkbox),
    Setting("api_endpoint", "https://api.fastly.com/", sanitize_url),
    Setting("enable_stale_while_revalidate", True, sanitize_checkbox),
    Setting("stale_while_revalidate_ttl", 60 * 60 * 24, absint),  # 24 hours
    Setting("enable_stale_if_error", True, sanitize_checkbox),
    Setting("stale_if_error_ttl", 60 * 60 * 24, absint),  # 24 hours
    Setting("surrogate_control_ttl", 60 * 5, absint),  # 5 minutes
    Setting("default_purge_type", "soft", sanitize_slug),
    Setting("purge_backend", "fastly", sanitize_dotted_path),
    Setting("api_timeout", 10.0, sanitize_timeout),
    Setting(
        "key_sources",
        ["surrogate_cache.surrogates.surrogate_from_path"],
        sanitize_dotted_paths,
    ),
    Setting(
        "related_urls",
        "surrogate_cache.related.no_related_urls",
        sanitize_dotted_path,
    ),
    Setting("merge_cache_control", False, sanitize_checkbox),
)


def get_overrides() -> Mapping[str, Any]:
    """
    Get the persisted overrides from Django settings.

    Example settings.py:

        SURROGATE_CACHE = {
            "fastly_key": "...",
            "fastly_service_id": "...",
            "surrogate_control_ttl": 600,
            "enable_stale_if_error": False,
        }
    """
    return getattr(settings, "SURROGATE_CACHE", {})


class SettingsResolver:
    """
    Negotiates the effective value of every registered setting.

    An override wins over the default and is passed through the setting's
    sanitizer; otherwise the (already sanitized) default is used. All settings
    are resolved in one pass and memoized. Concurrent first reads may both
    resolve, with the same result.
    """

    def __init__(
        self,
        registry: Optional[Mapping[str, Setting]] = None,
        source: Callable[[], Mapping[str, Any]] = get_overrides,
    ) -> None:
        self.registry = REGISTERED_SETTINGS if registry is None else registry
        self.source = source
        self._resolved: Optional[dict[str, Any]] = None

    def resolve(self) -> dict[str, Any]:
        resolved = self._resolved
        if resolved is None:
            overrides = self.source() or {}
            resolved = {}
            for name, setting in self.registry.items():
                if name in overrides:
                    resolved[name] = setting.clean(overrides[name])
                else:
                    resolved[name] = setting.default
            self._resolved = resolved
        return resolved

    def get_setting(self, name: str) -> Any:
        return self.resolve().get(name, "")

    def clear(self) -> None:
        self._resolved = None


default_resolver = SettingsResolver()

_backend_cache: dict[str, "BasePurgeBackend"] = {}


def get_settings() -> dict[str, Any]:
    """Return a copy of every resolved setting."""
    return dict(default_resolver.resolve())


def get_setting(name: str) -> Any:
    """Get a single resolved setting. Unknown names give an empty string."""
    return default_resolver.get_setting(name)


def get_backend_class(backend_path: str) -> type:
    """Import and return backend class from dotted path."""
    if backend_path in BUILTIN_BACKENDS:
        backend_path = BUILTIN_BACKENDS[backend_path]

    try:
        return import_string(backend_path)
    except ImportError as e:
        raise ImproperlyConfigured(f"Unknown purge backend: {backend_path}") from e


def get_purge_backend(name: Optional[str] = None) -> "BasePurgeBackend":
    """
    Get the purge backend, by name or from the purge_backend setting.

    Backends are cached for reuse.
    """
    name = name or get_setting("purge_backend")
    if name in _backend_cache:
        return _backend_cache[name]

    backend = get_backend_class(name)()
    _backend_cache[name] = backend
    return backend


def load_callable(path: str) -> Callable:
    try:
        return import_string(path)
    except ImportError as e:
        raise ImproperlyConfigured(f"Could not import {path!r}") from e


def clear_settings_cache() -> None:
    """Forget resolved settings and backend instances. Useful for testing."""
    default_resolver.clear()
    _backend_cache.clear()
