"""
Django Surrogate Cache

Surrogate-Key, Surrogate-Control and Cache-Control headers for pages served
behind Fastly, and purging of the cached copies through the Fastly API.
"""

from .backends import NO_RESULT, PurgeKind, PurgeResult, PurgeStatus
from .collection import CollectionResult, PurgeRequestCollection
from .conf import get_setting, get_settings
from .decorators import cache_headers, surrogate_keys
from .exceptions import (
    HeaderAlreadySent,
    HeaderFinalizedError,
    PreconditionViolation,
    SurrogateCacheError,
)
from .headers import (
    CacheControlHeader,
    SurrogateControlHeader,
    SurrogateKeysHeader,
)
from .lifecycle import (
    CacheHeaders,
    HookRegistry,
    Phase,
    default_hooks,
    get_cache_headers,
)
from .purge import Purger, purge_all, purge_surrogate_key, purge_url
from .surrogates import (
    SurrogateKeySet,
    surrogate_from_model,
    surrogate_from_path,
    surrogate_from_query_params,
    surrogate_from_user,
    surrogate_from_view,
)

__version__ = "1.0.0"

__all__ = [
    # Settings
    "get_setting",
    "get_settings",
    # Headers
    "CacheControlHeader",
    "SurrogateControlHeader",
    "SurrogateKeysHeader",
    # Response lifecycle
    "CacheHeaders",
    "HookRegistry",
    "Phase",
    "default_hooks",
    "get_cache_headers",
    "cache_headers",
    "surrogate_keys",
    # Purging
    "Purger",
    "PurgeKind",
    "PurgeResult",
    "PurgeStatus",
    "NO_RESULT",
    "PurgeRequestCollection",
    "CollectionResult",
    "purge_url",
    "purge_surrogate_key",
    "purge_all",
    # Errors
    "SurrogateCacheError",
    "PreconditionViolation",
    "HeaderAlreadySent",
    "HeaderFinalizedError",
    # Surrogate key utilities
    "SurrogateKeySet",
    "surrogate_from_model",
    "surrogate_from_path",
    "surrogate_from_query_params",
    "surrogate_from_user",
    "surrogate_from_view",
]
