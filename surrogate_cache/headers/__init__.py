from .base import BaseHeader, HeaderSink, ResponseSink, SentHeader
from .cache_control import (
    STALE_IF_ERROR,
    STALE_WHILE_REVALIDATE,
    CacheControlHeader,
    MergedCacheControlHeader,
)
from .surrogate_control import SurrogateControlHeader
from .surrogate_keys import SurrogateKeysHeader

__all__ = [
    "BaseHeader",
    "CacheControlHeader",
    "HeaderSink",
    "MergedCacheControlHeader",
    "ResponseSink",
    "STALE_IF_ERROR",
    "STALE_WHILE_REVALIDATE",
    "SentHeader",
    "SurrogateControlHeader",
    "SurrogateKeysHeader",
]
