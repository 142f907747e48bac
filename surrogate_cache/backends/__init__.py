from .base import (
    NO_RESULT,
    BasePurgeBackend,
    PurgeKind,
    PurgeRequest,
    PurgeResult,
    PurgeStatus,
)
from .fastly import FastlyBackend
from .locmem import LocMemBackend

__all__ = [
    "BasePurgeBackend",
    "FastlyBackend",
    "LocMemBackend",
    "NO_RESULT",
    "PurgeKind",
    "PurgeRequest",
    "PurgeResult",
    "PurgeStatus",
]
