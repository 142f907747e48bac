from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

PURGE_TYPE_SOFT = "soft"
PURGE_TYPE_INSTANT = "instant"


class PurgeKind(str, Enum):
    URL = "url"
    SURROGATE_KEY = "surrogate-key"
    ALL = "all"


class PurgeStatus(str, Enum):
    SUCCESS = "success"
    # The API answered, but did not confirm the purge.
    FAILED = "failed"
    # The call failed at the network or HTTP status level.
    ERROR = "error"
    # A whole-cache purge was attempted without permission; nothing was sent.
    REFUSED = "refused"
    NO_RESULT = "no-result"


@dataclass
class PurgeRequest:
    """A single invalidation operation against the CDN."""

    kind: PurgeKind
    target: str = ""
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def purge_type(self) -> str:
        return self.options.get("purge-type", PURGE_TYPE_SOFT)

    @property
    def soft(self) -> bool:
        return self.purge_type == PURGE_TYPE_SOFT


@dataclass(frozen=True)
class PurgeResult:
    """The outcome of a purge request."""

    status: PurgeStatus
    kind: Optional[PurgeKind] = None
    target: str = ""
    status_code: Optional[int] = None
    detail: str = ""
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is PurgeStatus.SUCCESS

    @classmethod
    def success(
        cls,
        request: PurgeRequest,
        status_code: Optional[int] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> "PurgeResult":
        return cls(
            PurgeStatus.SUCCESS,
            request.kind,
            request.target,
            status_code=status_code,
            payload=payload or {},
        )

    @classmethod
    def failed(
        cls,
        request: PurgeRequest,
        detail: str,
        status_code: Optional[int] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> "PurgeResult":
        return cls(
            PurgeStatus.FAILED,
            request.kind,
            request.target,
            status_code=status_code,
            detail=detail,
            payload=payload or {},
        )

    @classmethod
    def error(
        cls,
        request: PurgeRequest,
        detail: str,
        status_code: Optional[int] = None,
    ) -> "PurgeResult":
        return cls(
            PurgeStatus.ERROR,
            request.kind,
            request.target,
            status_code=status_code,
            detail=detail,
        )

    @classmethod
    def refused(cls, request: PurgeRequest, detail: str) -> "PurgeResult":
        return cls(PurgeStatus.REFUSED, request.kind, request.target, detail=detail)


NO_RESULT = PurgeResult(PurgeStatus.NO_RESULT, detail="No purge has been issued")


class BasePurgeBackend(ABC):
    """
    Abstract base class for purge backends.

    All backends must implement purge_url, purge_surrogate_key and purge_all.
    Implementations report failures through the returned PurgeResult and must
    not raise for network or API errors.
    """

    def __init__(self, **options: Any) -> None:
        self.options = options

    @abstractmethod
    def purge_url(self, request: PurgeRequest) -> PurgeResult:
        """
        Invalidate the cached copy of a single URL.

        Args:
            request: PurgeRequest whose target is the URL

        Returns:
            The outcome of the call
        """

    @abstractmethod
    def purge_surrogate_key(self, request: PurgeRequest) -> PurgeResult:
        """
        Invalidate everything tagged with a surrogate key.

        Args:
            request: PurgeRequest whose target is the key

        Returns:
            The outcome of the call
        """

    @abstractmethod
    def purge_all(self, request: PurgeRequest) -> PurgeResult:
        """
        Invalidate the whole service.

        Permission checks happen before this is called.
        """

    def send(self, request: PurgeRequest) -> PurgeResult:
        """Dispatch a request to the method for its kind."""
        if request.kind is PurgeKind.URL:
            return self.purge_url(request)
        if request.kind is PurgeKind.SURROGATE_KEY:
            return self.purge_surrogate_key(request)
        return self.purge_all(request)

    def purge_surrogate_keys(
        self,
        keys: list[str],
        options: Optional[dict[str, Any]] = None,
    ) -> list[PurgeResult]:
        """
        Purge several surrogate keys.

        Default implementation sends one request per key.
        Backends may override for batch operations.
        """
        return [
            self.purge_surrogate_key(
                PurgeRequest(PurgeKind.SURROGATE_KEY, key, dict(options or {}))
            )
            for key in keys
        ]
