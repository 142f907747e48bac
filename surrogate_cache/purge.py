import logging
from typing import Any, Optional, Union

from .backends.base import (
    NO_RESULT,
    BasePurgeBackend,
    PurgeKind,
    PurgeRequest,
    PurgeResult,
    PurgeStatus,
)
from .conf import get_purge_backend, get_setting
from .utils import sanitize_checkbox

logger = logging.getLogger(__name__)

PurgeArgs = Optional[dict[str, Any]]


def default_purge_args() -> dict[str, Any]:
    """Purge options as configured in settings, before per-call overrides."""
    return {
        "allow-all": get_setting("allow_purge_all"),
        "purge-type": get_setting("default_purge_type"),
    }


def log_result(result: PurgeResult) -> None:
    if result.ok:
        logger.info("Purged %s %s", result.kind.value, result.target or "*")
    elif result.status is PurgeStatus.REFUSED:
        logger.warning("Refused to purge %s: %s", result.kind.value, result.detail)
    else:
        logger.warning(
            "Purge of %s %s failed (%s, status=%s): %s",
            result.kind.value,
            result.target or "*",
            result.status.value,
            result.status_code,
            result.detail,
        )


class Purger:
    """
    Issues a single purge request and keeps its outcome.

    Expected failures never raise: a refused whole-cache purge, an API that
    doesn't confirm the purge and transport errors all come back as a
    PurgeResult. Nothing is retried, callers decide on a retry policy.
    """

    def __init__(self, backend: Optional[BasePurgeBackend] = None) -> None:
        self._backend = backend
        self.request: Optional[PurgeRequest] = None
        self.result: PurgeResult = NO_RESULT

    @property
    def backend(self) -> BasePurgeBackend:
        if self._backend is None:
            self._backend = get_purge_backend()
        return self._backend

    def get_purge_args(self, options: PurgeArgs = None) -> dict[str, Any]:
        return {**default_purge_args(), **(options or {})}

    def purge(
        self,
        kind: Union[PurgeKind, str],
        target: str = "",
        options: PurgeArgs = None,
    ) -> PurgeResult:
        kind = PurgeKind(kind)
        if kind is PurgeKind.ALL:
            target = ""

        self.request = PurgeRequest(kind, target, self.get_purge_args(options))

        if kind is PurgeKind.ALL and not sanitize_checkbox(
            self.request.options.get("allow-all")
        ):
            self.result = PurgeResult.refused(
                self.request, "Purging the whole cache is not allowed"
            )
        else:
            self.result = self.backend.send(self.request)

        log_result(self.result)
        return self.result

    def get_result(self) -> PurgeResult:
        return self.result


def purge_url(
    url: str,
    purge_args: PurgeArgs = None,
    backend: Optional[BasePurgeBackend] = None,
):
    """
    Purge a URL.

    With ``{"related": True}`` in purge_args the URL is expanded into its
    related URLs and every one of them is purged; the aggregated
    CollectionResult is returned instead of a single PurgeResult.
    """
    purge_args = purge_args or {}
    if purge_args.get("related") is True:
        from .collection import PurgeRequestCollection

        collection = PurgeRequestCollection(url, purge_args, backend=backend)
        collection.purge_related(collection.get_purge_args())
        return collection.get_result()

    purger = Purger(backend)
    purger.purge(PurgeKind.URL, url, purge_args)
    return purger.get_result()


def purge_surrogate_key(
    key: str,
    purge_args: PurgeArgs = None,
    backend: Optional[BasePurgeBackend] = None,
) -> PurgeResult:
    """Purge everything tagged with a surrogate key."""
    purger = Purger(backend)
    purger.purge(PurgeKind.SURROGATE_KEY, key, purge_args)
    return purger.get_result()


def purge_all(
    purge_args: PurgeArgs = None,
    backend: Optional[BasePurgeBackend] = None,
) -> PurgeResult:
    """
    Purge the whole cache.

    Refused unless allow_purge_all is enabled in settings or
    ``{"allow-all": True}`` is passed.
    """
    purger = Purger(backend)
    purger.purge(PurgeKind.ALL, "", purge_args)
    return purger.get_result()
