import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

from .backends.base import NO_RESULT, BasePurgeBackend, PurgeKind, PurgeResult
from .conf import get_setting, load_callable
from .purge import PurgeArgs, Purger, default_purge_args
from .related import RelatedUrlsFunc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollectionResult:
    """Aggregated outcome of a related purge, one result per target."""

    url: str
    results: list[PurgeResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def failures(self) -> list[PurgeResult]:
        return [result for result in self.results if not result.ok]

    @property
    def successes(self) -> list[PurgeResult]:
        return [result for result in self.results if result.ok]


class PurgeRequestCollection:
    """
    Purges a URL together with every URL related to it.

    The related URLs come from an injected strategy (see surrogate_cache.related).
    Every target is purged even when an earlier one fails, so a partial failure
    is always reported in full. Targets are independent, which lets them be
    dispatched from a thread pool with ``max_workers`` > 1.

    Example:
        collection = PurgeRequestCollection(
            "https://example.com/blog/post/",
            related_urls=parent_paths,
        )
        collection.purge_related()
        collection.get_result().ok
    """

    def __init__(
        self,
        url: str,
        purge_args: PurgeArgs = None,
        related_urls: Optional[RelatedUrlsFunc] = None,
        target_overrides: Optional[Mapping[str, dict[str, Any]]] = None,
        backend: Optional[BasePurgeBackend] = None,
        max_workers: int = 1,
    ) -> None:
        self.url = url
        self.purge_args = {
            **default_purge_args(),
            "related": True,
            **(purge_args or {}),
        }
        self.related_urls = related_urls or load_callable(get_setting("related_urls"))
        self.target_overrides = dict(target_overrides or {})
        self.backend = backend
        self.max_workers = max(1, max_workers)
        self.targets = self._build_targets()
        self.purgers: list[Purger] = []
        self.result: Union[CollectionResult, PurgeResult] = NO_RESULT

    def _build_targets(self) -> list[str]:
        targets = [self.url]
        for url in self.related_urls(self.url):
            if url and url not in targets:
                targets.append(url)
        return targets

    def get_purge_args(self) -> dict[str, Any]:
        """Options used for every purge, before per-target overrides."""
        return dict(self.purge_args)

    def get_target_args(
        self,
        target: str,
        purge_args: PurgeArgs = None,
    ) -> dict[str, Any]:
        return {
            **self.purge_args,
            **(purge_args or {}),
            **self.target_overrides.get(target, {}),
        }

    def _purge_one(self, job: tuple[Purger, str, dict[str, Any]]) -> PurgeResult:
        purger, target, args = job
        return purger.purge(PurgeKind.URL, target, args)

    def purge_related(self, purge_args: PurgeArgs = None) -> CollectionResult:
        jobs = [
            (Purger(self.backend), target, self.get_target_args(target, purge_args))
            for target in self.targets
        ]
        self.purgers = [purger for purger, _, _ in jobs]

        if self.max_workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(self._purge_one, jobs))
        else:
            results = [self._purge_one(job) for job in jobs]

        self.result = CollectionResult(self.url, results)
        if not self.result.ok:
            logger.warning(
                "%d of %d related purges for %s failed",
                len(self.result.failures),
                len(results),
                self.url,
            )
        return self.result

    def get_result(self) -> Union[CollectionResult, PurgeResult]:
        """The aggregated result, or NO_RESULT before purge_related is called."""
        return self.result
