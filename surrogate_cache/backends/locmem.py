from typing import Any, Iterable, Optional

from .base import BasePurgeBackend, PurgeRequest, PurgeResult

# Every request sent through a LocMemBackend, in order.
outbox: list[PurgeRequest] = []


class LocMemBackend(BasePurgeBackend):
    """
    Backend that records purges in memory instead of calling a CDN.

    Sent requests are appended to the module-level ``outbox`` list, the same
    way Django's locmem email backend collects mail.

    Options:
        fail_targets: Targets that should come back as transport errors
    """

    def __init__(
        self,
        fail_targets: Optional[Iterable[str]] = None,
        **options: Any,
    ) -> None:
        super().__init__(**options)
        self.fail_targets = set(fail_targets or ())

    def _record(self, request: PurgeRequest) -> PurgeResult:
        outbox.append(request)
        if request.target in self.fail_targets:
            return PurgeResult.error(
                request, detail="Simulated purge failure", status_code=503
            )
        return PurgeResult.success(
            request, status_code=200, payload={"status": "ok", "id": str(len(outbox))}
        )

    def purge_url(self, request: PurgeRequest) -> PurgeResult:
        return self._record(request)

    def purge_surrogate_key(self, request: PurgeRequest) -> PurgeResult:
        return self._record(request)

    def purge_all(self, request: PurgeRequest) -> PurgeResult:
        return self._record(request)
