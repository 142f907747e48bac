from ..utils import absint
from .base import BaseHeader

STALE_WHILE_REVALIDATE = "stale-while-revalidate"
STALE_IF_ERROR = "stale-if-error"


class CacheControlHeader(BaseHeader):
    """
    A single Cache-Control staleness directive, "<directive>=<seconds>".

    Each directive is its own header instance.
    """

    header_name = "Cache-Control"

    def __init__(self, seconds: int, directive: str) -> None:
        super().__init__()
        self._seconds = absint(seconds)
        self._directive = directive

    def get_seconds(self) -> int:
        return self._seconds

    def set_seconds(self, seconds: int) -> int:
        self._check_mutable()
        self._seconds = absint(seconds)
        return self._seconds

    def get_directive(self) -> str:
        return self._directive

    def get_value(self) -> str:
        return f"{self._directive}={self._seconds}"

    def __repr__(self) -> str:
        return f"<CacheControlHeader {self.get_value()}>"


class MergedCacheControlHeader(BaseHeader):
    """
    Several Cache-Control directives sent as one comma separated header.

    Sending it finalizes every member header.
    """

    header_name = "Cache-Control"

    def __init__(self, headers: list[CacheControlHeader]) -> None:
        super().__init__()
        self.headers = list(headers)

    def should_send(self) -> bool:
        return bool(self.headers)

    def get_value(self) -> str:
        return ", ".join(header.get_value() for header in self.headers)

    def send(self, sink):
        record = super().send(sink)
        if record is not None:
            for header in self.headers:
                header._sent = record
        return record
