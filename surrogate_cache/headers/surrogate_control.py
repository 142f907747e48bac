from ..utils import absint
from .base import BaseHeader


class SurrogateControlHeader(BaseHeader):
    """
    Tells the CDN how long to keep the page.

    Renders as "Surrogate-Control: max-age=<seconds>".
    """

    header_name = "Surrogate-Control"

    def __init__(self, seconds: int) -> None:
        super().__init__()
        self._seconds = absint(seconds)

    def get_seconds(self) -> int:
        return self._seconds

    def set_seconds(self, seconds: int) -> int:
        self._check_mutable()
        self._seconds = absint(seconds)
        return self._seconds

    def get_value(self) -> str:
        return f"max-age={self._seconds}"
