import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Protocol

from django.http import HttpResponseBase

from ..exceptions import HeaderAlreadySent, HeaderFinalizedError

logger = logging.getLogger(__name__)


class HeaderSink(Protocol):
    """Anything that can put a header line on the outgoing response."""

    def write_header(self, name: str, value: str) -> None:
        ...


class ResponseSink:
    """Header sink writing onto a Django response."""

    def __init__(self, response: HttpResponseBase) -> None:
        self.response = response

    def write_header(self, name: str, value: str) -> None:
        if self.response.closed:
            raise HeaderAlreadySent(
                f"Cannot send {name}: the response has already been transmitted"
            )
        self.response[name] = value


@dataclass(frozen=True)
class SentHeader:
    """Immutable record of a header line that was written to the response."""

    name: str
    value: str

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


class BaseHeader(ABC):
    """
    A directive that is emitted as a single response header line.

    Headers are mutable until they are sent. Sending consumes the header into a
    SentHeader record; any later mutation or second send is a lifecycle bug and
    raises.
    """

    header_name: str = ""

    def __init__(self) -> None:
        self._sent: Optional[SentHeader] = None

    def get_header_name(self) -> str:
        return self.header_name

    @abstractmethod
    def get_value(self) -> str:
        """Render the header value from the current state."""

    def render(self) -> str:
        return f"{self.get_header_name()}: {self.get_value()}"

    @property
    def sent(self) -> Optional[SentHeader]:
        return self._sent

    def should_send(self) -> bool:
        return True

    def send(self, sink: Optional[HeaderSink]) -> Optional[SentHeader]:
        """
        Write the header onto the response.

        Returns the sent record, or None when nothing was written (nothing to
        send, or no sink available).
        """
        if self._sent is not None:
            raise HeaderAlreadySent(f"{self.header_name} header was already sent")

        if not self.should_send():
            return None

        if sink is None:
            logger.warning(
                "No response available, %s header not sent", self.header_name
            )
            return None

        record = SentHeader(self.get_header_name(), self.get_value())
        sink.write_header(record.name, record.value)
        self._sent = record
        return record

    def _check_mutable(self) -> None:
        if self._sent is not None:
            raise HeaderFinalizedError(
                f"{self.header_name} header was already sent and can't be changed"
            )
