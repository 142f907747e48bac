import logging
from enum import Enum
from typing import Callable, Iterable, Optional

from django.http import HttpRequest, HttpResponseBase

from .conf import get_setting, load_callable
from .exceptions import HeaderFinalizedError, PreconditionViolation
from .headers import (
    STALE_IF_ERROR,
    STALE_WHILE_REVALIDATE,
    CacheControlHeader,
    HeaderSink,
    MergedCacheControlHeader,
    SentHeader,
    SurrogateControlHeader,
    SurrogateKeysHeader,
)
from .surrogates import KeySource, collect_keys

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    EXTEND = "extend"
    PRE_SEND_KEYS = "pre_send_keys"
    POST_SEND_KEYS = "post_send_keys"
    PRE_SEND_SURROGATE_CONTROL = "pre_send_surrogate_control"
    POST_SEND_SURROGATE_CONTROL = "post_send_surrogate_control"
    PRE_SEND_CACHE_CONTROL = "pre_send_cache_control"
    POST_SEND_CACHE_CONTROL = "post_send_cache_control"


class State(Enum):
    COLLECTING = "collecting"
    EXTENSIBLE = "extensible"
    FINALIZED = "finalized"


Hook = Callable[["CacheHeaders"], None]


class HookRegistry:
    """
    Ordered callbacks for each lifecycle phase.

    Every callback receives the CacheHeaders of the response being finalized
    and may change it, as long as the header it touches hasn't been sent yet.

    Example:
        @default_hooks.on(Phase.PRE_SEND_KEYS)
        def drop_path_keys(headers):
            headers.set_keys(k for k in headers.get_keys() if not k.startswith("path-"))
    """

    def __init__(self) -> None:
        self._hooks: dict[Phase, list[Hook]] = {phase: [] for phase in Phase}

    def register(self, phase: Phase, hook: Hook) -> Hook:
        self._hooks[Phase(phase)].append(hook)
        return hook

    def unregister(self, phase: Phase, hook: Hook) -> None:
        hooks = self._hooks[Phase(phase)]
        if hook in hooks:
            hooks.remove(hook)

    def on(self, phase: Phase) -> Callable[[Hook], Hook]:
        def decorator(hook: Hook) -> Hook:
            return self.register(phase, hook)

        return decorator

    def get_hooks(self, phase: Phase) -> list[Hook]:
        return list(self._hooks[Phase(phase)])

    def run(self, phase: Phase, headers: "CacheHeaders") -> None:
        for hook in self.get_hooks(phase):
            hook(headers)


default_hooks = HookRegistry()


def default_key_sources() -> list[KeySource]:
    """Key sources configured in the key_sources setting."""
    return [load_callable(path) for path in get_setting("key_sources")]


class CacheHeaders:
    """
    The cache headers of a single response.

    Built fresh for every response and never shared. It moves through three
    states:

    - COLLECTING: the baseline keys are gathered from the key sources
    - EXTENSIBLE: views and hooks add or drop keys, change the TTL and
      register Cache-Control directives
    - FINALIZED: the headers were written, every further change raises
      HeaderFinalizedError

    Authenticated responses get no cache headers at all.
    """

    def __init__(
        self,
        ttl: int = 0,
        keys: Optional[Iterable[str]] = None,
        hooks: Optional[HookRegistry] = None,
        merge_cache_control: bool = False,
    ) -> None:
        self.surrogate_keys = SurrogateKeysHeader(keys)
        self.surrogate_control = SurrogateControlHeader(ttl)
        self.cache_control: list[CacheControlHeader] = []
        self.hooks = hooks if hooks is not None else default_hooks
        self.merge_cache_control = merge_cache_control
        self.state = State.COLLECTING
        self.sent: list[SentHeader] = []

    @classmethod
    def from_settings(cls, hooks: Optional[HookRegistry] = None) -> "CacheHeaders":
        """Start from the configured TTL and stale-* directives."""
        headers = cls(
            ttl=get_setting("surrogate_control_ttl"),
            hooks=hooks,
            merge_cache_control=get_setting("merge_cache_control"),
        )
        if get_setting("enable_stale_while_revalidate"):
            headers.set_stale_while_revalidate(
                get_setting("stale_while_revalidate_ttl")
            )
        if get_setting("enable_stale_if_error"):
            headers.set_stale_if_error(get_setting("stale_if_error_ttl"))
        return headers

    @property
    def finalized(self) -> bool:
        return self.state is State.FINALIZED

    def _check_open(self) -> None:
        if self.finalized:
            raise HeaderFinalizedError("Cache headers for this response were finalized")

    def collect(self, sources: Iterable[KeySource], context: HttpRequest) -> list[str]:
        """Add the baseline keys derived from the current view."""
        if self.state is not State.COLLECTING:
            raise PreconditionViolation("Surrogate keys were already collected")
        keys = collect_keys(sources, context)
        self.surrogate_keys.add_keys(keys)
        self.state = State.EXTENSIBLE
        return self.get_keys()

    def add_key(self, key: str) -> list[str]:
        self._check_open()
        return self.surrogate_keys.add_key(key)

    def add_keys(self, keys: Iterable[str]) -> list[str]:
        self._check_open()
        return self.surrogate_keys.add_keys(keys)

    def get_keys(self) -> list[str]:
        return self.surrogate_keys.get_keys()

    def set_keys(self, keys: Iterable[str]) -> list[str]:
        self._check_open()
        return self.surrogate_keys.set_keys(keys)

    def get_ttl(self) -> int:
        return self.surrogate_control.get_seconds()

    def set_ttl(self, seconds: int) -> int:
        self._check_open()
        return self.surrogate_control.set_seconds(seconds)

    def add_cache_control(
        self,
        seconds: int,
        directive: str,
    ) -> list[CacheControlHeader]:
        """
        Register another Cache-Control directive.

        Directives are not deduplicated; registering the same directive twice
        sends it twice.
        """
        self._check_open()
        self.cache_control.append(CacheControlHeader(seconds, directive))
        return list(self.cache_control)

    def set_stale_while_revalidate(self, seconds: int) -> list[CacheControlHeader]:
        return self.add_cache_control(seconds, STALE_WHILE_REVALIDATE)

    def set_stale_if_error(self, seconds: int) -> list[CacheControlHeader]:
        return self.add_cache_control(seconds, STALE_IF_ERROR)

    def _record(self, record: Optional[SentHeader]) -> None:
        if record is not None:
            self.sent.append(record)

    def _send_cache_control(self, sink: Optional[HeaderSink]) -> None:
        if self.merge_cache_control:
            self._record(MergedCacheControlHeader(self.cache_control).send(sink))
            return
        for header in self.cache_control:
            self._record(header.send(sink))

    def finalize(
        self,
        sink: Optional[HeaderSink],
        authenticated: bool = False,
        cacheable: bool = True,
    ) -> list[SentHeader]:
        """
        Run the remaining phases and write the headers.

        Order: extend hooks, Surrogate-Key, Surrogate-Control, then each
        Cache-Control directive in registration order. Returns the headers that
        were written.

        Authenticated or uncacheable responses only run the extend hooks and
        get no headers.
        """
        self._check_open()
        self.state = State.EXTENSIBLE
        self.hooks.run(Phase.EXTEND, self)

        if authenticated or not cacheable:
            self.state = State.FINALIZED
            logger.debug(
                "Cache headers skipped (authenticated=%s, cacheable=%s)",
                authenticated,
                cacheable,
            )
            return []

        self.hooks.run(Phase.PRE_SEND_KEYS, self)
        self._record(self.surrogate_keys.send(sink))
        self.hooks.run(Phase.POST_SEND_KEYS, self)

        self.hooks.run(Phase.PRE_SEND_SURROGATE_CONTROL, self)
        self._record(self.surrogate_control.send(sink))
        self.hooks.run(Phase.POST_SEND_SURROGATE_CONTROL, self)

        self.hooks.run(Phase.PRE_SEND_CACHE_CONTROL, self)
        self._send_cache_control(sink)
        self.state = State.FINALIZED
        self.hooks.run(Phase.POST_SEND_CACHE_CONTROL, self)

        return list(self.sent)


def get_cache_headers(request: HttpRequest) -> Optional[CacheHeaders]:
    """The CacheHeaders attached to the request, if any."""
    return getattr(request, "cache_headers", None)


def is_authenticated(request: HttpRequest) -> bool:
    user = getattr(request, "user", None)
    return bool(user is not None and getattr(user, "is_authenticated", False))


def is_cacheable(response: HttpResponseBase) -> bool:
    """Only successful responses may be cached by the CDN."""
    return response.status_code == 200
