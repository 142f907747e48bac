from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

from .headers import ResponseSink
from .lifecycle import (
    CacheHeaders,
    HookRegistry,
    State,
    default_key_sources,
    get_cache_headers,
    is_authenticated,
    is_cacheable,
)
from .surrogates import KeySource


class SurrogateCacheMiddleware:
    """
    Adds Surrogate-Key, Surrogate-Control and Cache-Control headers to responses.

    Place it after AuthenticationMiddleware so logged in users are detected:

        MIDDLEWARE = [
            ...
            "django.contrib.auth.middleware.AuthenticationMiddleware",
            "surrogate_cache.middleware.SurrogateCacheMiddleware",
        ]

    Views reach the per-response state through ``request.cache_headers``.
    """

    def __init__(
        self,
        get_response: Callable[[HttpRequest], HttpResponse],
        hooks: Optional[HookRegistry] = None,
        key_sources: Optional[list[KeySource]] = None,
    ) -> None:
        self.get_response = get_response
        self.hooks = hooks
        self._key_sources = key_sources

    @property
    def key_sources(self) -> list[KeySource]:
        if self._key_sources is None:
            self._key_sources = default_key_sources()
        return self._key_sources

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.cache_headers = CacheHeaders.from_settings(hooks=self.hooks)
        response = self.get_response(request)
        return self.process_response(request, response)

    def process_view(self, request, view_func, view_args, view_kwargs):
        headers = get_cache_headers(request)
        if headers is not None and headers.state is State.COLLECTING:
            headers.collect(self.key_sources, request)
        return None

    def process_response(
        self,
        request: HttpRequest,
        response: HttpResponse,
    ) -> HttpResponse:
        headers = get_cache_headers(request)
        if headers is None or headers.finalized:
            return response

        if headers.state is State.COLLECTING:
            headers.collect(self.key_sources, request)

        headers.finalize(
            ResponseSink(response),
            authenticated=is_authenticated(request),
            cacheable=is_cacheable(response),
        )
        return response
