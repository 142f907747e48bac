from functools import wraps
from typing import Callable, Optional, Union

from django.http import HttpRequest, HttpResponse

from .headers import ResponseSink
from .lifecycle import (
    CacheHeaders,
    default_key_sources,
    get_cache_headers,
    is_authenticated,
    is_cacheable,
)
from .surrogates import SurrogateKeySet

TTLType = Union[int, Callable[[HttpRequest], int], None]
KeyType = Union[str, Callable[[HttpRequest], Union[str, list[str], None]]]
KeysType = Optional[list[KeyType]]


def cache_headers(
    ttl: TTLType = None,
    keys: KeysType = None,
    *,
    stale_while_revalidate: Optional[int] = None,
    stale_if_error: Optional[int] = None,
) -> Callable:
    """
    Set the cache headers of a view.

    Args:
        ttl: Surrogate-Control TTL in seconds (int or callable returning int
            from the request)
        keys: Extra surrogate keys (strings or callables of the request)
        stale_while_revalidate: Register a stale-while-revalidate directive
        stale_if_error: Register a stale-if-error directive

    With SurrogateCacheMiddleware installed the values are applied to
    ``request.cache_headers`` and sent by the middleware. Without it the
    decorator runs the whole header lifecycle for the view itself.

    Example:
        @cache_headers(
            ttl=3600,
            keys=["posts", lambda r: f"author-{r.GET.get('author')}"],
            stale_while_revalidate=86400,
        )
        def post_list(request):
            return HttpResponse(...)
    """

    def decorator(view_func: Callable) -> Callable:
        @wraps(view_func)
        def wrapper(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            headers = get_cache_headers(request)
            standalone = headers is None
            if standalone:
                headers = CacheHeaders.from_settings()
                request.cache_headers = headers
                headers.collect(default_key_sources(), request)

            if ttl is not None:
                headers.set_ttl(ttl(request) if callable(ttl) else ttl)
            if keys:
                headers.add_keys(_resolve_keys(request, keys))
            if stale_while_revalidate is not None:
                headers.set_stale_while_revalidate(stale_while_revalidate)
            if stale_if_error is not None:
                headers.set_stale_if_error(stale_if_error)

            response = view_func(request, *args, **kwargs)

            if standalone:
                headers.finalize(
                    ResponseSink(response),
                    authenticated=is_authenticated(request),
                    cacheable=is_cacheable(response),
                )
            return response

        return wrapper

    return decorator


def surrogate_keys(*keys: KeyType) -> Callable:
    """
    Shortcut for tagging a view with surrogate keys only.

    Usage: @surrogate_keys("posts", surrogate_from_user)
    """
    return cache_headers(keys=list(keys))


def _resolve_keys(request: HttpRequest, keys: list[KeyType]) -> SurrogateKeySet:
    result = SurrogateKeySet()
    for item in keys:
        if isinstance(item, str):
            result.add(item)
        elif callable(item):
            resolved = item(request)
            if isinstance(resolved, str):
                result.add(resolved)
            elif resolved:
                result.add(*resolved)
    return result
