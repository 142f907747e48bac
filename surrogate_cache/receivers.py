import logging
from typing import Any, Callable, Iterable, Optional, Union
from urllib.parse import urljoin

from django.db.models.signals import post_delete, post_save

from .backends.base import BasePurgeBackend
from .purge import PurgeArgs, purge_surrogate_key, purge_url

logger = logging.getLogger(__name__)

UrlFunc = Callable[[Any], Optional[str]]
KeysFunc = Callable[[Any], Union[str, Iterable[str], None]]


def _dispatch_uid(model: type) -> str:
    return f"surrogate_cache:{model.__module__}.{model.__qualname__}"


def absolute_url(instance: Any) -> Optional[str]:
    get_absolute_url = getattr(instance, "get_absolute_url", None)
    return get_absolute_url() if callable(get_absolute_url) else None


def purge_on_change(
    model: type,
    url_func: Optional[UrlFunc] = None,
    keys_func: Optional[KeysFunc] = None,
    *,
    related: bool = False,
    base_url: str = "",
    purge_args: PurgeArgs = None,
    backend: Optional[BasePurgeBackend] = None,
    on_delete: bool = True,
) -> Callable:
    """
    Purge an object's cached pages whenever it is saved or deleted.

    Args:
        model: Model class to watch
        url_func: Returns the URL to purge (default: instance.get_absolute_url())
        keys_func: Returns surrogate keys to purge for the instance
        related: Also purge the URLs related to the object's URL
        base_url: Joined with relative URLs, e.g. "https://example.com"
        purge_args: Options passed with every purge
        backend: Purge backend (default: the configured one)
        on_delete: Also purge on delete

    Returns the connected receiver, so it can be disconnected again.

    Example:
        purge_on_change(
            Post,
            keys_func=lambda post: [surrogate_from_model("Post", post.pk)],
            base_url="https://example.com",
        )
    """
    url_func = url_func or absolute_url

    def receiver(sender, instance, **kwargs) -> list:
        results = []

        url = url_func(instance)
        if url:
            url = urljoin(base_url, url) if base_url else url
            results.append(
                purge_url(url, {**(purge_args or {}), "related": related}, backend)
            )

        keys = keys_func(instance) if keys_func else None
        if isinstance(keys, str):
            keys = [keys]
        for key in keys or ():
            results.append(purge_surrogate_key(key, purge_args, backend))

        if not all(result.ok for result in results):
            logger.warning(
                "Purging %s after change did not fully succeed", instance
            )
        return results

    uid = _dispatch_uid(model)
    post_save.connect(receiver, sender=model, weak=False, dispatch_uid=uid)
    if on_delete:
        post_delete.connect(receiver, sender=model, weak=False, dispatch_uid=uid)
    return receiver


def disconnect_purge_on_change(model: type) -> None:
    """Stop purging on changes to the model."""
    uid = _dispatch_uid(model)
    post_save.disconnect(sender=model, dispatch_uid=uid)
    post_delete.disconnect(sender=model, dispatch_uid=uid)
