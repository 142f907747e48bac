"""
Strategies that expand one URL into the URLs related to it.

A strategy is any callable taking the seed URL and returning the related
URLs. The seed URL itself is always purged and does not need to be returned.
Choose a strategy with the ``related_urls`` setting (dotted path) or pass one
to PurgeRequestCollection directly.
"""
from typing import Callable, Iterable
from urllib.parse import urlsplit, urlunsplit

RelatedUrlsFunc = Callable[[str], Iterable[str]]


def no_related_urls(url: str) -> list[str]:
    return []


def parent_paths(url: str) -> list[str]:
    """
    Every ancestor path of the URL up to the site root.

    Example: https://example.com/blog/2024/05/post/ ->
        ["https://example.com/blog/2024/05/",
         "https://example.com/blog/2024/",
         "https://example.com/blog/",
         "https://example.com/"]
    """
    parts = urlsplit(url)
    segments = [segment for segment in parts.path.split("/") if segment]
    urls = []
    for depth in range(len(segments) - 1, -1, -1):
        path = "/" + "".join(f"{segment}/" for segment in segments[:depth])
        urls.append(urlunsplit((parts.scheme, parts.netloc, path, "", "")))
    return urls


def paginated(pages: int, template: str = "{url}page/{page}/") -> RelatedUrlsFunc:
    """
    Build a strategy returning the paginated variants of a URL.

    Usage:
        paginated(3)("https://example.com/blog/") ->
            ["https://example.com/blog/page/2/", "https://example.com/blog/page/3/"]
    """

    def related(url: str) -> list[str]:
        base = url if url.endswith("/") else f"{url}/"
        return [template.format(url=base, page=page) for page in range(2, pages + 1)]

    return related


def combine(*strategies: RelatedUrlsFunc) -> RelatedUrlsFunc:
    """Chain several strategies, keeping their order."""

    def related(url: str) -> list[str]:
        urls: list[str] = []
        for strategy in strategies:
            urls.extend(strategy(url))
        return urls

    return related
