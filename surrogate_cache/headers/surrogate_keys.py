from typing import Iterable, Optional

from ..surrogates import SurrogateKeySet
from .base import BaseHeader


class SurrogateKeysHeader(BaseHeader):
    """
    Carries the invalidation tags for the page, space separated.

    The header is not sent at all when there are no keys. Keys that would push
    the header past the size limits are dropped.
    """

    header_name = "Surrogate-Key"
    MAX_HEADER_SIZE = 16 * 1024  # 16KB
    MAX_KEY_SIZE = 1024  # 1KB per key

    def __init__(self, keys: Optional[Iterable[str]] = None) -> None:
        super().__init__()
        self._keys = SurrogateKeySet(keys)

    def add_key(self, key: str) -> list[str]:
        self._check_mutable()
        self._keys.add(key)
        return self._keys.keys

    def add_keys(self, keys: Iterable[str]) -> list[str]:
        self._check_mutable()
        if isinstance(keys, str):
            keys = [keys]
        self._keys.add(*keys)
        return self._keys.keys

    def get_keys(self) -> list[str]:
        return self._keys.keys

    def set_keys(self, keys: Iterable[str]) -> list[str]:
        """Replace every key, e.g. to let a late filter drop keys."""
        self._check_mutable()
        self._keys = SurrogateKeySet(keys)
        return self._keys.keys

    def _header_keys(self) -> list[str]:
        valid_keys = []
        total_size = 0

        for key in self._keys:
            key_size = len(key.encode("utf-8"))
            if key_size > self.MAX_KEY_SIZE:
                continue
            if total_size + key_size + 1 > self.MAX_HEADER_SIZE:
                break
            valid_keys.append(key)
            total_size += key_size + 1

        return valid_keys

    def should_send(self) -> bool:
        return bool(self._header_keys())

    def get_value(self) -> str:
        return " ".join(self._header_keys())
