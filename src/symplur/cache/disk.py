"""Persistent token cache backed by :mod:`diskcache`.

Lets consecutive ``symplur`` invocations reuse one access token instead of
running the client-credentials exchange on every command. The store lives
in a ``tokens/`` subdirectory of the given cache root (the CLI uses
:func:`~symplur.config.get_cache_dir`).

Entries are namespaced by client ID so that switching credentials never
picks up a token issued to another client.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import diskcache

from symplur.cache.base import TokenCache


class DiskTokenCache(TokenCache):
    """Token cache persisted in a :class:`diskcache.Cache` directory.

    Args:
        cache_dir: Root directory; a ``tokens/`` subdirectory is created in it.
        namespace: Prefix for every key, typically the client ID.
        ttl_seconds: Optional expiry for stored values. ``None`` keeps them
            until overwritten; staleness is otherwise discovered through a
            ``Bearer`` challenge.

    Example::

        cache = DiskTokenCache(get_cache_dir(), namespace="my-client-id")
        client = Client("my-client-id", secret, cache=cache)
    """

    def __init__(
        self,
        cache_dir: str | Path,
        namespace: str = "",
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._directory = Path(cache_dir) / "tokens"
        self._namespace = namespace
        self._ttl = ttl_seconds
        self._cache = diskcache.Cache(str(self._directory))

    @property
    def directory(self) -> Path:
        return self._directory

    def get(self, key: str) -> Optional[str]:
        value = self._cache.get(self._key(key))
        return value or None

    def set(self, key: str, value: str) -> None:
        if value:
            self._cache.set(self._key(key), value, expire=self._ttl)
        else:
            self._cache.delete(self._key(key))

    def clear(self) -> None:
        """Remove every stored token, across all namespaces."""
        self._cache.clear()

    def close(self) -> None:
        self._cache.close()

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}" if self._namespace else key
