"""Token cache interface and in-process implementations.

A cache has exactly two capabilities, :meth:`TokenCache.get` and
:meth:`TokenCache.set`. The token manager only ever uses the
:data:`ACCESS_TOKEN_KEY` key. Clearing is expressed as storing an empty
string, which every reader treats the same as a missing entry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from symplur.exceptions import ConfigurationError

ACCESS_TOKEN_KEY = "access_token"


class TokenCache(ABC):
    """Abstract key/value store for the access token."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value for *key*, or ``None`` when absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*. An empty string clears the entry."""
        ...

    @property
    def enabled(self) -> bool:
        return True


class NullTokenCache(TokenCache):
    """The "no cache configured" state: reads miss, writes are dropped."""

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str) -> None:
        return None

    @property
    def enabled(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NullTokenCache()"


NO_CACHE = NullTokenCache()


class MemoryTokenCache(TokenCache):
    """Dict-backed cache, shared by every client given the same instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key) or None

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class CallableTokenCache(TokenCache):
    """Adapter for a caller-supplied ``getter(key)`` and ``setter(key, value)``.

    Either function may be omitted: without a getter every read misses,
    without a setter writes are dropped. Both are checked at construction
    so a misconfiguration fails before any request is made.

    Args:
        getter: Called as ``getter(key)``; may return any falsy value for a miss.
        setter: Called as ``setter(key, value)``.

    Raises:
        ConfigurationError: If a supplied accessor is not callable.
    """

    def __init__(
        self,
        getter: Optional[Callable[[str], Any]] = None,
        setter: Optional[Callable[[str, str], Any]] = None,
    ) -> None:
        if getter is not None and not callable(getter):
            raise ConfigurationError("Cache getter is not callable")
        if setter is not None and not callable(setter):
            raise ConfigurationError("Cache setter is not callable")
        self._getter = getter
        self._setter = setter

    @property
    def getter(self) -> Optional[Callable[[str], Any]]:
        return self._getter

    @property
    def setter(self) -> Optional[Callable[[str, str], Any]]:
        return self._setter

    def get(self, key: str) -> Optional[str]:
        if self._getter is None:
            return None
        value = self._getter(key)
        return str(value) if value else None

    def set(self, key: str, value: str) -> None:
        if self._setter is not None:
            self._setter(key, value)


def build_token_cache(
    cache: Optional[TokenCache] = None,
    cache_getter: Optional[Callable[[str], Any]] = None,
    cache_setter: Optional[Callable[[str, str], Any]] = None,
) -> TokenCache:
    """Pick the cache for a client from its constructor arguments.

    An explicit *cache* wins; otherwise getter/setter functions are wrapped
    in a :class:`CallableTokenCache`; otherwise :data:`NO_CACHE` is used.

    Raises:
        ConfigurationError: If both *cache* and accessor functions are given,
            or an accessor is not callable.
    """
    has_callables = cache_getter is not None or cache_setter is not None
    if cache is not None:
        if has_callables:
            raise ConfigurationError(
                "Pass either a TokenCache or cache_getter/cache_setter, not both"
            )
        return cache
    if has_callables:
        return CallableTokenCache(cache_getter, cache_setter)
    return NO_CACHE
