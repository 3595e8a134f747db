"""Pluggable storage for the OAuth2 access token.

The :class:`~symplur.auth.tokens.TokenManager` mirrors the current access
token into a :class:`TokenCache` so that separate processes (or separate
client instances) can share one token instead of each running their own
credential exchange.

Implementations:
    :class:`NullTokenCache` -- explicit "no cache configured" state.
    :class:`MemoryTokenCache` -- a plain dict, handy in tests.
    :class:`CallableTokenCache` -- adapts caller-supplied getter/setter functions.
    :class:`DiskTokenCache` -- persistent store backed by :mod:`diskcache`.
"""

from symplur.cache.base import (
    ACCESS_TOKEN_KEY,
    NO_CACHE,
    CallableTokenCache,
    MemoryTokenCache,
    NullTokenCache,
    TokenCache,
    build_token_cache,
)
from symplur.cache.disk import DiskTokenCache

__all__ = [
    "ACCESS_TOKEN_KEY",
    "NO_CACHE",
    "CallableTokenCache",
    "DiskTokenCache",
    "MemoryTokenCache",
    "NullTokenCache",
    "TokenCache",
    "build_token_cache",
]
