"""OAuth2 client-credentials token handling.

- :class:`TokenManager` -- supplies bearer tokens to the blocking client.
- :class:`AsyncTokenManager` -- the same for the async client.

Typical usage goes through :class:`~symplur.client.Client`, which builds
a manager from its credentials; use these directly only to share a token
source between custom transports.
"""

from symplur.auth.tokens import AsyncTokenManager, TokenManager

__all__ = ["AsyncTokenManager", "TokenManager"]
