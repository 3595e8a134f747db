"""Access-token lifecycle for the OAuth2 client-credentials grant.

:class:`TokenManager` hands out the current bearer token and hides where
it came from. It tries three sources in order:

1. the token held in memory,
2. the configured :class:`~symplur.cache.TokenCache`,
3. a fresh exchange: ``POST <token_path>`` with HTTP Basic credentials and
   ``grant_type=client_credentials``.

No expiry is tracked. A token is considered good until an API request is
answered with a ``Bearer`` challenge, at which point the executor calls
:meth:`TokenManager.invalidate` and asks again.

The exchange itself is never retried. A ``Basic`` challenge with an
``invalid_client`` body means the client ID/secret pair is wrong and
raises :class:`~symplur.exceptions.CredentialsError`; any other failure
propagates as :class:`~symplur.exceptions.TransportError`.

:class:`AsyncTokenManager` shares all of the above and only swaps the
exchange for an ``await``-able one.
"""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from symplur.cache import ACCESS_TOKEN_KEY, NO_CACHE, TokenCache
from symplur.exceptions import CredentialsError, TokenResponseError, TransportError
from symplur.models import Credentials, HTTPMethod, RequestDescriptor, TokenResponse
from symplur.output import debug
from symplur.results import decode_json, is_credentials_rejection
from symplur.transport import AsyncTransport, Transport


class _TokenState:
    """Memory and cache handling common to the sync and async managers."""

    def __init__(self, credentials: Credentials, cache: TokenCache = NO_CACHE) -> None:
        self._credentials = credentials
        self._cache = cache
        self._token: Optional[str] = None

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def cache(self) -> TokenCache:
        return self._cache

    @cache.setter
    def cache(self, cache: TokenCache) -> None:
        self._cache = cache

    @property
    def has_token(self) -> bool:
        """Whether a token is held in memory (the cache is not consulted)."""
        return bool(self._token)

    def set_token(self, value: str) -> None:
        """Adopt *value* as the current token and mirror it into the cache."""
        self._token = value or None
        self._cache.set(ACCESS_TOKEN_KEY, value)

    def invalidate(self) -> None:
        """Forget the current token so the next request runs a fresh exchange.

        The cache entry is cleared as well; otherwise the rejected token
        would simply be read back from it.
        """
        debug("Discarding rejected access token")
        self._token = None
        self._cache.set(ACCESS_TOKEN_KEY, "")

    def _known_token(self) -> Optional[str]:
        if self._token:
            return self._token
        cached = self._cache.get(ACCESS_TOKEN_KEY)
        if cached:
            debug("Using access token from cache")
            self._token = cached
            return cached
        return None

    def _exchange_request(self, token_path: str) -> RequestDescriptor:
        return RequestDescriptor(
            method=HTTPMethod.POST,
            path=token_path,
            data={"grant_type": "client_credentials"},
        )

    def _accept_exchange(self, response: httpx.Response, base_uri: str) -> str:
        """Turn the token endpoint's answer into a stored token, or raise."""
        if response.status_code >= 400:
            if is_credentials_rejection(response):
                raise CredentialsError(
                    f"Invalid or missing client credentials for {base_uri}"
                )
            raise TransportError.from_response(response)

        body = decode_json(response)
        try:
            token = TokenResponse.model_validate(body)
        except ValidationError as exc:
            raise TokenResponseError(
                f"Token response from {base_uri} has no usable access_token"
            ) from exc

        debug("Obtained new access token")
        self.set_token(token.access_token)
        return token.access_token


class TokenManager(_TokenState):
    """Supplies bearer tokens to :class:`~symplur.client.Client`.

    Args:
        credentials: The client ID/secret pair used for the exchange.
        transport: Transport used for the token request; sharing the
            client's transport puts the exchange in its transaction log.
        cache: Where the token is mirrored. Defaults to no cache.

    Example::

        manager = TokenManager(Credentials(client_id="id", client_secret="s"), transport)
        token = manager.get_token()   # exchanges once
        manager.get_token()           # served from memory
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: Transport,
        cache: TokenCache = NO_CACHE,
    ) -> None:
        super().__init__(credentials, cache)
        self._transport = transport

    def get_token(self) -> str:
        """Return a bearer token, exchanging credentials only if none is known.

        Raises:
            CredentialsError: The client ID/secret pair was rejected.
            TokenResponseError: The endpoint answered without ``access_token``.
            BadJsonError: The endpoint answered with a non-JSON body.
            TransportError: Any other failure of the token request.
        """
        token = self._known_token()
        if token:
            return token
        return self.fetch_token()

    def fetch_token(self) -> str:
        """Run the client-credentials exchange unconditionally."""
        options = self._transport.options
        debug(f"Requesting access token from {options.token_path}")
        response = self._transport.send(
            self._exchange_request(options.token_path),
            auth=self._credentials.as_basic_auth(),
        )
        return self._accept_exchange(response, options.base_uri)


class AsyncTokenManager(_TokenState):
    """Coroutine flavour of :class:`TokenManager` for :class:`~symplur.client.AsyncClient`.

    Concurrent callers that all find no token will each run an exchange;
    the last one to finish wins. This is accepted rather than coordinated.
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: AsyncTransport,
        cache: TokenCache = NO_CACHE,
    ) -> None:
        super().__init__(credentials, cache)
        self._transport = transport

    async def get_token(self) -> str:
        token = self._known_token()
        if token:
            return token
        return await self.fetch_token()

    async def fetch_token(self) -> str:
        options = self._transport.options
        debug(f"Requesting access token from {options.token_path}")
        response = await self._transport.send(
            self._exchange_request(options.token_path),
            auth=self._credentials.as_basic_auth(),
        )
        return self._accept_exchange(response, options.base_uri)
