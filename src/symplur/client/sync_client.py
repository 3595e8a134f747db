"""Blocking API client with automatic bearer-token handling.

:class:`Client` is the main entry point of the package. Every call:

1. asks the :class:`~symplur.auth.TokenManager` for a token (memory, then
   cache, then a client-credentials exchange),
2. sends the request with ``Authorization: Bearer <token>`` and
   ``Prefer: representation=minimal``,
3. classifies the response (:mod:`symplur.results`) and

   - decodes JSON on success,
   - returns ``None`` on 404,
   - on a ``Bearer`` challenge, discards the token and sends the same
     request exactly once more with a fresh one,
   - raises :class:`~symplur.exceptions.TransportError` for anything else.

See Also:
    :class:`~symplur.client.async_client.AsyncClient` for the coroutine
    equivalent.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

import httpx

from symplur.auth.tokens import TokenManager
from symplur.cache import TokenCache
from symplur.client.base import ClientBase, OptionsArg
from symplur.models import RequestDescriptor
from symplur.output import debug
from symplur.results import Outcome, SendResult, classify
from symplur.transport import Transaction, Transport


class Client(ClientBase):
    """Synchronous client for an OAuth2 client-credentials protected JSON API.

    An instance keeps mutable state (the current token and the transaction
    log) without any locking. Do not share one instance between threads;
    create one per worker, or guard it with your own lock.

    Args:
        client_id: OAuth2 client ID. Must be non-empty.
        client_secret: OAuth2 client secret. Must be non-empty.
        options: :class:`~symplur.models.ClientOptions` or an equivalent
            mapping (``base_uri``, ``timeout``, ``headers``, ...).
        cache: Optional :class:`~symplur.cache.TokenCache` mirroring the token.
        cache_getter: Alternative to *cache*: ``getter(key)`` function.
        cache_setter: Alternative to *cache*: ``setter(key, value)`` function.

    Raises:
        ConfigurationError: Empty credentials, invalid options, or a cache
            accessor that is not callable.

    Example::

        with Client("my-id", "my-secret") as client:
            hashtag = client.get("/twitter/hashtags/hcsm")
            if hashtag is None:
                ...  # 404
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        options: OptionsArg = None,
        cache: Optional[TokenCache] = None,
        cache_getter: Optional[Callable[[str], Any]] = None,
        cache_setter: Optional[Callable[[str, str], Any]] = None,
    ) -> None:
        super().__init__(client_id, client_secret, options, cache, cache_getter, cache_setter)
        self._transport = Transport(self._options)
        self._tokens = TokenManager(self._credentials, self._transport, self._initial_cache)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._transport.close()

    # ------------------------------------------------------------------ #
    # Verb methods
    # ------------------------------------------------------------------ #

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET *path* with *params* as the query string."""
        return self.request_json("GET", path, params=params)

    def post(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        """POST *data* to *path* as a form-encoded body."""
        return self.request_json("POST", path, data=data)

    def put(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        """PUT *data* to *path* as a form-encoded body."""
        return self.request_json("PUT", path, data=data)

    def patch(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        """PATCH *path* with *data* as a form-encoded body."""
        return self.request_json("PATCH", path, data=data)

    def delete(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        """DELETE *path*, sending *data* as a form-encoded body."""
        return self.request_json("DELETE", path, data=data)

    # ------------------------------------------------------------------ #
    # Executor
    # ------------------------------------------------------------------ #

    def request_json(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send an authenticated request and return the decoded JSON body.

        Args:
            method: HTTP verb (GET, POST, PUT, PATCH, DELETE).
            path: Path relative to ``base_uri``; a leading ``/`` is ignored.
            params: Query parameters.
            data: Form-encoded body parameters.

        Returns:
            The decoded JSON value, or ``None`` when the API answered 404.

        Raises:
            CredentialsError: The client ID/secret pair was rejected.
            UnauthorizedTokenError: A freshly issued token was rejected too.
            BadJsonError: The response body is not JSON.
            TransportError: Any other HTTP error response.
            ConnectionError_: Network failure or timeout.
        """
        descriptor = self._describe(method, path, params, data)
        result = self._attempt(descriptor)
        retried = False
        if result.outcome is Outcome.UNAUTHORIZED:
            debug(
                f"Access token rejected on {descriptor.method.value} "
                f"{descriptor.relative_path}, re-authenticating once"
            )
            self._tokens.invalidate()
            result = self._attempt(descriptor)
            retried = True
        return self._finish(result, retried)

    def _attempt(self, descriptor: RequestDescriptor) -> SendResult:
        headers = self._auth_headers(self._tokens.get_token())
        return classify(self._transport.send(descriptor, headers=headers))

    # ------------------------------------------------------------------ #
    # Token access
    # ------------------------------------------------------------------ #

    def get_access_token(self) -> str:
        """Return the current access token, fetching one if necessary."""
        return self._tokens.get_token()

    def set_access_token(self, token: str) -> None:
        """Use *token* for subsequent requests and store it in the cache."""
        self._tokens.set_token(token)

    @property
    def token_manager(self) -> TokenManager:
        return self._tokens

    # ------------------------------------------------------------------ #
    # Configuration and test support
    # ------------------------------------------------------------------ #

    def set_options(self, **changes: Any) -> None:
        """Change options after construction.

        Accepts any :class:`~symplur.models.ClientOptions` field plus
        ``cache``, ``cache_getter``, and ``cache_setter``. Transport changes
        take effect on the next request.

        Raises:
            ConfigurationError: On invalid values or non-callable accessors.
        """
        cache, options = self._split_option_changes(changes, self._tokens.cache)
        if cache is not None:
            self._tokens.cache = cache
        if options is not None:
            self._options = options
            self._transport.reconfigure(options)

    def set_mock_responses(self, responses: Optional[Iterable[httpx.Response]] = None) -> None:
        """Serve *responses* in order instead of the network and reset the log."""
        self._transport.set_mock_responses(responses)

    @property
    def transaction_log(self) -> list[Transaction]:
        """Attempts that reached the transport, oldest first."""
        return self._transport.transaction_log
