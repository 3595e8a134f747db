"""Asynchronous API client -- mirrors :class:`~symplur.client.sync_client.Client`.

:class:`AsyncClient` keeps the exact protocol of the blocking client (one
transparent re-authentication on a ``Bearer`` challenge, ``None`` for
404) but awaits :class:`httpx.AsyncClient` instead of blocking.

.. note::
   Concurrency support is best-effort. Calls running at the same time on
   one instance share the token without coordination: several of them may
   see the same rejection and each run an exchange, and no ordering between
   in-flight calls is guaranteed. Each call still retries at most once.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

import httpx

from symplur.auth.tokens import AsyncTokenManager
from symplur.cache import TokenCache
from symplur.client.base import ClientBase, OptionsArg
from symplur.models import RequestDescriptor
from symplur.output import debug
from symplur.results import Outcome, SendResult, classify
from symplur.transport import AsyncTransport, Transaction


class AsyncClient(ClientBase):
    """Coroutine-based client for an OAuth2 client-credentials protected JSON API.

    Takes the same arguments as :class:`~symplur.client.sync_client.Client`.

    Example::

        async with AsyncClient("my-id", "my-secret") as client:
            data = await client.get("/twitter/hashtags/hcsm")
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
        self._transport = AsyncTransport(self._options)
        self._tokens = AsyncTokenManager(self._credentials, self._transport, self._initial_cache)

    async def __aenter__(self) -> AsyncClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    # ------------------------------------------------------------------ #
    # Verb methods
    # ------------------------------------------------------------------ #

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request_json("GET", path, params=params)

    async def post(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request_json("POST", path, data=data)

    async def put(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request_json("PUT", path, data=data)

    async def patch(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request_json("PATCH", path, data=data)

    async def delete(self, path: str, data: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request_json("DELETE", path, data=data)

    # ------------------------------------------------------------------ #
    # Executor
    # ------------------------------------------------------------------ #

    async def request_json(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Async counterpart of :meth:`Client.request_json <symplur.client.Client.request_json>`."""
        descriptor = self._describe(method, path, params, data)
        result = await self._attempt(descriptor)
        retried = False
        if result.outcome is Outcome.UNAUTHORIZED:
            debug(
                f"Access token rejected on {descriptor.method.value} "
                f"{descriptor.relative_path}, re-authenticating once"
            )
            self._tokens.invalidate()
            result = await self._attempt(descriptor)
            retried = True
        return self._finish(result, retried)

    async def _attempt(self, descriptor: RequestDescriptor) -> SendResult:
        headers = self._auth_headers(await self._tokens.get_token())
        return classify(await self._transport.send(descriptor, headers=headers))

    # ------------------------------------------------------------------ #
    # Token access, configuration, test support
    # ------------------------------------------------------------------ #

    async def get_access_token(self) -> str:
        return await self._tokens.get_token()

    def set_access_token(self, token: str) -> None:
        self._tokens.set_token(token)

    @property
    def token_manager(self) -> AsyncTokenManager:
        return self._tokens

    def set_options(self, **changes: Any) -> None:
        """See :meth:`Client.set_options <symplur.client.Client.set_options>`."""
        cache, options = self._split_option_changes(changes, self._tokens.cache)
        if cache is not None:
            self._tokens.cache = cache
        if options is not None:
            self._options = options
            self._transport.reconfigure(options)

    def set_mock_responses(self, responses: Optional[Iterable[httpx.Response]] = None) -> None:
        self._transport.set_mock_responses(responses)

    @property
    def transaction_log(self) -> list[Transaction]:
        return self._transport.transaction_log
