"""HTTP transport for the symplur clients, with recording and canned responses.

:class:`Transport` and :class:`AsyncTransport` own the underlying
:class:`httpx.Client` / :class:`httpx.AsyncClient`. They send exactly what
they are given (no auth decisions, no retries) and never raise for HTTP
status codes; classification is :mod:`symplur.results`' job.

Two test-support features live here:

* **Mock responses** -- :meth:`Transport.set_mock_responses` swaps the
  network for an :class:`httpx.MockTransport` that serves the queued
  responses in order.
* **Transaction log** -- every attempt that reaches the transport is
  recorded as a :class:`Transaction`, so tests can assert exactly which
  round-trips a call produced.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import httpx

from symplur.exceptions import ConnectionError_
from symplur.models import ClientOptions, RequestDescriptor
from symplur.output import debug


@dataclass
class Transaction:
    """One attempt sent to the transport.

    Attributes:
        request: The request as sent, including auth headers.
        response: The response, or ``None`` when the attempt failed.
        error: The network error raised by httpx, if any.
    """

    request: httpx.Request
    response: Optional[httpx.Response] = None
    error: Optional[Exception] = None


class MockQueueEmpty(LookupError):
    """Raised when a request arrives after every mock response was consumed."""


class _MockQueue:
    """Handler for :class:`httpx.MockTransport` serving responses first-in first-out."""

    def __init__(self, responses: Iterable[httpx.Response]) -> None:
        self._pending: deque[httpx.Response] = deque(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if not self._pending:
            raise MockQueueEmpty(
                f"No mock response left for {request.method} {request.url}"
            )
        return self._pending.popleft()

    def __len__(self) -> int:
        return len(self._pending)


class _BaseTransport(ABC):
    """Configuration, mock, and logging state shared by both transports."""

    def __init__(self, options: ClientOptions) -> None:
        self._options = options
        self._mock: Optional[_MockQueue] = None
        self._log: list[Transaction] = []

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def transaction_log(self) -> list[Transaction]:
        """Recorded attempts, oldest first. Returns a copy."""
        return list(self._log)

    @property
    def pending_mock_responses(self) -> int:
        return len(self._mock) if self._mock is not None else 0

    def set_mock_responses(self, responses: Optional[Iterable[httpx.Response]] = None) -> None:
        """Serve *responses* in order instead of using the network.

        The transaction log is reset. Passing nothing (or an empty list)
        switches back to the real network.
        """
        queue = _MockQueue(responses or ())
        self._mock = queue if len(queue) else None
        self._log = []
        self._drop_client()

    @abstractmethod
    def reconfigure(self, options: ClientOptions) -> None:
        """Apply new options; the httpx client is rebuilt on the next send."""

    @abstractmethod
    def _drop_client(self) -> None:
        """Retire the current httpx client, if any."""

    def _client_kwargs(self) -> dict[str, Any]:
        options = self._options
        headers = {"User-Agent": f"{options.user_agent} python-httpx/{httpx.__version__}"}
        headers.update(options.headers)
        kwargs: dict[str, Any] = {
            "base_url": options.base_uri + "/",
            "timeout": options.timeout,
            "verify": options.verify_ssl,
            "follow_redirects": True,
            "headers": headers,
        }
        if self._mock is not None:
            kwargs["transport"] = httpx.MockTransport(self._mock)
        return kwargs

    @staticmethod
    def _build(
        client: httpx.Client | httpx.AsyncClient,
        descriptor: RequestDescriptor,
        headers: Optional[dict[str, str]],
    ) -> httpx.Request:
        return client.build_request(
            descriptor.method.value,
            descriptor.relative_path,
            params=descriptor.params or None,
            data=descriptor.data or None,
            headers=headers,
        )

    def _record(
        self,
        request: httpx.Request,
        response: Optional[httpx.Response] = None,
        error: Optional[Exception] = None,
    ) -> None:
        if self._mock is not None or self._options.record_transactions:
            self._log.append(Transaction(request=request, response=response, error=error))

    def _connection_error(self, request: httpx.Request, exc: httpx.TransportError) -> ConnectionError_:
        self._record(request, error=exc)
        debug(f"{request.method} {request.url} failed: {exc!r}")
        return ConnectionError_(f"{request.method} {request.url} failed: {exc}")


class Transport(_BaseTransport):
    """Blocking transport backed by a lazily created :class:`httpx.Client`."""

    def __init__(self, options: ClientOptions) -> None:
        super().__init__(options)
        self._client: Optional[httpx.Client] = None

    def reconfigure(self, options: ClientOptions) -> None:
        self._options = options
        self._drop_client()

    def send(
        self,
        descriptor: RequestDescriptor,
        headers: Optional[dict[str, str]] = None,
        auth: Optional[tuple[str, str]] = None,
    ) -> httpx.Response:
        """Send one request and return the response, whatever its status.

        Raises:
            ConnectionError_: On timeouts and other network-level failures.
            MockQueueEmpty: When mocks are installed and none are left.
        """
        client = self._get_client()
        request = self._build(client, descriptor, headers)
        debug(f"{request.method} {request.url}")
        try:
            response = client.send(request, auth=auth)
        except httpx.TransportError as exc:
            raise self._connection_error(request, exc) from exc
        self._record(request, response=response)
        debug(f"{request.method} {request.url} -> HTTP {response.status_code}")
        return response

    def close(self) -> None:
        self._drop_client()

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(**self._client_kwargs())
        return self._client

    def _drop_client(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class AsyncTransport(_BaseTransport):
    """Non-blocking transport backed by a lazily created :class:`httpx.AsyncClient`."""

    def __init__(self, options: ClientOptions) -> None:
        super().__init__(options)
        self._client: Optional[httpx.AsyncClient] = None
        self._stale: list[httpx.AsyncClient] = []

    def reconfigure(self, options: ClientOptions) -> None:
        self._options = options
        self._drop_client()

    async def send(
        self,
        descriptor: RequestDescriptor,
        headers: Optional[dict[str, str]] = None,
        auth: Optional[tuple[str, str]] = None,
    ) -> httpx.Response:
        """Async counterpart of :meth:`Transport.send`."""
        client = self._get_client()
        request = self._build(client, descriptor, headers)
        debug(f"{request.method} {request.url}")
        try:
            response = await client.send(request, auth=auth)
        except httpx.TransportError as exc:
            raise self._connection_error(request, exc) from exc
        self._record(request, response=response)
        debug(f"{request.method} {request.url} -> HTTP {response.status_code}")
        return response

    async def aclose(self) -> None:
        self._drop_client()
        await self._close_stale()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs())
        return self._client

    def _drop_client(self) -> None:
        # Retired clients may still serve in-flight sends; aclose() closes them.
        if self._client is not None:
            self._stale.append(self._client)
            self._client = None

    async def _close_stale(self) -> None:
        while self._stale:
            await self._stale.pop().aclose()
