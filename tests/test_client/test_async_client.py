"""Tests for the asynchronous API client.

Coroutines are driven with :func:`asyncio.run` so no pytest plugin is
needed.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from canned import (
    BASE_URI,
    bearer_challenge,
    html_response,
    invalid_client,
    json_response,
    token_response,
)
from symplur.cache import MemoryTokenCache
from symplur.client import AsyncClient
from symplur.exceptions import (
    BadJsonError,
    ConfigurationError,
    ConnectionError_,
    CredentialsError,
    TransportError,
    UnauthorizedTokenError,
)


def _client(**kwargs) -> AsyncClient:
    return AsyncClient("myid", "mysecret", {"base_uri": BASE_URI}, **kwargs)


class TestAsyncVerbs:
    def test_can_get(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([token_response(), json_response({"title": "Da page"})])
                data = await api.get("/foo/yak")
                return data, api.transaction_log

        data, log = asyncio.run(scenario())

        assert data == {"title": "Da page"}
        assert len(log) == 2
        assert log[1].request.headers["Authorization"] == "Bearer abcdefg"

    @pytest.mark.parametrize("verb", ["post", "put", "patch", "delete"])
    def test_body_verbs(self, verb: str) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([token_response(), json_response({"verb": verb})])
                data = await getattr(api, verb)("/foo/yak", {"one": "fish"})
                return data, api.transaction_log

        data, log = asyncio.run(scenario())

        assert data == {"verb": verb}
        assert log[1].request.method == verb.upper()
        assert log[1].request.content == b"one=fish"


class TestAsyncReauthentication:
    def test_regenerates_expired_token(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_access_token("bq8yvbq3vc")
                api.set_mock_responses(
                    [bearer_challenge(), token_response(), json_response({"title": "Wun page"})]
                )
                data = await api.get("/foo/zat")
                return data, len(api.transaction_log), await api.get_access_token()

        data, count, token = asyncio.run(scenario())

        assert data == {"title": "Wun page"}
        assert count == 3
        assert token == "abcdefg"

    def test_second_rejection_raises(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_access_token("stale")
                api.set_mock_responses([bearer_challenge(), token_response(), bearer_challenge()])
                await api.get("/foo")

        with pytest.raises(UnauthorizedTokenError):
            asyncio.run(scenario())

    def test_concurrent_calls_each_succeed(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_access_token("tok")
                api.set_mock_responses([json_response({"n": 1}), json_response({"n": 2})])
                results = await asyncio.gather(api.get("/a"), api.get("/b"))
                return results, api.transaction_log

        results, log = asyncio.run(scenario())

        assert sorted(r["n"] for r in results) == [1, 2]
        assert len(log) == 2


class TestAsyncErrors:
    def test_invalid_credentials(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([invalid_client()])
                await api.get("/foo")

        with pytest.raises(CredentialsError):
            asyncio.run(scenario())

    def test_unparsable_json(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([token_response(), html_response()])
                await api.get("/foo")

        with pytest.raises(BadJsonError):
            asyncio.run(scenario())

    def test_not_found_returns_none(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([token_response(), httpx.Response(404)])
                return await api.get("/missing")

        assert asyncio.run(scenario()) is None

    def test_server_error(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([token_response(), httpx.Response(503)])
                await api.get("/foo")

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(scenario())

        assert exc_info.value.status_code == 503

    def test_network_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async def scenario():
            async with _client() as api:
                api.set_access_token("tok")
                api._transport._client = httpx.AsyncClient(
                    base_url=BASE_URI + "/", transport=httpx.MockTransport(handler)
                )
                await api.get("/foo")

        with pytest.raises(ConnectionError_):
            asyncio.run(scenario())

    def test_empty_secret(self) -> None:
        with pytest.raises(ConfigurationError):
            AsyncClient("id", "")


class TestAsyncOptions:
    def test_cache_is_shared_with_sync_semantics(self) -> None:
        cache = MemoryTokenCache()

        async def scenario():
            async with _client(cache=cache) as api:
                api.set_mock_responses([token_response(), json_response({})])
                await api.get("/foo")

        asyncio.run(scenario())

        assert cache.values["access_token"] == "abcdefg"

    def test_set_options_rebuilds_transport(self) -> None:
        async def scenario():
            async with _client() as api:
                api.set_mock_responses([token_response(), json_response({})])
                await api.get("/foo")
                api.set_options(base_uri="http://other.example.com")
                api.set_mock_responses([json_response({})])
                await api.get("/bar")
                return api.transaction_log

        log = asyncio.run(scenario())

        assert str(log[0].request.url) == "http://other.example.com/bar"

    def test_set_options_setter_keeps_existing_getter(self) -> None:
        async def scenario():
            async with _client(cache_getter=lambda name: "cached") as api:
                api.set_options(cache_setter=lambda name, value: None)
                api.set_mock_responses([json_response({"ok": True})])
                result = await api.get("/foo")
                return result, api.transaction_log

        result, log = asyncio.run(scenario())

        assert result == {"ok": True}
        assert log[0].request.headers["Authorization"] == "Bearer cached"
