"""Canned httpx responses shared by the test modules.

Each helper builds one answer the API or its token endpoint is known to
give, ready to be queued with ``set_mock_responses``.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

BASE_URI = "http://example.com"


def token_response(token: str = "abcdefg") -> httpx.Response:
    """A successful client-credentials answer carrying *token*."""
    return httpx.Response(200, json={"access_token": token, "token_type": "bearer"})


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


def bearer_challenge(status_code: int = 401) -> httpx.Response:
    """The API's answer to an expired or revoked access token."""
    return httpx.Response(
        status_code,
        headers={"WWW-Authenticate": 'Bearer realm="Service", error="invalid_token"'},
        json={"error": "invalid_token"},
    )


def invalid_client(headers: Optional[dict[str, str]] = None) -> httpx.Response:
    """The token endpoint's answer to a wrong client ID/secret pair."""
    if headers is None:
        headers = {"WWW-Authenticate": 'Basic realm="Service"'}
    return httpx.Response(
        401,
        headers=headers,
        json={"error": "invalid_client", "error_description": "Client authentication failed"},
    )


def html_response(status_code: int = 200) -> httpx.Response:
    """A body that is not JSON, as served by a misrouted proxy."""
    return httpx.Response(
        status_code,
        headers={"content-type": "text/html"},
        text="<html><body>Gateway says hi</body></html>",
    )
