"""Classification of raw API responses.

The request executors never use exceptions to decide whether to retry.
Every response from the transport is first turned into a :class:`SendResult`
whose :class:`Outcome` states what happened, and the executor branches on
that value:

=================  =====================================================
Outcome            Condition
=================  =====================================================
``SUCCESS``        status below 400
``UNAUTHORIZED``   4xx with a ``WWW-Authenticate: Bearer ...`` challenge
``NOT_FOUND``      404 without a Bearer challenge
``ERROR``          anything else (other 4xx, every 5xx)
=================  =====================================================

The challenge and JSON helpers here are also used by the token manager to
tell a rejected client ID/secret apart from other token endpoint failures.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, NoReturn

import httpx

from symplur.exceptions import BadJsonError, TransportError

BEARER_PREFIX = "Bearer "
BASIC_PREFIX = "Basic "


class Outcome(str, enum.Enum):
    SUCCESS = "success"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class SendResult:
    """A transport response paired with its classified :class:`Outcome`."""

    outcome: Outcome
    response: httpx.Response

    @property
    def status_code(self) -> int:
        return self.response.status_code


def challenge(response: httpx.Response) -> str:
    """Return the ``WWW-Authenticate`` header line (empty when absent)."""
    return response.headers.get("WWW-Authenticate", "")


def is_bearer_challenge(response: httpx.Response) -> bool:
    """True when the server rejected the presented access token."""
    return challenge(response).startswith(BEARER_PREFIX)


def is_basic_challenge(response: httpx.Response) -> bool:
    """True when the server asks for client credentials via HTTP Basic."""
    return challenge(response).startswith(BASIC_PREFIX)


def is_client_error(response: httpx.Response) -> bool:
    return 400 <= response.status_code < 500


def classify(response: httpx.Response) -> SendResult:
    """Map *response* to a :class:`SendResult`."""
    status = response.status_code
    if status < 400:
        outcome = Outcome.SUCCESS
    elif is_client_error(response) and is_bearer_challenge(response):
        outcome = Outcome.UNAUTHORIZED
    elif status == 404:
        outcome = Outcome.NOT_FOUND
    else:
        outcome = Outcome.ERROR
    return SendResult(outcome=outcome, response=response)


def decode_json(response: httpx.Response) -> Any:
    """Decode the response body as JSON.

    An empty body and a literal ``null`` are rejected too, so that ``None``
    from the client always means "not found".

    Raises:
        BadJsonError: With the decoder's message, offset, and the raw body.
    """
    text = response.text
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BadJsonError(exc.msg, body=text, position=exc.pos) from exc
    if data is None:
        raise BadJsonError("Response body decoded to null", body=text)
    return data


def error_code(response: httpx.Response) -> str | None:
    """Return the OAuth2 ``error`` field of a JSON error body, if there is one."""
    try:
        body = json.loads(response.text)
    except json.JSONDecodeError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


def is_credentials_rejection(response: httpx.Response) -> bool:
    """True for a token endpoint answer that rejects the client ID/secret pair.

    Requires all three signals: a 4xx status, an ``invalid_client`` error
    body, and a ``Basic`` challenge.
    """
    return (
        is_client_error(response)
        and error_code(response) == "invalid_client"
        and is_basic_challenge(response)
    )


def raise_for_result(result: SendResult) -> NoReturn:
    """Raise the :class:`~symplur.exceptions.TransportError` for an unhandled result."""
    raise TransportError.from_response(result.response)
