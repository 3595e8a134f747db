"""Exception hierarchy for symplur.

All exceptions inherit from :class:`SymplurError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`symplur.exit_codes`.
The command-line entry point in :func:`symplur.app.main` catches
``SymplurError`` and exits with the appropriate code.

Only two API outcomes are handled inside the client: a ``Bearer`` challenge
(the access token is refreshed once) and ``404`` (``None`` is returned).
Everything else surfaces as one of the types below.

Subclass hierarchy::

    SymplurError                (exit 1)
    +-- ConfigurationError      (exit 2)
    +-- CredentialsError        (exit 3)
    +-- TokenResponseError      (exit 3)
    +-- BadJsonError            (exit 7)
    +-- TransportError          (exit depends on the HTTP status)
        +-- UnauthorizedTokenError  (exit 3)
        +-- ConnectionError_        (exit 6)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from symplur.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_BAD_RESPONSE,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)

if TYPE_CHECKING:
    import httpx


class SymplurError(Exception):
    """Base exception for all symplur errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(SymplurError):
    """Raised for missing or invalid client configuration.

    Covers an empty client ID or secret, a cache accessor that is not
    callable, an unreadable config file, or an unresolvable credential
    source. Always raised before any network activity.
    """

    exit_code = EXIT_CONFIG_ERROR


class CredentialsError(SymplurError):
    """Raised when the token endpoint rejects the client ID/secret pair itself.

    Detected by an ``invalid_client`` error body together with a ``Basic``
    challenge. Never retried.
    """

    exit_code = EXIT_AUTH_FAILURE


class TokenResponseError(SymplurError):
    """Raised when the token endpoint succeeds but returns no ``access_token``."""

    exit_code = EXIT_AUTH_FAILURE


class BadJsonError(SymplurError):
    """Raised when a response body cannot be decoded as JSON.

    Attributes:
        reason: The decoder's diagnostic message.
        position: Character offset where decoding failed, if known.
        body: The raw response text.
    """

    exit_code = EXIT_BAD_RESPONSE

    def __init__(self, reason: str, body: str, position: Optional[int] = None):
        self.reason = reason
        self.position = position
        self.body = body
        where = f" at position {position}" if position is not None else ""
        super().__init__(
            f'JSON error{where}: "{reason}" while trying to parse API response: {body}'
        )


class TransportError(SymplurError):
    """Raised for any HTTP error response the client does not handle itself.

    The original :class:`httpx.Response` is kept on :attr:`response` so that
    callers can inspect the status, headers, and body.

    Attributes:
        response: The offending response, or ``None`` for network failures.
        status_code: Shortcut for ``response.status_code`` (``None`` when
            there is no response).
    """

    def __init__(
        self,
        message: str,
        response: Optional[httpx.Response] = None,
        exit_code: int | None = None,
    ):
        self.response = response
        self.status_code = response.status_code if response is not None else None
        if exit_code is None and self.status_code is not None:
            exit_code = _exit_code_for_status(self.status_code)
        super().__init__(message, exit_code=exit_code)

    @classmethod
    def from_response(cls, response: httpx.Response) -> TransportError:
        """Build an error whose message names the status and a body excerpt."""
        reason = response.reason_phrase or ""
        message = f"HTTP {response.status_code} {reason}".rstrip()
        text = response.text[:200] if response.content else ""
        if text:
            message = f"{message}: {text}"
        return cls(message, response=response)


class UnauthorizedTokenError(TransportError):
    """Raised when a freshly acquired access token is rejected as well.

    The first ``Bearer`` challenge is handled by one transparent retry; this
    surfaces only when the retry is challenged again.
    """

    exit_code = EXIT_AUTH_FAILURE

    def __init__(self, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message, response=response, exit_code=EXIT_AUTH_FAILURE)


class ConnectionError_(TransportError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR

    def __init__(self, message: str):
        super().__init__(message, response=None, exit_code=EXIT_CONNECTION_ERROR)


def _exit_code_for_status(status: int) -> int:
    if status in (401, 403):
        return EXIT_AUTH_FAILURE
    if status == 404:
        return EXIT_NOT_FOUND
    if status >= 500:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE
