"""Construction, options, and response handling shared by both clients.

:class:`ClientBase` validates credentials, normalises options and cache
arguments, and owns the two pieces of per-attempt logic the sync and async
executors have in common: building the auth headers and turning a
:class:`~symplur.results.SendResult` into the caller's return value.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError

from symplur.cache import CallableTokenCache, TokenCache, build_token_cache
from symplur.exceptions import ConfigurationError, UnauthorizedTokenError
from symplur.models import ClientOptions, Credentials, HTTPMethod, RequestDescriptor
from symplur.results import Outcome, SendResult, decode_json, raise_for_result

OptionsArg = Union[ClientOptions, Mapping[str, Any], None]

_CACHE_KEYS = ("cache", "cache_getter", "cache_setter")


def coerce_options(options: OptionsArg) -> ClientOptions:
    """Accept a :class:`ClientOptions`, a plain mapping, or ``None``.

    Raises:
        ConfigurationError: If a mapping fails validation.
    """
    if options is None:
        return ClientOptions()
    if isinstance(options, ClientOptions):
        return options
    try:
        return ClientOptions.model_validate(dict(options))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid client options: {exc}") from exc


class ClientBase:
    """State and helpers common to :class:`~symplur.client.Client` and
    :class:`~symplur.client.AsyncClient`.

    Raises:
        ConfigurationError: On an empty client ID or secret, invalid options,
            or a non-callable cache accessor. Nothing touches the network
            before these checks pass.
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
        if not client_id:
            raise ConfigurationError("Client ID is empty")
        if not client_secret:
            raise ConfigurationError("Client Secret is empty")

        self._credentials = Credentials(client_id=client_id, client_secret=client_secret)
        self._options = coerce_options(options)
        self._initial_cache = build_token_cache(cache, cache_getter, cache_setter)

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def base_uri(self) -> str:
        return self._options.base_uri

    def _split_option_changes(
        self, changes: dict[str, Any], current_cache: TokenCache
    ) -> tuple[Optional[TokenCache], Optional[ClientOptions]]:
        """Separate cache arguments from transport options in a ``set_options`` call.

        Passing only one of ``cache_getter``/``cache_setter`` keeps the other
        accessor of a callable cache already in place.
        """
        cache_args = {key: changes.pop(key) for key in _CACHE_KEYS if key in changes}
        keeps_accessor = cache_args and "cache" not in cache_args
        if keeps_accessor and isinstance(current_cache, CallableTokenCache):
            cache_args.setdefault("cache_getter", current_cache.getter)
            cache_args.setdefault("cache_setter", current_cache.setter)
        cache = build_token_cache(**cache_args) if cache_args else None
        options = None
        if changes:
            merged = {**self._options.model_dump(), **changes}
            options = coerce_options(merged)
        return cache, options

    def _auth_headers(self, token: str) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {token}"}
        if self._options.prefer:
            headers["Prefer"] = self._options.prefer
        return headers

    @staticmethod
    def _describe(
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]],
        data: Optional[Mapping[str, Any]],
    ) -> RequestDescriptor:
        try:
            verb = HTTPMethod(method.upper())
        except ValueError:
            raise ConfigurationError(f"Unsupported HTTP method: {method}") from None
        return RequestDescriptor(
            method=verb,
            path=path,
            params=dict(params) if params else None,
            data=dict(data) if data else None,
        )

    @staticmethod
    def _finish(result: SendResult, retried: bool) -> Any:
        """Map the final attempt's result to a return value or an exception."""
        if result.outcome is Outcome.SUCCESS:
            return decode_json(result.response)
        if result.outcome is Outcome.NOT_FOUND:
            return None
        if result.outcome is Outcome.UNAUTHORIZED and retried:
            raise UnauthorizedTokenError(
                f"Access token rejected again after re-authenticating "
                f"(HTTP {result.status_code})",
                response=result.response,
            )
        raise_for_result(result)
