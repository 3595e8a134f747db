"""Turns resolved settings into a ready-to-use :class:`~symplur.client.Client`.

Every API-calling command goes through :func:`open_client`, so credentials,
options, and the on-disk token cache are wired up in one place.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from symplur.models import Settings


def _ctx_value(ctx: Optional[typer.Context], key: str) -> Any:
    if ctx is None or not ctx.obj:
        return None
    return ctx.obj.get(key)


def load_context_settings(ctx: Optional[typer.Context]) -> Settings:
    """Load settings, applying the ``--base-uri`` and ``--timeout`` root flags."""
    from symplur.config import load_settings

    return load_settings(
        cli_base_uri=_ctx_value(ctx, "base_uri"),
        cli_timeout=_ctx_value(ctx, "timeout"),
    )


@contextmanager
def open_client(ctx: Optional[typer.Context]) -> Iterator[Any]:
    """Yield a :class:`~symplur.client.Client` built from the active settings.

    The client (and the disk token cache, when ``persist_token`` is set)
    is closed on exit.

    Raises:
        ConfigurationError: If settings or credential sources are invalid.
    """
    from symplur.cache import DiskTokenCache
    from symplur.client import Client
    from symplur.config import get_cache_dir, resolve_credential

    settings = load_context_settings(ctx)
    client_id = resolve_credential(settings.client_id_source)
    client_secret = resolve_credential(settings.client_secret_source)

    cache = None
    if settings.persist_token and client_id:
        cache = DiskTokenCache(get_cache_dir(), namespace=client_id)
    try:
        with Client(client_id, client_secret, settings.options, cache=cache) as client:
            yield client
    finally:
        if cache is not None:
            cache.close()


def parse_pairs(pairs: Optional[list[str]], option: str) -> dict[str, str]:
    """Parse repeated ``key=value`` option values into a dict.

    Raises:
        typer.BadParameter: If an item has no ``=``.
    """
    result: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(
                f"Expected key=value, got '{pair}'", param_hint=option
            )
        result[key] = value
    return result
