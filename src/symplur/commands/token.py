"""Token commands -- inspect or discard the cached access token.

Typical workflow::

    symplur token show            # print the token, exchanging if needed
    symplur token show --refresh  # force a new client-credentials exchange
    symplur token clear           # forget every token in the on-disk cache
"""

from __future__ import annotations

import typer

from symplur.output import error, get_output, success

token_app = typer.Typer(no_args_is_help=True)


@token_app.command("show")
def token_show(
    ctx: typer.Context,
    refresh: bool = typer.Option(
        False, "--refresh", "-r", help="Discard the current token and fetch a new one."
    ),
) -> None:
    """Print the current access token to stdout.

    Reuses the cached token when there is one. With ``--refresh`` the
    cached token is discarded first, which also verifies the configured
    client ID and secret against the token endpoint.
    """
    from symplur.commands.session import open_client
    from symplur.exceptions import SymplurError

    try:
        with open_client(ctx) as client:
            if refresh:
                client.token_manager.invalidate()
            token = client.get_access_token()
    except SymplurError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    get_output().print_data(token)


@token_app.command("clear")
def token_clear() -> None:
    """Remove all access tokens from the on-disk token cache."""
    from symplur.cache import DiskTokenCache
    from symplur.config import get_cache_dir

    cache = DiskTokenCache(get_cache_dir())
    try:
        cache.clear()
    finally:
        cache.close()
    success("Token cache cleared.")
