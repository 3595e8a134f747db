"""Request commands -- ``symplur get|post|put|patch|delete PATH``.

Each command sends one authenticated request through
:class:`~symplur.client.Client` and prints the decoded JSON body to stdout.
``get`` takes query parameters (``-p key=value``); the other verbs take
form fields (``-d key=value``).

Exit codes follow :mod:`symplur.exit_codes`: a 404 exits with ``4``, a
rejected client ID/secret with ``3``, and so on.

Example::

    symplur get /twitter/analytics/hashtags -p limit=10
    symplur post /projects -d name=hcsm -d public=1
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from symplur.output import error

_PARAM_HELP = "Query parameter as key=value (repeatable)."
_DATA_HELP = "Form field as key=value (repeatable)."


def _run(
    ctx: typer.Context,
    method: str,
    path: str,
    params: Optional[dict[str, Any]] = None,
    data: Optional[dict[str, Any]] = None,
) -> None:
    """Send the request, print the result, and exit with the mapped code."""
    from symplur.client.response import format_api_result
    from symplur.commands.session import open_client
    from symplur.exceptions import SymplurError

    try:
        with open_client(ctx) as client:
            result = client.request_json(method, path, params=params, data=data)
    except SymplurError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    code = format_api_result(result, path)
    if code:
        raise typer.Exit(code=code)


def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Path relative to the API base URI."),
    param: Optional[list[str]] = typer.Option(None, "--param", "-p", help=_PARAM_HELP),
) -> None:
    """Send a GET request and print the JSON response."""
    from symplur.commands.session import parse_pairs

    _run(ctx, "GET", path, params=parse_pairs(param, "--param"))


def _body_command(method: str):
    def command(
        ctx: typer.Context,
        path: str = typer.Argument(help="Path relative to the API base URI."),
        field: Optional[list[str]] = typer.Option(None, "--data", "-d", help=_DATA_HELP),
    ) -> None:
        from symplur.commands.session import parse_pairs

        _run(ctx, method, path, data=parse_pairs(field, "--data"))

    command.__name__ = f"{method.lower()}_command"
    command.__doc__ = f"Send a {method} request with a form body and print the JSON response."
    return command


post_command = _body_command("POST")
put_command = _body_command("PUT")
patch_command = _body_command("PATCH")
delete_command = _body_command("DELETE")
