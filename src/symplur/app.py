"""Typer application and CLI entry point for symplur.

Registers the request commands (``get``, ``post``, ``put``, ``patch``,
``delete``) and the ``token`` and ``config`` groups on one Typer app.
Root options configure the active :class:`~symplur.output.OutputManager`
and carry ``--base-uri`` / ``--timeout`` overrides to the commands via the
Typer context.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. A :class:`~symplur.exceptions.SymplurError` that
escapes a command exits with its ``exit_code``; any other exception is
written to a crash log under the data directory.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from symplur import __version__
from symplur.commands.config import config_app
from symplur.commands.request import (
    delete_command,
    get_command,
    patch_command,
    post_command,
    put_command,
)
from symplur.commands.token import token_app
from symplur.exceptions import SymplurError
from symplur.exit_codes import EXIT_GENERIC_FAILURE
from symplur.output import OutputFormat, OutputManager, error, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="symplur",
    help="Call an OAuth2 client-credentials protected JSON API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

for _verb, _command in (
    ("get", get_command),
    ("post", post_command),
    ("put", put_command),
    ("patch", patch_command),
    ("delete", delete_command),
):
    app.command(_verb)(_command)
app.add_typer(token_app, name="token", help="Access token management.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"symplur {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    base_uri: Optional[str] = typer.Option(
        None, "--base-uri", help="Override the API base URI."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print responses as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print responses as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print data, warnings and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace requests and token handling on stderr."
    ),
) -> None:
    """Install the output manager and stash overrides for sub-commands."""
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj.update(base_uri=base_uri, timeout=timeout)


def _on_interrupt(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log() -> Path:
    """Save the traceback being handled under ``<data dir>/logs`` and return its path."""
    from symplur.config import get_data_dir

    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    path = get_data_dir() / "logs" / f"crash-{stamp}.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(traceback.format_exc(), encoding="utf-8")
    return path


def main() -> None:
    """CLI entry point invoked by the ``symplur`` console script.

    Raises:
        SystemExit: Always, with the command's exit code.
    """
    signal.signal(signal.SIGINT, _on_interrupt)
    try:
        app()
    except SymplurError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        _on_interrupt(signal.SIGINT, None)
    except Exception:
        error(f"Unexpected error. Debug log: {_write_crash_log()}")
        sys.exit(EXIT_GENERIC_FAILURE)
