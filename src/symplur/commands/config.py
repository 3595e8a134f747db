"""Config commands -- view and modify the persisted settings.

Settings live in ``config.json`` inside the symplur config directory (see
:func:`~symplur.config.get_config_dir`) and hold credential *sources*,
never the secrets themselves.

Example::

    symplur config init --client-id-source env:MY_ID --client-secret-source file:~/.secret
    symplur config set options.timeout 30
    symplur config show --json
"""

from __future__ import annotations

from typing import Any, NoReturn, Optional

import typer

from symplur.exit_codes import EXIT_CONFIG_ERROR
from symplur.output import error, format_response, info, success, suggest

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration, after env and CLI overrides."""
    from symplur.commands.session import load_context_settings
    from symplur.config import get_config_dir
    from symplur.exceptions import SymplurError

    try:
        settings = load_context_settings(ctx)
    except SymplurError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    info(f"Config directory: {get_config_dir()}")
    format_response(settings.model_dump(mode="json"))


@config_app.command("init")
def config_init(
    client_id_source: str = typer.Option(
        "env:SYMPLUR_CLIENT_ID", help="Where to read the client ID (env:, file:, prompt, value:)."
    ),
    client_secret_source: str = typer.Option(
        "env:SYMPLUR_CLIENT_SECRET", help="Where to read the client secret."
    ),
    base_uri: Optional[str] = typer.Option(None, help="API base URI."),
    persist_token: bool = typer.Option(
        True, "--persist-token/--no-persist-token", help="Keep tokens in the disk cache."
    ),
) -> None:
    """Write a fresh configuration file, replacing any existing one."""
    from symplur.config import save_settings
    from symplur.models import ClientOptions, Settings

    options = ClientOptions(base_uri=base_uri) if base_uri else ClientOptions()
    settings = Settings(
        client_id_source=client_id_source,
        client_secret_source=client_secret_source,
        options=options,
        persist_token=persist_token,
    )
    path = save_settings(settings)
    success(f"Configuration written to {path}")
    suggest("Verify it: symplur token show --refresh")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted config key, e.g. 'options.timeout'."),
    value: str = typer.Argument(help="New value; 'null' clears an optional field."),
) -> None:
    """Set one value in the user config file.

    The text is validated against the field's type, so ``30`` is accepted
    for a number and ``false`` for a flag. Nothing is written unless the
    whole configuration still validates.
    """
    from pydantic import ValidationError

    from symplur.config import load_user_settings, save_settings
    from symplur.exceptions import SymplurError
    from symplur.models import Settings

    try:
        data = load_user_settings().model_dump(mode="json")
    except SymplurError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    *parents, leaf = key.split(".")
    section: Any = data
    for part in parents:
        section = section.get(part)
        if not isinstance(section, dict):
            _fail(f"Invalid config key: {key}")
    if leaf not in section:
        _fail(f"Unknown config key: {key}")
    section[leaf] = None if value.lower() in ("null", "none") else value

    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        _fail(f"Invalid value for {key}: {exc.errors()[0]['msg']}")

    save_settings(settings)
    success(f"Set {key} = {value}")


def _fail(message: str) -> NoReturn:
    error(message)
    raise typer.Exit(code=EXIT_CONFIG_ERROR)
