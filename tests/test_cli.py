"""CLI tests using Typer's CliRunner.

API-calling commands get a mock-backed client by replacing
``symplur.commands.session.open_client``; the config and token-cache
commands run against an isolated XDG directory.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path

import httpx
import pytest

from canned import BASE_URI, invalid_client, json_response, token_response
from symplur import __version__
from symplur.app import app
from symplur.cache import DiskTokenCache
from symplur.client import Client
from symplur.config import load_user_settings
from symplur.exceptions import ConfigurationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_client(monkeypatch: pytest.MonkeyPatch, responses: list[httpx.Response]) -> Client:
    """Route every command through one client that serves *responses*."""
    api = Client("myid", "mysecret", {"base_uri": BASE_URI})
    api.set_mock_responses(responses)

    @contextmanager
    def fake_open_client(ctx):
        yield api

    monkeypatch.setattr("symplur.commands.session.open_client", fake_open_client)
    return api


# ---------------------------------------------------------------------------
# Root options
# ---------------------------------------------------------------------------


class TestRoot:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "Usage" in result.output


# ---------------------------------------------------------------------------
# Request commands
# ---------------------------------------------------------------------------


class TestRequestCommands:
    def test_get_prints_json(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        api = _mock_client(monkeypatch, [token_response(), json_response({"title": "Da page"})])

        result = cli_runner.invoke(app, ["--json", "get", "/foo/yak", "-p", "limit=5"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"title": "Da page"}
        assert api.transaction_log[1].request.url.params["limit"] == "5"

    def test_post_sends_form_fields(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        api = _mock_client(monkeypatch, [token_response(), json_response({"id": 7})])

        result = cli_runner.invoke(
            app, ["--json", "post", "/projects", "-d", "name=hcsm", "-d", "public=1"]
        )

        assert result.exit_code == 0, result.output
        request = api.transaction_log[1].request
        assert request.method == "POST"
        assert request.content == b"name=hcsm&public=1"

    @pytest.mark.parametrize("verb", ["put", "patch", "delete"])
    def test_other_verbs(self, cli_runner, monkeypatch: pytest.MonkeyPatch, verb: str) -> None:
        api = _mock_client(monkeypatch, [token_response(), json_response({"ok": True})])

        result = cli_runner.invoke(app, ["--json", verb, "/things/1", "-d", "a=b"])

        assert result.exit_code == 0, result.output
        assert api.transaction_log[1].request.method == verb.upper()

    def test_not_found_exits_4(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [token_response(), httpx.Response(404)])

        result = cli_runner.invoke(app, ["--no-color", "get", "/missing"])

        assert result.exit_code == 4
        assert "Not found: /missing" in result.output

    def test_invalid_credentials_exit_3(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [invalid_client()])

        result = cli_runner.invoke(app, ["--no-color", "get", "/foo"])

        assert result.exit_code == 3
        assert "Invalid or missing client credentials" in result.output

    def test_bad_json_exit_7(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [token_response(), httpx.Response(200, text="<html>")])

        result = cli_runner.invoke(app, ["--no-color", "get", "/foo"])

        assert result.exit_code == 7

    def test_server_error_exit_5(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [token_response(), httpx.Response(502)])

        result = cli_runner.invoke(app, ["--no-color", "get", "/foo"])

        assert result.exit_code == 5
        assert "HTTP 502" in result.output

    def test_malformed_pair(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [])

        result = cli_runner.invoke(app, ["get", "/foo", "-p", "novalue"])

        assert result.exit_code == 2

    def test_missing_credentials_exit_2(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "get", "/foo"])

        assert result.exit_code == 2
        assert "SYMPLUR_CLIENT_ID" in result.output

    def test_verbose_traces_requests(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [token_response(), json_response({})])

        result = cli_runner.invoke(app, ["--no-color", "-v", "get", "/foo"])

        assert result.exit_code == 0, result.output
        assert "[debug] GET http://example.com/foo" in result.output


# ---------------------------------------------------------------------------
# Token commands
# ---------------------------------------------------------------------------


class TestTokenCommands:
    def test_show(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [token_response("shown-token")])

        result = cli_runner.invoke(app, ["token", "show"])

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "shown-token"

    def test_show_refresh(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        api = _mock_client(monkeypatch, [token_response("fresh")])
        api.set_access_token("old")

        result = cli_runner.invoke(app, ["token", "show", "--refresh"])

        assert result.exit_code == 0, result.output
        assert "fresh" in result.stdout
        assert len(api.transaction_log) == 1

    def test_show_bad_credentials(self, cli_runner, monkeypatch: pytest.MonkeyPatch) -> None:
        _mock_client(monkeypatch, [invalid_client()])

        result = cli_runner.invoke(app, ["token", "show"])

        assert result.exit_code == 3

    def test_clear(self, cli_runner, isolated_config: Path) -> None:
        from symplur.config import get_cache_dir

        cache = DiskTokenCache(get_cache_dir(), namespace="myid")
        cache.set("access_token", "abc")
        cache.close()

        result = cli_runner.invoke(app, ["--no-color", "token", "clear"])

        assert result.exit_code == 0, result.output
        assert "cleared" in result.output
        reopened = DiskTokenCache(get_cache_dir(), namespace="myid")
        try:
            assert reopened.get("access_token") is None
        finally:
            reopened.close()


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


class TestConfigCommands:
    def test_init_then_show(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app,
            [
                "--no-color",
                "config",
                "init",
                "--client-id-source",
                "value:abc",
                "--base-uri",
                "http://configured.example.com",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Configuration written" in result.output

        result = cli_runner.invoke(app, ["--json", "config", "show"])

        assert result.exit_code == 0, result.output
        assert "http://configured.example.com" in result.output
        assert "value:abc" in result.output

    def test_show_applies_root_overrides(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(
            app, ["--json", "--base-uri", "http://flag.example.com", "config", "show"]
        )

        assert result.exit_code == 0, result.output
        assert "http://flag.example.com" in result.output

    def test_set_coerces_type(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "options.timeout", "30"])

        assert result.exit_code == 0, result.output
        assert load_user_settings().options.timeout == 30.0

    def test_set_bool(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "persist_token", "false"])

        assert result.exit_code == 0, result.output
        assert load_user_settings().persist_token is False

    def test_set_unknown_key(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "options.nope", "1"])

        assert result.exit_code == 2

    def test_set_invalid_value(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["config", "set", "options.timeout", "0"])

        assert result.exit_code == 2
        assert load_user_settings().options.timeout == 600


# ---------------------------------------------------------------------------
# Session wiring
# ---------------------------------------------------------------------------


class TestOpenClient:
    def test_builds_client_from_settings(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from symplur.commands.session import open_client

        monkeypatch.setenv("SYMPLUR_CLIENT_ID", "env-id")
        monkeypatch.setenv("SYMPLUR_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("SYMPLUR_BASE_URI", "http://env.example.com")

        with open_client(None) as api:
            assert api.base_uri == "http://env.example.com"
            assert isinstance(api.token_manager.cache, DiskTokenCache)
            assert api.token_manager.credentials.client_id == "env-id"

    def test_persist_token_off(self, isolated_config: Path) -> None:
        from symplur.commands.session import open_client
        from symplur.config import save_settings
        from symplur.models import Settings

        save_settings(
            Settings(
                client_id_source="value:id",
                client_secret_source="value:secret",
                persist_token=False,
            )
        )

        with open_client(None) as api:
            assert not api.token_manager.cache.enabled

    def test_missing_credentials(self, isolated_config: Path) -> None:
        from symplur.commands.session import open_client

        with pytest.raises(ConfigurationError):
            with open_client(None):
                pass


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


class TestMain:
    @pytest.fixture(autouse=True)
    def _keep_sigint(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("symplur.app.signal.signal", lambda signum, handler: None)

    def test_symplur_error_maps_to_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, capsys
    ) -> None:
        from symplur import app as app_module
        from symplur.exceptions import CredentialsError

        def boom() -> None:
            raise CredentialsError("Invalid or missing client credentials for http://x")

        monkeypatch.setattr(app_module, "app", boom)

        with pytest.raises(SystemExit) as exc_info:
            app_module.main()

        assert exc_info.value.code == 3
        assert "Invalid or missing client credentials" in capsys.readouterr().err

    def test_unexpected_error_writes_crash_log(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from symplur import app as app_module
        from symplur.config import get_data_dir

        def boom() -> None:
            raise RuntimeError("kaput")

        monkeypatch.setattr(app_module, "app", boom)

        with pytest.raises(SystemExit) as exc_info:
            app_module.main()

        assert exc_info.value.code == 1
        (log,) = (get_data_dir() / "logs").iterdir()
        assert "RuntimeError: kaput" in log.read_text()
