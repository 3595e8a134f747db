"""Tests for symplur.client.response -- printing decoded API results."""

from __future__ import annotations

import json

import pytest

from symplur.client.response import format_api_result
from symplur.exit_codes import EXIT_NOT_FOUND, EXIT_SUCCESS
from symplur.output import OutputFormat, OutputManager, set_output


@pytest.fixture
def json_out() -> OutputManager:
    output = OutputManager(format=OutputFormat.JSON, no_color=True)
    set_output(output)
    return output


class TestFormatApiResult:
    def test_prints_json_to_stdout(self, capsys, json_out) -> None:
        code = format_api_result({"title": "Da page"}, "/foo")

        captured = capsys.readouterr()
        assert code == EXIT_SUCCESS
        assert json.loads(captured.out) == {"title": "Da page"}
        assert captured.err == ""

    def test_none_means_not_found(self, capsys, json_out) -> None:
        code = format_api_result(None, "/foo/missing")

        captured = capsys.readouterr()
        assert code == EXIT_NOT_FOUND
        assert captured.out == ""
        assert "Not found: /foo/missing" in captured.err

    def test_falsy_data_is_still_printed(self, capsys, json_out) -> None:
        code = format_api_result([], "/empty")

        assert code == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out) == []
