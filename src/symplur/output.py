"""Diagnostics and data output with strict stdout/stderr separation.

* **stdout** carries decoded API responses only, so ``symplur get ... | jq``
  keeps working.
* **stderr** carries everything else: debug traces from the client, status
  notes, warnings, and errors. Each message has a :class:`Level` that
  decides its prefix, its style, and whether ``--quiet`` hides it.
* Colour follows ``NO_COLOR``, ``TERM=dumb``, and the ``--no-color`` flag;
  Rich rendering is used only when stdout is an interactive terminal.

Library code never prints directly. It calls the module-level helpers
(:func:`debug`, :func:`warning`, ...) which route through the active
:class:`OutputManager`: the one installed by the CLI, or a default one
created on first use.
"""

from __future__ import annotations

import json
import os
import sys
from contextvars import ContextVar
from enum import Enum
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text


class OutputFormat(str, Enum):
    """Rendering used for response data on stdout.

    ``AUTO`` becomes ``RICH`` on a colour-capable TTY and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class Level(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    HINT = "hint"
    WARNING = "warning"
    ERROR = "error"


# level -> (prefix, rich style, shown under --quiet)
_LEVELS: dict[Level, tuple[str, str, bool]] = {
    Level.DEBUG: ("[debug] ", "dim", True),
    Level.INFO: ("", "", False),
    Level.SUCCESS: ("", "green", False),
    Level.HINT: ("→ ", "dim", False),
    Level.WARNING: ("Warning: ", "yellow", True),
    Level.ERROR: ("Error: ", "bold red", True),
}


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Desired data format. ``AUTO`` resolves based on TTY detection.
        no_color: Disable colour and Rich rendering of diagnostics.
        quiet: Hide info, success, and hint messages. Warnings and errors
            always show.
        verbose: Show :attr:`Level.DEBUG` messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self.color = not (no_color or _env_disables_color())
        self.quiet = quiet
        self.verbose = verbose
        self.format = _resolve_format(format, self.color)

        self._data_console = Console(
            file=sys.stdout,
            no_color=not self.color,
            force_terminal=self.format is OutputFormat.RICH,
        )
        self._note_console = Console(file=sys.stderr, no_color=not self.color, stderr=True)

    # Data (stdout)

    def format_response(self, data: Any) -> None:
        """Render a decoded API response to stdout in the active format."""
        if self.format is OutputFormat.JSON:
            self.print_data(_dump(data))
        elif self.format is OutputFormat.RICH and isinstance(data, (dict, list)):
            self._data_console.print(Syntax(_dump(data), "json", theme="monokai", word_wrap=True))
        else:
            for line in _plain_lines(data):
                self.print_data(line)

    def print_data(self, text: str) -> None:
        """Write raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    # Diagnostics (stderr)

    def shows(self, level: Level) -> bool:
        if level is Level.DEBUG:
            return self.verbose
        return _LEVELS[level][2] or not self.quiet

    def log(self, level: Level, message: str) -> None:
        """Write *message* to stderr if *level* is enabled.

        Messages are never parsed as Rich markup, so brackets in URLs or
        response bodies print as-is.
        """
        if not self.shows(level):
            return
        prefix, style, _ = _LEVELS[level]
        if self.color:
            self._note_console.print(Text(prefix + message, style=style))
        else:
            print(prefix + message, file=sys.stderr, flush=True)

    def debug(self, message: str) -> None:
        self.log(Level.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(Level.INFO, message)

    def success(self, message: str) -> None:
        self.log(Level.SUCCESS, message)

    def suggest(self, message: str) -> None:
        self.log(Level.HINT, message)

    def warning(self, message: str) -> None:
        self.log(Level.WARNING, message)

    def error(self, message: str) -> None:
        self.log(Level.ERROR, message)


def _resolve_format(requested: OutputFormat, color: bool) -> OutputFormat:
    if requested is not OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if color and _stdout_is_terminal() else OutputFormat.PLAIN


def _plain_lines(data: Any) -> Iterator[str]:
    """Tab-separated lines: ``key<TAB>value`` for objects, one row per list item."""
    if isinstance(data, dict):
        for key, value in data.items():
            yield f"{key}\t{_scalar(value)}"
    elif isinstance(data, list):
        for item in data:
            if isinstance(item, dict):
                yield "\t".join(_scalar(v) for v in item.values())
            else:
                yield _scalar(item)
    else:
        yield _scalar(data)


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _scalar(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _stdout_is_terminal() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _env_disables_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# Active manager

_active: ContextVar[Optional[OutputManager]] = ContextVar("symplur_output", default=None)


def get_output() -> OutputManager:
    """Return the active :class:`OutputManager`, creating a default one lazily."""
    manager = _active.get()
    if manager is None:
        manager = OutputManager()
        _active.set(manager)
    return manager


def set_output(output: OutputManager) -> None:
    """Make *output* the active manager."""
    _active.set(output)


def reset_output() -> None:
    """Forget the active manager. Used by the test suite between tests."""
    _active.set(None)


def format_response(data: Any) -> None:
    get_output().format_response(data)


def debug(message: str) -> None:
    get_output().log(Level.DEBUG, message)


def info(message: str) -> None:
    get_output().log(Level.INFO, message)


def success(message: str) -> None:
    get_output().log(Level.SUCCESS, message)


def suggest(message: str) -> None:
    get_output().log(Level.HINT, message)


def warning(message: str) -> None:
    get_output().log(Level.WARNING, message)


def error(message: str) -> None:
    get_output().log(Level.ERROR, message)
