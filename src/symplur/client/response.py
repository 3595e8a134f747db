"""Bridge from decoded API results to the output system.

The command line prints whatever :meth:`~symplur.client.Client.request_json`
returns. :func:`format_api_result` sends data to stdout through
:meth:`~symplur.output.OutputManager.format_response` and turns the
``None`` that stands for a 404 into a stderr note and a non-zero exit code.
"""

from __future__ import annotations

from typing import Any

from symplur.exit_codes import EXIT_NOT_FOUND, EXIT_SUCCESS
from symplur.output import get_output


def format_api_result(data: Any, path: str) -> int:
    """Print *data* and return the exit code the command should finish with.

    Args:
        data: Decoded JSON, or ``None`` when the API answered 404.
        path: The requested path, used in the not-found message.

    Returns:
        :data:`~symplur.exit_codes.EXIT_SUCCESS` after printing data, or
        :data:`~symplur.exit_codes.EXIT_NOT_FOUND` when *data* is ``None``.
    """
    output = get_output()
    if data is None:
        output.warning(f"Not found: {path}")
        return EXIT_NOT_FOUND
    output.format_response(data)
    return EXIT_SUCCESS
