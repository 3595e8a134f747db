"""Numeric process exit codes used by the ``symplur`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~symplur.exceptions.SymplurError` subclass.
Shell scripts can inspect the exit code to tell a rejected credential pair
from a missing resource without parsing stderr.

Example::

    $ symplur get /twitter/analytics/hashtags/foo
    $ echo $?
    4   # EXIT_NOT_FOUND -- the API answered 404
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIG_ERROR = 2
"""The client was configured with missing or invalid values."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_BAD_RESPONSE = 7
"""The API answered with a body that could not be decoded as JSON."""
