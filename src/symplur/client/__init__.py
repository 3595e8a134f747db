"""API clients for symplur.

Classes:
    :class:`Client` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncClient` -- coroutine client backed by :class:`httpx.AsyncClient`.

Both acquire OAuth2 client-credentials tokens on demand, re-authenticate
once when a token is rejected, and return ``None`` for 404 responses.

Example::

    from symplur.client import Client

    with Client(client_id, client_secret) as client:
        data = client.get("/users", params={"page": 2})
"""

from symplur.client.async_client import AsyncClient
from symplur.client.sync_client import Client

__all__ = ["AsyncClient", "Client"]
