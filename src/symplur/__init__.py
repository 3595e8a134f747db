"""symplur -- OAuth2 client-credentials API client with transparent token refresh.

The client exchanges a client ID/secret for a bearer token on first use,
attaches it to every request, and when the API rejects the token it
fetches a new one and retries the request once. 404 answers come back as
``None`` instead of an exception.

Typical usage::

    from symplur import Client

    client = Client("my-client-id", "my-client-secret")
    data = client.get("/twitter/analytics/hashtags", params={"limit": 10})

Modules:
    client: Sync and async clients (the request executors).
    auth: Access-token lifecycle.
    cache: Token cache interface and implementations.
    results: Response classification helpers.
    transport: httpx transport with transaction log and mock responses.
    models: Pydantic models for options, settings, and protocol values.
    config: XDG-aware settings for the command line.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr output system with Rich support.
    app: Typer command-line entry point.
"""

__version__ = "1.0.0"

from symplur.client import AsyncClient, Client  # noqa: E402
from symplur.models import ClientOptions  # noqa: E402

__all__ = ["AsyncClient", "Client", "ClientOptions", "__version__"]
