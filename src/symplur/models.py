"""Pydantic models shared across symplur modules.

**Configuration models** -- :class:`ClientOptions` controls how the client
talks to the API, and :class:`Settings` is what the command line persists
as JSON in the user's config directory.

**Protocol models** -- :class:`Credentials`, :class:`RequestDescriptor`, and
:class:`TokenResponse` describe the values exchanged with the token endpoint
and the API.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URI = "https://api.symplur.com/v1"
DEFAULT_TOKEN_PATH = "oauth/token"
DEFAULT_USER_AGENT = "SymplurApiSdk/1.0"
DEFAULT_TIMEOUT = 600.0


# --- Configuration ---


class ClientOptions(BaseModel):
    """Transport and protocol settings for a :class:`~symplur.client.Client`.

    None of these values are interpreted by the token or retry logic; they
    are passed through to :mod:`httpx` verbatim.

    Example::

        ClientOptions(base_uri="https://staging.example.com/v1", timeout=30)
    """

    base_uri: str = Field(
        default=DEFAULT_BASE_URI, description="API root all relative paths resolve against"
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Product token prefixed to httpx's own User-Agent",
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers sent with every request"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    prefer: Optional[str] = Field(
        default="representation=minimal",
        description="Value of the Prefer header on API requests (None disables it)",
    )
    token_path: str = Field(
        default=DEFAULT_TOKEN_PATH, description="Token endpoint, relative to base_uri"
    )
    record_transactions: bool = Field(
        default=False,
        description="Keep a transaction log even when no mock responses are installed",
    )

    @field_validator("base_uri")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class Settings(BaseModel):
    """Command-line configuration persisted at ``~/.config/symplur/config.json``.

    Credential fields hold *source descriptors* rather than secrets; they
    are resolved by :func:`~symplur.config.resolve_credential` at call time.
    """

    model_config = ConfigDict(extra="allow")

    client_id_source: str = Field(
        default="env:SYMPLUR_CLIENT_ID",
        description="Credential source: env:VAR, file:/path, prompt, value:LITERAL",
    )
    client_secret_source: str = Field(default="env:SYMPLUR_CLIENT_SECRET")
    options: ClientOptions = Field(default_factory=ClientOptions)
    persist_token: bool = Field(
        default=True, description="Keep the access token in the on-disk token cache"
    )


# --- Protocol ---


class Credentials(BaseModel):
    """Immutable OAuth2 client ID/secret pair."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: str

    def as_basic_auth(self) -> tuple[str, str]:
        return (self.client_id, self.client_secret)


class HTTPMethod(str, enum.Enum):
    """HTTP verbs exposed by the client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class RequestDescriptor(BaseModel):
    """One logical API call, identical across the original attempt and the retry.

    ``params`` are sent as a query string and ``data`` as a form-encoded
    body. Authorization headers are deliberately absent: they are
    recomputed for every attempt because the token may change in between.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    params: Optional[dict[str, Any]] = None
    data: Optional[dict[str, Any]] = None

    @property
    def relative_path(self) -> str:
        """The path with leading slashes removed so it resolves under ``base_uri``."""
        return self.path.lstrip("/")


class TokenResponse(BaseModel):
    """Body of a successful client-credentials token response.

    Only ``access_token`` is checked. The other fields are kept as sent,
    since providers disagree on their types.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str = Field(min_length=1)
    token_type: Any = None
    expires_in: Any = None
    scope: Any = None
