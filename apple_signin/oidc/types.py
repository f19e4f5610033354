"""Option models for the authorization, token, and revocation calls."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ResponseMode = Literal["query", "fragment", "form_post"]
TokenTypeHint = Literal["refresh_token", "access_token"]

# Parsed JSON body of a token or revoke response, or "" for an empty body.
TokenEndpointResult = dict[str, Any] | str


class AuthorizationUrlOptions(BaseModel):
    """Query parameters of the ``/auth/authorize`` URL."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(default="", alias="clientID")
    redirect_uri: str = Field(default="", alias="redirectUri")
    response_mode: ResponseMode | None = Field(default=None, alias="responseMode")
    state: str | None = None
    scope: str | None = None


class ClientCredentials(BaseModel):
    """Client authentication shared by the token and revoke calls."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(default="", alias="clientID")
    client_secret: str = Field(default="", alias="clientSecret")


class AuthorizationTokenOptions(ClientCredentials):
    """Options for exchanging an authorization code."""

    redirect_uri: str | None = Field(default=None, alias="redirectUri")
    code_verifier: str | None = Field(default=None, alias="codeVerifier")


class RefreshTokenOptions(ClientCredentials):
    """Options for refreshing an access token."""


class RevokeTokenOptions(ClientCredentials):
    """Options for revoking a token."""

    token_type_hint: TokenTypeHint = Field(
        default="refresh_token", alias="tokenTypeHint"
    )
