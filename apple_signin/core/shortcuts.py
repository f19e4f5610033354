"""Module-level functions backed by one process-wide client.

Options may be passed as the pydantic models or as plain mappings using
either the snake_case or the camelCase field names, e.g.
``get_client_secret({"clientID": ..., "teamID": ..., ...})``.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from apple_signin.core.client import AppleAuthClient
from apple_signin.crypto.types import (
    ClientSecretOptions,
    IdentityTokenClaims,
    VerifyOptions,
    WebhookTokenClaims,
)
from apple_signin.http.transport import reset_fetch, set_fetch
from apple_signin.oidc.types import (
    AuthorizationTokenOptions,
    AuthorizationUrlOptions,
    RefreshTokenOptions,
    RevokeTokenOptions,
    TokenEndpointResult,
)

__all__ = [
    "default_client",
    "get_apple_public_keys",
    "get_authorization_token",
    "get_authorization_url",
    "get_client_secret",
    "refresh_authorization_token",
    "reset_default_client",
    "reset_fetch",
    "revoke_authorization_token",
    "set_fetch",
    "verify_id_token",
    "verify_webhook_token",
]

_M = TypeVar("_M", bound=BaseModel)
Options = BaseModel | Mapping[str, Any] | None

_client: AppleAuthClient | None = None


def default_client() -> AppleAuthClient:
    """Return the process-wide client, creating it from the environment."""
    global _client
    if _client is None:
        _client = AppleAuthClient()
    return _client


def reset_default_client() -> None:
    """Drop the process-wide client and its key cache."""
    global _client
    _client = None


def _coerce(model: type[_M], options: Options) -> _M:
    if options is None:
        return model()
    if isinstance(options, model):
        return options
    return model.model_validate(options)


def get_authorization_url(options: Options = None) -> str:
    return default_client().get_authorization_url(
        _coerce(AuthorizationUrlOptions, options)
    )


def get_client_secret(options: Options = None) -> str:
    return default_client().get_client_secret(_coerce(ClientSecretOptions, options))


async def get_authorization_token(
    code: str, options: Options = None
) -> TokenEndpointResult:
    return await default_client().get_authorization_token(
        code, _coerce(AuthorizationTokenOptions, options)
    )


async def refresh_authorization_token(
    refresh_token: str, options: Options = None
) -> TokenEndpointResult:
    return await default_client().refresh_authorization_token(
        refresh_token, _coerce(RefreshTokenOptions, options)
    )


async def revoke_authorization_token(
    token: str, options: Options = None
) -> TokenEndpointResult:
    return await default_client().revoke_authorization_token(
        token, _coerce(RevokeTokenOptions, options)
    )


async def get_apple_public_keys(*, disable_caching: bool = False) -> list[str]:
    return await default_client().get_apple_public_keys(
        disable_caching=disable_caching
    )


async def verify_id_token(
    id_token: str, options: Options = None
) -> IdentityTokenClaims:
    return await default_client().verify_id_token(
        id_token, _coerce(VerifyOptions, options)
    )


async def verify_webhook_token(
    webhook_token: str, options: Options = None
) -> WebhookTokenClaims:
    return await default_client().verify_webhook_token(
        webhook_token, _coerce(VerifyOptions, options)
    )
