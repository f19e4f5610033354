"""Authorization code exchange, token refresh, and revocation."""

from apple_signin.core.errors import InvalidOptionsError
from apple_signin.core.settings import APPLE_ENDPOINT_URL
from apple_signin.http.transport import (
    FetchFn,
    FetchRequest,
    get_fetch,
    parse_json_body,
)
from apple_signin.oidc.types import (
    AuthorizationTokenOptions,
    ClientCredentials,
    RefreshTokenOptions,
    RevokeTokenOptions,
    TokenEndpointResult,
)

TOKEN_PATH = "/auth/token"
REVOKE_PATH = "/auth/revoke"


def _check_credentials(options: ClientCredentials) -> None:
    if not options.client_id:
        raise InvalidOptionsError("clientID is empty")
    if not options.client_secret:
        raise InvalidOptionsError("clientSecret is empty")


async def _post_form(
    url: str, data: dict[str, str], fetch: FetchFn | None
) -> TokenEndpointResult:
    """POST a form body and parse the response, whatever its status."""
    fetch_fn = fetch or get_fetch()
    body = await fetch_fn(FetchRequest(method="POST", url=url, data=data))
    return parse_json_body(body)


async def get_authorization_token(
    code: str,
    options: AuthorizationTokenOptions,
    *,
    endpoint_url: str = APPLE_ENDPOINT_URL,
    fetch: FetchFn | None = None,
) -> TokenEndpointResult:
    """Exchange an authorization code for access, refresh, and id tokens."""
    _check_credentials(options)
    data = {
        "client_id": options.client_id,
        "client_secret": options.client_secret,
        "code": code,
        "grant_type": "authorization_code",
    }
    if options.redirect_uri:
        data["redirect_uri"] = options.redirect_uri
    if options.code_verifier:
        data["code_verifier"] = options.code_verifier
    return await _post_form(endpoint_url.rstrip("/") + TOKEN_PATH, data, fetch)


async def refresh_authorization_token(
    refresh_token: str,
    options: RefreshTokenOptions,
    *,
    endpoint_url: str = APPLE_ENDPOINT_URL,
    fetch: FetchFn | None = None,
) -> TokenEndpointResult:
    """Get a new access token with a refresh token."""
    _check_credentials(options)
    data = {
        "client_id": options.client_id,
        "client_secret": options.client_secret,
        "refresh_token": refresh_token,
        "grant_type": "refresh_token",
    }
    return await _post_form(endpoint_url.rstrip("/") + TOKEN_PATH, data, fetch)


async def revoke_authorization_token(
    token: str,
    options: RevokeTokenOptions,
    *,
    endpoint_url: str = APPLE_ENDPOINT_URL,
    fetch: FetchFn | None = None,
) -> TokenEndpointResult:
    """Revoke an access or refresh token. Apple answers with an empty body."""
    _check_credentials(options)
    data = {
        "client_id": options.client_id,
        "client_secret": options.client_secret,
        "token": token,
        "token_type_hint": options.token_type_hint,
    }
    return await _post_form(endpoint_url.rstrip("/") + REVOKE_PATH, data, fetch)
