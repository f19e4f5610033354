"""Authorization URL builder."""

from urllib.parse import urlencode

from apple_signin.core.errors import InvalidOptionsError
from apple_signin.core.settings import APPLE_ENDPOINT_URL
from apple_signin.oidc.types import AuthorizationUrlOptions

AUTHORIZE_PATH = "/auth/authorize"
DEFAULT_STATE = "state"


def _build_scope(scope: str | None) -> str:
    """Prefix the requested scope with ``openid``."""
    if not scope:
        return "openid"
    return f"openid {scope}"


def get_authorization_url(
    options: AuthorizationUrlOptions, endpoint_url: str = APPLE_ENDPOINT_URL
) -> str:
    """Build the URL that starts the Sign in with Apple flow."""
    if not options.client_id:
        raise InvalidOptionsError("clientID is empty")
    if not options.redirect_uri:
        raise InvalidOptionsError("redirectUri is empty")

    params = {
        "response_type": "code",
        "state": options.state or DEFAULT_STATE,
        "client_id": options.client_id,
        "redirect_uri": options.redirect_uri,
        "scope": _build_scope(options.scope),
    }
    if options.scope and "email" in options.scope:
        # Apple only returns the email with a form_post response.
        params["response_mode"] = "form_post"
    elif options.response_mode:
        params["response_mode"] = options.response_mode

    return f"{endpoint_url.rstrip('/')}{AUTHORIZE_PATH}?{urlencode(params)}"
