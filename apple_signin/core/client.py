"""Sign in with Apple client bundling settings, key cache, and verifier."""

from typing import TypeVar

from pydantic import BaseModel

from apple_signin.core.settings import AppleSettings
from apple_signin.crypto.client_secret import get_client_secret
from apple_signin.crypto.types import (
    ClientSecretOptions,
    IdentityTokenClaims,
    VerifyOptions,
    WebhookTokenClaims,
)
from apple_signin.crypto.verifier import TokenVerifier
from apple_signin.http.transport import FetchFn
from apple_signin.keys.cache import KeyCache
from apple_signin.keys.fetcher import KeySetFetcher
from apple_signin.keys.resolver import CachedKeyResolver, KeyResolver
from apple_signin.oidc import token_service
from apple_signin.oidc.authorize import get_authorization_url
from apple_signin.oidc.types import (
    AuthorizationTokenOptions,
    AuthorizationUrlOptions,
    RefreshTokenOptions,
    RevokeTokenOptions,
    TokenEndpointResult,
)

_M = TypeVar("_M", bound=BaseModel)


def _fill_missing(options: _M, **defaults: object) -> _M:
    """Copy ``options`` with empty fields taken from ``defaults``."""
    update = {
        name: value
        for name, value in defaults.items()
        if value and not getattr(options, name)
    }
    return options.model_copy(update=update) if update else options


class AppleAuthClient:
    """Entry point for every Sign in with Apple operation.

    Each client owns its key cache, so several configurations can coexist
    in one process. Without an explicit ``fetch`` the process-wide fetch
    function is looked up on every call.
    """

    def __init__(
        self,
        settings: AppleSettings | None = None,
        *,
        key_cache: KeyCache | None = None,
        fetch: FetchFn | None = None,
        resolver: KeyResolver | None = None,
    ) -> None:
        self._settings = settings or AppleSettings()
        self._fetch = fetch
        self._key_cache = key_cache if key_cache is not None else KeyCache()
        self._fetcher = KeySetFetcher(
            self._key_cache, endpoint_url=self._settings.base_url, fetch=fetch
        )
        self._resolver = resolver or CachedKeyResolver(self._key_cache, self._fetcher)
        self._verifier = TokenVerifier(self._resolver)

    @property
    def settings(self) -> AppleSettings:
        return self._settings

    @property
    def key_cache(self) -> KeyCache:
        return self._key_cache

    @property
    def verifier(self) -> TokenVerifier:
        return self._verifier

    def get_authorization_url(
        self, options: AuthorizationUrlOptions | None = None
    ) -> str:
        """Build the authorization URL, defaulting ids from settings."""
        opts = _fill_missing(
            options or AuthorizationUrlOptions(),
            client_id=self._settings.client_id,
            redirect_uri=self._settings.redirect_uri,
        )
        return get_authorization_url(opts, endpoint_url=self._settings.base_url)

    def get_client_secret(self, options: ClientSecretOptions | None = None) -> str:
        """Sign a client secret.

        A private key given in ``options`` takes precedence over both key
        settings, so the one-of check only sees the caller's choice.
        """
        opts = _fill_missing(
            options or ClientSecretOptions(),
            client_id=self._settings.client_id,
            team_id=self._settings.team_id,
            key_identifier=self._settings.key_identifier,
            exp_after=self._settings.client_secret_ttl,
        )
        if not opts.private_key and not opts.private_key_path:
            opts = opts.model_copy(
                update={
                    "private_key": self._settings.private_key,
                    "private_key_path": self._settings.private_key_path,
                }
            )
        return get_client_secret(opts, endpoint_url=self._settings.base_url)

    async def get_authorization_token(
        self, code: str, options: AuthorizationTokenOptions | None = None
    ) -> TokenEndpointResult:
        opts = _fill_missing(
            options or AuthorizationTokenOptions(),
            client_id=self._settings.client_id,
            redirect_uri=self._settings.redirect_uri,
        )
        return await token_service.get_authorization_token(
            code, opts, endpoint_url=self._settings.base_url, fetch=self._fetch
        )

    async def refresh_authorization_token(
        self, refresh_token: str, options: RefreshTokenOptions | None = None
    ) -> TokenEndpointResult:
        opts = _fill_missing(
            options or RefreshTokenOptions(), client_id=self._settings.client_id
        )
        return await token_service.refresh_authorization_token(
            refresh_token, opts, endpoint_url=self._settings.base_url, fetch=self._fetch
        )

    async def revoke_authorization_token(
        self, token: str, options: RevokeTokenOptions | None = None
    ) -> TokenEndpointResult:
        opts = _fill_missing(
            options or RevokeTokenOptions(), client_id=self._settings.client_id
        )
        return await token_service.revoke_authorization_token(
            token, opts, endpoint_url=self._settings.base_url, fetch=self._fetch
        )

    async def get_apple_public_keys(
        self, *, disable_caching: bool = False
    ) -> list[str]:
        """Fetch Apple's current public keys as PEM strings."""
        return await self._fetcher.fetch_keys(disable_caching=disable_caching)

    async def verify_id_token(
        self, id_token: str, options: VerifyOptions | None = None
    ) -> IdentityTokenClaims:
        return await self._verifier.verify_id_token(id_token, options)

    async def verify_webhook_token(
        self, webhook_token: str, options: VerifyOptions | None = None
    ) -> WebhookTokenClaims:
        return await self._verifier.verify_webhook_token(webhook_token, options)
