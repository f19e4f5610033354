"""Retrieval of Apple's published JSON Web Key Set."""

import logging

from apple_signin.core.settings import APPLE_ENDPOINT_URL
from apple_signin.crypto.keys import jwk_entry_to_pem
from apple_signin.crypto.types import JWKSResponse
from apple_signin.http.transport import (
    FetchFn,
    FetchRequest,
    get_fetch,
    parse_json_body,
)
from apple_signin.keys.cache import KeyCache

logger = logging.getLogger(__name__)

KEYS_PATH = "/auth/keys"


class KeySetFetcher:
    """Fetches Apple's public keys and refills a ``KeyCache``."""

    def __init__(
        self,
        cache: KeyCache,
        endpoint_url: str = APPLE_ENDPOINT_URL,
        fetch: FetchFn | None = None,
    ) -> None:
        self._cache = cache
        self._url = endpoint_url.rstrip("/") + KEYS_PATH
        self._fetch = fetch

    @property
    def url(self) -> str:
        return self._url

    async def fetch_keys(self, *, disable_caching: bool = False) -> list[str]:
        """Fetch the current key set and return the keys as PEM strings.

        The cache is emptied once the response body has been read. Unless
        ``disable_caching`` is set, it is then refilled with the parsed keys.
        Transport and parse errors propagate unchanged.
        """
        fetch = self._fetch or get_fetch()
        body = await fetch(
            FetchRequest(
                method="GET",
                url=self._url,
                headers={"Content-Type": "application/json"},
            )
        )
        data = parse_json_body(body)

        self._cache.reset()

        key_set = JWKSResponse.model_validate(data)
        parsed = [(entry.kid, jwk_entry_to_pem(entry)) for entry in key_set.keys]
        if not disable_caching:
            self._cache.replace(dict(parsed))
            logger.info("Refreshed Apple public keys (%d keys)", len(parsed))
        return [pem for _kid, pem in parsed]
