"""Key id to public key resolution with refresh on cache miss."""

import logging
from typing import Protocol

from apple_signin.core.errors import UnknownKeyIdError
from apple_signin.keys.cache import KeyCache
from apple_signin.keys.fetcher import KeySetFetcher

logger = logging.getLogger(__name__)


class KeyResolver(Protocol):
    """Looks up the public key that signed a token."""

    async def resolve(self, kid: str | None) -> str:
        """Return the PEM public key for ``kid`` or raise."""
        ...


class CachedKeyResolver:
    """Serves keys from a ``KeyCache`` and refetches the key set on a miss.

    A miss triggers exactly one fetch. If the key is still unknown
    afterwards, the fetch error is raised when there was one, so an
    unreachable Apple endpoint is not reported as a forged key id.
    """

    def __init__(self, cache: KeyCache, fetcher: KeySetFetcher) -> None:
        self._cache = cache
        self._fetcher = fetcher

    async def resolve(self, kid: str | None) -> str:
        if not kid:
            raise UnknownKeyIdError(kid)

        cached = self._cache.get(kid)
        if cached is not None:
            logger.debug("Apple public key %s served from cache", kid)
            return cached

        fetch_error: Exception | None = None
        try:
            await self._fetcher.fetch_keys()
        except Exception as exc:  # noqa: BLE001
            fetch_error = exc

        refreshed = self._cache.get(kid)
        if refreshed is not None:
            if fetch_error is not None:
                logger.warning(
                    "Apple key refresh failed but %s is cached: %s", kid, fetch_error
                )
            return refreshed

        if fetch_error is not None:
            logger.warning("Apple key refresh failed: %s", fetch_error)
            raise fetch_error
        raise UnknownKeyIdError(kid)
