"""Tests for key id resolution with refresh on miss."""

import httpx
import pytest

from apple_signin.core.errors import UnknownKeyIdError
from apple_signin.keys.cache import KeyCache
from apple_signin.keys.fetcher import KeySetFetcher
from apple_signin.keys.resolver import CachedKeyResolver

KEYS_URL = "https://appleid.apple.com/auth/keys"


def _resolver(cache: KeyCache, fetch) -> CachedKeyResolver:
    return CachedKeyResolver(cache, KeySetFetcher(cache, fetch=fetch))


class TestCacheHit:
    """A cached key id never touches the network."""

    async def test_returns_cached_key(self, fake_fetch) -> None:
        cache = KeyCache()
        cache.replace({"K1": "cached-pem"})
        key = await _resolver(cache, fake_fetch).resolve("K1")
        assert key == "cached-pem"
        assert fake_fetch.calls_to(KEYS_URL) == 0


class TestCacheMiss:
    """A miss refreshes the key set exactly once."""

    async def test_refresh_finds_rotated_key(self, fake_fetch, rsa_keypair) -> None:
        cache = KeyCache()
        cache.replace({"OLD": "old-pem"})
        key = await _resolver(cache, fake_fetch).resolve("K1")
        assert key == rsa_keypair.public_key_pem
        assert fake_fetch.calls_to(KEYS_URL) == 1

    async def test_second_lookup_is_served_from_cache(self, fake_fetch) -> None:
        resolver = _resolver(KeyCache(), fake_fetch)
        await resolver.resolve("K1")
        await resolver.resolve("K1")
        assert fake_fetch.calls_to(KEYS_URL) == 1

    async def test_unknown_kid_after_refresh(self, fake_fetch) -> None:
        with pytest.raises(UnknownKeyIdError) as exc_info:
            await _resolver(KeyCache(), fake_fetch).resolve("FORGED")
        assert exc_info.value.kid == "FORGED"
        assert fake_fetch.calls_to(KEYS_URL) == 1

    async def test_fetch_error_is_raised_when_key_missing(self, fake_fetch) -> None:
        error = httpx.ConnectError("apple down")
        fake_fetch.respond(KEYS_URL, error)
        with pytest.raises(httpx.ConnectError) as exc_info:
            await _resolver(KeyCache(), fake_fetch).resolve("K1")
        assert exc_info.value is error
        assert fake_fetch.calls_to(KEYS_URL) == 1

    async def test_parse_error_is_raised_when_key_missing(self, fake_fetch) -> None:
        fake_fetch.respond(KEYS_URL, "not json")
        with pytest.raises(ValueError):
            await _resolver(KeyCache(), fake_fetch).resolve("K1")

    async def test_fetch_error_ignored_when_key_appears(self, fake_fetch) -> None:
        cache = KeyCache()

        class _RacingFetcher(KeySetFetcher):
            async def fetch_keys(self, *, disable_caching: bool = False) -> list[str]:
                # Another flow refilled the cache before this fetch failed.
                cache.replace({"K1": "from-other-flow"})
                raise httpx.ReadTimeout("slow")

        resolver = CachedKeyResolver(cache, _RacingFetcher(cache, fetch=fake_fetch))
        assert await resolver.resolve("K1") == "from-other-flow"


class TestMissingKid:
    """Tokens without a key id are rejected without a fetch."""

    @pytest.mark.parametrize("kid", [None, ""])
    async def test_rejected(self, fake_fetch, kid: str | None) -> None:
        with pytest.raises(UnknownKeyIdError):
            await _resolver(KeyCache(), fake_fetch).resolve(kid)
        assert fake_fetch.calls_to(KEYS_URL) == 0
