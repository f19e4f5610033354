"""In-memory cache of Apple's public signing keys."""

from collections.abc import Mapping


class KeyCache:
    """Mapping of key id to PEM public key.

    Writes always swap in a complete mapping, so a reader sees either the
    previous key set or the new one, never a partially filled one.
    """

    def __init__(self) -> None:
        self._keys: dict[str, str] = {}
        self._generation = 0

    def get(self, kid: str) -> str | None:
        """Return the cached PEM for ``kid``, or None."""
        return self._keys.get(kid)

    def __contains__(self, kid: object) -> bool:
        return kid in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def generation(self) -> int:
        """Number of resets and replacements since construction."""
        return self._generation

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the current mapping."""
        return dict(self._keys)

    def reset(self) -> None:
        """Drop every cached key."""
        self._keys = {}
        self._generation += 1

    def replace(self, keys: Mapping[str, str]) -> None:
        """Replace the whole mapping with ``keys``."""
        self._keys = dict(keys)
        self._generation += 1
