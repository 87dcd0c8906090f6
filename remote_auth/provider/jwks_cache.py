"""
JWKS fetch and cache for the remote backend's published signing keys.

Background for newcomers:
    The backend signs every access token with a private RSA key and publishes
    the matching public keys at ``<base_url>/keys``. The token header names the
    signing key by ``kid``. We keep the last fetched key set in memory and only
    go back to the backend when a token names a ``kid`` we don't know yet,
    which is what happens right after the backend rotates its keys.

    There is no TTL: the cache is refreshed reactively, once per unknown kid.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from .errors import FetchError, KeyNotFoundError

logger = logging.getLogger(__name__)

KeySetEntry = dict[str, str]


def _parse_entries(raw_keys: list[Any]) -> list[KeySetEntry]:
    """
    Best-effort parsing of the ``keys`` array.

    Members that are not JSON objects are dropped, and so are non-string
    fields inside an entry (``x5c`` arrays, for instance). Neither is an error.
    """
    entries: list[KeySetEntry] = []
    for raw in raw_keys:
        if not isinstance(raw, dict):
            continue
        entries.append({str(k): v for k, v in raw.items() if isinstance(v, str)})
    dropped = len(raw_keys) - len(entries)
    if dropped:
        logger.warning("Dropped %d malformed JWKS entries", dropped)
    return entries


class JWKSCache:
    """
    In-memory cache of the backend's JWKS (JSON Web Key Set).

    Starts empty and is populated lazily by the first lookup. Every successful
    ``refresh`` replaces the whole key set; a failed one leaves it untouched.
    """

    def __init__(self, keys_url: str, timeout_seconds: float = 10.0) -> None:
        self._url = keys_url
        self._timeout = timeout_seconds
        self._keys: list[KeySetEntry] = []

    @property
    def keys(self) -> list[KeySetEntry]:
        """Snapshot of the currently cached entries."""
        return list(self._keys)

    def _fetch(self) -> dict[str, Any]:
        try:
            resp = requests.get(self._url, timeout=self._timeout)
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as e:
            logger.warning("JWKS fetch failed: %s", type(e).__name__)
            raise FetchError("could not fetch the published key set") from e
        except ValueError as e:
            raise FetchError("published key set is not valid JSON") from e
        if not isinstance(body, dict):
            raise FetchError("published key set must be a JSON object")
        return body

    def refresh(self) -> None:
        """Fetch the key set and replace the cache wholesale."""
        body = self._fetch()
        raw_keys = body.get("keys")
        if not isinstance(raw_keys, list):
            raise FetchError("published key set has no 'keys' array")
        # Single reference swap; concurrent readers see the old or the new set.
        self._keys = _parse_entries(raw_keys)
        logger.debug("JWKS cache refreshed uri=%s keys=%d", self._url, len(self._keys))

    def _find_key(self, kid: str) -> KeySetEntry | None:
        for entry in self._keys:
            if entry.get("kid") == kid:
                return entry
        return None

    def lookup(self, kid: str) -> KeySetEntry:
        """
        Return the key set entry for ``kid``.

        On a miss the cache is refreshed once (the backend may have rotated
        its keys) and searched again. Raises KeyNotFoundError if the kid is
        still unknown; FetchError from the refresh propagates.
        """
        entry = self._find_key(kid)
        if entry is not None:
            return entry

        logger.info("kid not in cached JWKS; refreshing for possible key rotation")
        self.refresh()
        entry = self._find_key(kid)
        if entry is None:
            raise KeyNotFoundError(f"no published key with kid {kid!r}")
        return entry
