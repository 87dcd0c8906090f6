"""Process-wide facade wiring the codec, caches, executor and verifier together."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import requests

from .config import RemoteProviderConfig
from .executor import AuthenticatedRequestExecutor
from .jwks_cache import JWKSCache, KeySetEntry
from .refresh_cache import RefreshCache
from .token_codec import AccessTokenEnvelope, decode_token
from .verifier import TokenVerifier

logger = logging.getLogger(__name__)


class RemoteProvider:
    """
    One remote backend: its refresh cache, JWKS cache, executor and verifier.

    Create one per process (see ``get_provider``) so every request thread
    shares the same caches.
    """

    def __init__(self, config: RemoteProviderConfig | None = None, session: requests.Session | None = None) -> None:
        self._config = config or RemoteProviderConfig.from_environ()
        self.jwks = JWKSCache(self._config.keys_url, self._config.http_timeout_seconds)
        self.refresh_cache = RefreshCache(
            self._config.refresh_url,
            token_field=self._config.token_field,
            retention_seconds=self._config.refresh_retention_seconds,
            timeout_seconds=self._config.http_timeout_seconds,
        )
        self.executor = AuthenticatedRequestExecutor(
            self.refresh_cache,
            session=session,
            timeout_seconds=self._config.http_timeout_seconds,
        )
        self.verifier = TokenVerifier(self._config, self.jwks)

    @property
    def config(self) -> RemoteProviderConfig:
        return self._config

    def decode_token(self, opaque: str) -> AccessTokenEnvelope:
        return decode_token(opaque)

    def do_request(self, request: requests.Request, opaque: str) -> requests.Response:
        return self.executor.execute(request, opaque)

    def refresh_token(self, opaque: str) -> str:
        return self.refresh_cache.refresh(opaque)

    def get_jwk(self, kid: str) -> KeySetEntry:
        return self.jwks.lookup(kid)

    def verify_token(self, opaque: str) -> dict[str, Any]:
        return self.verifier.verify(opaque)


@lru_cache
def get_provider() -> RemoteProvider:
    """Return the process-wide provider, configured from the environment."""
    provider = RemoteProvider()
    logger.info("Remote provider configured base_url=%s", provider.config.base_url)
    return provider
