"""Configuration from environment variables. No hardcoded secrets."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _getenv_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class RemoteProviderConfig:
    """
    Remote SaaS backend configuration from environment.

    Required:
        REMOTE_PROVIDER_BASE_URL: Backend base URL; ``/refresh`` and ``/keys`` live under it.

    Optional:
        REMOTE_PROVIDER_TOKEN_FIELD: JSON field carrying the opaque token (default "token").
        REMOTE_PROVIDER_HTTP_TIMEOUT_SECONDS: Timeout for every outbound call (default 10).
        REMOTE_PROVIDER_REFRESH_RETENTION_SECONDS: How long a refreshed token is
            remembered for its predecessor (default 300).
        REMOTE_PROVIDER_CLOCK_SKEW_SECONDS: Tolerance for exp/nbf/iat (default 0).
        REMOTE_PROVIDER_AUDIENCE: Expected ``aud``; not checked when unset.
        REMOTE_PROVIDER_ISSUER: Expected ``iss``; not checked when unset.
    """

    base_url: str
    token_field: str = "token"
    http_timeout_seconds: float = 10.0
    refresh_retention_seconds: float = 300.0
    clock_skew_seconds: float = 0.0
    audience: str | None = None
    issuer: str | None = None

    @property
    def refresh_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/refresh"

    @property
    def keys_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/keys"

    @property
    def algorithms(self) -> list[str]:
        return ["RS256", "RS384", "RS512"]

    @classmethod
    def from_environ(cls) -> RemoteProviderConfig:
        base_url = _strip_or_none(_getenv("REMOTE_PROVIDER_BASE_URL"))
        if not base_url:
            raise _config_error("REMOTE_PROVIDER_BASE_URL must be set")
        return cls(
            base_url=base_url.rstrip("/"),
            token_field=_strip_or_none(_getenv("REMOTE_PROVIDER_TOKEN_FIELD")) or "token",
            http_timeout_seconds=_getenv_float("REMOTE_PROVIDER_HTTP_TIMEOUT_SECONDS", 10.0),
            refresh_retention_seconds=_getenv_float("REMOTE_PROVIDER_REFRESH_RETENTION_SECONDS", 300.0),
            clock_skew_seconds=_getenv_float("REMOTE_PROVIDER_CLOCK_SKEW_SECONDS", 0.0),
            audience=_strip_or_none(_getenv("REMOTE_PROVIDER_AUDIENCE")),
            issuer=_strip_or_none(_getenv("REMOTE_PROVIDER_ISSUER")),
        )


def _strip_or_none(s: str | None) -> str | None:
    if s is None:
        return None
    t = s.strip()
    return t if t else None


def _config_error(msg: str) -> Exception:
    return ValueError(msg)
