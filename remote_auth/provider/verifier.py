"""
Verify an inbound opaque session token against the backend's published keys.

Background for newcomers:
    The opaque token is only a wrapper. Inside it is the real access token, a
    JWT signed by the backend. To trust it we:

    1. Decode the opaque wrapper to get the JWT.
    2. Read the JWT header **without** verifying it, only to learn its ``kid``.
    3. Find the published key with that ``kid`` (refreshing the key set once
       if we haven't seen it yet).
    4. Rebuild the RSA public key from the published entry.
    5. Verify the signature and the standard claims (``exp``, ``nbf``, ``iat``,
       plus ``aud``/``iss`` when configured).

    Each step fails with its own error type so callers and logs can tell a
    garbled cookie from an expired token or a backend that is down.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt

from .config import RemoteProviderConfig
from .errors import ClaimsError, TokenExpiredError, TokenParseError, VerifyError
from .jwks_cache import JWKSCache
from .key_builder import build_verification_key
from .token_codec import decode_token

logger = logging.getLogger(__name__)


def _get_kid(token: str) -> str:
    """Read ``kid`` from the JWT header. The token is not validated here."""
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise TokenParseError("access token is not a JWT") from e
    kid = header.get("kid") if isinstance(header, dict) else None
    if not isinstance(kid, str) or not kid:
        raise TokenParseError("access token header has no key id")
    return kid


class TokenVerifier:
    """Verifies opaque session tokens and returns the access token's claims."""

    def __init__(self, config: RemoteProviderConfig, jwks: JWKSCache) -> None:
        self._config = config
        self._jwks = jwks

    def verify(self, opaque: str) -> dict[str, Any]:
        """
        Return the verified claims of the access token inside ``opaque``.

        Raises DecodeError, TokenParseError, KeyNotFoundError, FetchError,
        KeyFormatError, TokenExpiredError / VerifyError or ClaimsError,
        depending on which stage failed.
        """
        token = decode_token(opaque).access_token
        kid = _get_kid(token)
        entry = self._jwks.lookup(kid)
        key = build_verification_key(entry)

        try:
            payload = jwt.decode(
                token,
                key,
                algorithms=self._config.algorithms,
                audience=self._config.audience,
                issuer=self._config.issuer,
                leeway=self._config.clock_skew_seconds,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_iat": True,
                    "verify_aud": self._config.audience is not None,
                    "verify_iss": self._config.issuer is not None,
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Token expired")
            raise TokenExpiredError("access token expired") from e
        except jwt.InvalidTokenError as e:
            logger.info("Token invalid: %s", type(e).__name__)
            raise VerifyError("access token failed verification") from e

        if not isinstance(payload, dict):
            raise ClaimsError("verified token claims are not a mapping")
        return payload
