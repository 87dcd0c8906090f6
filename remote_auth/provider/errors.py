"""Error hierarchy for the remote provider. Messages never include token values."""

from __future__ import annotations


class RemoteAuthError(Exception):
    """Base class for every failure raised by this package."""


class DecodeError(RemoteAuthError):
    """Opaque session token is not base64-encoded OAuth2 token JSON."""


class FetchError(RemoteAuthError):
    """HTTP or transport failure talking to the remote backend."""


class RefreshError(FetchError):
    """The ``/refresh`` endpoint failed or returned no replacement token."""


class KeyNotFoundError(RemoteAuthError):
    """Key id absent from the published key set, even after a refresh."""


class KeyFormatError(RemoteAuthError):
    """Published key has a malformed modulus or an unsupported exponent."""


class VerifyError(RemoteAuthError):
    """Signature or standard claims check failed."""


class TokenParseError(VerifyError):
    """Access token header could not be read (not a JWT, or no usable kid)."""


class TokenExpiredError(VerifyError):
    """Access token ``exp`` is in the past."""


class ClaimsError(RemoteAuthError):
    """Verified token payload is not a claims mapping."""
