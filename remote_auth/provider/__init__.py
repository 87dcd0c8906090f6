"""
Session token handling for a remote SaaS backend.

This package has no dependency on the web layer (remote_auth.security, routers).
Use RemoteProvider.do_request() to call the backend on behalf of a session and
RemoteProvider.verify_token() to check an inbound opaque token.
"""

from .config import RemoteProviderConfig
from .errors import (
    ClaimsError,
    DecodeError,
    FetchError,
    KeyFormatError,
    KeyNotFoundError,
    RefreshError,
    RemoteAuthError,
    TokenExpiredError,
    TokenParseError,
    VerifyError,
)
from .provider import RemoteProvider, get_provider
from .token_codec import AccessTokenEnvelope, decode_token, encode_token

__all__ = [
    "AccessTokenEnvelope",
    "ClaimsError",
    "DecodeError",
    "FetchError",
    "KeyFormatError",
    "KeyNotFoundError",
    "RefreshError",
    "RemoteAuthError",
    "RemoteProvider",
    "RemoteProviderConfig",
    "TokenExpiredError",
    "TokenParseError",
    "VerifyError",
    "decode_token",
    "encode_token",
    "get_provider",
]
