"""
Opaque session token <-> OAuth2 token envelope.

The opaque token handed to clients (usually in a cookie) is the OAuth2 token
JSON issued by the remote backend, base64-encoded with the standard alphabet
and no padding. It is not verifiable on its own: decode it first, then verify
the ``access_token`` inside.
"""

from __future__ import annotations

import base64
import binascii
import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .errors import DecodeError

# RFC 3339 fractions run from 1 to 9 digits (trailing zeros dropped); fromisoformat
# on 3.10 takes only 3 or 6.
_FRACTION_RE = re.compile(r"\.(\d+)")


def _six_digit_fraction(match: re.Match[str]) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def b64decode_unpadded(value: str, *, urlsafe: bool = False) -> bytes:
    """Decode base64 that may have had its ``=`` padding stripped. Strict alphabet."""
    padded = value + "=" * (-len(value) % 4)
    altchars = b"-_" if urlsafe else None
    return base64.b64decode(padded, altchars=altchars, validate=True)


def b64encode_unpadded(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii").rstrip("=")


@dataclass(frozen=True)
class AccessTokenEnvelope:
    """Decoded opaque token. Lives for a single request; never persisted."""

    access_token: str
    token_type: str = ""
    refresh_token: str = ""
    expiry: datetime | None = None

    @property
    def authorization_header(self) -> str:
        """Value for the outbound ``Authorization`` header."""
        return f"bearer {self.access_token}"

    def to_dict(self) -> dict[str, Any]:
        """Return the OAuth2 token JSON fields; empty optional fields are omitted."""
        out: dict[str, Any] = {"access_token": self.access_token}
        if self.token_type:
            out["token_type"] = self.token_type
        if self.refresh_token:
            out["refresh_token"] = self.refresh_token
        if self.expiry is not None:
            out["expiry"] = _format_expiry(self.expiry)
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> AccessTokenEnvelope:
        for name in ("access_token", "token_type", "refresh_token", "expiry"):
            value = raw.get(name)
            if value is not None and not isinstance(value, str):
                raise DecodeError(f"token field {name!r} must be a string")
        return cls(
            access_token=raw.get("access_token") or "",
            token_type=raw.get("token_type") or "",
            refresh_token=raw.get("refresh_token") or "",
            expiry=_parse_expiry(raw.get("expiry")),
        )


def _parse_expiry(value: str | None) -> datetime | None:
    if not value:
        return None
    text = _FRACTION_RE.sub(_six_digit_fraction, value, count=1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise DecodeError("token expiry is not an RFC 3339 timestamp") from e
    # The zero time means "no expiry".
    if parsed.year == 1:
        return None
    return parsed


def _format_expiry(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


def decode_token(opaque: str) -> AccessTokenEnvelope:
    """
    Decode an opaque session token into its OAuth2 envelope.

    Raises DecodeError when the value is not unpadded standard base64 or the
    payload is not a JSON object with string token fields. No side effects.
    """
    try:
        raw = b64decode_unpadded(opaque)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("opaque token is not valid base64") from e
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeError("opaque token payload is not valid JSON") from e
    if not isinstance(payload, dict):
        raise DecodeError("opaque token payload must be a JSON object")
    return AccessTokenEnvelope.from_dict(payload)


def encode_token(envelope: AccessTokenEnvelope) -> str:
    """Inverse of ``decode_token``."""
    raw = json.dumps(envelope.to_dict(), separators=(",", ":")).encode("utf-8")
    return b64encode_unpadded(raw)
