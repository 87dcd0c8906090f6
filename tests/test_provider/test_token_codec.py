"""Tests for opaque token decoding."""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest

from remote_auth.provider.errors import DecodeError
from remote_auth.provider.token_codec import AccessTokenEnvelope, decode_token, encode_token


def _opaque(payload) -> str:
    raw = json.dumps(payload).encode("utf-8")
    return base64.b64encode(raw).decode("ascii").rstrip("=")


def test_decode_oauth2_token():
    opaque = _opaque({
        "access_token": "abc",
        "token_type": "bearer",
        "refresh_token": "r-1",
        "expiry": "2030-01-02T03:04:05.123456789Z",
    })
    envelope = decode_token(opaque)
    assert envelope.access_token == "abc"
    assert envelope.token_type == "bearer"
    assert envelope.refresh_token == "r-1"
    assert envelope.expiry == datetime(2030, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
    assert envelope.authorization_header == "bearer abc"


def test_decode_minimal_token():
    envelope = decode_token(_opaque({"access_token": "abc"}))
    assert envelope == AccessTokenEnvelope(access_token="abc")


def test_decode_accepts_padded_input():
    raw = json.dumps({"access_token": "abc"}).encode("utf-8")
    padded = base64.b64encode(raw).decode("ascii")
    assert padded.endswith("=")
    assert decode_token(padded).access_token == "abc"


def test_decode_zero_expiry_means_none():
    envelope = decode_token(_opaque({"access_token": "a", "expiry": "0001-01-01T00:00:00Z"}))
    assert envelope.expiry is None


@pytest.mark.parametrize(
    "expiry, microsecond",
    [
        ("2030-01-02T03:04:05.5+02:00", 500000),
        ("2030-01-02T03:04:05.25+02:00", 250000),
        ("2030-01-02T03:04:05.1234+02:00", 123400),
        ("2030-01-02T03:04:05+02:00", 0),
    ],
)
def test_decode_expiry_with_short_fraction(expiry, microsecond):
    envelope = decode_token(_opaque({"access_token": "a", "expiry": expiry}))
    tz = timezone(timedelta(hours=2))
    assert envelope.expiry == datetime(2030, 1, 2, 3, 4, 5, microsecond, tzinfo=tz)


@pytest.mark.parametrize(
    "opaque",
    [
        "not base64!",
        base64.b64encode(b"not json").decode("ascii"),
        _opaque(["access_token", "abc"]),
        _opaque({"access_token": 42}),
        _opaque({"access_token": "a", "expiry": "tomorrow"}),
    ],
)
def test_decode_rejects_malformed_tokens(opaque):
    with pytest.raises(DecodeError):
        decode_token(opaque)


def test_encode_then_decode_preserves_envelope():
    envelope = AccessTokenEnvelope(
        access_token="abc",
        token_type="bearer",
        refresh_token="r",
        expiry=datetime(2030, 1, 1, tzinfo=timezone.utc),
    )
    opaque = encode_token(envelope)
    assert "=" not in opaque
    assert decode_token(opaque) == envelope
