"""
Pytest fixtures for the test suite.

HTTP is never real: tests patch ``requests.get`` / ``requests.post`` where the
provider modules look them up, and hand the executor a session whose ``send``
is a mock. RSA keys are generated per test session with ``cryptography``.
"""
from __future__ import annotations

import base64
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from remote_auth.provider.config import RemoteProviderConfig
from remote_auth.provider.token_codec import AccessTokenEnvelope, encode_token


BASE_URL = "https://saas.example.com"


def b64url_uint(val: int) -> str:
    raw = val.to_bytes((val.bit_length() + 7) // 8, "big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def make_jwk(public_key, kid: str) -> dict[str, str]:
    numbers = public_key.public_numbers()
    return {
        "kty": "RSA",
        "kid": kid,
        "use": "sig",
        "alg": "RS256",
        "n": b64url_uint(numbers.n),
        "e": b64url_uint(numbers.e),
    }


def make_opaque(access_token: str, **fields) -> str:
    return encode_token(AccessTokenEnvelope(access_token=access_token, token_type="bearer", **fields))


def json_response(payload, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


@pytest.fixture(scope="session")
def rsa_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


@pytest.fixture(scope="session")
def other_rsa_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return private_key, private_key.public_key()


@pytest.fixture
def config() -> RemoteProviderConfig:
    return RemoteProviderConfig(base_url=BASE_URL)
