"""
Rebuild an RSA verification key from one published JWKS entry.

Background for newcomers:
    A JWK publishes an RSA public key as two base64url numbers: the modulus
    ``n`` and the public exponent ``e``. Practically every issuer uses the
    exponent 65537, whose encodings are ``AQAB`` (bytes 01 00 01) or ``AAEAAQ``
    (00 01 00 01). Those are the only exponents accepted here; anything else
    is rejected as a malformed key rather than guessed at.
"""

from __future__ import annotations

import binascii
import logging
from typing import Mapping

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey, RSAPublicNumbers
from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from .errors import KeyFormatError
from .token_codec import b64decode_unpadded

logger = logging.getLogger(__name__)

DEFAULT_EXPONENT = 65537
_DEFAULT_EXPONENT_ENCODINGS = frozenset({"AQAB", "AAEAAQ"})


def _decode_modulus(entry: Mapping[str, str]) -> int:
    raw_n = entry.get("n")
    if not raw_n:
        raise KeyFormatError("key entry has no modulus")
    try:
        nb = b64decode_unpadded(raw_n, urlsafe=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError("key modulus is not valid base64url") from e
    return int.from_bytes(nb, "big")


def _decode_exponent(entry: Mapping[str, str]) -> int:
    raw_e = entry.get("e")
    if raw_e in _DEFAULT_EXPONENT_ENCODINGS:
        return DEFAULT_EXPONENT
    logger.warning("Unsupported RSA exponent in key entry kid=%s", entry.get("kid"))
    raise KeyFormatError(f"unsupported RSA exponent {raw_e!r}")


def build_verification_key(entry: Mapping[str, str]) -> RSAPublicKey:
    """
    Return the RSA public key described by ``entry``.

    The key is serialized to PEM (SubjectPublicKeyInfo) and loaded back
    through PyJWT so the result is exactly what ``jwt.decode`` expects.
    Raises KeyFormatError on a missing or undecodable modulus, an unsupported
    exponent, or a key the crypto backend refuses.
    """
    n = _decode_modulus(entry)
    e = _decode_exponent(entry)

    try:
        public_key = RSAPublicNumbers(e, n).public_key()
        pem = public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        key = RSAAlgorithm(RSAAlgorithm.SHA256).prepare_key(pem)
    except (ValueError, InvalidKeyError) as e:
        raise KeyFormatError("key entry does not describe a usable RSA key") from e

    if not isinstance(key, RSAPublicKey):
        raise KeyFormatError("key entry did not produce an RSA public key")
    return key
