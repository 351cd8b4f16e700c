"""
Signature service for JWS entries

A signer turns a key and the JWS signing input into signature bytes, and
checks signature bytes against a key. Keys are opaque to the container; each
signer accepts the key objects of the cryptography package that fit its
algorithm family (raw bytes for HMAC).
"""

import hmac as std_hmac
import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from jwsgate.config import JWSConfig, get_config
from jwsgate.errors import SigningError, UnsupportedAlgorithmError

logger = logging.getLogger(__name__)

_HASHES = {
    "256": hashes.SHA256,
    "384": hashes.SHA384,
    "512": hashes.SHA512,
}


class Signer(Protocol):
    """Interface every signer implements."""

    alg: str

    def sign(self, key: Any, message: bytes) -> bytes:
        ...

    def verify(self, key: Any, message: bytes, signature: bytes) -> bool:
        ...


class NoneSigner:
    """Unsecured JWS ("alg": "none"); the signature is always empty."""

    alg = "none"

    def sign(self, key: Any, message: bytes) -> bytes:
        return b""

    def verify(self, key: Any, message: bytes, signature: bytes) -> bool:
        return signature == b""


class HMACSigner:
    """HS256/HS384/HS512 over a shared secret."""

    def __init__(self, alg: str = "HS256", min_key_length: int = 32):
        self.alg = alg
        self.min_key_length = min_key_length
        self._hash = _HASHES[alg[2:]]

    def _secret(self, key: Any) -> bytes:
        if isinstance(key, str):
            key = key.encode('utf-8')
        if not isinstance(key, (bytes, bytearray)):
            raise SigningError(f"{self.alg} requires a bytes secret, got {type(key).__name__}")
        if len(key) < self.min_key_length:
            raise SigningError(
                f"{self.alg} secret must be at least {self.min_key_length} bytes"
            )
        return bytes(key)

    def sign(self, key: Any, message: bytes) -> bytes:
        h = hmac.HMAC(self._secret(key), self._hash())
        h.update(message)
        return h.finalize()

    def verify(self, key: Any, message: bytes, signature: bytes) -> bool:
        return std_hmac.compare_digest(self.sign(key, message), signature)


class RSASigner:
    """RS256/RS384/RS512 (RSASSA-PKCS1-v1_5)."""

    def __init__(self, alg: str = "RS256"):
        self.alg = alg
        self._hash = _HASHES[alg[2:]]

    def sign(self, key: Any, message: bytes) -> bytes:
        if not isinstance(key, rsa.RSAPrivateKey):
            raise SigningError(f"Key type mismatch for {self.alg}")
        return key.sign(message, padding.PKCS1v15(), self._hash())

    def verify(self, key: Any, message: bytes, signature: bytes) -> bool:
        if isinstance(key, rsa.RSAPrivateKey):
            key = key.public_key()
        if not isinstance(key, rsa.RSAPublicKey):
            raise SigningError(f"Key type mismatch for {self.alg}")
        try:
            key.verify(signature, message, padding.PKCS1v15(), self._hash())
            return True
        except InvalidSignature:
            return False


class ECDSASigner:
    """ES256/ES384/ES512; signatures use the fixed-width r||s form of RFC 7518."""

    _CURVES = {
        "ES256": (ec.SECP256R1, 32),
        "ES384": (ec.SECP384R1, 48),
        "ES512": (ec.SECP521R1, 66),
    }

    def __init__(self, alg: str = "ES256"):
        self.alg = alg
        self._hash = _HASHES[alg[2:]]
        self._curve, self._size = self._CURVES[alg]

    def _check_curve(self, key: Any) -> None:
        if not isinstance(key.curve, self._curve):
            raise SigningError(f"{self.alg} requires curve {self._curve.name}")

    def sign(self, key: Any, message: bytes) -> bytes:
        if not isinstance(key, ec.EllipticCurvePrivateKey):
            raise SigningError(f"Key type mismatch for {self.alg}")
        self._check_curve(key)
        der = key.sign(message, ec.ECDSA(self._hash()))
        r, s = decode_dss_signature(der)
        return r.to_bytes(self._size, 'big') + s.to_bytes(self._size, 'big')

    def verify(self, key: Any, message: bytes, signature: bytes) -> bool:
        if isinstance(key, ec.EllipticCurvePrivateKey):
            key = key.public_key()
        if not isinstance(key, ec.EllipticCurvePublicKey):
            raise SigningError(f"Key type mismatch for {self.alg}")
        self._check_curve(key)
        if len(signature) != 2 * self._size:
            return False
        r = int.from_bytes(signature[:self._size], 'big')
        s = int.from_bytes(signature[self._size:], 'big')
        try:
            key.verify(encode_dss_signature(r, s), message, ec.ECDSA(self._hash()))
            return True
        except InvalidSignature:
            return False


class EdDSASigner:
    """EdDSA over Ed25519."""

    alg = "EdDSA"

    def sign(self, key: Any, message: bytes) -> bytes:
        if not isinstance(key, ed25519.Ed25519PrivateKey):
            raise SigningError("Key type mismatch for EdDSA")
        return key.sign(message)

    def verify(self, key: Any, message: bytes, signature: bytes) -> bool:
        if isinstance(key, ed25519.Ed25519PrivateKey):
            key = key.public_key()
        if not isinstance(key, ed25519.Ed25519PublicKey):
            raise SigningError("Key type mismatch for EdDSA")
        try:
            key.verify(signature, message)
            return True
        except InvalidSignature:
            return False


@lru_cache(maxsize=None)
def _build_registry(config: JWSConfig) -> Dict[str, Signer]:
    registry: Dict[str, Signer] = {}
    for alg in ("HS256", "HS384", "HS512"):
        registry[alg] = HMACSigner(alg, min_key_length=config.hmac_min_key_length)
    for alg in ("RS256", "RS384", "RS512"):
        registry[alg] = RSASigner(alg)
    for alg in ("ES256", "ES384", "ES512"):
        registry[alg] = ECDSASigner(alg)
    registry["EdDSA"] = EdDSASigner()
    if config.allow_unsecured:
        registry["none"] = NoneSigner()
    return registry


def get_signer(alg: Optional[str], config: Optional[JWSConfig] = None) -> Signer:
    """
    Look up the signer for a JWS "alg" value.

    Args:
        alg: Algorithm name from the protected header
        config: Config to build the signer with (default: process config)

    Returns:
        Signer instance

    Raises:
        UnsupportedAlgorithmError: If no signer handles the algorithm
    """
    registry = _build_registry(config or get_config())
    if alg not in registry:
        logger.warning("No signer registered for alg %r", alg)
        raise UnsupportedAlgorithmError(f"Unsupported algorithm: {alg!r}")
    return registry[alg]
