"""
Tests for the stock signers and JWS verification
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from cryptography.hazmat.primitives.asymmetric import ec

from jwsgate.config import JWSConfig
from jwsgate.errors import NotFoundError, SigningError, UnsupportedAlgorithmError
from jwsgate.models.jws import JWS
from jwsgate.services.base64url import b64url_decode
from jwsgate.services.loader import load
from jwsgate.services.signer import (
    ECDSASigner,
    EdDSASigner,
    HMACSigner,
    NoneSigner,
    RSASigner,
    get_signer,
)
from jwsgate.services.verifier import verify_any, verify_signature

RFC7515_A1 = (
    "eyJ0eXAiOiJKV1QiLA0KICJhbGciOiJIUzI1NiJ9"
    ".eyJpc3MiOiJqb2UiLA0KICJleHAiOjEzMDA4MTkzODAsDQogImh0dHA6Ly9leGFtcGxlLmNvbS9pc19yb290Ijp0cnVlfQ"
    ".dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
)
RFC7515_A1_KEY = b64url_decode(
    "AyM1SysPpbyDfgZld3umj1qzKObwVMkoqQ-EstJQLr_T-1qS0gZH75aKtMN3Yj0iPS4hcgUuTwjAzZr1Z9CAow"
)


class TestRegistry:
    """Test suite for signer lookup."""

    @pytest.mark.parametrize("alg,cls", [
        ("HS256", HMACSigner),
        ("HS512", HMACSigner),
        ("RS256", RSASigner),
        ("ES384", ECDSASigner),
        ("EdDSA", EdDSASigner),
    ])
    def test_known_algorithms(self, alg, cls):
        """Test that each supported alg maps to its signer."""
        signer = get_signer(alg)
        assert isinstance(signer, cls)
        assert signer.alg == alg

    @pytest.mark.parametrize("alg", [None, "none", "PS256", "hs256"])
    def test_unknown_algorithms(self, alg):
        """Test that unsupported alg values are refused."""
        with pytest.raises(UnsupportedAlgorithmError):
            get_signer(alg)

    def test_none_with_unsecured_config(self):
        """Test that alg none is registered with allow_unsecured."""
        assert isinstance(get_signer("none", JWSConfig(allow_unsecured=True)), NoneSigner)

    def test_registry_is_cached(self):
        """Test that repeated lookups with one config reuse the same signer."""
        assert get_signer("RS256") is get_signer("RS256")
        assert get_signer("HS256", JWSConfig()) is get_signer("HS256", JWSConfig())

    def test_registry_per_config(self):
        """Test that a different config gets its own signers."""
        strict = get_signer("HS256")
        relaxed = get_signer("HS256", JWSConfig(hmac_min_key_length=4))

        assert strict is not relaxed
        assert relaxed.min_key_length == 4

    def test_hmac_min_length_from_config(self):
        """Test that the HMAC minimum length comes from config."""
        signer = get_signer("HS256", JWSConfig(hmac_min_key_length=4))
        assert signer.sign(b"abcd", b"msg")


class TestSigners:
    """Test suite for the stock signers."""

    def test_hmac_rejects_short_secret(self):
        """Test that short HMAC secrets are refused."""
        with pytest.raises(SigningError, match="at least 32 bytes"):
            HMACSigner("HS256").sign(b"short", b"msg")

    def test_hmac_rejects_key_object(self, rsa_key):
        """Test that HMAC refuses non-bytes keys."""
        with pytest.raises(SigningError):
            HMACSigner("HS256").sign(rsa_key, b"msg")

    def test_rsa_rejects_wrong_key(self, ec_key):
        """Test that RSA refuses an EC key."""
        with pytest.raises(SigningError, match="Key type mismatch"):
            RSASigner("RS256").sign(ec_key, b"msg")

    def test_ecdsa_raw_signature_length(self, ec_key):
        """Test that ES256 signatures are 64 raw bytes."""
        assert len(ECDSASigner("ES256").sign(ec_key, b"msg")) == 64

    def test_ecdsa_rejects_wrong_curve(self):
        """Test that ES256 refuses a P-384 key."""
        key = ec.generate_private_key(ec.SECP384R1())
        with pytest.raises(SigningError, match="curve"):
            ECDSASigner("ES256").sign(key, b"msg")

    def test_none_signer(self):
        """Test that the none signer produces and accepts only empty signatures."""
        assert NoneSigner().sign(None, b"msg") == b""
        assert NoneSigner().verify(None, b"msg", b"")
        assert not NoneSigner().verify(None, b"msg", b"x")


class TestVerify:
    """Test suite for JWS verification."""

    def test_rfc_vector(self):
        """Test that the RFC example verifies with its key."""
        jws = load(RFC7515_A1)
        assert verify_signature(jws, RFC7515_A1_KEY)

    def test_rfc_vector_resigned(self):
        """Signing the loaded protected string reproduces the RFC signature."""
        jws = load(RFC7515_A1)
        signer = HMACSigner("HS256")
        assert signer.sign(RFC7515_A1_KEY, jws.signing_input(0)) == jws.get_signature(0).signature

    def test_rfc_vector_wrong_key(self):
        """Test that the RFC example fails with another key."""
        assert not verify_signature(load(RFC7515_A1), b"x" * 64)

    @pytest.mark.parametrize("alg,key_fixture", [
        ("HS256", "hmac_key"),
        ("RS256", "rsa_key"),
        ("RS512", "rsa_key"),
        ("ES256", "ec_key"),
        ("EdDSA", "ed_key"),
    ])
    def test_sign_then_verify(self, request, alg, key_fixture):
        """Test that a fresh signature verifies before and after a compact round trip."""
        key = request.getfixturevalue(key_fixture)
        jws = JWS.from_payload({"sub": "alice"}).add_signature(key, {"alg": alg})

        assert verify_signature(jws, key)
        assert verify_signature(load(jws.to_compact(0)), key)

    def test_tampered_payload(self, rsa_key):
        """Test that a signature moved to another payload fails."""
        jws = JWS.from_payload("hi").add_signature(rsa_key, {"alg": "RS256"})
        forged = JWS.from_payload("bye").add_signature_from_loaded_data(
            jws.get_signature(0).signature,
            jws.get_signature(0).encoded_protected_headers,
            {},
        )
        assert not verify_signature(forged, rsa_key)

    def test_unknown_alg(self):
        """Test that verifying alg none without config raises."""
        jws = JWS.from_payload("hi").add_signature_from_loaded_data(b"", "eyJhbGciOiJub25lIn0", {})
        with pytest.raises(UnsupportedAlgorithmError):
            verify_signature(jws, None)

    def test_index_out_of_range(self, hmac_key):
        """Test that a bad index raises NotFoundError."""
        jws = JWS.from_payload("hi").add_signature(hmac_key, {"alg": "HS256"})
        with pytest.raises(NotFoundError):
            verify_signature(jws, hmac_key, index=1)

    def test_verify_any(self, hmac_key, rsa_key, ed_key):
        """Test that verify_any finds the signature matching each key."""
        jws = (
            JWS.from_payload("hi")
            .add_signature(hmac_key, {"alg": "HS256"})
            .add_signature(rsa_key, {"alg": "RS256"}, {"kid": "rsa"})
            .add_signature(ed_key, {"alg": "EdDSA"})
        )

        assert verify_any(jws, hmac_key) == 0
        assert verify_any(jws, rsa_key.public_key()) == 1
        assert verify_any(jws, ed_key.public_key()) == 2
        assert verify_any(jws, b"z" * 32) is None
