"""
Signature entries of a JWS

An entry holds the signature bytes, the base64url-encoded protected headers
exactly as they are covered by the signature, and the unprotected headers as
plain JSON.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from jwsgate.errors import EncodingError, MalformedInputError
from jwsgate.services.base64url import b64url_decode, b64url_encode
from jwsgate.services.c14n import json_c14n_v1
from jwsgate.services.signer import Signer, get_signer

logger = logging.getLogger(__name__)


def _freeze(headers: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    # Nested values are copied too; the entry must not share them with the caller
    try:
        return MappingProxyType(copy.deepcopy(dict(headers or {})))
    except (TypeError, copy.Error, RecursionError) as e:
        raise EncodingError(f"Unprotected headers cannot be copied: {e}") from e


def encode_protected_headers(protected_headers: Optional[Mapping[str, Any]]) -> str:
    """
    Render protected headers to the string placed on the wire.

    Args:
        protected_headers: Header mapping; empty or None gives an empty string

    Returns:
        base64url(canonical JSON) of the mapping

    Raises:
        EncodingError: If the mapping cannot be canonicalized
    """
    if not protected_headers:
        return ""
    return b64url_encode(json_c14n_v1(dict(protected_headers)))


def signing_input(encoded_protected_headers: Optional[str], encoded_payload: Optional[str]) -> bytes:
    """Bytes covered by a signature: ASCII(protected + "." + payload)."""
    return f"{encoded_protected_headers or ''}.{encoded_payload or ''}".encode('ascii')


def decode_protected_headers(encoded_protected_headers: Optional[str]) -> Dict[str, Any]:
    """
    Decode an encoded protected header string back into a mapping.

    Raises:
        MalformedInputError: If the string is not a base64url-encoded JSON object
    """
    if not encoded_protected_headers:
        return {}
    raw = b64url_decode(encoded_protected_headers)
    try:
        decoded = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedInputError(f"Protected headers are not valid JSON: {e}") from e
    if not isinstance(decoded, dict):
        raise MalformedInputError("Protected headers must be a JSON object")
    return decoded


@dataclass(frozen=True)
class Signature:
    """One signature over the payload of a JWS."""

    signature: bytes
    encoded_protected_headers: Optional[str] = None
    headers: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        object.__setattr__(self, "headers", _freeze(self.headers))

    @classmethod
    def create_signature(
        cls,
        key: Any,
        encoded_payload: Optional[str],
        protected_headers: Mapping[str, Any],
        headers: Optional[Mapping[str, Any]] = None,
        signer: Optional[Signer] = None,
    ) -> "Signature":
        """
        Sign the payload with freshly encoded protected headers.

        Args:
            key: Signing key handed to the signer untouched
            encoded_payload: base64url payload of the owning JWS (None if absent)
            protected_headers: Headers covered by the signature
            headers: Unprotected headers
            signer: Signer to use (default: looked up from protected_headers["alg"])

        Returns:
            New Signature entry

        Raises:
            EncodingError: If protected_headers cannot be canonicalized
            UnsupportedAlgorithmError: If no signer was given and "alg" is unknown
        """
        encoded_protected = encode_protected_headers(protected_headers)
        if signer is None:
            signer = get_signer((protected_headers or {}).get("alg"))

        signature = signer.sign(key, signing_input(encoded_protected, encoded_payload))
        logger.debug("Created %s signature (%d bytes)", signer.alg, len(signature))

        return cls(
            signature=signature,
            encoded_protected_headers=encoded_protected,
            headers=headers,
        )

    @classmethod
    def create_signature_from_loaded_data(
        cls,
        signature: bytes,
        encoded_protected_headers: Optional[str],
        headers: Optional[Mapping[str, Any]],
    ) -> "Signature":
        """Keep loaded values verbatim; the protected string is never re-encoded."""
        return cls(
            signature=bytes(signature),
            encoded_protected_headers=encoded_protected_headers,
            headers=headers,
        )

    @property
    def protected_headers(self) -> Dict[str, Any]:
        return decode_protected_headers(self.encoded_protected_headers)

    @property
    def has_unprotected_headers(self) -> bool:
        return len(self.headers) > 0
