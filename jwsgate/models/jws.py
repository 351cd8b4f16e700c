"""
JWS container and its wire encoders

A JWS holds one payload and an ordered tuple of signatures. It is an immutable
value: adding a signature returns a new container built from the old tuple plus
the new entry.

Wire formats (RFC 7515 section 7):
- Compact: <protected>.<payload>.<signature>
- Flattened JSON: {"payload", "protected", "header", "signature"}
- General JSON: {"payload", "signatures": [{"signature", "protected", "header"}, ...]}
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from jwsgate.config import get_config
from jwsgate.errors import (
    EmptySignatureListError,
    EncodingError,
    NotFoundError,
    UnsupportedFormatError,
)
from jwsgate.models.payload import Payload, payload_bytes, to_payload
from jwsgate.models.signature import Signature, signing_input
from jwsgate.services.base64url import b64url_encode
from jwsgate.services.signer import Signer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JWS:
    """A payload with one or more independent signatures."""

    payload: Optional[Payload] = None
    signatures: Tuple[Signature, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "payload", to_payload(self.payload))
        object.__setattr__(self, "signatures", tuple(self.signatures))

    @classmethod
    def from_payload(cls, value: Any) -> "JWS":
        """Create an unsigned JWS from bytes, text, or a JSON-serializable value."""
        return cls(payload=to_payload(value))

    def __len__(self) -> int:
        return len(self.signatures)

    def encoded_payload(self) -> Optional[str]:
        """
        Get the base64url form of the payload.

        Returns:
            Unpadded base64url string, or None when no payload was set

        Raises:
            EncodingError: If a structured payload cannot be canonicalized
        """
        if self.payload is None:
            return None
        return b64url_encode(payload_bytes(self.payload))

    def get_signatures(self) -> Tuple[Signature, ...]:
        return self.signatures

    def get_signature(self, index: int) -> Signature:
        """
        Get the signature at a position.

        Raises:
            NotFoundError: If index is out of range
        """
        if not isinstance(index, int) or not 0 <= index < len(self.signatures):
            raise NotFoundError(f"The signature does not exist: {index!r}")
        return self.signatures[index]

    def count_signatures(self) -> int:
        return len(self.signatures)

    def add_signature(
        self,
        key: Any,
        protected_headers: Mapping[str, Any],
        headers: Optional[Mapping[str, Any]] = None,
        signer: Optional[Signer] = None,
    ) -> "JWS":
        """
        Sign the payload and return a new JWS carrying the extra signature.

        Args:
            key: Signing key, passed to the signer as-is
            protected_headers: Headers covered by the signature
            headers: Unprotected headers (default: none)
            signer: Signer to use (default: chosen from protected_headers["alg"])

        Returns:
            New JWS; the receiver is left unchanged

        Raises:
            EncodingError: If the payload or protected headers cannot be canonicalized
        """
        signature = Signature.create_signature(
            key,
            self.encoded_payload(),
            protected_headers,
            headers,
            signer=signer,
        )
        return self._with_signature(signature)

    def add_signature_from_loaded_data(
        self,
        signature: bytes,
        encoded_protected_headers: Optional[str],
        headers: Optional[Mapping[str, Any]],
    ) -> "JWS":
        """Return a new JWS with a signature taken verbatim from wire data."""
        return self._with_signature(
            Signature.create_signature_from_loaded_data(signature, encoded_protected_headers, headers)
        )

    def _with_signature(self, signature: Signature) -> "JWS":
        return JWS(payload=self.payload, signatures=self.signatures + (signature,))

    def signing_input(self, index: int) -> bytes:
        """Bytes covered by the signature at index."""
        signature = self.get_signature(index)
        return signing_input(signature.encoded_protected_headers, self.encoded_payload())

    def _require_signatures(self) -> None:
        if not self.signatures:
            raise EmptySignatureListError("No signature.")

    def to_compact(self, index: int) -> str:
        """
        Serialize one signature in Compact form.

        Args:
            index: Position of the signature to serialize

        Returns:
            "<protected>.<payload>.<signature>"

        Raises:
            EmptySignatureListError: If the JWS has no signature
            NotFoundError: If index is out of range
            UnsupportedFormatError: If the signature carries unprotected headers
        """
        self._require_signatures()
        signature = self.get_signature(index)
        if signature.has_unprotected_headers:
            raise UnsupportedFormatError(
                "The signature contains unprotected headers and cannot be converted into compact JSON"
            )

        return "%s.%s.%s" % (
            signature.encoded_protected_headers or "",
            self.encoded_payload() or "",
            b64url_encode(signature.signature),
        )

    def to_flattened(self, index: int) -> str:
        """
        Serialize one signature in Flattened JSON form.

        Raises:
            EmptySignatureListError: If the JWS has no signature
            NotFoundError: If index is out of range
        """
        self._require_signatures()
        signature = self.get_signature(index)

        data: Dict[str, Any] = {}
        values = {
            "payload": self.encoded_payload(),
            "protected": signature.encoded_protected_headers,
            "header": dict(signature.headers),
        }
        for key, value in values.items():
            if value:
                data[key] = value
        data["signature"] = b64url_encode(signature.signature)

        return _dump(data)

    def to_general_json(self) -> str:
        """
        Serialize every signature in General JSON form, in add order.

        Raises:
            EmptySignatureListError: If the JWS has no signature
        """
        self._require_signatures()

        data: Dict[str, Any] = {}
        encoded_payload = self.encoded_payload()
        if encoded_payload:
            data["payload"] = encoded_payload

        data["signatures"] = []
        for signature in self.signatures:
            entry = {"signature": b64url_encode(signature.signature)}
            values = {
                "protected": signature.encoded_protected_headers,
                "header": dict(signature.headers),
            }
            for key, value in values.items():
                if value:
                    entry[key] = value
            data["signatures"].append(entry)

        logger.debug("Serialized JWS with %d signatures to general JSON", len(self.signatures))
        return _dump(data)


def _dump(data: Dict[str, Any]) -> str:
    try:
        return json.dumps(
            data,
            separators=(',', ':'),
            ensure_ascii=get_config().ensure_ascii,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Unprotected headers cannot be serialized: {e}") from e
