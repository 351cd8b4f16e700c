"""
Loader for serialized JWS

Parses Compact, Flattened JSON and General JSON text back into a JWS. Loaded
protected headers are kept exactly as received so that re-serializing a loaded
JWS reproduces the signed bytes.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from jwsgate.errors import MalformedInputError
from jwsgate.models.jws import JWS
from jwsgate.models.payload import RawBytes
from jwsgate.models.signature import decode_protected_headers
from jwsgate.services.base64url import b64url_decode

logger = logging.getLogger(__name__)


# Wire models
class SignatureMember(BaseModel):
    """Per-signature members shared by the Flattened and General forms."""
    protected: Optional[str] = Field(None, description="base64url protected headers")
    header: Optional[Dict[str, Any]] = Field(None, description="Unprotected headers")
    signature: str = Field(..., description="base64url signature")


class FlattenedJWS(SignatureMember):
    """Flattened JSON serialization."""
    payload: Optional[str] = Field(None, description="base64url payload")


class GeneralJWS(BaseModel):
    """General JSON serialization."""
    payload: Optional[str] = Field(None, description="base64url payload")
    signatures: List[SignatureMember] = Field(..., min_length=1)


def load(text: str) -> JWS:
    """
    Load a JWS in any of the three serializations.

    Args:
        text: Serialized JWS

    Returns:
        JWS carrying the loaded signatures

    Raises:
        MalformedInputError: If the text is not a well-formed JWS
    """
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"JWS is not UTF-8 text: {e}") from e

    stripped = text.strip()
    if not stripped.startswith("{"):
        return load_compact(stripped)

    data = _parse_json(stripped)
    if "signatures" in data:
        return load_general(data)
    return load_flattened(data)


def load_compact(text: str) -> JWS:
    """Load "<protected>.<payload>.<signature>"."""
    parts = text.split(".")
    if len(parts) != 3:
        logger.warning("Rejected compact JWS with %d segments", len(parts))
        raise MalformedInputError(
            f"Compact JWS must have 3 segments, got {len(parts)}"
        )

    protected, payload, signature = parts
    jws = JWS(payload=_decode_payload(payload))
    return _add_loaded_signature(jws, signature, protected, None)


def load_flattened(data: Union[str, Dict[str, Any]]) -> JWS:
    """Load a Flattened JSON serialization (text or already-parsed object)."""
    if isinstance(data, str):
        data = _parse_json(data)
    try:
        wire = FlattenedJWS.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid flattened JWS: {e}") from e

    jws = JWS(payload=_decode_payload(wire.payload))
    return _add_loaded_signature(jws, wire.signature, wire.protected, wire.header)


def load_general(data: Union[str, Dict[str, Any]]) -> JWS:
    """Load a General JSON serialization; signature order is preserved."""
    if isinstance(data, str):
        data = _parse_json(data)
    try:
        wire = GeneralJWS.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid general JWS: {e}") from e

    jws = JWS(payload=_decode_payload(wire.payload))
    for member in wire.signatures:
        jws = _add_loaded_signature(jws, member.signature, member.protected, member.header)

    logger.debug("Loaded general JWS with %d signatures", jws.count_signatures())
    return jws


def _parse_json(text: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedInputError(f"JWS is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedInputError("JSON serialized JWS must be an object")
    return data


def _decode_payload(encoded: Optional[str]) -> Optional[RawBytes]:
    if not encoded:
        return None
    return RawBytes(b64url_decode(encoded))


def _add_loaded_signature(
    jws: JWS,
    signature: str,
    protected: Optional[str],
    header: Optional[Dict[str, Any]],
) -> JWS:
    protected = protected or None
    decode_protected_headers(protected)

    return jws.add_signature_from_loaded_data(b64url_decode(signature), protected, header)
