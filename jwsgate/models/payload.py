"""
JWS payload variants

A payload is either raw bytes, carried as-is, or a structured value rendered to
canonical JSON before encoding.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from jwsgate.errors import EncodingError
from jwsgate.services.c14n import json_c14n_v1


@dataclass(frozen=True)
class RawBytes:
    data: bytes


@dataclass(frozen=True)
class StructuredValue:
    value: Any = field(hash=False)


Payload = Union[RawBytes, StructuredValue]


def to_payload(value: Any) -> Optional[Payload]:
    """
    Wrap a caller value in the matching payload variant.

    Text is treated as raw content and stored as its UTF-8 bytes. Structured
    values are deep-copied so later changes by the caller do not reach the JWS.

    Raises:
        EncodingError: If a structured value cannot be copied; such a value
            has no JSON representation either
    """
    if value is None or isinstance(value, (RawBytes, StructuredValue)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return RawBytes(bytes(value))
    if isinstance(value, str):
        return RawBytes(value.encode('utf-8'))
    try:
        return StructuredValue(copy.deepcopy(value))
    except (TypeError, copy.Error, RecursionError) as e:
        raise EncodingError(f"Unsupported payload: {e}") from e


def payload_bytes(payload: Payload) -> bytes:
    """
    Normalize a payload to the bytes that get base64url-encoded.

    Raises:
        EncodingError: If a structured value cannot be canonicalized
    """
    if isinstance(payload, RawBytes):
        return payload.data
    return json_c14n_v1(payload.value)
