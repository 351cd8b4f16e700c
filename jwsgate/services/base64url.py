"""
Base64url codec without padding (RFC 7515 section 2)
"""

import base64
import binascii
import re
from typing import Union

from jwsgate.errors import MalformedInputError

_B64URL_CHARS = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(data: Union[bytes, bytearray]) -> str:
    """Encode bytes as base64url text with the trailing '=' stripped."""
    return base64.urlsafe_b64encode(bytes(data)).decode('ascii').rstrip('=')


def b64url_decode(text: str) -> bytes:
    """
    Decode unpadded base64url text.

    Args:
        text: base64url string, with or without padding

    Returns:
        Decoded bytes

    Raises:
        MalformedInputError: If the text is not valid base64url
    """
    if isinstance(text, bytes):
        text = text.decode('ascii', errors='replace')
    if not _B64URL_CHARS.fullmatch(text.rstrip("=")):
        raise MalformedInputError("Invalid base64url data: characters outside [A-Za-z0-9_-]")
    if len(text) % 4 == 1:
        raise MalformedInputError(f"Invalid base64url length: {len(text)}")

    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, altchars=b'-_', validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"Invalid base64url data: {e}") from e
