"""
Canonical JSON serialization (json_c14n_v1)

Protected headers and structured payloads are covered by signatures, so their
JSON text must be byte-identical every time the same value is serialized.

Rules:
- UTF-8 encoding
- Objects: keys sorted lexicographically
- Arrays: preserve order
- No whitespace
- Reject NaN/Infinity
"""

import json
import math
from typing import Any, Optional, Set

from jwsgate.errors import EncodingError


def json_c14n_v1(obj: Any) -> bytes:
    """
    Canonicalize a Python object to deterministic JSON bytes.

    Args:
        obj: Python object (dict, list, tuple, str, int, float, bool, None)

    Returns:
        bytes: Canonical JSON representation

    Raises:
        EncodingError: If the object contains NaN/Infinity or values JSON cannot represent
    """
    try:
        _validate_no_special_floats(obj)
    except RecursionError as e:
        raise EncodingError("Value is nested too deeply to canonicalize") from e

    try:
        canonical_str = json.dumps(
            obj,
            ensure_ascii=False,
            sort_keys=True,
            separators=(',', ':'),
            allow_nan=False
        )
    except (TypeError, ValueError, RecursionError) as e:
        raise EncodingError(f"Value cannot be canonicalized: {e}") from e

    return canonical_str.encode('utf-8')


def _validate_no_special_floats(obj: Any, _ancestors: Optional[Set[int]] = None) -> None:
    """
    Recursively validate that no NaN or Infinity exists in the structure.

    Raises:
        EncodingError: If NaN or Infinity is found, or a container contains itself
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise EncodingError("NaN and Infinity are not allowed in canonical JSON")
        return
    if not isinstance(obj, (dict, list, tuple)):
        return

    if _ancestors is None:
        _ancestors = set()
    if id(obj) in _ancestors:
        raise EncodingError("Circular reference detected in canonical JSON input")
    _ancestors.add(id(obj))

    children = obj.values() if isinstance(obj, dict) else obj
    for child in children:
        _validate_no_special_floats(child, _ancestors)

    _ancestors.discard(id(obj))
