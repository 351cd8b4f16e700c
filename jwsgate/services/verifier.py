"""
Signature verification for JWS containers

The signed message is the JWS signing input of each entry:
ASCII(<encoded protected headers> + "." + <encoded payload>)
"""

import logging
from typing import Any, Optional

from jwsgate.errors import SigningError, UnsupportedAlgorithmError
from jwsgate.models.jws import JWS
from jwsgate.services.signer import Signer, get_signer

logger = logging.getLogger(__name__)


def verify_signature(jws: JWS, key: Any, index: int = 0, signer: Optional[Signer] = None) -> bool:
    """
    Verify one signature of a JWS.

    Args:
        jws: Container holding the signature
        key: Verification key handed to the signer
        index: Position of the signature to check
        signer: Signer to use (default: chosen from the protected "alg")

    Returns:
        True if the signature matches, False otherwise

    Raises:
        NotFoundError: If index is out of range
        UnsupportedAlgorithmError: If no signer was given and "alg" is unknown
    """
    signature = jws.get_signature(index)
    if signer is None:
        signer = get_signer(signature.protected_headers.get("alg"))

    valid = signer.verify(key, jws.signing_input(index), signature.signature)
    if not valid:
        logger.debug("Signature %d failed %s verification", index, signer.alg)
    return valid


def verify_any(jws: JWS, key: Any) -> Optional[int]:
    """
    Find the first signature that verifies with a key.

    Entries whose algorithm has no signer, or whose algorithm does not fit the
    key, are skipped.

    Returns:
        Index of the first valid signature, or None
    """
    for index in range(jws.count_signatures()):
        try:
            if verify_signature(jws, key, index):
                return index
        except (UnsupportedAlgorithmError, SigningError):
            continue
    return None
