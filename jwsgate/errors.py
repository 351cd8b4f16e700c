"""
Error hierarchy for JWS containers

Every error raised by this package derives from JWSError, so callers can catch
the whole family at once. Value-shaped failures also derive from ValueError,
and lookup failures from IndexError.
"""


class JWSError(Exception):
    """Base class for all JWS errors."""


class EncodingError(JWSError, ValueError):
    """A payload or protected-header mapping cannot be serialized to canonical JSON."""


class NotFoundError(JWSError, IndexError):
    """A signature index is out of range."""


class UnsupportedFormatError(JWSError, ValueError):
    """The requested serialization cannot represent the selected signature."""


class EmptySignatureListError(JWSError, ValueError):
    """Serialization was requested on a JWS without any signature."""


class MalformedInputError(JWSError, ValueError):
    """Wire data could not be parsed into a JWS."""


class UnsupportedAlgorithmError(JWSError):
    """No signer is available for the requested algorithm."""


class SigningError(JWSError):
    """A signer refused the key it was given."""
