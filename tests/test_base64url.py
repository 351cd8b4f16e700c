"""
Tests for the unpadded base64url codec
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from jwsgate.errors import MalformedInputError
from jwsgate.services.base64url import b64url_decode, b64url_encode


class TestBase64Url:
    """Test suite for the base64url codec."""

    def test_padding_stripped(self):
        """Test that encoded output never carries '=' padding."""
        assert b64url_encode(b"hi") == "aGk"
        assert b64url_encode(b"a") == "YQ"
        assert b64url_encode(b"") == ""

    def test_url_safe_alphabet(self):
        """Test that '-' and '_' replace '+' and '/'."""
        encoded = b64url_encode(b"\xfb\xff\xbf")
        assert encoded == "-_-_"
        assert "+" not in encoded and "/" not in encoded

    def test_decode_without_padding(self):
        """Test that unpadded text decodes."""
        assert b64url_decode("aGk") == b"hi"
        assert b64url_decode("YQ") == b"a"
        assert b64url_decode("") == b""

    def test_decode_with_padding(self):
        """Test that padded text is still accepted."""
        assert b64url_decode("aGk=") == b"hi"

    def test_round_trip_binary(self):
        """Test that every byte value survives encode then decode."""
        data = bytes(range(256))
        assert b64url_decode(b64url_encode(data)) == data

    def test_rejects_bad_length(self):
        """Test that a length of 4n+1 characters is rejected."""
        with pytest.raises(MalformedInputError):
            b64url_decode("abcde")

    def test_rejects_bad_characters(self):
        """Test that characters outside the alphabet are rejected."""
        with pytest.raises(MalformedInputError):
            b64url_decode("a*c!")

    @pytest.mark.parametrize("text", ["a+b/", "ab+c", "++//", "a/=="])
    def test_rejects_standard_alphabet(self, text):
        """Test that '+' and '/' from standard base64 are rejected."""
        with pytest.raises(MalformedInputError, match="outside"):
            b64url_decode(text)

    def test_rejects_non_ascii(self):
        """Test that non-ASCII text is rejected."""
        with pytest.raises(MalformedInputError):
            b64url_decode("aGé=")
