"""
Module 02 - Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- sha256 against hashlib
- to_hex/from_hex format and error cases
"""
import hashlib
import pytest

from core.crypto.hashing import from_hex, sha256, to_hex


class TestSha256:
    """Tests for sha256() function."""

    def test_sha256_known_value(self):
        result = sha256(b"hello")

        assert result == hashlib.sha256(b"hello").digest()
        assert len(result) == 32

    def test_sha256_empty_bytes(self):
        assert sha256(b"") == hashlib.sha256(b"").digest()


class TestHexConversion:
    """Tests for to_hex() and from_hex() functions."""

    def test_to_hex_format(self):
        """Test to_hex produces lowercase hex with 0x prefix."""
        assert to_hex(bytes.fromhex("DEADBEEF")) == "0xdeadbeef"

    def test_to_hex_empty(self):
        assert to_hex(b"") == "0x"

    def test_point_sized_value(self):
        """Test a 33-byte compressed point encoding decodes back."""
        data = bytes([2]) + bytes(range(32))
        assert from_hex(to_hex(data)) == data

    def test_from_hex_accepts_uppercase_digits(self):
        assert from_hex("0xABCD") == b"\xab\xcd"

    def test_from_hex_requires_prefix(self):
        with pytest.raises(ValueError, match="0x"):
            from_hex("deadbeef")

    def test_from_hex_odd_length(self):
        with pytest.raises(ValueError, match="even length"):
            from_hex("0xabc")

    def test_from_hex_invalid_chars(self):
        with pytest.raises(ValueError, match="Invalid hex"):
            from_hex("0xzz")
