"""
Module 02 - Hashing Utilities
SHA-256 and the 0x-hex codec used by setup, Merkle and export code.
"""
from __future__ import annotations

import hashlib

HEX_PREFIX = "0x"


def sha256(data: bytes) -> bytes:
    """
    SHA-256 digest of raw bytes.

    Example:
        >>> sha256(b"hello").hex()[:16]
        '2cf24dba5fb0a30e'
    """
    return hashlib.sha256(data).digest()


def to_hex(data: bytes) -> str:
    """Lowercase hex with the 0x prefix every wire field uses."""
    return HEX_PREFIX + data.hex()


def from_hex(value: str) -> bytes:
    """
    Decode a 0x-prefixed hex string.

    Raises:
        ValueError: On a missing prefix, an odd digit count or a non-hex
            character.
    """
    if not value.startswith(HEX_PREFIX):
        raise ValueError(f"Hex string must start with '0x' prefix, got: {value[:10]}...")

    digits = value[len(HEX_PREFIX):]
    if len(digits) % 2:
        raise ValueError(f"Hex string must have even length after 0x prefix, got {len(digits)} digits")

    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "sha256",
    "to_hex",
    "from_hex",
]
