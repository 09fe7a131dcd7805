"""
Module 02 - Field Splitter
Lossless conversion of a base-field coordinate into two scalar-field limbs.

The base field of BN254 (the coordinate field) is larger than its scalar
field, so a coordinate cannot be fed to a scalar-field hash directly. The
32-byte little-endian encoding is cut into two 16-byte halves instead:

    low  = int.from_bytes(le32[:16], "little")
    high = int.from_bytes(le32[16:], "little")

Both halves are below 2^128 and therefore valid scalars, and
join_coordinate(low, high) restores the coordinate exactly.
"""
from __future__ import annotations

from core.crypto.group import FIELD_MODULUS

COORDINATE_BYTES = 32
LIMB_BYTES = 16


def split_coordinate(coordinate: int) -> tuple[int, int]:
    """
    Split a base-field coordinate into (low, high) scalar limbs.

    Raises:
        ValueError: If the coordinate is not a canonical base-field element.
    """
    if not 0 <= coordinate < FIELD_MODULUS:
        raise ValueError("Coordinate is not a canonical base-field element")

    encoded = coordinate.to_bytes(COORDINATE_BYTES, "little")
    low = int.from_bytes(encoded[:LIMB_BYTES], "little")
    high = int.from_bytes(encoded[LIMB_BYTES:], "little")
    return low, high


def join_coordinate(low: int, high: int) -> int:
    """
    Reassemble a coordinate from its limbs (inverse of split_coordinate).

    Raises:
        ValueError: If a limb does not fit in 16 bytes or the result is not
            a canonical base-field element.
    """
    limit = 1 << (8 * LIMB_BYTES)
    if not (0 <= low < limit and 0 <= high < limit):
        raise ValueError("Coordinate limbs must fit in 16 bytes")

    encoded = low.to_bytes(LIMB_BYTES, "little") + high.to_bytes(LIMB_BYTES, "little")
    coordinate = int.from_bytes(encoded, "little")
    if coordinate >= FIELD_MODULUS:
        raise ValueError("Reassembled coordinate exceeds the base-field modulus")
    return coordinate
