"""
Module 02 - Group Arithmetic
BN254 G1 group operations on top of the ecdsa library's generic curve code.

The curve is y^2 = x^3 + 3 over the 254-bit base field, with prime order
CURVE_ORDER and cofactor 1, so every point that decodes onto the curve is
in the prime-order subgroup.

Encodings fixed by this protocol:
- Scalars: 32-byte big-endian, canonical (strictly below CURVE_ORDER)
- Points: 33-byte compressed, 0x02/0x03 parity prefix + 32-byte big-endian x
- The identity has no encoding and never appears in a proof

Point arithmetic goes through the helpers below so that the identity
(ecdsa's INFINITY sentinel) is handled in one place.
"""
from __future__ import annotations

from typing import Optional, Union

import ecdsa.ellipticcurve as ec
from ecdsa import numbertheory

from core.schemas.errors import EncodingException

# BN254 base (coordinate) field modulus
FIELD_MODULUS = 0x30644E72E131A029B85045B68181585D97816A916871CA8D3C208C16D87CFD47

# BN254 scalar (exponent) field modulus, the group order
CURVE_ORDER = 0x30644E72E131A029B85045B68181585D2833E84879B9709143E1F593F0000001

SCALAR_BYTES = 32
POINT_BYTES = 33

_CURVE = ec.CurveFp(FIELD_MODULUS, 0, 3, 1)

# Canonical base point (1, 2)
GENERATOR = ec.PointJacobi(_CURVE, 1, 2, 1, CURVE_ORDER, generator=True)

IDENTITY = ec.INFINITY

GroupElement = Union[ec.PointJacobi, ec.Point]


def is_identity(point: GroupElement) -> bool:
    """Check whether a point is the group identity."""
    return point is IDENTITY or point == IDENTITY


def points_equal(a: GroupElement, b: GroupElement) -> bool:
    """Compare two points, treating every identity representation as equal."""
    if is_identity(a) or is_identity(b):
        return is_identity(a) and is_identity(b)
    return a == b


def scalar_mul(point: GroupElement, scalar: int) -> GroupElement:
    """Compute point^scalar (additively: scalar * point)."""
    scalar %= CURVE_ORDER
    if scalar == 0 or is_identity(point):
        return IDENTITY
    return point * scalar


def point_add(a: GroupElement, b: GroupElement) -> GroupElement:
    """Group operation a · b (additively: a + b)."""
    if is_identity(a):
        return b
    if is_identity(b):
        return a
    return a + b


def point_neg(point: GroupElement) -> GroupElement:
    """Group inverse of a point."""
    if is_identity(point):
        return IDENTITY
    return ec.PointJacobi(
        _CURVE, point.x(), (FIELD_MODULUS - point.y()) % FIELD_MODULUS, 1, CURVE_ORDER
    )


def point_sub(a: GroupElement, b: GroupElement) -> GroupElement:
    """Group subtraction a · b^-1 (additively: a - b)."""
    return point_add(a, point_neg(b))


def affine_x(point: GroupElement) -> int:
    """
    Affine x coordinate of a point.

    Raises:
        ValueError: For the identity, which has no affine coordinates.
    """
    if is_identity(point):
        raise ValueError("The identity has no affine coordinates")
    return point.x()


def encode_point(point: GroupElement) -> bytes:
    """
    Encode a point as 33 compressed bytes.

    Raises:
        EncodingException: For the identity.
    """
    if is_identity(point):
        raise EncodingException("Cannot encode the point at infinity")
    prefix = b"\x02" if point.y() % 2 == 0 else b"\x03"
    return prefix + point.x().to_bytes(32, "big")


def decode_point(data: bytes) -> ec.PointJacobi:
    """
    Decode a 33-byte compressed point and check it lies on the curve.

    Raises:
        EncodingException: On bad length, prefix, non-canonical x, or an x
            coordinate with no matching curve point.
    """
    if len(data) != POINT_BYTES:
        raise EncodingException(f"Expected {POINT_BYTES} bytes, got {len(data)}")
    prefix = data[0]
    if prefix not in (0x02, 0x03):
        raise EncodingException(f"Invalid prefix byte: 0x{prefix:02x}")

    x = int.from_bytes(data[1:], "big")
    if x >= FIELD_MODULUS:
        raise EncodingException("X coordinate is not a canonical base-field element")

    y_sq = (pow(x, 3, FIELD_MODULUS) + 3) % FIELD_MODULUS
    try:
        y = numbertheory.square_root_mod_prime(y_sq, FIELD_MODULUS)
    except numbertheory.Error as e:
        raise EncodingException(
            f"X coordinate 0x{x:064x} does not correspond to a curve point"
        ) from e

    if (y % 2 == 0) != (prefix == 0x02):
        y = FIELD_MODULUS - y

    if not _CURVE.contains_point(x, y):
        raise EncodingException("Decoded point is not on the curve")

    return ec.PointJacobi(_CURVE, x, y, 1, CURVE_ORDER)


def point_from_candidate(candidate: bytes) -> Optional[ec.PointJacobi]:
    """
    Interpret 32 candidate bytes as an even-parity compressed x coordinate.

    Returns None when the bytes do not name a valid curve point, which is
    the expected outcome for roughly half of all candidates.
    """
    try:
        return decode_point(b"\x02" + candidate)
    except EncodingException:
        return None


def encode_scalar(scalar: int) -> bytes:
    """
    Encode a scalar as 32 big-endian bytes.

    Raises:
        EncodingException: If the scalar is not canonical.
    """
    if not 0 <= scalar < CURVE_ORDER:
        raise EncodingException("Scalar is not a canonical scalar-field element")
    return scalar.to_bytes(SCALAR_BYTES, "big")


def decode_scalar(data: bytes) -> int:
    """
    Decode a 32-byte big-endian scalar, rejecting non-canonical values.

    Raises:
        EncodingException: On bad length or a value >= CURVE_ORDER.
    """
    if len(data) != SCALAR_BYTES:
        raise EncodingException(f"Expected {SCALAR_BYTES} bytes, got {len(data)}")
    scalar = int.from_bytes(data, "big")
    if scalar >= CURVE_ORDER:
        raise EncodingException("Scalar is not a canonical scalar-field element")
    return scalar
