"""
Module 02 - Group Arithmetic Unit Tests
Tests for core/crypto/group.py

Tests:
- Compressed point encoding of known points
- Decoding rejects off-curve, malformed and non-canonical inputs
- Identity handling
- Canonical scalar encoding
"""
import pytest

from core.crypto.group import (
    CURVE_ORDER,
    FIELD_MODULUS,
    GENERATOR,
    IDENTITY,
    affine_x,
    decode_point,
    decode_scalar,
    encode_point,
    encode_scalar,
    is_identity,
    point_add,
    point_from_candidate,
    point_neg,
    point_sub,
    points_equal,
    scalar_mul,
)
from core.schemas.errors import EncodingException, ErrorCodes


def _non_residue_x() -> int:
    """Smallest x for which x^3 + 3 has no square root mod p."""
    x = 1
    while True:
        rhs = (pow(x, 3, FIELD_MODULUS) + 3) % FIELD_MODULUS
        if pow(rhs, (FIELD_MODULUS - 1) // 2, FIELD_MODULUS) == FIELD_MODULUS - 1:
            return x
        x += 1


class TestPointEncoding:
    """Tests for encode_point / decode_point."""

    def test_generator_encoding(self):
        """Test G = (1, 2) encodes with an even prefix and x = 1."""
        assert encode_point(GENERATOR) == b"\x02" + (1).to_bytes(32, "big")

    def test_negated_generator_has_odd_prefix(self):
        """Test -G = (1, p - 2) encodes with 0x03."""
        assert encode_point(point_neg(GENERATOR))[0] == 0x03

    def test_decode_inverts_encode(self):
        """Test decode(encode(P)) == P for both parities."""
        point = scalar_mul(GENERATOR, 123456789)
        for candidate in (point, point_neg(point)):
            decoded = decode_point(encode_point(candidate))
            assert points_equal(decoded, candidate)

    def test_encoding_is_33_bytes(self):
        """Test every encoding is 33 bytes."""
        assert len(encode_point(scalar_mul(GENERATOR, 7))) == 33

    def test_identity_cannot_be_encoded(self):
        """Test encoding the identity raises."""
        with pytest.raises(EncodingException):
            encode_point(IDENTITY)

    def test_off_curve_x_rejected(self):
        """Test an x with no curve point is rejected."""
        x = _non_residue_x()
        with pytest.raises(EncodingException) as exc_info:
            decode_point(b"\x02" + x.to_bytes(32, "big"))
        assert exc_info.value.code == ErrorCodes.ENCODING_ERROR

    def test_bad_prefix_rejected(self):
        """Test prefixes other than 0x02/0x03 are rejected."""
        data = b"\x04" + (1).to_bytes(32, "big")
        with pytest.raises(EncodingException, match="prefix"):
            decode_point(data)

    def test_bad_length_rejected(self):
        """Test non-33-byte input is rejected."""
        with pytest.raises(EncodingException, match="33"):
            decode_point(b"\x02" + (1).to_bytes(31, "big"))

    def test_non_canonical_x_rejected(self):
        """Test x >= p is rejected."""
        with pytest.raises(EncodingException, match="canonical"):
            decode_point(b"\x02" + FIELD_MODULUS.to_bytes(32, "big"))


class TestPointFromCandidate:
    """Tests for point_from_candidate()."""

    def test_valid_candidate(self):
        """Test the generator's x is accepted as a candidate."""
        point = point_from_candidate((1).to_bytes(32, "big"))
        assert point is not None
        assert points_equal(point, GENERATOR)

    def test_invalid_candidate_returns_none(self):
        """Test an off-curve candidate returns None instead of raising."""
        assert point_from_candidate(_non_residue_x().to_bytes(32, "big")) is None
        assert point_from_candidate(b"\xff" * 32) is None


class TestIdentity:
    """Tests for identity handling in group helpers."""

    def test_scalar_mul_by_order_is_identity(self):
        """Test G^r is the identity."""
        assert is_identity(scalar_mul(GENERATOR, CURVE_ORDER))
        assert is_identity(scalar_mul(GENERATOR, 0))

    def test_point_sub_self_is_identity(self):
        """Test P - P is the identity."""
        point = scalar_mul(GENERATOR, 42)
        assert is_identity(point_sub(point, point))

    def test_add_identity(self):
        """Test identity is neutral for point_add."""
        point = scalar_mul(GENERATOR, 42)
        assert points_equal(point_add(point, IDENTITY), point)
        assert points_equal(point_add(IDENTITY, point), point)

    def test_addition_matches_scalar_mul(self):
        """Test G^a * G^b == G^(a+b)."""
        a, b = 1234, 98765
        assert points_equal(
            point_add(scalar_mul(GENERATOR, a), scalar_mul(GENERATOR, b)),
            scalar_mul(GENERATOR, a + b),
        )

    def test_affine_x_of_identity_raises(self):
        """Test the identity has no x coordinate."""
        with pytest.raises(ValueError):
            affine_x(IDENTITY)

    def test_points_equal_identity(self):
        """Test identity compares equal only to identity."""
        assert points_equal(IDENTITY, scalar_mul(GENERATOR, 0))
        assert not points_equal(IDENTITY, GENERATOR)


class TestScalarEncoding:
    """Tests for encode_scalar / decode_scalar."""

    def test_round_trip(self):
        """Test a canonical scalar survives encode/decode."""
        value = CURVE_ORDER - 1
        assert decode_scalar(encode_scalar(value)) == value

    def test_encode_rejects_order(self):
        """Test encoding r itself fails."""
        with pytest.raises(EncodingException):
            encode_scalar(CURVE_ORDER)

    def test_decode_rejects_order(self):
        """Test decoding a value >= r fails."""
        with pytest.raises(EncodingException, match="canonical"):
            decode_scalar(CURVE_ORDER.to_bytes(32, "big"))

    def test_decode_rejects_bad_length(self):
        """Test decoding a 31-byte value fails."""
        with pytest.raises(EncodingException):
            decode_scalar(b"\x01" * 31)
