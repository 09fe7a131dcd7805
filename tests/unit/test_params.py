"""
Module 04 - Parameter Setup Unit Tests
Tests for core/anchored/params.py

Tests:
- Generator derivation is deterministic and yields distinct points
- Sampling caps and degenerate seeds raise SetupException
- Scalar sampling honours the randomness handle and its failures
"""
import random

import pytest

from core.anchored.params import (
    B_SEED,
    H_SEED,
    generator_setup,
    sample_blinding,
    sample_nonce,
    sample_nums_generator,
    sample_secret,
)
from core.crypto.group import CURVE_ORDER, GENERATOR, encode_point, points_equal
from core.crypto.hashing import to_hex
from core.schemas.errors import ErrorCodes, RandomnessException, SetupException

from fixtures import FailingRandom, SequenceRandom


class TestGeneratorSetup:
    """Tests for generator_setup()."""

    def test_deterministic(self):
        assert generator_setup().to_dict() == generator_setup().to_dict()

    def test_g_is_canonical_base_point(self):
        assert points_equal(generator_setup().g, GENERATOR)

    def test_pairwise_distinct(self):
        gens = generator_setup()

        assert not points_equal(gens.g, gens.h)
        assert not points_equal(gens.g, gens.b)
        assert not points_equal(gens.h, gens.b)

    def test_seeded_generators(self):
        """H and B come from their default seeds."""
        gens = generator_setup()

        assert points_equal(gens.h, sample_nums_generator(H_SEED))
        assert points_equal(gens.b, sample_nums_generator(B_SEED))

    def test_custom_seeds_change_generators(self):
        gens = generator_setup(seeds=(b"\x02" * 32, b"\x03" * 32))
        assert gens.to_dict()["generator_h"] != generator_setup().to_dict()["generator_h"]

    def test_equal_seeds_rejected(self):
        with pytest.raises(SetupException, match="coincide"):
            generator_setup(seeds=(b"\x05" * 32, b"\x05" * 32))

    def test_to_dict_hex(self):
        data = generator_setup().to_dict()

        assert set(data) == {"generator_g", "generator_h", "generator_b"}
        assert data["generator_g"] == to_hex(encode_point(GENERATOR))


class TestSampleNumsGenerator:
    """Tests for sample_nums_generator()."""

    def test_attempt_cap(self):
        with pytest.raises(SetupException) as exc_info:
            sample_nums_generator(H_SEED, max_attempts=0)

        assert exc_info.value.code == ErrorCodes.SETUP_FAILED
        assert exc_info.value.details["max_attempts"] == 0

    def test_point_encodes_even(self):
        """Try-and-increment candidates are read with the 0x02 prefix."""
        assert encode_point(sample_nums_generator(b"seed"))[0] == 0x02


class TestScalarSampling:
    """Tests for sample_secret / sample_blinding / sample_nonce."""

    def test_seeded_rng_deterministic(self):
        assert sample_secret(random.Random(1)) == sample_secret(random.Random(1))

    def test_system_rng_in_range(self):
        for sampler in (sample_secret, sample_blinding, sample_nonce):
            value = sampler()
            assert 1 <= value < CURVE_ORDER

    def test_fresh_samples_differ(self):
        assert sample_nonce() != sample_nonce()

    def test_source_failure(self):
        with pytest.raises(RandomnessException) as exc_info:
            sample_secret(FailingRandom())
        assert exc_info.value.code == ErrorCodes.RANDOMNESS_FAILURE

    @pytest.mark.parametrize("value", [0, CURVE_ORDER, -1])
    def test_out_of_range_value(self, value):
        with pytest.raises(RandomnessException, match="out-of-range"):
            sample_blinding(SequenceRandom([value]))
