"""
Test fixtures package for anchored-proof tests.

This package provides factory functions for creating test objects.
- common.py: randomness handles, generators, enrollments, proof packages

Usage:
    from fixtures import make_enrollment, make_proof_package

    def test_something():
        package = make_proof_package(range_bits=4, witness=5)
"""

from .common import (
    EnrollmentFixture,
    FailingRandom,
    SequenceRandom,
    flip_hex_byte,
    make_enrollment,
    make_generators,
    make_proof_input,
    make_proof_package,
    make_rng,
)

__all__ = [
    "EnrollmentFixture",
    "FailingRandom",
    "SequenceRandom",
    "flip_hex_byte",
    "make_enrollment",
    "make_generators",
    "make_proof_input",
    "make_proof_package",
    "make_rng",
]
