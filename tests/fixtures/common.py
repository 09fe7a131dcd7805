"""
Common test fixtures shared by all modules.

Provides factory functions for core anchored-proof structures:
- Deterministic randomness handles
- Generators
- Enrollments (secret, anchor, tree)
- Proof packages

Trees default to range 4 (16 leaves) to keep tests fast; tests that are
about tree shape rather than the hash pass merkle_hash="sha256".
"""

import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from core.anchored import (
    EnrollmentTree,
    Generators,
    ProofInput,
    anchor_setup,
    generate_anchored_proof,
    generator_setup,
    leaf_index_for,
    sample_blinding,
    sample_secret,
    tree_setup,
)
from core.crypto import from_hex, get_merkle_hasher, to_hex
from orchestrator.pipeline import ProofPackage


DEFAULT_SEED = 20240601


# =============================================================================
# Randomness
# =============================================================================

def make_rng(seed: int = DEFAULT_SEED) -> random.Random:
    """Deterministic randomness handle."""
    return random.Random(seed)


class SequenceRandom:
    """Randomness handle returning a fixed sequence of values."""

    def __init__(self, values: list[int]):
        self._values = list(values)

    def randrange(self, start: int, stop: int) -> int:
        return self._values.pop(0)


class FailingRandom:
    """Randomness handle whose source is unavailable."""

    def randrange(self, start: int, stop: int) -> int:
        raise OSError("entropy source unavailable")


# =============================================================================
# Generators & Enrollment
# =============================================================================

@lru_cache(maxsize=1)
def make_generators() -> Generators:
    """Default generators (cached; setup is deterministic)."""
    return generator_setup()


@dataclass(frozen=True)
class EnrollmentFixture:
    """Secret-side material plus the tree for one holder."""
    generators: Generators
    secret: int
    anchor: object
    tree: EnrollmentTree


def make_enrollment(
    range_bits: int = 4,
    secret: Optional[int] = None,
    merkle_hash: str = "field",
    seed: int = DEFAULT_SEED,
    workers: int = 1,
    generators: Optional[Generators] = None,
) -> EnrollmentFixture:
    """
    Build an enrollment with a deterministic secret.

    Args:
        range_bits: Tree range
        secret: Holder secret (sampled from seed if omitted)
        merkle_hash: Merkle hasher name ("field" or "sha256")
        seed: Seed for the secret
        workers: Tree build threads
        generators: Public generators (the default set if omitted)
    """
    generators = generators or make_generators()
    if secret is None:
        secret = sample_secret(make_rng(seed))
    anchor = anchor_setup(secret, generators.b)
    tree = tree_setup(
        range_bits,
        anchor,
        secret,
        generator=generators.g,
        hasher=get_merkle_hasher(merkle_hash),
        workers=workers,
    )
    return EnrollmentFixture(generators=generators, secret=secret, anchor=anchor, tree=tree)


def make_proof_input(
    enrollment: EnrollmentFixture,
    witness: int,
    blinding: Optional[int] = None,
    seed: int = DEFAULT_SEED + 1,
) -> ProofInput:
    """ProofInput for a witness with a deterministic blinding."""
    if blinding is None:
        blinding = sample_blinding(make_rng(seed))
    return ProofInput(
        secret=enrollment.secret,
        witness=witness,
        blinding=blinding,
        generators=enrollment.generators,
        anchor=enrollment.anchor,
        tree=enrollment.tree,
    )


def make_proof_package(
    range_bits: int = 4,
    witness: int = 5,
    merkle_hash: str = "field",
    seed: int = DEFAULT_SEED,
) -> ProofPackage:
    """A valid proof package (params + proof + index claim)."""
    enrollment = make_enrollment(range_bits=range_bits, merkle_hash=merkle_hash, seed=seed)
    proof = generate_anchored_proof(
        make_proof_input(enrollment, witness), make_rng(seed + 2)
    )
    return ProofPackage(
        params=enrollment.tree.public_parameters(enrollment.generators),
        proof=proof,
        leaf_index=leaf_index_for(witness),
    )


# =============================================================================
# Tampering helpers
# =============================================================================

def flip_hex_byte(value: str, index: int = -1, mask: int = 0x01) -> str:
    """Flip bits of one byte in a 0x-hex string."""
    data = bytearray(from_hex(value))
    data[index] ^= mask
    return to_hex(bytes(data))
