"""
Module 04 - Parameter Setup
Public generators and scalar sampling for anchored proofs.

G is the curve's canonical base point. H and B are "nothing up my sleeve"
generators: SHA-256(seed || counter) is read as an even-parity compressed x
coordinate and the counter advances until the digest names a curve point.
Nobody knows the discrete log of H or B with respect to G.

All sampling takes an explicit randomness handle. Production code passes
nothing and gets secrets.SystemRandom(); tests pass random.Random(seed).
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from core.crypto.group import (
    CURVE_ORDER,
    GENERATOR,
    GroupElement,
    encode_point,
    is_identity,
    point_from_candidate,
    points_equal,
)
from core.crypto.hashing import sha256, to_hex
from core.schemas.errors import RandomnessException, SetupException


logger = logging.getLogger(__name__)


H_SEED = bytes(32)
B_SEED = bytes([1]) * 32

DEFAULT_MAX_ATTEMPTS = 1024


class RandomSource(Protocol):
    """Anything exposing randrange, e.g. secrets.SystemRandom or random.Random."""

    def randrange(self, start: int, stop: int) -> int:
        ...


@dataclass(frozen=True)
class Generators:
    """The three public generators (G, H, B)."""
    g: GroupElement
    h: GroupElement
    b: GroupElement

    def to_dict(self) -> dict[str, Any]:
        return {
            "generator_g": to_hex(encode_point(self.g)),
            "generator_h": to_hex(encode_point(self.h)),
            "generator_b": to_hex(encode_point(self.b)),
        }


def sample_nums_generator(seed: bytes, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> GroupElement:
    """
    Derive a generator from a seed by try-and-increment.

    Raises:
        SetupException: If no valid point is found within max_attempts.
    """
    for counter in range(max_attempts):
        digest = sha256(seed + counter.to_bytes(8, "big"))
        point = point_from_candidate(digest)
        if point is not None and not is_identity(point):
            logger.debug(f"Seed {seed[:4].hex()}... produced a generator at counter {counter}")
            return point

    raise SetupException(
        f"No generator found within {max_attempts} attempts",
        details={"seed": seed.hex(), "max_attempts": max_attempts},
    )


def generator_setup(
    seeds: Optional[tuple[bytes, bytes]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Generators:
    """
    Produce the public generators (G, H, B).

    Args:
        seeds: (H seed, B seed); defaults to 32 zero bytes and 32 one-bytes
        max_attempts: Counter cap for each seeded generator

    Raises:
        SetupException: If sampling fails or the generators are not pairwise
            distinct and non-identity.
    """
    h_seed, b_seed = seeds if seeds is not None else (H_SEED, B_SEED)

    h = sample_nums_generator(h_seed, max_attempts)
    b = sample_nums_generator(b_seed, max_attempts)
    generators = Generators(g=GENERATOR, h=h, b=b)

    _check_generators(generators)
    logger.info("Generator setup complete")
    return generators


def _check_generators(generators: Generators) -> None:
    named = [("G", generators.g), ("H", generators.h), ("B", generators.b)]
    for name, point in named:
        if is_identity(point):
            raise SetupException(f"Generator {name} is the identity")
    for i in range(len(named)):
        for j in range(i + 1, len(named)):
            if points_equal(named[i][1], named[j][1]):
                raise SetupException(
                    f"Generators {named[i][0]} and {named[j][0]} coincide"
                )


def _sample_scalar(rng: Optional[RandomSource]) -> int:
    source = rng if rng is not None else secrets.SystemRandom()
    try:
        value = source.randrange(1, CURVE_ORDER)
    except (OSError, NotImplementedError) as e:
        raise RandomnessException(f"Randomness source failed: {e}") from e

    if not 1 <= value < CURVE_ORDER:
        raise RandomnessException("Randomness source returned an out-of-range scalar")
    return value


def sample_secret(rng: Optional[RandomSource] = None) -> int:
    """Sample a holder secret uniformly from [1, r)."""
    return _sample_scalar(rng)


def sample_blinding(rng: Optional[RandomSource] = None) -> int:
    """Sample a commitment blinding factor uniformly from [1, r)."""
    return _sample_scalar(rng)


def sample_nonce(rng: Optional[RandomSource] = None) -> int:
    """Sample a proof nonce uniformly from [1, r)."""
    return _sample_scalar(rng)
