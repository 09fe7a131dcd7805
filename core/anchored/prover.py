"""
Module 06 - Proof Generator
Builds an AnchoredProof for an enrolled witness.

Generation Steps:
1. C = G^w * H^r            (Pedersen commitment)
2. C' = C^s                 (modified commitment)
3. P = G^(s*w)
4. leaf = Hash5(1, split(U.x), split(P.x)), looked up in the tree
5. Merkle sibling path for the matched leaf
6. public_blinding = C' - P (= H^(s*r))
7. DLEQ proof that (B, U) and (C, C') share exponent s
8. Schnorr proof of t = s*r for public_blinding = H^t

Both nonces are drawn fresh from the randomness handle on every call and a
failed lookup aborts before any nonce is drawn. Responses are computed
modulo the group order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.crypto.field_hash import field_hash
from core.crypto.field_split import split_coordinate
from core.crypto.group import (
    CURVE_ORDER,
    GroupElement,
    affine_x,
    encode_point,
    encode_scalar,
    point_add,
    point_sub,
    scalar_mul,
)
from core.crypto.hashing import to_hex
from core.schemas.errors import (
    InvalidParameterException,
    RandomnessException,
    RangeMismatchException,
    WitnessNotEnrolledException,
)
from core.schemas.proof import AnchoredProof, DLEQProof, MerklePath, SchnorrProof

from .params import Generators, RandomSource, sample_nonce
from .tree import EnrollmentTree, leaf_hash_from_points


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofInput:
    """
    Everything the prover needs for one proof.

    Attributes:
        secret: Holder secret s
        witness: Value w to prove enrollment of
        blinding: Pedersen blinding r
        generators: Public (G, H, B)
        anchor: Public anchor U = B^s
        tree: Enrollment tree built for (U, s)
    """
    secret: int
    witness: int
    blinding: int
    generators: Generators
    anchor: GroupElement
    tree: EnrollmentTree


def leaf_index_for(witness: int) -> int:
    """Tree position of an enrolled witness; leaves are ordered by x = index + 1."""
    return witness - 1


def _split_x(point: GroupElement) -> tuple[int, int]:
    return split_coordinate(affine_x(point))


def dleq_challenge(
    anchor: GroupElement,
    modified_commitment: GroupElement,
    r1: GroupElement,
    r2: GroupElement,
) -> int:
    """e = Hash8(split(U.x), split(C'.x), split(R1.x), split(R2.x))."""
    return field_hash([
        *_split_x(anchor),
        *_split_x(modified_commitment),
        *_split_x(r1),
        *_split_x(r2),
    ])


def schnorr_challenge(public_blinding: GroupElement, r: GroupElement) -> int:
    """e' = Hash4(split(public_blinding.x), split(R.x))."""
    return field_hash([*_split_x(public_blinding), *_split_x(r)])


def schnorr_response(nonce: int, challenge: int, secret: int) -> int:
    """Response nonce + challenge * secret in the scalar field."""
    return (nonce + challenge * secret) % CURVE_ORDER


def generate_dleq_proof(
    base: GroupElement,
    public: GroupElement,
    commitment: GroupElement,
    modified_commitment: GroupElement,
    secret: int,
    nonce: int,
) -> DLEQProof:
    """
    Prove log_base(public) == log_commitment(modified_commitment) == secret.

    R1 = base^nonce, R2 = commitment^nonce, z = nonce + e*secret.
    """
    r1 = scalar_mul(base, nonce)
    r2 = scalar_mul(commitment, nonce)
    e = dleq_challenge(public, modified_commitment, r1, r2)
    z = schnorr_response(nonce, e, secret)
    return DLEQProof(
        r1=to_hex(encode_point(r1)),
        r2=to_hex(encode_point(r2)),
        z=to_hex(encode_scalar(z)),
    )


def generate_schnorr_proof(
    base: GroupElement,
    public: GroupElement,
    secret: int,
    nonce: int,
) -> SchnorrProof:
    """Prove knowledge of secret with public = base^secret."""
    r = scalar_mul(base, nonce)
    e = schnorr_challenge(public, r)
    z = schnorr_response(nonce, e, secret)
    return SchnorrProof(r=to_hex(encode_point(r)), z=to_hex(encode_scalar(z)))


def _check_inputs(inputs: ProofInput) -> None:
    if not 1 <= inputs.secret < CURVE_ORDER:
        raise InvalidParameterException("Secret must lie in [1, r)", parameter="secret")
    if not 1 <= inputs.blinding < CURVE_ORDER:
        raise InvalidParameterException("Blinding must lie in [1, r)", parameter="blinding")
    range_bits = inputs.tree.range_bits
    if not 1 <= inputs.witness <= 1 << range_bits:
        raise RangeMismatchException(
            f"Witness is outside the enrolled range [1, {1 << range_bits}]",
            range_bits=range_bits,
        )


def generate_anchored_proof(
    inputs: ProofInput,
    rng: Optional[RandomSource] = None,
) -> AnchoredProof:
    """
    Generate an anchored proof for inputs.witness.

    Args:
        inputs: Secret, witness, blinding and public context
        rng: Randomness handle for the two nonces (system CSPRNG by default)

    Returns:
        AnchoredProof. The leaf index is not embedded; see leaf_index_for.

    Raises:
        RangeMismatchException: If the witness is outside [1, 2^range].
        WitnessNotEnrolledException: If the derived leaf is not in the tree.
        RandomnessException: If the randomness source fails or repeats.
    """
    _check_inputs(inputs)
    gens = inputs.generators
    s = inputs.secret

    commitment = point_add(
        scalar_mul(gens.g, inputs.witness), scalar_mul(gens.h, inputs.blinding)
    )
    modified_commitment = scalar_mul(commitment, s)
    p_point = scalar_mul(gens.g, s * inputs.witness)

    leaf = leaf_hash_from_points(inputs.anchor, p_point)
    index = inputs.tree.index_of(leaf)
    if index is None:
        raise WitnessNotEnrolledException(
            "Witness leaf not found in the enrollment tree",
            details={"range_bits": inputs.tree.range_bits},
        )
    merkle_proof = inputs.tree.proof(index)
    logger.debug(f"Leaf matched, path depth {len(merkle_proof.siblings)}")

    public_blinding = point_sub(modified_commitment, p_point)

    dleq_nonce = sample_nonce(rng)
    schnorr_nonce = sample_nonce(rng)
    if dleq_nonce == schnorr_nonce:
        raise RandomnessException("Randomness source returned the same nonce twice")

    dleq_proof = generate_dleq_proof(
        base=gens.b,
        public=inputs.anchor,
        commitment=commitment,
        modified_commitment=modified_commitment,
        secret=s,
        nonce=dleq_nonce,
    )
    schnorr_proof = generate_schnorr_proof(
        base=gens.h,
        public=public_blinding,
        secret=(s * inputs.blinding) % CURVE_ORDER,
        nonce=schnorr_nonce,
    )

    proof = AnchoredProof(
        commitment=to_hex(encode_point(commitment)),
        modified_commitment=to_hex(encode_point(modified_commitment)),
        p_point=to_hex(encode_point(p_point)),
        leaf_hash=to_hex(leaf),
        merkle_proof=MerklePath(siblings=[to_hex(sibling) for sibling in merkle_proof.siblings]),
        dleq_proof=dleq_proof,
        schnorr_proof=schnorr_proof,
    )
    logger.info("Anchored proof generated")
    return proof
