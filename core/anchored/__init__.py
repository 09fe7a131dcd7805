"""
Anchored Proofs

Setup, enrollment tree, proof generation and verification.

Usage:
    from core.anchored import (
        generator_setup, sample_secret, anchor_setup, tree_setup,
        ProofInput, generate_anchored_proof, verify_anchored_proof,
    )

    gens = generator_setup()
    s = sample_secret()
    anchor = anchor_setup(s, gens.b)
    tree = tree_setup(8, anchor, s, generator=gens.g)
    proof = generate_anchored_proof(ProofInput(s, 2, sample_blinding(), gens, anchor, tree))
    result = verify_anchored_proof(tree.public_parameters(gens), proof, leaf_index_for(2))
"""

from .params import (
    B_SEED,
    H_SEED,
    Generators,
    RandomSource,
    generator_setup,
    sample_blinding,
    sample_nonce,
    sample_nums_generator,
    sample_secret,
)
from .tree import (
    EnrollmentTree,
    anchor_setup,
    leaf_hash_for,
    leaf_hash_from_points,
    tree_setup,
)
from .prover import (
    ProofInput,
    dleq_challenge,
    generate_anchored_proof,
    generate_dleq_proof,
    generate_schnorr_proof,
    leaf_index_for,
    schnorr_challenge,
    schnorr_response,
)
from .verifier import require_valid_proof, verify_anchored_proof

__all__ = [
    "B_SEED",
    "H_SEED",
    "Generators",
    "RandomSource",
    "generator_setup",
    "sample_blinding",
    "sample_nonce",
    "sample_nums_generator",
    "sample_secret",
    "EnrollmentTree",
    "anchor_setup",
    "leaf_hash_for",
    "leaf_hash_from_points",
    "tree_setup",
    "ProofInput",
    "dleq_challenge",
    "generate_anchored_proof",
    "generate_dleq_proof",
    "generate_schnorr_proof",
    "leaf_index_for",
    "schnorr_challenge",
    "schnorr_response",
    "require_valid_proof",
    "verify_anchored_proof",
]
