"""
Module 03 - Merkle Tree and Inclusion Proofs
Deterministic Merkle tree construction + proof generation/verification over
a pluggable node hasher.

Usage:
    from core.crypto import FieldMerkleHasher
    from core.merkle import MerkleTree

    tree = MerkleTree(leaves, FieldMerkleHasher())
    proof = tree.proof(2)
    assert proof.verify(tree.root, 2, leaves[2], len(leaves), tree.hasher)
"""
from .merkle_tree import (
    MerkleProof,
    MerkleTree,
    merkle_parent,
    compute_tree_depth,
    build_merkle_levels,
    build_merkle_root,
    verify_merkle_proof,
)


__all__ = [
    "MerkleProof",
    "MerkleTree",
    "merkle_parent",
    "compute_tree_depth",
    "build_merkle_levels",
    "build_merkle_root",
    "verify_merkle_proof",
]
