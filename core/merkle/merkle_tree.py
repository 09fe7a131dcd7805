"""
Module 03 - Merkle Tree Implementation
Deterministic binary Merkle tree over pre-hashed 32-byte leaves, with a
pluggable node hasher.

Commitment Rules (Hard Contracts):
1. Leaves are inserted as given; the tree never rehashes them
2. Parent hashing: parent = hasher.hash(left + right) over 64 bytes
3. Padding rule: duplicate last node if odd number at any level
4. Empty trees are rejected; a single leaf is its own root
5. Leaf order is defined by the caller and never sorted here

Proofs carry only sibling hashes. Root, index, leaf and total leaf count are
supplied by the verifier, so a proof cannot vouch for its own position.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from core.crypto.field_hash import NODE_BYTES, MerkleHasher


@dataclass(frozen=True)
class MerkleProof:
    """
    Inclusion path for a single leaf.

    Attributes:
        siblings: Sibling hashes from the leaf level up to (excluding) the root
    """
    siblings: tuple[bytes, ...]

    def verify(
        self,
        root: bytes,
        index: int,
        leaf: bytes,
        total_leaves: int,
        hasher: MerkleHasher,
    ) -> bool:
        """Verify this path against a root. See verify_merkle_proof."""
        return verify_merkle_proof(self, root, index, leaf, total_leaves, hasher)


def merkle_parent(left: bytes, right: bytes, hasher: MerkleHasher) -> bytes:
    """Compute the parent hash of two child nodes: hasher(left + right)."""
    return hasher.hash(left + right)


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of parent levels above the leaves (the length of every path).

    A single leaf has depth 0, two leaves depth 1, 2^k leaves depth k.
    """
    if num_leaves < 1:
        raise ValueError(f"Tree must have at least one leaf, got {num_leaves}")
    depth = 0
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


def build_merkle_levels(leaves: Sequence[bytes], hasher: MerkleHasher) -> list[list[bytes]]:
    """
    Build every level of the tree, leaves first, root level last.

    Raises:
        ValueError: If leaves is empty.
    """
    if len(leaves) == 0:
        raise ValueError("Cannot build a Merkle tree from an empty leaf list")

    current_level: list[bytes] = list(leaves)
    levels = [current_level]

    while len(current_level) > 1:
        if len(current_level) % 2 == 1:
            current_level = current_level + [current_level[-1]]

        current_level = [
            merkle_parent(current_level[i], current_level[i + 1], hasher)
            for i in range(0, len(current_level), 2)
        ]
        levels.append(current_level)

    return levels


def build_merkle_root(leaves: Sequence[bytes], hasher: MerkleHasher) -> bytes:
    """Compute the Merkle root of a non-empty leaf sequence."""
    return build_merkle_levels(leaves, hasher)[-1][0]


def verify_merkle_proof(
    proof: MerkleProof,
    root: bytes,
    index: int,
    leaf: bytes,
    total_leaves: int,
    hasher: MerkleHasher,
) -> bool:
    """
    Verify that `leaf` sits at `index` in a tree of `total_leaves` with `root`.

    The path length must match the depth implied by total_leaves exactly.
    Sibling values the hasher cannot accept make the proof invalid.

    Returns:
        True if the recomputed root equals `root`, False otherwise.
    """
    if total_leaves < 1 or not 0 <= index < total_leaves:
        return False
    if len(proof.siblings) != compute_tree_depth(total_leaves):
        return False

    current_hash = leaf
    current_index = index

    try:
        for sibling in proof.siblings:
            if current_index % 2 == 0:
                current_hash = merkle_parent(current_hash, sibling, hasher)
            else:
                current_hash = merkle_parent(sibling, current_hash, hasher)
            current_index //= 2
    except ValueError:
        return False

    return current_hash == root


class MerkleTree:
    """
    Immutable Merkle tree with proof generation and leaf lookup.

    Safe for concurrent readers: nothing is mutated after __init__.
    """

    def __init__(self, leaves: Sequence[bytes], hasher: MerkleHasher):
        """
        Build a tree over pre-hashed leaves.

        Raises:
            ValueError: If leaves is empty or a leaf is not 32 bytes.
        """
        for i, leaf in enumerate(leaves):
            if len(leaf) != NODE_BYTES:
                raise ValueError(f"Leaf {i} must be {NODE_BYTES} bytes, got {len(leaf)}")

        self._hasher = hasher
        self._levels: tuple[tuple[bytes, ...], ...] = tuple(
            tuple(level) for level in build_merkle_levels(leaves, hasher)
        )
        self._positions: dict[bytes, int] = {}
        for i, leaf in enumerate(self._levels[0]):
            self._positions.setdefault(leaf, i)

    @classmethod
    def from_data(cls, chunks: Iterable[bytes], hasher: MerkleHasher) -> "MerkleTree":
        """Build a tree whose leaves are hasher(chunk) for each raw chunk."""
        return cls([hasher.hash(chunk) for chunk in chunks], hasher)

    @property
    def root(self) -> bytes:
        return self._levels[-1][0]

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self._levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        return len(self._levels) - 1

    @property
    def hasher(self) -> MerkleHasher:
        return self._hasher

    def proof(self, index: int) -> MerkleProof:
        """
        Generate the sibling path for the leaf at `index`.

        Raises:
            IndexError: If index is out of range.
        """
        if not 0 <= index < self.leaf_count:
            raise IndexError(
                f"Leaf index {index} out of range for {self.leaf_count} leaves"
            )

        siblings: list[bytes] = []
        current_index = index
        for level in self._levels[:-1]:
            sibling_index = current_index ^ 1
            # Odd-length level: the last node is paired with itself
            if sibling_index >= len(level):
                sibling_index = current_index
            siblings.append(level[sibling_index])
            current_index //= 2

        return MerkleProof(siblings=tuple(siblings))

    def find_index(self, leaf: bytes) -> Optional[int]:
        """Return the first index holding `leaf`, or None."""
        return self._positions.get(leaf)

    def verify(self, proof: MerkleProof, index: int, leaf: bytes) -> bool:
        """Verify a path against this tree's root and size."""
        return verify_merkle_proof(
            proof, self.root, index, leaf, self.leaf_count, self._hasher
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
