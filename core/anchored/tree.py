"""
Module 05 - Anchor & Enrollment Tree
Builds the public anchor U = B^s and the Merkle tree of enrolled values.

Leaf Rules (Hard Contracts):
1. One leaf per x in 1..2^range, ordered by ascending x
2. leaf(x) = Hash5(1, split(U.x), split(P_x.x)) with P_x = G^(s*x)
3. Leaves are 32-byte big-endian field elements
4. Tree depth equals range; the tree is read-only once built

Leaf computation is split into contiguous chunks across worker threads and
joined in x order before the tree is assembled, so the root does not depend
on the worker count.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

from core.crypto.field_hash import FieldMerkleHasher, MerkleHasher, field_hash, field_to_bytes
from core.crypto.field_split import split_coordinate
from core.crypto.group import (
    CURVE_ORDER,
    GroupElement,
    affine_x,
    encode_point,
    is_identity,
    point_add,
    scalar_mul,
)
from core.crypto.hashing import to_hex
from core.merkle import MerkleProof, MerkleTree
from core.schemas.errors import InvalidParameterException, TreeBuildCancelledException
from core.schemas.proof import PublicParameters

from .params import Generators


logger = logging.getLogger(__name__)


LEAF_DOMAIN_TAG = 1

DEFAULT_MAX_RANGE_BITS = 24

# Leaves computed between progress reports and cancellation checks
PROGRESS_INTERVAL = 64

ProgressCallback = Callable[[int, int], None]


def anchor_setup(secret: int, base: GroupElement) -> GroupElement:
    """
    Compute the public anchor U = base^secret.

    Raises:
        InvalidParameterException: If the secret is not in [1, r) or the base
            is the identity.
    """
    _check_secret(secret)
    if is_identity(base):
        raise InvalidParameterException("Anchor base must not be the identity", parameter="base")
    return scalar_mul(base, secret)


def leaf_hash_from_points(anchor: GroupElement, point: GroupElement) -> bytes:
    """Hash5(1, split(anchor.x), split(point.x)) as 32 big-endian bytes."""
    anchor_lo, anchor_hi = split_coordinate(affine_x(anchor))
    point_lo, point_hi = split_coordinate(affine_x(point))
    return field_to_bytes(
        field_hash([LEAF_DOMAIN_TAG, anchor_lo, anchor_hi, point_lo, point_hi])
    )


def leaf_hash_for(anchor: GroupElement, generator: GroupElement, secret: int, x: int) -> bytes:
    """Leaf for enrolled value x under (anchor, secret), with P = generator^(secret*x)."""
    return leaf_hash_from_points(anchor, scalar_mul(generator, secret * x))


def _check_secret(secret: int) -> None:
    if not 1 <= secret < CURVE_ORDER:
        raise InvalidParameterException("Secret must lie in [1, r)", parameter="secret")


class EnrollmentTree:
    """
    Read-only enrollment tree for one (anchor, secret, range).

    Leaf i holds the value x = i + 1.
    """

    def __init__(self, range_bits: int, anchor: GroupElement, merkle_tree: MerkleTree):
        if merkle_tree.leaf_count != 1 << range_bits:
            raise ValueError(
                f"Expected {1 << range_bits} leaves for range {range_bits}, "
                f"got {merkle_tree.leaf_count}"
            )
        self._range_bits = range_bits
        self._anchor = anchor
        self._tree = merkle_tree

    @property
    def range_bits(self) -> int:
        return self._range_bits

    @property
    def anchor(self) -> GroupElement:
        return self._anchor

    @property
    def root(self) -> bytes:
        return self._tree.root

    @property
    def depth(self) -> int:
        return self._tree.depth

    @property
    def leaf_count(self) -> int:
        return self._tree.leaf_count

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self._tree.leaves

    @property
    def hasher(self) -> MerkleHasher:
        return self._tree.hasher

    def index_of(self, leaf: bytes) -> Optional[int]:
        """Position of an exact leaf match, or None."""
        return self._tree.find_index(leaf)

    def proof(self, index: int) -> MerkleProof:
        """Sibling path for the leaf at index."""
        return self._tree.proof(index)

    def verify(self, proof: MerkleProof, index: int, leaf: bytes) -> bool:
        return self._tree.verify(proof, index, leaf)

    def describe(self, preview: int = 4) -> dict[str, Any]:
        """
        Loggable summary: root, depth, leaf count and abbreviated leaves.

        Trees with more than 16 leaves show only the first `preview` leaves.
        """
        shown = self.leaves if self.leaf_count <= 16 else self.leaves[:preview]
        return {
            "root": to_hex(self.root),
            "depth": self.depth,
            "total_leaves": self.leaf_count,
            "merkle_hash": self.hasher.name,
            "leaves": [f"0x{leaf[:4].hex()}..." for leaf in shown],
            "truncated": len(shown) < self.leaf_count,
        }

    def public_parameters(self, generators: Generators) -> PublicParameters:
        """Export everything a verifier needs for proofs against this tree."""
        return PublicParameters(
            **generators.to_dict(),
            anchor=to_hex(encode_point(self._anchor)),
            root=to_hex(self.root),
            range_bits=self._range_bits,
            merkle_hash=self.hasher.name,
        )


def _chunk_bounds(total: int, workers: int) -> list[tuple[int, int]]:
    """Split 1..total into contiguous (first, last) ranges, one per worker."""
    workers = max(1, min(workers, total))
    size, extra = divmod(total, workers)
    bounds = []
    start = 1
    for i in range(workers):
        end = start + size + (1 if i < extra else 0) - 1
        bounds.append((start, end))
        start = end + 1
    return bounds


def tree_setup(
    range_bits: int,
    anchor: GroupElement,
    secret: int,
    *,
    generator: GroupElement,
    hasher: Optional[MerkleHasher] = None,
    workers: int = 1,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[threading.Event] = None,
    max_range_bits: int = DEFAULT_MAX_RANGE_BITS,
) -> EnrollmentTree:
    """
    Build the enrollment tree for x in 1..2^range_bits.

    Args:
        range_bits: Tree depth
        anchor: Public anchor U
        secret: Holder secret s
        generator: Value base G, the g of the public generators
        hasher: Merkle node hasher (FieldMerkleHasher by default)
        workers: Threads computing leaf chunks
        progress: Called with (completed, total) as leaves are computed
        cancel: Event checked between leaf batches
        max_range_bits: Upper bound accepted for range_bits

    Raises:
        InvalidParameterException: On a bad range, secret, anchor or generator.
        TreeBuildCancelledException: If cancel is set before completion.
    """
    if not 1 <= range_bits <= max_range_bits:
        raise InvalidParameterException(
            f"range_bits must be between 1 and {max_range_bits}, got {range_bits}",
            parameter="range_bits",
        )
    _check_secret(secret)
    if is_identity(anchor):
        raise InvalidParameterException("Anchor must not be the identity", parameter="anchor")
    if is_identity(generator):
        raise InvalidParameterException("Generator must not be the identity", parameter="generator")
    if workers < 1:
        raise InvalidParameterException("workers must be at least 1", parameter="workers")

    hasher = hasher or FieldMerkleHasher()
    total = 1 << range_bits
    started = time.perf_counter()

    anchor_lo, anchor_hi = split_coordinate(affine_x(anchor))
    step = scalar_mul(generator, secret)

    lock = threading.Lock()
    completed = 0

    def report(count: int) -> None:
        nonlocal completed
        with lock:
            completed += count
            done = completed
        if progress is not None:
            progress(done, total)

    def compute_chunk(bounds: tuple[int, int]) -> list[bytes]:
        first, last = bounds
        leaves: list[bytes] = []
        point = scalar_mul(generator, secret * first)
        pending = 0
        for x in range(first, last + 1):
            if x > first:
                point = point_add(point, step)
            point_lo, point_hi = split_coordinate(affine_x(point))
            leaves.append(field_to_bytes(
                field_hash([LEAF_DOMAIN_TAG, anchor_lo, anchor_hi, point_lo, point_hi])
            ))
            pending += 1
            if pending == PROGRESS_INTERVAL:
                report(pending)
                pending = 0
                if cancel is not None and cancel.is_set():
                    return leaves
        if pending:
            report(pending)
        return leaves

    chunks = _chunk_bounds(total, workers)
    if len(chunks) == 1:
        results = [compute_chunk(chunks[0])]
    else:
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            results = list(pool.map(compute_chunk, chunks))

    if cancel is not None and cancel.is_set():
        logger.info(f"Tree build cancelled after {completed}/{total} leaves")
        raise TreeBuildCancelledException(
            "Enrollment tree build cancelled", completed=completed, total=total
        )

    leaves = [leaf for chunk in results for leaf in chunk]
    tree = EnrollmentTree(range_bits, anchor, MerkleTree(leaves, hasher))

    elapsed = time.perf_counter() - started
    logger.info(
        f"Enrollment tree built: {total} leaves, depth {tree.depth}, "
        f"root {to_hex(tree.root)[:18]}... ({elapsed:.2f}s, {len(chunks)} worker(s))"
    )
    logger.debug(f"Tree summary: {tree.describe()}")
    return tree
