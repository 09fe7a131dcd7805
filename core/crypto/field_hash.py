"""
Module 02 - Fixed-Arity Field Hash
Poseidon over the BN254 scalar field with circom parameters.

The protocol calls the hash with 1, 2, 4, 5 and 8 inputs. An n-input call
runs the width n+1 permutation from the poseidon-hash package on the state
[0, in_0, ..., in_n-1] and returns state[0], the same value circomlib's
Poseidon(n) produces.

Parameters:
    alpha = 5, 8 full rounds, partial rounds by width as in circomlib.
    Width 3 uses the circom constant set shipped with poseidon-hash. The
    other widths regenerate theirs from the Grain LFSR stream circomlib's
    constants came from, clocked by the package's calc_next_bits: round
    constants first, then the Cauchy MDS points from the same stream.

The Merkle tree consumes a narrower capability, MerkleHasher:
hash(bytes) -> 32 bytes. FieldMerkleHasher adapts the field hash to it by
input length (32 bytes -> 1-input form, 64 bytes -> 2-input form).
Sha256MerkleHasher is the trivial byte hash used where only tree shape
matters.
"""
from __future__ import annotations

import contextlib
import io
import logging
import threading
from functools import lru_cache
from typing import Protocol, Sequence

import poseidon
from poseidon import round_constants as grain

from core.crypto.group import CURVE_ORDER
from core.crypto.hashing import sha256

logger = logging.getLogger(__name__)

FULL_ROUNDS = 8

# circomlib N_ROUNDS_P, keyed by input count (width - 1)
PARTIAL_ROUNDS: dict[int, int] = {1: 56, 2: 57, 4: 60, 5: 60, 8: 63}

SUPPORTED_ARITIES: frozenset[int] = frozenset(PARTIAL_ROUNDS)

SBOX_ALPHA = 5
SECURITY_LEVEL = 128
PRIME_BITS = CURVE_ORDER.bit_length()

NODE_BYTES = 32

_GRAIN_WARMUP = 160

_local = threading.local()
_construct_lock = threading.Lock()


def _hex(value: int) -> str:
    return f"0x{value:064x}"


def derive_circom_parameters(width: int, partial_rounds: int) -> tuple[list[str], list[list[str]]]:
    """
    Regenerate the circom round constants and MDS matrix for one width.

    Returns:
        (round_constants, mds_matrix) as hex strings, the form
        poseidon.Poseidon accepts.
    """
    # field 1 (prime), S-box 0 (x^alpha), then n, t, R_F, R_P and 30 ones
    seed = f"{1:02b}{0:04b}{PRIME_BITS:012b}{width:012b}{FULL_ROUNDS:010b}{partial_rounds:010b}"
    state = [int(bit) for bit in seed] + [1] * 30
    for _ in range(_GRAIN_WARMUP):
        bit = state[62] ^ state[51] ^ state[38] ^ state[23] ^ state[13] ^ state[0]
        state.pop(0)
        state.append(bit)

    def draw() -> int:
        _, bits = grain.calc_next_bits(state, PRIME_BITS)
        return int("".join(str(b) for b in bits), 2)

    round_constants = []
    while len(round_constants) < width * (FULL_ROUNDS + partial_rounds):
        value = draw()
        if value < CURVE_ORDER:
            round_constants.append(_hex(value))

    while True:
        points = [draw() % CURVE_ORDER for _ in range(2 * width)]
        while len(set(points)) != len(points):
            points = [draw() % CURVE_ORDER for _ in range(2 * width)]
        xs, ys = points[:width], points[width:]
        if all((x + y) % CURVE_ORDER for x in xs for y in ys):
            break

    mds = [[_hex(pow(x + y, -1, CURVE_ORDER)) for y in ys] for x in xs]
    return round_constants, mds


@lru_cache(maxsize=None)
def circom_parameters(arity: int) -> tuple[tuple[str, ...], tuple[tuple[str, ...], ...]]:
    """Round constants and MDS matrix for an n-input hash, cached per arity."""
    width = arity + 1
    if width == 3:
        round_constants, mds = poseidon.round_constants_254, poseidon.matrix_254
    else:
        round_constants, mds = derive_circom_parameters(width, PARTIAL_ROUNDS[arity])
    return tuple(round_constants), tuple(tuple(row) for row in mds)


def _permutation(arity: int) -> poseidon.Poseidon:
    # Poseidon instances keep their state between calls, so each thread owns one.
    instances = getattr(_local, "instances", None)
    if instances is None:
        instances = _local.instances = {}

    instance = instances.get(arity)
    if instance is None:
        round_constants, mds = circom_parameters(arity)
        logger.debug(f"Building Poseidon width {arity + 1} in {threading.current_thread().name}")
        # the constructor prints progress to stdout
        with _construct_lock, contextlib.redirect_stdout(io.StringIO()):
            instance = poseidon.Poseidon(
                CURVE_ORDER,
                SECURITY_LEVEL,
                SBOX_ALPHA,
                arity,
                arity + 1,
                full_round=FULL_ROUNDS,
                partial_round=PARTIAL_ROUNDS[arity],
                mds_matrix=[list(row) for row in mds],
                rc_list=list(round_constants),
            )
        instances[arity] = instance
    return instance


def field_hash(inputs: Sequence[int]) -> int:
    """
    Hash a fixed-arity tuple of scalar-field elements.

    Raises:
        ValueError: If the arity is unsupported or an input is not a
            canonical scalar-field element.
    """
    arity = len(inputs)
    if arity not in SUPPORTED_ARITIES:
        raise ValueError(
            f"Unsupported hash arity {arity}, expected one of {sorted(SUPPORTED_ARITIES)}"
        )
    for i, value in enumerate(inputs):
        if not 0 <= value < CURVE_ORDER:
            raise ValueError(f"Hash input {i} is not a canonical scalar-field element")

    permutation = _permutation(arity)
    permutation.run_hash([0, *inputs])
    return int(permutation.state[0])


def field_to_bytes(value: int) -> bytes:
    """Encode a field hash output as 32 big-endian bytes."""
    return value.to_bytes(NODE_BYTES, "big")


def bytes_to_field(data: bytes) -> int:
    """
    Read 32 big-endian bytes as a scalar-field element.

    Raises:
        ValueError: If the bytes are not exactly 32 long or exceed the modulus.
    """
    if len(data) != NODE_BYTES:
        raise ValueError(f"Expected {NODE_BYTES} bytes, got {len(data)}")
    value = int.from_bytes(data, "big")
    if value >= CURVE_ORDER:
        raise ValueError("Bytes do not encode a canonical scalar-field element")
    return value


class MerkleHasher(Protocol):
    """Capability consumed by the Merkle tree: bytes in, 32-byte digest out."""

    name: str

    def hash(self, data: bytes) -> bytes:
        ...


class FieldMerkleHasher:
    """
    Field hash exposed as a Merkle hasher.

    The variant is picked by input length only: 64 bytes are split into two
    field elements and hashed with the 2-input form, 32 bytes use the
    1-input form. Leaves and internal nodes are therefore separated by input
    length alone, not by an explicit tag.
    """

    name = "field"

    def hash(self, data: bytes) -> bytes:
        if len(data) == 2 * NODE_BYTES:
            left, right = data[:NODE_BYTES], data[NODE_BYTES:]
            return field_to_bytes(field_hash([bytes_to_field(left), bytes_to_field(right)]))
        if len(data) == NODE_BYTES:
            return field_to_bytes(field_hash([bytes_to_field(data)]))
        raise ValueError(f"Merkle hasher expects 32 or 64 bytes, got {len(data)}")


class Sha256MerkleHasher:
    """Plain SHA-256 over the input bytes."""

    name = "sha256"

    def hash(self, data: bytes) -> bytes:
        return sha256(data)


_HASHERS: dict[str, type] = {
    FieldMerkleHasher.name: FieldMerkleHasher,
    Sha256MerkleHasher.name: Sha256MerkleHasher,
}


def get_merkle_hasher(name: str) -> MerkleHasher:
    """
    Look up a Merkle hasher by its configured name.

    Raises:
        ValueError: If no hasher is registered under that name.
    """
    try:
        return _HASHERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown Merkle hasher '{name}', expected one of {sorted(_HASHERS)}"
        ) from None
