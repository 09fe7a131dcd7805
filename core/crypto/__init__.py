"""
Core cryptographic utilities.

Module 02 provides byte hashing, BN254 group arithmetic, the field splitter
and the fixed-arity field hash used by the anchored proof protocol.
"""
from .hashing import (
    sha256,
    to_hex,
    from_hex,
)
from .group import (
    CURVE_ORDER,
    FIELD_MODULUS,
    GENERATOR,
    IDENTITY,
    affine_x,
    decode_point,
    decode_scalar,
    encode_point,
    encode_scalar,
    is_identity,
    point_add,
    point_from_candidate,
    point_neg,
    point_sub,
    points_equal,
    scalar_mul,
)
from .field_split import split_coordinate, join_coordinate
from .field_hash import (
    SUPPORTED_ARITIES,
    FieldMerkleHasher,
    MerkleHasher,
    Sha256MerkleHasher,
    field_hash,
    field_to_bytes,
    bytes_to_field,
    get_merkle_hasher,
)

__all__ = [
    "sha256",
    "to_hex",
    "from_hex",
    "CURVE_ORDER",
    "FIELD_MODULUS",
    "GENERATOR",
    "IDENTITY",
    "affine_x",
    "decode_point",
    "decode_scalar",
    "encode_point",
    "encode_scalar",
    "is_identity",
    "point_add",
    "point_from_candidate",
    "point_neg",
    "point_sub",
    "points_equal",
    "scalar_mul",
    "split_coordinate",
    "join_coordinate",
    "SUPPORTED_ARITIES",
    "FieldMerkleHasher",
    "MerkleHasher",
    "Sha256MerkleHasher",
    "field_hash",
    "field_to_bytes",
    "bytes_to_field",
    "get_merkle_hasher",
]
