"""
Module 01 - Schemas & Canonicalization
File: proof.py

Purpose: Wire models for the anchored proof bundle and the public parameters
a verifier needs. All byte strings travel as 0x-prefixed lowercase hex:
points as 33-byte compressed encodings, scalars and hashes as 32 bytes.

These models check shape only (prefix, length, hex digits). Whether a point
lies on the curve or a scalar is canonical is decided by the verifier, which
turns such failures into rejections.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .versioning import PROTOCOL_VERSION, SCHEMA_VERSION


# 0x + 64 hex chars = 32 bytes (scalars, hashes)
HEX_32_PATTERN = re.compile(r"^0x[0-9a-fA-F]{64}$")

# 0x + 66 hex chars = 33 bytes (compressed points)
HEX_33_PATTERN = re.compile(r"^0x[0-9a-fA-F]{66}$")


def _short(value: str) -> str:
    return f"{value[:20]}..." if len(value) > 20 else value


def validate_hex_point(value: str, field_name: str) -> str:
    """Validate a 33-byte compressed point in 0x hex form."""
    if not HEX_33_PATTERN.match(value):
        raise ValueError(
            f"{field_name} must be a 33-byte hex string with 0x prefix "
            f"(66 hex chars), got: {_short(value)}"
        )
    return value.lower()


def validate_hex_32(value: str, field_name: str) -> str:
    """Validate a 32-byte scalar or hash in 0x hex form."""
    if not HEX_32_PATTERN.match(value):
        raise ValueError(
            f"{field_name} must be a 32-byte hex string with 0x prefix "
            f"(64 hex chars), got: {_short(value)}"
        )
    return value.lower()


class DLEQProof(BaseModel):
    """
    Proof that (B, U) and (C, C') share the same discrete log.

    Attributes:
        r1: Nonce commitment B^rho
        r2: Nonce commitment C^rho
        z: Response rho + e*s (mod group order)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    r1: str = Field(..., description="Nonce commitment over the anchor base")
    r2: str = Field(..., description="Nonce commitment over the commitment")
    z: str = Field(..., description="Response scalar")

    @field_validator("r1", "r2")
    @classmethod
    def validate_points(cls, v: str, info: ValidationInfo) -> str:
        return validate_hex_point(v, info.field_name)

    @field_validator("z")
    @classmethod
    def validate_response(cls, v: str) -> str:
        return validate_hex_32(v, "z")


class SchnorrProof(BaseModel):
    """Proof of knowledge of t with public_blinding = H^t."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    r: str = Field(..., description="Nonce commitment H^rho'")
    z: str = Field(..., description="Response scalar rho' + e'*t")

    @field_validator("r")
    @classmethod
    def validate_commitment(cls, v: str) -> str:
        return validate_hex_point(v, "r")

    @field_validator("z")
    @classmethod
    def validate_response(cls, v: str) -> str:
        return validate_hex_32(v, "z")


class MerklePath(BaseModel):
    """Sibling hashes from the leaf level upward. Carries no index."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    siblings: list[str] = Field(default_factory=list)

    @field_validator("siblings")
    @classmethod
    def validate_siblings(cls, v: list[str]) -> list[str]:
        return [validate_hex_32(s, f"siblings[{i}]") for i, s in enumerate(v)]

    @property
    def depth(self) -> int:
        return len(self.siblings)


class AnchoredProof(BaseModel):
    """
    Complete anchored proof bundle.

    Holds only public values. The Merkle leaf index is deliberately not part
    of the bundle; it travels beside it as a separate claim.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    schema_version: str = Field(default=SCHEMA_VERSION)
    protocol_version: str = Field(default=PROTOCOL_VERSION)

    commitment: str = Field(..., description="Pedersen commitment C = G^w * H^r")
    modified_commitment: str = Field(..., description="C' = C^s")
    p_point: str = Field(..., description="P = G^(s*w)")
    leaf_hash: str = Field(..., description="Enrollment leaf claimed by the prover")

    merkle_proof: MerklePath
    dleq_proof: DLEQProof
    schnorr_proof: SchnorrProof

    @field_validator("commitment", "modified_commitment", "p_point")
    @classmethod
    def validate_points(cls, v: str, info: ValidationInfo) -> str:
        return validate_hex_point(v, info.field_name)

    @field_validator("leaf_hash")
    @classmethod
    def validate_leaf_hash(cls, v: str) -> str:
        return validate_hex_32(v, "leaf_hash")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class PublicParameters(BaseModel):
    """
    Everything a verifier needs besides the proof and the index claim.

    The secret scalar and the leaf set never appear here.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    protocol_version: str = Field(default=PROTOCOL_VERSION)

    generator_g: str = Field(..., description="Canonical base point G")
    generator_h: str = Field(..., description="Blinding generator H")
    generator_b: str = Field(..., description="Anchor base B")
    anchor: str = Field(..., description="Public anchor U = B^s")
    root: str = Field(..., description="Enrollment tree root")
    range_bits: int = Field(..., ge=1, le=32, description="Tree depth; 2^range_bits leaves")
    merkle_hash: str = Field(default="field", description="Name of the Merkle node hasher")

    @field_validator("generator_g", "generator_h", "generator_b", "anchor")
    @classmethod
    def validate_points(cls, v: str, info: ValidationInfo) -> str:
        return validate_hex_point(v, info.field_name)

    @field_validator("root")
    @classmethod
    def validate_root(cls, v: str) -> str:
        return validate_hex_32(v, "root")

    @property
    def total_leaves(self) -> int:
        return 1 << self.range_bits
