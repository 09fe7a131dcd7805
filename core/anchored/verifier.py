"""
Module 07 - Proof Verifier
Checks an AnchoredProof against public parameters and a leaf index claim.

Verification Checks (all mandatory, in order):
1. encoding  - versions supported, every point on the curve, scalars canonical
2. merkle    - leaf_hash sits at the claimed index under the public root
3. dleq      - B^z == R1 * U^e  and  C^z == R2 * C'^e
4. schnorr   - H^z' == R * (C' - P)^e'

The verifier never recomputes leaf_hash; it only checks that the supplied
value is on a valid path and that the public points are related as claimed.

Verification is total: malformed input of any kind yields a rejection,
never an exception. With uniform_rejection the failing stage is withheld.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from core.crypto.field_hash import MerkleHasher, get_merkle_hasher
from core.crypto.group import (
    GroupElement,
    decode_point,
    decode_scalar,
    is_identity,
    point_add,
    point_sub,
    points_equal,
    scalar_mul,
)
from core.crypto.hashing import from_hex
from core.merkle import MerkleProof
from core.schemas.errors import AnchoredException, EncodingException, VerificationFailureException
from core.schemas.proof import AnchoredProof, PublicParameters
from core.schemas.verification import CheckResult, RejectionStage, VerificationResult
from core.schemas.versioning import (
    UnsupportedProtocolVersionError,
    UnsupportedSchemaVersionError,
    assert_supported_protocol_version,
    assert_supported_schema_version,
)

from .prover import dleq_challenge, schnorr_challenge


logger = logging.getLogger(__name__)


ProofLike = Union[AnchoredProof, Mapping[str, Any]]
ParamsLike = Union[PublicParameters, Mapping[str, Any]]


@dataclass(frozen=True)
class _DecodedStatement:
    """Public parameters and proof with every value decoded."""
    h: GroupElement
    b: GroupElement
    anchor: GroupElement
    root: bytes
    total_leaves: int
    hasher: MerkleHasher
    commitment: GroupElement
    modified_commitment: GroupElement
    p_point: GroupElement
    leaf_hash: bytes
    siblings: tuple[bytes, ...]
    r1: GroupElement
    r2: GroupElement
    z: int
    r: GroupElement
    z_prime: int


class _Malformed(Exception):
    """Internal signal: input could not be decoded."""

    def __init__(self, message: str, error: Optional[AnchoredException] = None):
        super().__init__(message)
        self.error = error


def _point(value: str, field_path: str) -> GroupElement:
    try:
        return decode_point(from_hex(value))
    except EncodingException as e:
        raise _Malformed(f"{field_path}: {e.message}", EncodingException(e.message, field_path)) from e
    except ValueError as e:
        raise _Malformed(f"{field_path}: {e}", EncodingException(str(e), field_path)) from e


def _scalar(value: str, field_path: str) -> int:
    try:
        return decode_scalar(from_hex(value))
    except EncodingException as e:
        raise _Malformed(f"{field_path}: {e.message}", EncodingException(e.message, field_path)) from e
    except ValueError as e:
        raise _Malformed(f"{field_path}: {e}", EncodingException(str(e), field_path)) from e


def _bytes(value: str, field_path: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError as e:
        raise _Malformed(f"{field_path}: {e}", EncodingException(str(e), field_path)) from e


def _decode(params: ParamsLike, proof: ProofLike, leaf_index: Any) -> tuple[_DecodedStatement, int]:
    try:
        if not isinstance(params, PublicParameters):
            params = PublicParameters.model_validate(params)
        if not isinstance(proof, AnchoredProof):
            proof = AnchoredProof.model_validate(proof)
    except ValidationError as e:
        raise _Malformed(f"Schema validation failed: {e.error_count()} error(s)") from e

    try:
        assert_supported_schema_version(proof.schema_version)
        assert_supported_protocol_version(proof.protocol_version)
        assert_supported_protocol_version(params.protocol_version)
    except (UnsupportedSchemaVersionError, UnsupportedProtocolVersionError) as e:
        raise _Malformed(str(e)) from e

    if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
        raise _Malformed("Leaf index claim must be an integer")

    try:
        hasher = get_merkle_hasher(params.merkle_hash)
    except ValueError as e:
        raise _Malformed(str(e)) from e

    statement = _DecodedStatement(
        h=_point(params.generator_h, "params.generator_h"),
        b=_point(params.generator_b, "params.generator_b"),
        anchor=_point(params.anchor, "params.anchor"),
        root=_bytes(params.root, "params.root"),
        total_leaves=params.total_leaves,
        hasher=hasher,
        commitment=_point(proof.commitment, "commitment"),
        modified_commitment=_point(proof.modified_commitment, "modified_commitment"),
        p_point=_point(proof.p_point, "p_point"),
        leaf_hash=_bytes(proof.leaf_hash, "leaf_hash"),
        siblings=tuple(
            _bytes(s, f"merkle_proof.siblings[{i}]")
            for i, s in enumerate(proof.merkle_proof.siblings)
        ),
        r1=_point(proof.dleq_proof.r1, "dleq_proof.r1"),
        r2=_point(proof.dleq_proof.r2, "dleq_proof.r2"),
        z=_scalar(proof.dleq_proof.z, "dleq_proof.z"),
        r=_point(proof.schnorr_proof.r, "schnorr_proof.r"),
        z_prime=_scalar(proof.schnorr_proof.z, "schnorr_proof.z"),
    )
    return statement, leaf_index


def _check_merkle(st: _DecodedStatement, index: int) -> CheckResult:
    path = MerkleProof(siblings=st.siblings)
    if path.verify(st.root, index, st.leaf_hash, st.total_leaves, st.hasher):
        return CheckResult.passed("merkle_inclusion", "Leaf is included under the public root")
    return CheckResult.failed(
        "merkle_inclusion",
        "Merkle path does not reach the public root",
        details={"index": index, "path_length": len(st.siblings)},
    )


def _check_dleq(st: _DecodedStatement) -> CheckResult:
    e = dleq_challenge(st.anchor, st.modified_commitment, st.r1, st.r2)

    anchor_ok = points_equal(
        scalar_mul(st.b, st.z), point_add(st.r1, scalar_mul(st.anchor, e))
    )
    commitment_ok = points_equal(
        scalar_mul(st.commitment, st.z),
        point_add(st.r2, scalar_mul(st.modified_commitment, e)),
    )
    if anchor_ok and commitment_ok:
        return CheckResult.passed("dleq", "Anchor and commitment share the secret exponent")
    return CheckResult.failed(
        "dleq",
        "DLEQ relation does not hold",
        details={"anchor_relation": anchor_ok, "commitment_relation": commitment_ok},
    )


def _check_schnorr(st: _DecodedStatement) -> CheckResult:
    public_blinding = point_sub(st.modified_commitment, st.p_point)
    if is_identity(public_blinding):
        return CheckResult.failed("schnorr", "Public blinding is the identity")

    e = schnorr_challenge(public_blinding, st.r)
    if points_equal(
        scalar_mul(st.h, st.z_prime), point_add(st.r, scalar_mul(public_blinding, e))
    ):
        return CheckResult.passed("schnorr", "Blinding knowledge proof holds")
    return CheckResult.failed("schnorr", "Schnorr relation does not hold")


def verify_anchored_proof(
    params: ParamsLike,
    proof: ProofLike,
    leaf_index: int,
    *,
    uniform_rejection: bool = False,
) -> VerificationResult:
    """
    Verify an anchored proof.

    Args:
        params: PublicParameters or their JSON form
        proof: AnchoredProof or its JSON form
        leaf_index: Claimed position of proof.leaf_hash in the tree
        uniform_rejection: Withhold the failing stage and check details

    Returns:
        VerificationResult; never raises for malformed input.
    """
    try:
        st, index = _decode(params, proof, leaf_index)
    except _Malformed as e:
        logger.debug(f"Proof rejected during decoding: {e}")
        result = VerificationResult.failure(
            checks=[CheckResult.failed("decode", str(e))],
            stage=RejectionStage.ENCODING,
            reason=str(e),
            error=e.error.to_error_model() if e.error else None,
        )
        return _finish(result, uniform_rejection)

    checks: list[CheckResult] = [CheckResult.passed("decode", "All values decoded")]
    stages = (
        (RejectionStage.MERKLE, lambda: _check_merkle(st, index)),
        (RejectionStage.DLEQ, lambda: _check_dleq(st)),
        (RejectionStage.SCHNORR, lambda: _check_schnorr(st)),
    )
    for stage, run_check in stages:
        check = run_check()
        checks.append(check)
        if not check.ok:
            result = VerificationResult.failure(checks=checks, stage=stage, reason=check.message)
            return _finish(result, uniform_rejection)

    return _finish(VerificationResult.success(checks), uniform_rejection)


def _finish(result: VerificationResult, uniform_rejection: bool) -> VerificationResult:
    if result.ok:
        logger.info("Anchored proof accepted")
        return result
    logger.info(f"Anchored proof rejected at stage {result.stage.value}")
    return result.to_uniform() if uniform_rejection else result


def require_valid_proof(
    params: ParamsLike,
    proof: ProofLike,
    leaf_index: int,
    *,
    uniform_rejection: bool = False,
) -> VerificationResult:
    """
    Verify and raise on rejection.

    Raises:
        VerificationFailureException: With the failing stage (None if uniform).
    """
    result = verify_anchored_proof(
        params, proof, leaf_index, uniform_rejection=uniform_rejection
    )
    if not result.ok:
        stage = result.stage.value if result.stage else None
        raise VerificationFailureException(result.rejection.reason, stage=stage)
    return result
