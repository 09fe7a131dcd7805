"""
Module 07 - Proof Verifier Unit Tests
Tests for core/anchored/verifier.py

Tests:
- Honest proofs are accepted with all checks passing
- Each tampered component is rejected at its own stage
- Malformed input is rejected at the encoding stage without raising
- Uniform rejection hides the failing stage
"""
import pytest

from core.anchored import require_valid_proof, verify_anchored_proof
from core.crypto.group import FIELD_MODULUS, GENERATOR, encode_point, scalar_mul
from core.crypto.hashing import to_hex
from core.schemas.errors import ErrorCodes, VerificationFailureException
from core.schemas.verification import RejectionStage

from fixtures import flip_hex_byte, make_proof_package


def _tampered(package, **proof_changes):
    """Package parts as dicts, with top-level proof fields replaced."""
    params = package.params.model_dump(mode="json")
    proof = package.proof.model_dump(mode="json")
    proof.update(proof_changes)
    return params, proof


def _off_curve_point() -> str:
    x = 1
    while True:
        rhs = (pow(x, 3, FIELD_MODULUS) + 3) % FIELD_MODULUS
        if pow(rhs, (FIELD_MODULUS - 1) // 2, FIELD_MODULUS) == FIELD_MODULUS - 1:
            return "0x02" + x.to_bytes(32, "big").hex()
        x += 1


class TestAcceptance:
    """Tests for honest proofs."""

    def test_valid_proof_accepted(self, proof_package, assert_check_passed):
        result = verify_anchored_proof(
            proof_package.params, proof_package.proof, proof_package.leaf_index
        )

        assert result.ok
        assert result.rejection is None
        for check_id in ("decode", "merkle_inclusion", "dleq", "schnorr"):
            assert_check_passed(result, check_id)

    def test_dict_input_accepted(self, proof_package):
        params, proof = _tampered(proof_package)
        assert verify_anchored_proof(params, proof, proof_package.leaf_index).ok

    def test_sha256_tree_accepted(self):
        package = make_proof_package(range_bits=3, witness=8, merkle_hash="sha256")

        assert package.params.merkle_hash == "sha256"
        assert verify_anchored_proof(package.params, package.proof, package.leaf_index).ok

    def test_uniform_mode_keeps_acceptance(self, proof_package):
        result = verify_anchored_proof(
            proof_package.params,
            proof_package.proof,
            proof_package.leaf_index,
            uniform_rejection=True,
        )
        assert result.ok
        assert len(result.checks) == 4


class TestStagedRejection:
    """Tests for rejection at each stage."""

    def test_tampered_modified_commitment(self, proof_package):
        params, proof = _tampered(
            proof_package,
            modified_commitment=flip_hex_byte(proof_package.proof.modified_commitment),
        )
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert not result.ok
        assert result.stage in (RejectionStage.ENCODING, RejectionStage.DLEQ)

    def test_substituted_modified_commitment(self, proof_package):
        """A well-formed but unrelated C' fails the DLEQ stage."""
        params, proof = _tampered(
            proof_package,
            modified_commitment=to_hex(encode_point(scalar_mul(GENERATOR, 12345))),
        )
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.DLEQ

    def test_tampered_leaf_hash(self, proof_package, assert_check_failed):
        params, proof = _tampered(
            proof_package, leaf_hash=flip_hex_byte(proof_package.proof.leaf_hash)
        )
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.MERKLE
        assert_check_failed(result, "merkle_inclusion")

    def test_wrong_leaf_index(self, proof_package):
        result = verify_anchored_proof(
            proof_package.params, proof_package.proof, proof_package.leaf_index + 1
        )
        assert result.stage == RejectionStage.MERKLE

    def test_out_of_range_leaf_index(self, proof_package):
        result = verify_anchored_proof(proof_package.params, proof_package.proof, 16)
        assert result.stage == RejectionStage.MERKLE

    def test_tampered_dleq_response(self, proof_package, assert_check_failed):
        dleq = proof_package.proof.dleq_proof.model_dump()
        dleq["z"] = flip_hex_byte(dleq["z"])
        params, proof = _tampered(proof_package, dleq_proof=dleq)
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.DLEQ
        assert_check_failed(result, "dleq")

    def test_tampered_schnorr_response(self, proof_package, assert_check_failed):
        schnorr = proof_package.proof.schnorr_proof.model_dump()
        schnorr["z"] = flip_hex_byte(schnorr["z"])
        params, proof = _tampered(proof_package, schnorr_proof=schnorr)
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.SCHNORR
        assert_check_failed(result, "schnorr")

    def test_p_point_equal_to_modified_commitment(self, proof_package):
        """An identity public blinding is rejected at the Schnorr stage."""
        params, proof = _tampered(
            proof_package, p_point=proof_package.proof.modified_commitment
        )
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.SCHNORR

    def test_stops_at_first_failure(self, proof_package):
        """Later stages are not run once one fails."""
        params, proof = _tampered(
            proof_package, leaf_hash=flip_hex_byte(proof_package.proof.leaf_hash)
        )
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert [c.check_id for c in result.checks] == ["decode", "merkle_inclusion"]

    def test_foreign_root(self, proof_package):
        params, proof = _tampered(proof_package)
        params["root"] = flip_hex_byte(params["root"])

        assert verify_anchored_proof(params, proof, proof_package.leaf_index).stage == RejectionStage.MERKLE


class TestMalformedInput:
    """Tests for the encoding stage; nothing here may raise."""

    def test_non_hex_field(self, proof_package):
        params, proof = _tampered(proof_package, commitment="0xzz")
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.ENCODING

    def test_empty_proof(self, proof_package):
        result = verify_anchored_proof(proof_package.params, {}, 0)
        assert result.stage == RejectionStage.ENCODING

    def test_empty_params(self, proof_package):
        result = verify_anchored_proof({}, proof_package.proof, 0)
        assert result.stage == RejectionStage.ENCODING

    @pytest.mark.parametrize("leaf_index", ["3", None, 2.0, True])
    def test_non_integer_leaf_index(self, proof_package, leaf_index):
        result = verify_anchored_proof(proof_package.params, proof_package.proof, leaf_index)
        assert result.stage == RejectionStage.ENCODING

    def test_unsupported_protocol_version(self, proof_package):
        params, proof = _tampered(proof_package, protocol_version="anchored-bn254-v1")
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.ENCODING
        assert "anchored-bn254-v1" in result.rejection.reason

    def test_unknown_merkle_hash(self, proof_package):
        params, proof = _tampered(proof_package)
        params["merkle_hash"] = "md5"

        assert verify_anchored_proof(params, proof, proof_package.leaf_index).stage == RejectionStage.ENCODING

    def test_off_curve_point(self, proof_package):
        params, proof = _tampered(proof_package, p_point=_off_curve_point())
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.ENCODING
        assert result.error is not None
        assert result.error.code == ErrorCodes.ENCODING_ERROR
        assert result.error.details["field_path"] == "p_point"

    def test_non_canonical_scalar(self, proof_package):
        schnorr = proof_package.proof.schnorr_proof.model_dump()
        schnorr["z"] = "0x" + "ff" * 32
        params, proof = _tampered(proof_package, schnorr_proof=schnorr)
        result = verify_anchored_proof(params, proof, proof_package.leaf_index)

        assert result.stage == RejectionStage.ENCODING
        assert result.error.details["field_path"] == "schnorr_proof.z"


class TestUniformRejection:
    """Tests for uniform rejection mode."""

    @pytest.mark.parametrize("field", ["leaf_hash", "modified_commitment"])
    def test_stage_withheld(self, proof_package, field):
        params, proof = _tampered(
            proof_package, **{field: flip_hex_byte(getattr(proof_package.proof, field))}
        )
        result = verify_anchored_proof(
            params, proof, proof_package.leaf_index, uniform_rejection=True
        )

        assert not result.ok
        assert result.stage is None
        assert result.checks == []
        assert result.rejection.reason == "proof rejected"
        assert result.error is None

    def test_malformed_input_uniform(self, proof_package):
        result = verify_anchored_proof({}, {}, "x", uniform_rejection=True)

        assert not result.ok
        assert result.stage is None


class TestRequireValidProof:
    """Tests for require_valid_proof()."""

    def test_returns_result_when_valid(self, proof_package):
        result = require_valid_proof(
            proof_package.params, proof_package.proof, proof_package.leaf_index
        )
        assert result.ok

    def test_raises_with_stage(self, proof_package):
        with pytest.raises(VerificationFailureException) as exc_info:
            require_valid_proof(
                proof_package.params, proof_package.proof, proof_package.leaf_index + 1
            )

        assert exc_info.value.stage == "merkle"
        assert exc_info.value.code == ErrorCodes.VERIFICATION_FAILED

    def test_raises_without_stage_in_uniform_mode(self, proof_package):
        with pytest.raises(VerificationFailureException) as exc_info:
            require_valid_proof(
                proof_package.params,
                proof_package.proof,
                proof_package.leaf_index + 1,
                uniform_rejection=True,
            )

        assert exc_info.value.stage is None
        assert exc_info.value.message == "proof rejected"
