"""
Module 08A - Pipeline Integration

In-process runner composing Modules 04-07 for one holder:

    setup() -> enroll(secret) -> prove(witness) -> verify(package)

Key features:
- Driven by RuntimeConfig (seeds, range, workers, Merkle hasher, uniform mode)
- Prover-side state (secret, tree) kept in an Enrollment, never exported
- Each step timed and logged
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.anchored import (
    EnrollmentTree,
    Generators,
    ProofInput,
    RandomSource,
    anchor_setup,
    generate_anchored_proof,
    generator_setup,
    leaf_index_for,
    sample_blinding,
    sample_secret,
    tree_setup,
    verify_anchored_proof,
)
from core.anchored.tree import ProgressCallback
from core.config import RuntimeConfig, get_default_config
from core.crypto import get_merkle_hasher
from core.crypto.group import GroupElement
from core.schemas.errors import AnchoredException
from core.schemas.proof import AnchoredProof, PublicParameters
from core.schemas.verification import VerificationResult


logger = logging.getLogger(__name__)


# =============================================================================
# Proof Package
# =============================================================================

class ProofPackage(BaseModel):
    """
    Everything a verifier receives: public parameters, proof, index claim.

    The leaf index reveals the witness (leaves are ordered by value), so a
    package is only handed to parties allowed to learn it.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    params: PublicParameters
    proof: AnchoredProof
    leaf_index: int = Field(..., ge=0, description="Claimed position of proof.leaf_hash")


# =============================================================================
# Enrollment (prover-side state)
# =============================================================================

@dataclass(frozen=True)
class Enrollment:
    """Holder state produced by enroll(). The secret is excluded from repr."""
    generators: Generators
    secret: int = field(repr=False)
    anchor: GroupElement
    tree: EnrollmentTree

    @property
    def range_bits(self) -> int:
        return self.tree.range_bits

    def public_parameters(self) -> PublicParameters:
        return self.tree.public_parameters(self.generators)


# =============================================================================
# Run Result
# =============================================================================

@dataclass
class RunResult:
    """Complete result of a pipeline run."""
    package: Optional[ProofPackage] = None
    verification: Optional[VerificationResult] = None
    timings: dict[str, float] = field(default_factory=dict)
    ok: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "root": self.package.params.root if self.package else None,
            "range_bits": self.package.params.range_bits if self.package else None,
            "verified": self.verification.ok if self.verification else None,
            "timings": {k: round(v, 4) for k, v in self.timings.items()},
            "errors": self.errors,
        }


# =============================================================================
# Pipeline Class
# =============================================================================

class AnchoredPipeline:
    """
    Runs setup, enrollment, proving and verification from one config.

    Generators are computed once and cached; enrollments are independent
    and may be reused for many proofs.
    """

    def __init__(
        self,
        *,
        config: Optional[RuntimeConfig] = None,
        rng: Optional[RandomSource] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config: Runtime configuration (process default if omitted)
            rng: Randomness handle for secrets, blindings and nonces
        """
        self.config = config or get_default_config()
        self._rng = rng
        self._generators: Optional[Generators] = None
        self.timings: dict[str, float] = {}

    def _record(self, step: str, started: float) -> None:
        elapsed = time.perf_counter() - started
        self.timings[step] = elapsed
        logger.debug(f"Step {step} took {elapsed:.3f}s")

    def setup(self) -> Generators:
        """Compute (or return cached) public generators."""
        if self._generators is None:
            started = time.perf_counter()
            self._generators = generator_setup(
                self.config.setup.seeds,
                max_attempts=self.config.setup.max_generator_attempts,
            )
            self._record("setup", started)
        return self._generators

    def enroll(
        self,
        secret: Optional[int] = None,
        *,
        range_bits: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Enrollment:
        """
        Create an anchor and enrollment tree for a holder.

        Args:
            secret: Holder secret; sampled fresh if omitted
            range_bits: Tree range; config.tree.range_bits if omitted
            progress: Leaf progress callback
            cancel: Cooperative cancellation token
        """
        generators = self.setup()
        if secret is None:
            secret = sample_secret(self._rng)
        range_bits = range_bits if range_bits is not None else self.config.tree.range_bits

        started = time.perf_counter()
        anchor = anchor_setup(secret, generators.b)
        tree = tree_setup(
            range_bits,
            anchor,
            secret,
            generator=generators.g,
            hasher=get_merkle_hasher(self.config.tree.merkle_hash),
            workers=self.config.tree.workers,
            progress=progress,
            cancel=cancel,
            max_range_bits=self.config.tree.max_range_bits,
        )
        self._record("enroll", started)
        return Enrollment(generators=generators, secret=secret, anchor=anchor, tree=tree)

    def prove(
        self,
        enrollment: Enrollment,
        witness: int,
        blinding: Optional[int] = None,
    ) -> ProofPackage:
        """Generate a proof for witness and wrap it with the public parameters."""
        if blinding is None:
            blinding = sample_blinding(self._rng)

        started = time.perf_counter()
        proof = generate_anchored_proof(
            ProofInput(
                secret=enrollment.secret,
                witness=witness,
                blinding=blinding,
                generators=enrollment.generators,
                anchor=enrollment.anchor,
                tree=enrollment.tree,
            ),
            self._rng,
        )
        self._record("prove", started)
        return ProofPackage(
            params=enrollment.public_parameters(),
            proof=proof,
            leaf_index=leaf_index_for(witness),
        )

    def verify(
        self,
        package: ProofPackage,
        *,
        uniform_rejection: Optional[bool] = None,
    ) -> VerificationResult:
        """Verify a package; uniform mode defaults to config.verifier."""
        if uniform_rejection is None:
            uniform_rejection = self.config.verifier.uniform_rejection

        started = time.perf_counter()
        result = verify_anchored_proof(
            package.params,
            package.proof,
            package.leaf_index,
            uniform_rejection=uniform_rejection,
        )
        self._record("verify", started)
        return result

    def run(self, witness: int, secret: Optional[int] = None) -> RunResult:
        """Execute setup, enrollment, proving and verification end to end."""
        result = RunResult()
        try:
            enrollment = self.enroll(secret)
            result.package = self.prove(enrollment, witness)
            result.verification = self.verify(result.package)
            result.ok = result.verification.ok
            if not result.ok:
                result.errors.append(
                    f"Verification rejected: {result.verification.rejection.reason}"
                )
        except AnchoredException as e:
            logger.error(f"Pipeline failed: [{e.code}] {e.message}")
            result.errors.append(f"{e.code}: {e.message}")
        result.timings = dict(self.timings)
        return result
