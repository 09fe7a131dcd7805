"""
Module 08A - Pipeline Integration (In-Process Runtime Wiring)

Composes parameter setup, enrollment, proving and verification into one
configurable runner.

Public API:
- AnchoredPipeline: Main pipeline runner class
- Enrollment: Prover-side state for one holder
- ProofPackage: Public parameters + proof + leaf index claim
- RunResult: Complete result of an end-to-end run
"""

from orchestrator.pipeline import (
    AnchoredPipeline,
    Enrollment,
    ProofPackage,
    RunResult,
)


__all__ = [
    "AnchoredPipeline",
    "Enrollment",
    "ProofPackage",
    "RunResult",
]
