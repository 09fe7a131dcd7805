"""
Module 09 - CLI Verify Command

Verify a proof package offline:
- Check the package digest
- Verify the anchored proof against the embedded public parameters

Usage:
    anchored verify proof.json [--uniform] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from typing import Any

from core.anchored import verify_anchored_proof
from core.schemas.verification import VerificationResult
from orchestrator.artifacts.io import (
    PackageDigestMismatchError,
    PackageIOError,
    read_package_document,
)


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of package verification for CLI output."""
    package_path: str = ""
    digest_ok: bool = False
    proof_ok: bool = False
    stage: str | None = None
    reason: str | None = None
    checks: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["stage"] is None:
            del d["stage"]
        if d["reason"] is None:
            del d["reason"]
        if not d["checks"]:
            del d["checks"]
        return d

    @property
    def all_ok(self) -> bool:
        return self.digest_ok and self.proof_ok


def build_summary(package_path: str, result: VerificationResult) -> VerifySummary:
    """Build a VerifySummary from a verification result."""
    summary = VerifySummary(
        package_path=package_path,
        digest_ok=True,
        proof_ok=result.ok,
    )
    if result.rejection is not None:
        summary.stage = result.stage.value if result.stage else None
        summary.reason = result.rejection.reason
    summary.checks = [
        {"check_id": c.check_id, "ok": c.ok, "message": c.message}
        for c in result.checks
    ]
    return summary


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"package: {summary.package_path}")
    print(f"digest_ok: {str(summary.digest_ok).lower()}")
    print(f"proof_ok: {str(summary.proof_ok).lower()}")
    if summary.stage:
        print(f"rejected_at: {summary.stage}")
    if summary.reason:
        print(f"reason: {summary.reason}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        failed = len(summary.checks) - passed
        print(f"\nchecks: {passed} passed, {failed} failed")
        for check in summary.checks:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} {check['check_id']}")


def print_summary_json(summary: VerifySummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config
    uniform = args.uniform if args.uniform is not None else config.verifier.uniform_rejection

    # Step 1: Read document and check digest
    try:
        data = read_package_document(args.package_path)
    except PackageDigestMismatchError as e:
        logger.warning(f"Package digest mismatch: {e}")
        summary = VerifySummary(
            package_path=args.package_path,
            digest_ok=False,
            reason="package digest mismatch",
        )
        if args.json:
            print_summary_json(summary)
        else:
            print_summary_human(summary)
        return EXIT_VERIFICATION_FAILED
    except PackageIOError as e:
        print(f"Error loading package: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Step 2: Verify the proof (total: malformed contents become rejections)
    result = verify_anchored_proof(
        data.get("params", {}),
        data.get("proof", {}),
        data.get("leaf_index"),
        uniform_rejection=uniform,
    )

    summary = build_summary(args.package_path, result)
    if args.json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    if summary.all_ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS
    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
