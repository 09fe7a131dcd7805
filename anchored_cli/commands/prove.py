"""
Module 09 - CLI Prove Command

Enroll a holder, prove one witness and write a proof package.

Usage:
    anchored prove --witness 2 --out proof.json
    anchored prove --witness 5 --range 4 --secret 0x1234... --json
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from core.schemas.errors import AnchoredException, WitnessNotEnrolledException
from orchestrator.artifacts.io import save_proof_package
from orchestrator.pipeline import AnchoredPipeline


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class ProveSummary:
    """Summary of a prove run for CLI output."""
    out_path: str = ""
    root: str = ""
    anchor: str = ""
    range_bits: int = 0
    leaf_index: int = 0
    leaf_hash: str = ""
    timings: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def parse_secret(value: Optional[str]) -> Optional[int]:
    """
    Parse a 0x-hex secret argument.

    Raises:
        ValueError: If the value is not hex.
    """
    if value is None:
        return None
    text = value[2:] if value.lower().startswith("0x") else value
    return int(text, 16)


def print_summary_human(summary: ProveSummary) -> None:
    """Print summary in human-readable format."""
    print(f"package: {summary.out_path}")
    print(f"root: {summary.root}")
    print(f"anchor: {summary.anchor}")
    print(f"range_bits: {summary.range_bits}")
    print(f"leaf_index: {summary.leaf_index}")
    print(f"leaf_hash: {summary.leaf_hash}")
    for step, seconds in summary.timings.items():
        print(f"{step}_s: {seconds:.3f}")


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    try:
        secret = parse_secret(args.secret)
    except ValueError:
        print("Error: --secret must be a hex string", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if secret is None:
        logger.info("No secret given; sampling a fresh one that will not be retained")

    pipeline = AnchoredPipeline(config=args.runtime_config)
    try:
        enrollment = pipeline.enroll(secret, range_bits=args.range_bits)
        package = pipeline.prove(enrollment, args.witness)
    except WitnessNotEnrolledException as e:
        print(f"Error: witness not enrolled [{e.code}]: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except AnchoredException as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    out_path = save_proof_package(args.out, package)
    logger.info(f"Proof package written to {out_path}")

    summary = ProveSummary(
        out_path=str(out_path),
        root=package.params.root,
        anchor=package.params.anchor,
        range_bits=package.params.range_bits,
        leaf_index=package.leaf_index,
        leaf_hash=package.proof.leaf_hash,
        timings={k: round(v, 4) for k, v in pipeline.timings.items()},
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
