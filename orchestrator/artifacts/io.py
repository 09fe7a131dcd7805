"""
Module 08B - Proof Package IO
File: io.py

Purpose: Save and load proof packages as single canonical JSON documents.

Document layout:
    {
      "digest": "<sha256 of canonical package JSON>",
      "format_version": "1",
      "package": {"leaf_index": ..., "params": {...}, "proof": {...}}
    }

The digest detects accidental corruption only; it is not a signature.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core.schemas.canonical import dumps_canonical
from core.schemas.errors import CanonicalizationException
from core.schemas.verification import CheckResult, VerificationResult

from orchestrator.pipeline import ProofPackage


FORMAT_VERSION = "1"
SUPPORTED_FORMAT_VERSIONS = frozenset({"1"})


class PackageIOError(Exception):
    """Error during package IO operations."""
    pass


class PackageDigestMismatchError(PackageIOError):
    """Digest mismatch detected during package loading."""
    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Package digest mismatch: expected {expected}, got {actual}")


def dump_json(obj: Any) -> str:
    """Serialize object to canonical JSON string."""
    if hasattr(obj, "model_dump"):
        return dumps_canonical(obj.model_dump(mode="json", by_alias=True))
    return dumps_canonical(obj)


def compute_sha256(data: bytes) -> str:
    """Compute SHA-256 hex digest of data."""
    return hashlib.sha256(data).hexdigest()


def package_digest(package_data: Any) -> str:
    """Digest of a package (model or its JSON dict) in canonical form."""
    return compute_sha256(dump_json(package_data).encode("utf-8"))


def save_proof_package(path: str | Path, package: ProofPackage) -> Path:
    """
    Write a package document to path.

    Returns:
        Path to the written file
    """
    out_path = Path(path)
    package_data = package.model_dump(mode="json")
    document = {
        "format_version": FORMAT_VERSION,
        "digest": package_digest(package_data),
        "package": package_data,
    }
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dump_json(document), encoding="utf-8")
    return out_path


def read_package_document(path: str | Path, *, verify_digest: bool = True) -> dict[str, Any]:
    """
    Read a package document and return the raw package dict.

    The package is not schema-validated here, so a verifier can still turn
    malformed contents into a rejection.

    Raises:
        PackageIOError: Missing file, invalid JSON, unknown format or
            contents (such as floats) that have no canonical form.
        PackageDigestMismatchError: Stored digest does not match contents.
    """
    in_path = Path(path)
    if not in_path.is_file():
        raise PackageIOError(f"Package not found: {in_path}")

    try:
        document = json.loads(in_path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PackageIOError(f"Package is not valid JSON: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("package"), dict):
        raise PackageIOError("Package document has no 'package' object")

    format_version = document.get("format_version")
    if format_version not in SUPPORTED_FORMAT_VERSIONS:
        raise PackageIOError(f"Incompatible format version: {format_version}")

    package_data = document["package"]
    if verify_digest:
        try:
            actual = package_digest(package_data)
        except CanonicalizationException as e:
            raise PackageIOError(f"Package cannot be digested: {e}") from e
        expected = document.get("digest")
        if actual != expected:
            raise PackageDigestMismatchError(str(expected), actual)

    return package_data


def load_proof_package(path: str | Path, *, verify_digest: bool = True) -> ProofPackage:
    """
    Load and validate a ProofPackage.

    Raises:
        PackageIOError: On any read, digest or schema failure.
    """
    package_data = read_package_document(path, verify_digest=verify_digest)
    try:
        return ProofPackage.model_validate(package_data)
    except ValidationError as e:
        raise PackageIOError(f"Package failed schema validation: {e.error_count()} error(s)") from e


def validate_package_file(path: str | Path) -> VerificationResult:
    """
    Check a package file's readability and digest without raising.

    Returns VerificationResult with one check per property.
    """
    checks: list[CheckResult] = []
    try:
        read_package_document(path)
        checks.append(CheckResult.passed("package_read", "Package document readable"))
        checks.append(CheckResult.passed("package_digest", "Package digest valid"))
    except PackageDigestMismatchError as e:
        checks.append(CheckResult.passed("package_read", "Package document readable"))
        checks.append(CheckResult.failed(
            "package_digest",
            "Package digest mismatch",
            {"expected": e.expected, "actual": e.actual},
        ))
    except PackageIOError as e:
        checks.append(CheckResult.failed("package_read", str(e)))

    return VerificationResult(ok=all(c.ok for c in checks), checks=checks)
