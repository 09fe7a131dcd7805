"""
Module 08B - Proof Package IO

Provides functionality for saving, loading, and validating proof packages.
"""

from orchestrator.artifacts.io import (
    FORMAT_VERSION,
    PackageDigestMismatchError,
    PackageIOError,
    compute_sha256,
    dump_json,
    load_proof_package,
    package_digest,
    read_package_document,
    save_proof_package,
    validate_package_file,
)

__all__ = [
    "FORMAT_VERSION",
    "PackageIOError",
    "PackageDigestMismatchError",
    "dump_json",
    "compute_sha256",
    "package_digest",
    "save_proof_package",
    "read_package_document",
    "load_proof_package",
    "validate_package_file",
]
