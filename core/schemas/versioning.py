"""
Module 01 - Schemas & Canonicalization
File: versioning.py

Purpose: Version stamps carried by proofs and public parameters.
Kept free of imports from other schema files to avoid circular dependencies.
"""

# Wire layout of AnchoredProof
SCHEMA_VERSION: str = "v1"

# Curve, field hash and encoding rules. Bumped when any of them changes.
PROTOCOL_VERSION: str = "anchored-bn254-poseidon-v1"

SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({SCHEMA_VERSION})
SUPPORTED_PROTOCOL_VERSIONS: frozenset[str] = frozenset({PROTOCOL_VERSION})


class UnsupportedVersionError(ValueError):
    """A proof or parameter set carries a version this build cannot check."""

    kind = "version"

    def __init__(self, version: str, supported: frozenset[str]) -> None:
        self.version = version
        self.supported = supported
        super().__init__(f"Unsupported {self.kind}: '{version}'. Supported: {sorted(supported)}")


class UnsupportedSchemaVersionError(UnsupportedVersionError):
    kind = "schema version"


class UnsupportedProtocolVersionError(UnsupportedVersionError):
    kind = "protocol version"


def assert_supported_schema_version(version: str) -> None:
    """Raises UnsupportedSchemaVersionError for an unknown schema version."""
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        raise UnsupportedSchemaVersionError(version, SUPPORTED_SCHEMA_VERSIONS)


def assert_supported_protocol_version(version: str) -> None:
    """Raises UnsupportedProtocolVersionError for an unknown protocol version."""
    if version not in SUPPORTED_PROTOCOL_VERSIONS:
        raise UnsupportedProtocolVersionError(version, SUPPORTED_PROTOCOL_VERSIONS)
