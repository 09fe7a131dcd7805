"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    PROTOCOL_VERSION,
    SCHEMA_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    SUPPORTED_SCHEMA_VERSIONS,
    UnsupportedProtocolVersionError,
    UnsupportedSchemaVersionError,
    assert_supported_protocol_version,
    assert_supported_schema_version,
)

# Canonical serialization API
from .canonical import (
    canonicalize_value,
    dumps_canonical,
)

# Error models and exceptions
from .errors import (
    AnchoredError,
    AnchoredException,
    CanonicalizationException,
    EncodingException,
    ErrorCodes,
    InvalidParameterException,
    RandomnessException,
    RangeMismatchException,
    SetupException,
    TreeBuildCancelledException,
    VerificationFailureException,
    WitnessNotEnrolledException,
)

# Proof bundle schemas
from .proof import (
    AnchoredProof,
    DLEQProof,
    MerklePath,
    PublicParameters,
    SchnorrProof,
)

# Verification schemas
from .verification import (
    CheckResult,
    CheckSeverity,
    Rejection,
    RejectionStage,
    VerificationResult,
)


# Define __all__ for explicit public API
__all__ = [
    # Versioning
    "SCHEMA_VERSION",
    "PROTOCOL_VERSION",
    "SUPPORTED_SCHEMA_VERSIONS",
    "SUPPORTED_PROTOCOL_VERSIONS",
    "assert_supported_schema_version",
    "assert_supported_protocol_version",
    "UnsupportedSchemaVersionError",
    "UnsupportedProtocolVersionError",
    # Canonical serialization
    "dumps_canonical",
    "canonicalize_value",
    # Errors
    "AnchoredError",
    "AnchoredException",
    "CanonicalizationException",
    "EncodingException",
    "ErrorCodes",
    "InvalidParameterException",
    "RandomnessException",
    "RangeMismatchException",
    "SetupException",
    "TreeBuildCancelledException",
    "VerificationFailureException",
    "WitnessNotEnrolledException",
    # Proof
    "AnchoredProof",
    "DLEQProof",
    "MerklePath",
    "PublicParameters",
    "SchnorrProof",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "Rejection",
    "RejectionStage",
    "VerificationResult",
]
