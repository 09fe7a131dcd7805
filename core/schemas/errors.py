"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for anchored proof setup, generation and
verification. Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the protocol."""

    # Schema & Validation Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    UNSUPPORTED_VERSION = "UNSUPPORTED_VERSION"
    ENCODING_ERROR = "ENCODING_ERROR"

    # Setup Errors
    SETUP_FAILED = "SETUP_FAILED"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    RANDOMNESS_FAILURE = "RANDOMNESS_FAILURE"
    TREE_BUILD_CANCELLED = "TREE_BUILD_CANCELLED"

    # Generation Errors
    WITNESS_NOT_ENROLLED = "WITNESS_NOT_ENROLLED"
    RANGE_MISMATCH = "RANGE_MISMATCH"

    # Verification Errors
    VERIFICATION_FAILED = "VERIFICATION_FAILED"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class AnchoredError(BaseModel):
    """
    Base error model for structured error communication.

    Used for passing errors between modules without exceptions, e.g. to
    attach the cause of a rejection to a VerificationResult.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.WITNESS_NOT_ENROLLED],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "AnchoredException":
        """Convert this error model to a raised exception."""
        return AnchoredException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class AnchoredException(Exception):
    """
    Base exception for all anchored proof errors.

    Carries structured error information and can be converted to/from
    AnchoredError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "ANCHORED_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> AnchoredError:
        """Convert this exception to an AnchoredError model."""
        return AnchoredError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(AnchoredException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class EncodingException(AnchoredException):
    """Exception raised when a scalar or point encoding is malformed."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.ENCODING_ERROR,
            details=full_details,
        )


class InvalidParameterException(AnchoredException):
    """Exception raised when a protocol parameter is out of its domain."""

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if parameter:
            full_details["parameter"] = parameter
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_PARAMETER,
            details=full_details,
        )


class SetupException(AnchoredException):
    """Exception raised when public parameter setup fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.SETUP_FAILED,
            details=details,
        )


class RandomnessException(AnchoredException):
    """Exception raised when the randomness source fails or degenerates."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.RANDOMNESS_FAILURE,
            details=details,
        )


class TreeBuildCancelledException(AnchoredException):
    """Exception raised when an enrollment tree build is cancelled."""

    def __init__(
        self,
        message: str,
        completed: int | None = None,
        total: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if completed is not None:
            details["completed"] = completed
        if total is not None:
            details["total"] = total
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_BUILD_CANCELLED,
            details=details,
        )


class WitnessNotEnrolledException(AnchoredException):
    """Exception raised when the witness leaf is absent from the tree."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.WITNESS_NOT_ENROLLED,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
        )


class RangeMismatchException(WitnessNotEnrolledException):
    """Exception raised when the witness lies outside [1, 2^range]."""

    def __init__(
        self,
        message: str,
        witness: int | None = None,
        range_bits: int | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if witness is not None:
            details["witness"] = witness
        if range_bits is not None:
            details["range_bits"] = range_bits
        super().__init__(
            message=message,
            details=details,
            code=ErrorCodes.RANGE_MISMATCH,
        )


class VerificationFailureException(AnchoredException):
    """Exception raised when an anchored proof is rejected."""

    def __init__(
        self,
        message: str,
        stage: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if stage:
            full_details["stage"] = stage
        super().__init__(
            message=message,
            code=ErrorCodes.VERIFICATION_FAILED,
            details=full_details,
        )
        self.stage = stage
