"""
Module 01 - Schemas & Canonicalization
File: verification.py

Purpose: Standard result format for anchored proof verification.
The verifier reports outcomes through these models instead of raising.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import AnchoredError


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]


class RejectionStage(str, Enum):
    """Verifier stage that rejected a proof."""

    ENCODING = "encoding"
    MERKLE = "merkle"
    DLEQ = "dleq"
    SCHNORR = "schnorr"


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @property
    def is_error(self) -> bool:
        """Check if this is an error-level failure."""
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class Rejection(BaseModel):
    """
    Classified reason a proof was rejected.

    In uniform mode the stage is withheld and the reason is generic, so a
    caller cannot learn which sub-proof failed.
    """

    model_config = ConfigDict(extra="forbid")

    stage: RejectionStage | None = Field(
        default=None,
        description="Failing stage, or None when rejection is uniform",
    )
    reason: str = Field(
        default="proof rejected",
        description="Human-readable reason",
    )

    @classmethod
    def uniform(cls) -> "Rejection":
        return cls()


class VerificationResult(BaseModel):
    """
    Complete result of a verification process.

    This is the standard format for communicating verification outcomes
    without using exceptions.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool = Field(
        ...,
        description="Overall verification success",
    )
    checks: list[CheckResult] = Field(
        default_factory=list,
        description="Individual check results",
    )
    rejection: Rejection | None = Field(
        default=None,
        description="Why the proof was rejected, if it was",
    )
    error: AnchoredError | None = Field(
        default=None,
        description="Error details if verification encountered malformed input",
    )

    @property
    def stage(self) -> RejectionStage | None:
        """Failing stage, if rejected and not uniform."""
        return self.rejection.stage if self.rejection else None

    @property
    def passed_count(self) -> int:
        """Count of passed checks."""
        return sum(1 for check in self.checks if check.ok)

    def get_failed_checks(self) -> list[CheckResult]:
        """Get all failed checks."""
        return [check for check in self.checks if not check.ok]

    def get_error_messages(self) -> list[str]:
        """Get all error messages."""
        return [check.message for check in self.checks if check.is_error]

    @classmethod
    def success(cls, checks: list[CheckResult] | None = None) -> "VerificationResult":
        """Create a successful verification result."""
        return cls(ok=True, checks=checks or [])

    @classmethod
    def failure(
        cls,
        checks: list[CheckResult],
        stage: RejectionStage,
        reason: str,
        error: AnchoredError | None = None,
    ) -> "VerificationResult":
        """Create a failed verification result."""
        return cls(
            ok=False,
            checks=checks,
            rejection=Rejection(stage=stage, reason=reason),
            error=error,
        )

    def to_uniform(self) -> "VerificationResult":
        """
        Collapse a rejection so it no longer reveals the failing stage.

        Accepted results are returned unchanged.
        """
        if self.ok:
            return self
        return VerificationResult(ok=False, checks=[], rejection=Rejection.uniform())
