"""
Runtime Configuration Module

Provides configuration loading and management for anchored proofs.
"""

from .runtime import (
    LoggingConfig,
    RuntimeConfig,
    SetupConfig,
    TreeConfig,
    VerifierConfig,
    get_default_config,
    set_default_config,
)

__all__ = [
    "RuntimeConfig",
    "SetupConfig",
    "TreeConfig",
    "VerifierConfig",
    "LoggingConfig",
    "get_default_config",
    "set_default_config",
]
