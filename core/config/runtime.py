"""
Runtime Configuration

Central configuration for generator setup, tree building, verification and
logging.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

from core.schemas.errors import InvalidParameterException

load_dotenv()


DEFAULT_H_SEED = "00" * 32
DEFAULT_B_SEED = "01" * 32

MERKLE_HASH_CHOICES = ("field", "sha256")


def _parse_seed(value: str, name: str) -> bytes:
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidParameterException(
            f"{name} must be a hex string", parameter=name
        ) from e


def _env_bool(name: str) -> bool:
    return os.getenv(name, "false").lower() in ("1", "true", "yes")


@dataclass
class SetupConfig:
    """Configuration for generator sampling."""
    h_seed: str = DEFAULT_H_SEED
    b_seed: str = DEFAULT_B_SEED
    max_generator_attempts: int = 1024

    @property
    def seeds(self) -> tuple[bytes, bytes]:
        """Decoded (H seed, B seed)."""
        return _parse_seed(self.h_seed, "h_seed"), _parse_seed(self.b_seed, "b_seed")


@dataclass
class TreeConfig:
    """Configuration for enrollment tree construction."""
    range_bits: int = 8
    max_range_bits: int = 24
    workers: int = 1
    merkle_hash: str = "field"


@dataclass
class VerifierConfig:
    """Configuration for proof verification."""
    uniform_rejection: bool = False


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration for anchored proofs.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    setup: SetupConfig = field(default_factory=SetupConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    verifier: VerifierConfig = field(default_factory=VerifierConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - ANCHORED_H_SEED / ANCHORED_B_SEED: generator seeds (hex)
        - ANCHORED_MAX_GENERATOR_ATTEMPTS: sampling attempt cap
        - ANCHORED_RANGE_BITS: default tree range
        - ANCHORED_TREE_WORKERS: leaf computation threads
        - ANCHORED_MERKLE_HASH: Merkle node hasher (field/sha256)
        - ANCHORED_UNIFORM_REJECTION: hide failing stage (true/false)
        - ANCHORED_LOG_LEVEL / ANCHORED_LOG_FILE: logging output
        """
        overrides: dict[str, Any] = {}

        # Setup settings
        if os.getenv("ANCHORED_H_SEED"):
            overrides.setdefault("setup", {})["h_seed"] = os.getenv("ANCHORED_H_SEED")
        if os.getenv("ANCHORED_B_SEED"):
            overrides.setdefault("setup", {})["b_seed"] = os.getenv("ANCHORED_B_SEED")
        if os.getenv("ANCHORED_MAX_GENERATOR_ATTEMPTS"):
            overrides.setdefault("setup", {})["max_generator_attempts"] = int(
                os.getenv("ANCHORED_MAX_GENERATOR_ATTEMPTS")
            )

        # Tree settings
        if os.getenv("ANCHORED_RANGE_BITS"):
            overrides.setdefault("tree", {})["range_bits"] = int(os.getenv("ANCHORED_RANGE_BITS"))
        if os.getenv("ANCHORED_TREE_WORKERS"):
            overrides.setdefault("tree", {})["workers"] = int(os.getenv("ANCHORED_TREE_WORKERS"))
        if os.getenv("ANCHORED_MERKLE_HASH"):
            overrides.setdefault("tree", {})["merkle_hash"] = os.getenv("ANCHORED_MERKLE_HASH")

        # Verifier settings
        if os.getenv("ANCHORED_UNIFORM_REJECTION"):
            overrides.setdefault("verifier", {})["uniform_rejection"] = _env_bool(
                "ANCHORED_UNIFORM_REJECTION"
            )

        # Logging
        if os.getenv("ANCHORED_LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv("ANCHORED_LOG_LEVEL")
        if os.getenv("ANCHORED_LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv("ANCHORED_LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        overrides = cls._get_env_overrides()
        return cls.from_dict(overrides)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        setup_data = data.get("setup", {})
        tree_data = data.get("tree", {})
        verifier_data = data.get("verifier", {})
        logging_data = data.get("logging", {})

        config = cls(
            setup=SetupConfig(**setup_data) if setup_data else SetupConfig(),
            tree=TreeConfig(**tree_data) if tree_data else TreeConfig(),
            verifier=VerifierConfig(**verifier_data) if verifier_data else VerifierConfig(),
            logging=LoggingConfig(**logging_data) if logging_data else LoggingConfig(),
            extra=data.get("extra", {}),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Check value ranges that dataclass typing cannot express.

        Raises:
            InvalidParameterException: On the first invalid field.
        """
        h_seed, b_seed = self.setup.seeds
        if h_seed == b_seed:
            raise InvalidParameterException(
                "h_seed and b_seed must differ", parameter="setup.b_seed"
            )
        if self.setup.max_generator_attempts < 1:
            raise InvalidParameterException(
                "max_generator_attempts must be positive",
                parameter="setup.max_generator_attempts",
            )
        if not 1 <= self.tree.max_range_bits <= 32:
            raise InvalidParameterException(
                "max_range_bits must be between 1 and 32", parameter="tree.max_range_bits"
            )
        if not 1 <= self.tree.range_bits <= self.tree.max_range_bits:
            raise InvalidParameterException(
                f"range_bits must be between 1 and {self.tree.max_range_bits}",
                parameter="tree.range_bits",
            )
        if self.tree.workers < 1:
            raise InvalidParameterException(
                "workers must be at least 1", parameter="tree.workers"
            )
        if self.tree.merkle_hash not in MERKLE_HASH_CHOICES:
            raise InvalidParameterException(
                f"merkle_hash must be one of {MERKLE_HASH_CHOICES}",
                parameter="tree.merkle_hash",
            )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        sections = {
            "setup": new_config.setup,
            "tree": new_config.tree,
            "verifier": new_config.verifier,
            "logging": new_config.logging,
        }
        for section_name, values in overrides.items():
            for key, value in values.items():
                setattr(sections[section_name], key, value)

        new_config.validate()
        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "setup": {
                "h_seed": self.setup.h_seed,
                "b_seed": self.setup.b_seed,
                "max_generator_attempts": self.setup.max_generator_attempts,
            },
            "tree": {
                "range_bits": self.tree.range_bits,
                "max_range_bits": self.tree.max_range_bits,
                "workers": self.tree.workers,
                "merkle_hash": self.tree.merkle_hash,
            },
            "verifier": {
                "uniform_rejection": self.verifier.uniform_rejection,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
