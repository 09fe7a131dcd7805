"""
Module 09 - CLI Configuration

Locates and loads the RuntimeConfig used by CLI commands.
YAML file settings are applied first, environment variables on top.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from core.config import RuntimeConfig


DEFAULT_CONFIG_NAME = "anchored.yaml"


def default_config_paths() -> list[Path]:
    """Config locations searched when no explicit path is given."""
    return [
        Path.cwd() / DEFAULT_CONFIG_NAME,
        Path.cwd() / f".{DEFAULT_CONFIG_NAME}",
        Path.home() / ".config" / "anchored" / "config.yaml",
    ]


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Merged configuration

    Raises:
        FileNotFoundError: If config_path is given but does not exist.
    """
    if config_path is not None:
        config = RuntimeConfig.from_yaml(config_path)
    else:
        config = RuntimeConfig()
        for default_path in default_config_paths():
            if default_path.exists():
                config = RuntimeConfig.from_yaml(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    header = (
        "# Anchored proofs configuration\n"
        "# Environment variables (ANCHORED_* prefix) override these values.\n"
    )
    return header + yaml.safe_dump(RuntimeConfig().to_dict(), sort_keys=False)
