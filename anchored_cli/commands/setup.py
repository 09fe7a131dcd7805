"""
Module 09 - CLI Setup Command

Print the public generators derived from the configured seeds.

Usage:
    anchored setup [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace

from orchestrator.pipeline import AnchoredPipeline


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def setup_cmd(args: Namespace) -> int:
    """
    Execute the setup command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config
    pipeline = AnchoredPipeline(config=config)
    generators = pipeline.setup()

    output = {
        **generators.to_dict(),
        "h_seed": config.setup.h_seed,
        "b_seed": config.setup.b_seed,
    }

    if args.json:
        print(json.dumps(output, indent=2))
    else:
        for key, value in output.items():
            print(f"{key}: {value}")

    return EXIT_SUCCESS
