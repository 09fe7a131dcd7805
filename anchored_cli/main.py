"""
Module 09 - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m anchored_cli setup [--json]
    python -m anchored_cli prove --witness N [--range R] [--secret HEX] [--out FILE] [--json]
    python -m anchored_cli verify <package_path> [--uniform] [--json]
    python -m anchored_cli config --init|--show [--path FILE]

Environment Variables:
    ANCHORED_H_SEED / ANCHORED_B_SEED   Generator seeds (hex)
    ANCHORED_RANGE_BITS                 Default tree range (default: 8)
    ANCHORED_TREE_WORKERS               Leaf computation threads (default: 1)
    ANCHORED_MERKLE_HASH                Merkle node hasher: field, sha256
    ANCHORED_UNIFORM_REJECTION          Hide the failing verifier stage
    ANCHORED_LOG_LEVEL                  Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from anchored_cli import __version__
from anchored_cli.commands import prove, setup, verify
from anchored_cli.config import load_config, get_default_config_template


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="anchored",
        description="Anchored proofs CLI - set up parameters, generate and verify proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: ./anchored.yaml or ~/.config/anchored/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- setup command ---
    setup_parser = subparsers.add_parser(
        "setup",
        help="Print the public generators",
        description="Derive the generators (G, H, B) from the configured seeds.",
    )
    setup_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    setup_parser.set_defaults(func=setup.setup_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Enroll and generate a proof package",
        description="Build an enrollment tree, prove a witness and write a proof package.",
    )
    prove_parser.add_argument(
        "--witness", "-w",
        type=int,
        required=True,
        help="Enrolled value to prove (1..2^range)",
    )
    prove_parser.add_argument(
        "--range", "-r",
        dest="range_bits",
        type=int,
        default=None,
        help="Tree range in bits (default: from config)",
    )
    prove_parser.add_argument(
        "--secret",
        type=str,
        default=None,
        help="Holder secret as 0x-hex (default: sampled fresh and discarded)",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default="proof.json",
        help="Output path for the proof package (default: proof.json)",
    )
    prove_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a proof package offline",
        description="Check the package digest and verify the anchored proof.",
    )
    verify_parser.add_argument(
        "package_path",
        type=str,
        help="Path to proof package JSON file",
    )
    verify_parser.add_argument(
        "--uniform",
        action="store_true",
        default=None,
        help="Do not reveal which verifier stage rejected the proof",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show effective configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="anchored.yaml",
        help="Path for config file (default: anchored.yaml)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (ANCHORED_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: anchored config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
