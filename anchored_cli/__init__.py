"""
Module 09 - Anchored CLI

Command-line interface for anchored proofs.

Usage:
    python -m anchored_cli setup
    python -m anchored_cli prove --witness 2 --out proof.json
    python -m anchored_cli verify proof.json
    python -m anchored_cli config --init
"""

__version__ = "0.1.0"
