"""
CLI command modules.
"""

from anchored_cli.commands import setup, prove, verify

__all__ = ["setup", "prove", "verify"]
