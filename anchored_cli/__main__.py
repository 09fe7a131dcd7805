"""
Module execution entry point.

Allows running with: python -m anchored_cli
"""

import sys
from anchored_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
