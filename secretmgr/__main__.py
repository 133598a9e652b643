"""
Main entry point for running secretmgr as a module.

Usage:
    python -m secretmgr <command> [options]
"""

from .cli import main
import sys

if __name__ == "__main__":
    sys.exit(main())
