#!/usr/bin/env python3
"""
blockcalc - block-oriented calculators

Thin wrapper that delegates all functionality to the blockcalc_pkg package.

Usage:
    python blockcalc.py                       # Integer calculator on stdin
    python blockcalc.py -k matrix             # Matrix calculator
    python blockcalc.py -k memo -f script.txt # Run a script file
    python blockcalc.py --help                # Show help
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for blockcalc.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        from blockcalc_pkg.cli import main_entry
    except ImportError as e:
        print(f"Error: Failed to import blockcalc_pkg: {e}")
        print("Please ensure all dependencies are installed: pip install -e .")
        return 1
    try:
        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
