"""Main entry point for running blockcalc_pkg as a module.

This allows running blockcalc with:
    python -m blockcalc_pkg
    python -m blockcalc_pkg -k matrix
    python -m blockcalc_pkg --health-check

This is equivalent to running:
    python -m blockcalc_pkg.cli
    python blockcalc.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
