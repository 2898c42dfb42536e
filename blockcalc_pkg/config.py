"""Centralized configuration for blockcalc.

This module defines:
- Block protocol markers and REPL prompts
- Matrix rendering width and precision
- Eigenvalue iteration limits
- Error policy switches
- Regex patterns for literal parsing

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with BLOCKCALC_)
"""

import os
import re

# Version is defined in pyproject.toml [project] section
try:
    import importlib.metadata

    VERSION = importlib.metadata.version("blockcalc")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# Block protocol
BLOCK_MARKER = ":"
CONTINUATION_PREFIX = "\t"

# Prompts (only shown for interactive input)
PROMPT = os.getenv("BLOCKCALC_PROMPT", ">> ")
CONTINUATION_PROMPT = os.getenv("BLOCKCALC_CONTINUATION_PROMPT", ".. ")

# Calculator selection
CALCULATOR_KINDS = ("int", "memo", "matrix")
DEFAULT_KIND = os.getenv("BLOCKCALC_DEFAULT_KIND", "int")

# Matrix rendering: each cell is formatted as f"{value:{WIDTH}.{PRECISION}f}"
MATRIX_CELL_WIDTH = int(os.getenv("BLOCKCALC_MATRIX_CELL_WIDTH", "8"))
MATRIX_CELL_PRECISION = int(os.getenv("BLOCKCALC_MATRIX_CELL_PRECISION", "3"))

# Largest K accepted by ``eye K`` and ``zero K``
MAX_MATRIX_DIM = int(os.getenv("BLOCKCALC_MAX_MATRIX_DIM", "1000"))

# LR iteration for eigenvalue approximation
EIGEN_MAX_ITERATIONS = int(
    os.getenv("BLOCKCALC_EIGEN_MAX_ITERATIONS", "1000")
)  # hard cap, no other divergence guard
EIGEN_TOLERANCE = float(
    os.getenv("BLOCKCALC_EIGEN_TOLERANCE", "1e-11")
)  # sum of |strictly lower entries| below this means converged

# Error policy: when true, loading an unknown variable ends the session
STRICT_VARIABLES = (
    os.getenv("BLOCKCALC_STRICT_VARIABLES", "false").lower() == "true"
)

LOG_LEVEL = os.getenv("BLOCKCALC_LOG_LEVEL", "WARNING")

INT_LITERAL_RE = re.compile(r"^[+-]?\d+$")
VAR_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
TOKEN_SPLIT_REGEX = re.compile(r"(\W)", re.ASCII)
