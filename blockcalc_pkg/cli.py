from __future__ import annotations

import argparse
import io
import sys

from .api import build_calculator, run_script
from .config import CALCULATOR_KINDS, DEFAULT_KIND, LOG_LEVEL, VERSION
from .logging_config import get_logger, setup_logging
from .matrix import Matrix
from .output import OUTPUT_FORMATS
from .parser import BlockReader, LineSource, console_source, stream_source
from .types import CalculatorError

logger = get_logger("cli")


def _health_check() -> int:
    """Run health check to verify dependencies and the numerical kernel.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running blockcalc health check...")
    print("-" * 50)

    try:
        import numpy as np

        print(f"[OK] NumPy {np.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] NumPy import failed: {e}")
        checks_failed += 1

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        print("  To install: pip install sympy")
        return 1

    # Cross-check the elimination kernel against exact rational arithmetic
    rows = [[4, 7, 2], [3, 6, 1], [2, 5, 3]]
    kernel = Matrix.from_rows(rows)
    exact = sp.Matrix(rows)
    try:
        expected = Matrix.from_rows(np.array(exact.inv(), dtype=float).tolist())
        if kernel.inverse().allclose(expected):
            print("[OK] Inverse matches exact result")
            checks_passed += 1
        else:
            print(f"[FAIL] Inverse mismatch: got {kernel.inverse()!r}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Inverse check failed: {e}")
        checks_failed += 1

    try:
        expected_det = float(exact.det())
        got_det = kernel.determinant()
        if abs(got_det - expected_det) < 1e-9:
            print("[OK] Determinant matches exact result")
            checks_passed += 1
        else:
            print(f"[FAIL] Determinant mismatch: expected {expected_det}, got {got_det}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Determinant check failed: {e}")
        checks_failed += 1

    try:
        symmetric = [[2, 1], [1, 3]]
        expected_eig = sorted(float(v) for v in sp.Matrix(symmetric).eigenvals())
        got_eig = sorted(np.diagonal(Matrix.from_rows(symmetric).eigenvalues().vals))
        if np.allclose(expected_eig, got_eig, atol=1e-9):
            print("[OK] Eigenvalue iteration converges to exact eigenvalues")
            checks_passed += 1
        else:
            print(f"[FAIL] Eigenvalue mismatch: expected {expected_eig}, got {got_eig}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Eigenvalue check failed: {e}")
        checks_failed += 1

    try:
        result = run_script("123\n+ 45", kind="int")
        if result.ok and result.final == 168:
            print("[OK] Block dispatch works")
            checks_passed += 1
        else:
            print(f"[FAIL] Block dispatch check failed: {result}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Block dispatch check failed: {e}")
        checks_failed += 1

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def _positive_int(text: str) -> int:
    """argparse type for iteration caps and other counts that must be >= 1."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def _select_source(args: argparse.Namespace) -> tuple[LineSource, bool]:
    """Pick the line source for this run.

    Returns:
        Tuple (source, interactive)
    """
    if args.eval_script is not None:
        return stream_source(io.StringIO(args.eval_script), prompts=False), False
    if sys.stdin.isatty() and not args.no_prompt:
        return console_source(), True
    return stream_source(sys.stdin, prompts=False), False


def repl_loop(kind: str, source: LineSource, output_format: str = "human") -> int:
    """Run one calculator session until the input is exhausted.

    Returns:
        Exit code (1 if a fatal calculator error ended the session)
    """
    reader = BlockReader(source)
    calculator, initial = build_calculator(kind, reader, output_format=output_format)
    logger.debug("Starting %s calculator with %d operations", kind, len(calculator.operations))
    try:
        calculator.run(initial)
    except CalculatorError as e:
        logger.debug("Session ended by %s", e.code)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nGoodbye.")
    return 0


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the blockcalc CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(prog="blockcalc")
    parser.add_argument(
        "-k",
        "--kind",
        type=str,
        choices=list(CALCULATOR_KINDS),
        default=DEFAULT_KIND,
        help="Calculator to run: int, memo (integers with variables) or matrix",
    )
    parser.add_argument(
        "-e",
        "--eval",
        type=str,
        help="Run the given script (lines separated by newlines) and exit",
        dest="eval_script",
    )
    parser.add_argument("-f", "--file", type=str, help="Read blocks from a file")
    parser.add_argument(
        "--format",
        type=str,
        choices=list(OUTPUT_FORMATS),
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "--no-prompt", action="store_true", help="Do not show input prompts"
    )
    parser.add_argument(
        "--strict-variables",
        action="store_true",
        help="End the session when an unknown variable is used",
    )
    parser.add_argument(
        "--eigen-max-iterations",
        type=_positive_int,
        help="Iteration cap for eigenvalue approximation (default: 1000)",
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=LOG_LEVEL.upper(),
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file, kind=args.kind)

    # Apply CLI configuration overrides
    import blockcalc_pkg.config as _config

    if args.strict_variables:
        _config.STRICT_VARIABLES = True
    if args.eigen_max_iterations is not None:
        _config.EIGEN_MAX_ITERATIONS = args.eigen_max_iterations

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()

    if args.file and args.eval_script is None:
        try:
            with open(args.file, encoding="utf-8") as stream:
                return repl_loop(
                    args.kind,
                    stream_source(stream, prompts=False),
                    output_format=args.format,
                )
        except OSError as e:
            print(f"Error: cannot read {args.file}: {e}", file=sys.stderr)
            return 1

    source, interactive = _select_source(args)
    if interactive:
        print(f"blockcalc {VERSION} ({args.kind}) - end input with Ctrl-D.")
    return repl_loop(args.kind, source, output_format=args.format)


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m blockcalc_pkg.cli"""
    sys.exit(main_entry())
