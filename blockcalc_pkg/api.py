"""Public API for blockcalc - builds calculators and runs scripts without side effects."""

from __future__ import annotations

import io
from typing import Any, Callable, TextIO

from . import config
from .engine import Calculator
from .intcalc import INITIAL_RESULT, build_int_operations, build_memo_operations
from .matcalc import build_matrix_operations, initial_result
from .output import OUTPUT_FORMATS, render_json, to_jsonable  # noqa: F401
from .parser import BlockReader, stream_source
from .types import CalculatorError, RunResult


def build_calculator(
    kind: str,
    reader: BlockReader,
    out: TextIO | None = None,
    err: TextIO | None = None,
    render: Callable[[Any], str] | None = None,
    output_format: str = "human",
) -> tuple[Calculator, Any]:
    """Wire the operation list of a calculator kind to a block reader.

    Args:
        kind: One of "int", "memo", "matrix"
        reader: Where blocks come from
        out: Channel for results and listings
        err: Channel for diagnostics
        render: Result formatter (default: str, or JSON lines in json format)
        output_format: "human" or "json"; also applies to ``inv`` and ``show``

    Returns:
        Tuple (calculator, initial_result)

    Raises:
        ValueError: If kind or output_format is unknown
    """
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {output_format!r}")
    if kind == "int":
        operations, initial = build_int_operations(), INITIAL_RESULT
    elif kind == "memo":
        operations = build_memo_operations(out=out, output_format=output_format)
        initial = INITIAL_RESULT
    elif kind == "matrix":
        operations = build_matrix_operations(out=out, err=err, output_format=output_format)
        initial = initial_result()
    else:
        raise ValueError(
            f"Unknown calculator kind: {kind!r} (expected one of {', '.join(config.CALCULATOR_KINDS)})"
        )
    if render is None:
        render = render_json if output_format == "json" else str
    calculator = Calculator(reader, operations, out=out, err=err, render=render)
    return calculator, initial


def run_script(
    text: str, kind: str = config.DEFAULT_KIND, output_format: str = "human"
) -> RunResult:
    """Run a whole script through a fresh calculator.

    Args:
        text: Input lines separated by newlines (e.g., "123\\n+ 45")
        kind: Calculator kind
        output_format: "human" or "json"

    Returns:
        RunResult with every displayed result, diagnostics and final result

    Example:
        >>> from blockcalc_pkg.api import run_script
        >>> result = run_script("123\\n+ 45")
        >>> print(result.outputs)
        ['0', '123', '168']
        >>> print(result.final)
        168
    """
    out = io.StringIO()
    err = io.StringIO()
    reader = BlockReader(stream_source(io.StringIO(text), prompts=False), err=err)
    calculator, initial = build_calculator(
        kind, reader, out=out, err=err, output_format=output_format
    )
    try:
        final = calculator.run(initial)
    except CalculatorError as e:
        return RunResult(
            ok=False,
            final=calculator.current,
            outputs=calculator.displayed,
            diagnostics=err.getvalue().splitlines(),
            transcript=out.getvalue(),
            error=str(e),
        )
    return RunResult(
        ok=True,
        final=final,
        outputs=calculator.displayed,
        diagnostics=err.getvalue().splitlines(),
        transcript=out.getvalue(),
    )
