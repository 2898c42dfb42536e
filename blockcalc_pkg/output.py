"""Output formatting shared by the dispatcher and the operations that print.

In ``json`` mode every line written to the output channel is one JSON
object, so ``inv`` and ``show`` go through the same helpers as results.
"""

from __future__ import annotations

import json
import math
from typing import Any, Iterable

from . import config
from .matrix import Matrix

OUTPUT_FORMATS = ("human", "json")


def _json_number(value: float) -> Any:
    # JSON has no NaN or Infinity
    if math.isfinite(value):
        return value
    return str(value)


def to_jsonable(result: Any) -> Any:
    """Convert a result into plain JSON data.

    Integers become decimal strings so that no precision is lost; matrices
    become nested lists of rows, with non-finite entries as "nan", "inf" or
    "-inf".
    """
    if isinstance(result, Matrix):
        return [[_json_number(v) for v in row] for row in result.to_list()]
    if isinstance(result, float):
        return _json_number(result)
    return str(result)


def dumps(payload: dict[str, Any]) -> str:
    return json.dumps({"ok": True, **payload}, allow_nan=False)


def render_json(result: Any) -> str:
    return dumps({"result": to_jsonable(result)})


def render_determinant(det: float, output_format: str = "human") -> str:
    if output_format == "json":
        return dumps({"det": _json_number(det)})
    width = config.MATRIX_CELL_WIDTH
    precision = config.MATRIX_CELL_PRECISION
    return f"det = {det:{width}.{precision}f}"


def render_variables(items: Iterable[tuple[str, Any]]) -> str:
    """The ``show`` listing as one JSON object."""
    return dumps({"variables": {name: to_jsonable(value) for name, value in items}})
