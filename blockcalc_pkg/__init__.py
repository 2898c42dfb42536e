"""blockcalc package: block reader, dispatch engine, matrix kernel and calculators."""

__all__ = [
    "config",
    "parser",
    "engine",
    "matrix",
    "memory",
    "intcalc",
    "matcalc",
    "output",
    "types",
    "api",
    "cli",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "run_script",
    "build_calculator",
    "Calculator",
    "Matrix",
]
