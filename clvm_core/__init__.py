"""
clvm_core - Tree model, binary codec, textual form and cost-metered evaluator
for clvm puzzles.

Public API:
- Program / NIL: the atom/pair tree value
- run_program, RunOptions, Output: cost-metered evaluation
- OperatorRegistry, CORE_OPERATORS: pluggable operator dispatch
- KEYWORDS: operator mnemonic table
"""

from .errors import (
    ArgumentError,
    ClvmError,
    CostExceededError,
    EvalError,
    ParseError,
    ProgramTypeError,
    RangeError,
    UnknownOperatorError,
)
from .program import NIL, Position, Program
from .keywords import KEYWORDS
from .runtime import MAX_BLOCK_COST, Output, RunOptions, run_program
from .operators import CORE_OPERATORS, OperatorRegistry, operator_handler

# Derive version from package metadata
try:
    from importlib.metadata import version
    __version__ = version("clvm-core")
except Exception:
    __version__ = "1.0.0"

__all__ = [
    "Program",
    "NIL",
    "Position",
    "KEYWORDS",
    "run_program",
    "RunOptions",
    "Output",
    "MAX_BLOCK_COST",
    "OperatorRegistry",
    "CORE_OPERATORS",
    "operator_handler",
    "ClvmError",
    "ProgramTypeError",
    "ParseError",
    "RangeError",
    "ArgumentError",
    "EvalError",
    "CostExceededError",
    "UnknownOperatorError",
]
