"""
clvm_core/errors.py - Error kinds raised by the tree model, codec, parser and evaluator.

Every error is fail-fast and propagates to the caller of the operation that
detected it. Messages carry the printed form of the offending value and its
source position when one is known.
"""

from typing import Optional


# -------------------------------------------------------------------------
# Exceptions
# -------------------------------------------------------------------------


class ClvmError(Exception):
    """Base class for all clvm_core errors."""


class ProgramTypeError(ClvmError, TypeError):
    """Raised when an atom accessor is used on a pair, or a pair accessor on an atom."""


class ParseError(ClvmError, ValueError):
    """Raised on malformed, truncated or empty textual or binary input."""


class RangeError(ClvmError, ValueError):
    """Raised when an atom is too large to serialize (0x400000000 bytes or more)."""


class ArgumentError(ClvmError, ValueError):
    """
    Raised by the list decoder when an element fails validation or the
    element count violates the requested arity.

    ``index`` is the 1-based offending element, or None for arity failures.
    """

    def __init__(self, message: str, *, index: Optional[int] = None,
                 suffix: Optional[str] = None, position=None):
        super().__init__(message)
        self.index = index
        self.suffix = suffix
        self.position = position


class EvalError(ClvmError):
    """Raised when evaluation fails. ``program`` is the offending value."""

    def __init__(self, message: str, program=None):
        super().__init__(message)
        self.program = program


class CostExceededError(EvalError):
    """Raised as soon as the accumulated cost goes over the configured maximum."""

    def __init__(self, message: str, program=None, *, max_cost: int = 0, cost: int = 0):
        super().__init__(message, program)
        self.max_cost = max_cost
        self.cost = cost


class UnknownOperatorError(EvalError):
    """Raised when no handler is registered for an operator code."""

    def __init__(self, message: str, program=None, *, code: int = 0):
        super().__init__(message, program)
        self.code = code
