"""
runtime.py

Cost-metered evaluator
----------------------

run_program() evaluates a Program as code against an argument tree with an
explicit two-stack trampoline:

    instructions : pending steps, each a function
                   (instructions, stack, options) -> incremental cost
    stack        : value stack, initially [(program . args)]

The loop pops one instruction at a time, adds its cost to the running
total, and aborts with CostExceededError as soon as the total goes over
options.max_cost. It stops when no instructions remain; the result is the
top of the value stack.

No native recursion is used, so evaluation depth is bounded only by the
cost ceiling.

Environment:
    CLVM_DEBUG=1     trace every step to stderr
    CLVM_MAX_COST    default ceiling for RunOptions.from_env()
    CLVM_STRICT=1    default strict flag for RunOptions.from_env()
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Callable, List, Optional

from .errors import CostExceededError, EvalError, UnknownOperatorError
from .keywords import KEYWORDS
from .program import NIL, Program

if TYPE_CHECKING:
    from .operators import OperatorRegistry

# Conventional per-block ceiling
MAX_BLOCK_COST = 11_000_000_000

QUOTE_COST = 20
EVAL_STEP_COST = 1
TRAVERSE_BASE_COST = 40
TRAVERSE_COST_PER_ZERO_BYTE = 4
TRAVERSE_COST_PER_BIT = 4

QUOTE_CODE = KEYWORDS["q"]

_DEBUG_ENABLED = os.getenv("CLVM_DEBUG", "0") == "1"


def _debug_print(*args, **kwargs):
    print(*args, file=sys.stderr, **kwargs)


Instruction = Callable[[List["Instruction"], List[Program], "RunOptions"], int]


# -------------------------------------------------------------------------
# Options and result
# -------------------------------------------------------------------------

@dataclass
class RunOptions:
    """
    Configuration for one evaluation.

        max_cost  : abort once the accumulated cost exceeds this (None = unbounded)
        strict    : passed through to operator handlers
        operators : operator registry (defaults to the core operator set)
        debug     : trace every step to stderr
    """
    max_cost: Optional[int] = None
    strict: bool = False
    operators: Optional["OperatorRegistry"] = None
    debug: bool = _DEBUG_ENABLED

    @classmethod
    def from_env(cls, **overrides) -> "RunOptions":
        env_cost = os.getenv("CLVM_MAX_COST")
        options = cls(
            max_cost=int(env_cost) if env_cost else None,
            strict=os.getenv("CLVM_STRICT", "0") == "1",
            debug=_DEBUG_ENABLED,
        )
        return replace(options, **overrides)

    def registry(self) -> "OperatorRegistry":
        if self.operators is None:
            from .operators import CORE_OPERATORS
            return CORE_OPERATORS
        return self.operators


@dataclass
class Output:
    """Result of run_program: the value produced and the total cost."""
    program: Program
    cost: int


# -------------------------------------------------------------------------
# Environment path traversal
# -------------------------------------------------------------------------

def msb_mask(byte: int) -> int:
    byte |= byte >> 1
    byte |= byte >> 2
    byte |= byte >> 4
    return (byte + 1) >> 1


def traverse_path(path: Program, env: Program):
    """
    Resolve an atom as a path into env. Bits are read from the least
    significant end; 0 selects first, 1 selects rest, and the most
    significant 1 bit terminates the path. Returns (cost, value).
    """
    cost = TRAVERSE_BASE_COST
    blob = path.atom
    end_byte_cursor = 0
    while end_byte_cursor < len(blob) and blob[end_byte_cursor] == 0:
        end_byte_cursor += 1
    cost += end_byte_cursor * TRAVERSE_COST_PER_ZERO_BYTE
    if end_byte_cursor == len(blob):
        return cost, NIL

    end_bitmask = msb_mask(blob[end_byte_cursor])
    byte_cursor = len(blob) - 1
    bitmask = 0x01
    while byte_cursor > end_byte_cursor or bitmask < end_bitmask:
        if not env.is_pair:
            raise EvalError(f"Path into atom {env}{path.position_suffix}.", env)
        env = env.rest() if blob[byte_cursor] & bitmask else env.first()
        cost += TRAVERSE_COST_PER_BIT
        bitmask <<= 1
        if bitmask == 0x100:
            byte_cursor -= 1
            bitmask = 0x01
    return cost, env


# -------------------------------------------------------------------------
# Instructions
# -------------------------------------------------------------------------

def swap_instruction(instructions, stack, options) -> int:
    v2 = stack.pop()
    v1 = stack.pop()
    stack.append(v2)
    stack.append(v1)
    return 0


def cons_instruction(instructions, stack, options) -> int:
    first = stack.pop()
    rest = stack.pop()
    stack.append(Program.cons(first, rest))
    return 0


def _push_operand_evaluation(instructions, stack, operands: Program, args: Program):
    """
    Schedule evaluation of every operand against args. Once these steps run,
    the evaluated operands sit on the stack as a single list.
    """
    current = operands
    while current.is_pair:
        stack.append(Program.cons(current.first(), args))
        instructions.append(cons_instruction)
        instructions.append(eval_instruction)
        instructions.append(swap_instruction)
        current = current.rest()
    stack.append(NIL)


def eval_instruction(instructions, stack, options) -> int:
    pair = stack.pop()
    program, args = pair.first(), pair.rest()

    if program.is_atom:
        cost, value = traverse_path(program, args)
        stack.append(value)
        return cost

    head = program.first()
    operands = program.rest()

    if head.is_pair:
        # ((code ...) operands...): run the head as code on the evaluated operands
        instructions.append(run_head_instruction)
        stack.append(head)
        _push_operand_evaluation(instructions, stack, operands, args)
        return EVAL_STEP_COST

    if head.as_int() == QUOTE_CODE:
        stack.append(operands)
        return QUOTE_COST

    instructions.append(apply_instruction)
    stack.append(head)
    _push_operand_evaluation(instructions, stack, operands, args)
    return EVAL_STEP_COST


def run_head_instruction(instructions, stack, options) -> int:
    evaluated = stack.pop()
    code = stack.pop()
    stack.append(Program.cons(code, evaluated))
    instructions.append(eval_instruction)
    return 0


def apply_instruction(instructions, stack, options) -> int:
    """
    Dispatch an operator: the operand list is on top of the stack with the
    operator atom beneath it. The handler consumes the operand list and
    pushes its result.
    """
    operands = stack.pop()
    operator = stack.pop()
    if operator.is_pair:
        raise EvalError(f"Operator {operator} must be an atom{operator.position_suffix}.", operator)
    code = operator.as_int()
    handler = options.registry().lookup(code)
    if handler is None:
        raise UnknownOperatorError(
            f"Unknown operator {operator}{operator.position_suffix}.", operator, code=code)
    stack.append(operands)
    return handler(instructions, stack, options)


# -------------------------------------------------------------------------
# Main loop
# -------------------------------------------------------------------------

def run_program(program: Program, args: Program, options: Optional[RunOptions] = None) -> Output:
    if options is None:
        options = RunOptions()
    instructions: List[Instruction] = [eval_instruction]
    stack: List[Program] = [Program.cons(program, args)]
    cost = 0
    while instructions:
        instruction = instructions.pop()
        cost += instruction(instructions, stack, options)
        if options.debug:
            _debug_print(f"[clvm] {instruction.__name__} cost={cost} top={stack[-1]}")
        if options.max_cost is not None and cost > options.max_cost:
            top = stack[-1] if stack else program
            raise CostExceededError(
                f"Exceeded cost of {options.max_cost}{top.position_suffix}.",
                top, max_cost=options.max_cost, cost=cost)
    return Output(stack[-1], cost)
