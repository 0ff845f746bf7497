"""
operators.py

Operator registry and the core operator set.

A handler has the shape

    handler(instructions, stack, options) -> incremental cost

On entry the operand list (already evaluated) is on top of the stack. The
handler pops it and either pushes one result or schedules further
instructions (see `a`). New operators are added by registering handlers;
the evaluator loop in runtime.py never changes.

Costs follow the standard clvm cost table. Allocated results are charged
MALLOC_COST_PER_BYTE for every byte of the result atom.
"""

from functools import wraps
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from .casts import is_canonical_int, limbs_for_int
from .errors import EvalError
from .keywords import KEYWORDS
from .program import Program
from .tree_hash import sha256

Handler = Callable[[list, list, object], int]

APPLY_COST = 90
IF_COST = 33
CONS_COST = 50
FIRST_COST = 30
REST_COST = 30
LISTP_COST = 19
MALLOC_COST_PER_BYTE = 10

EQ_BASE_COST = 117
EQ_COST_PER_BYTE = 1
GR_BASE_COST = 498
GR_COST_PER_BYTE = 2

SHA256_BASE_COST = 87
SHA256_COST_PER_ARG = 134
SHA256_COST_PER_BYTE = 2
STRLEN_BASE_COST = 173
STRLEN_COST_PER_BYTE = 1
CONCAT_BASE_COST = 142
CONCAT_COST_PER_ARG = 135
CONCAT_COST_PER_BYTE = 3

ARITH_BASE_COST = 99
ARITH_COST_PER_ARG = 320
ARITH_COST_PER_BYTE = 3
MUL_BASE_COST = 92
MUL_COST_PER_OP = 885
MUL_LINEAR_COST_PER_BYTE = 6
MUL_SQUARE_COST_PER_BYTE_DIVIDER = 128

BOOL_BASE_COST = 200
BOOL_COST_PER_ARG = 300


class OperatorRegistry:
    """Mapping from operator code to handler."""

    def __init__(self, handlers: Optional[Dict[int, Handler]] = None):
        self._handlers: Dict[int, Handler] = dict(handlers or {})

    def register(self, key: Union[int, str], handler: Handler) -> Handler:
        code = KEYWORDS[key] if isinstance(key, str) else key
        if code < 0:
            raise ValueError(f"Operator code must be non-negative, got {code}")
        self._handlers[code] = handler
        return handler

    def lookup(self, code: int) -> Optional[Handler]:
        return self._handlers.get(code)

    def copy(self) -> "OperatorRegistry":
        return OperatorRegistry(self._handlers)

    def __contains__(self, code: int) -> bool:
        return code in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._handlers))


def operator_handler(fn: Callable[[Program, object], Tuple[int, Program]]) -> Handler:
    """Adapt a plain (args, options) -> (cost, result) function to the stack contract."""
    @wraps(fn)
    def handler(instructions, stack, options):
        args = stack.pop()
        cost, result = fn(args, options)
        stack.append(result)
        return cost
    return handler


CORE_OPERATORS = OperatorRegistry()


def _core(name: str):
    def decorator(handler: Handler) -> Handler:
        return CORE_OPERATORS.register(name, handler)
    return decorator


def _malloc_cost(cost: int, result: Program) -> Tuple[int, Program]:
    return cost + len(result.atom) * MALLOC_COST_PER_BYTE, result


def _int_args(name: str, args: Program, options, size: Optional[int] = None) -> List[Tuple[int, int]]:
    """Operands as (value, byte length) pairs."""
    items = args.to_atom_list(size=size, suffix=f"in {name}")
    if getattr(options, "strict", False):
        for item in items:
            if not is_canonical_int(item.atom):
                raise EvalError(
                    f"Non-canonical integer {item} in {name}{item.position_suffix}.", item)
    return [(item.as_int(), len(item.atom)) for item in items]


# -------------------------------------------------------------------------
# Core language
# -------------------------------------------------------------------------

@_core("a")
def op_apply(instructions, stack, options):
    from .runtime import eval_instruction
    program, env = stack.pop().to_list(size=2, suffix="in a")
    stack.append(Program.cons(program, env))
    instructions.append(eval_instruction)
    return APPLY_COST


@_core("i")
@operator_handler
def op_if(args, options):
    condition, then_branch, else_branch = args.to_list(size=3, suffix="in i")
    return IF_COST, else_branch if condition.is_null else then_branch


@_core("c")
@operator_handler
def op_cons(args, options):
    first, rest = args.to_list(size=2, suffix="in c")
    return CONS_COST, Program.cons(first, rest)


@_core("f")
@operator_handler
def op_first(args, options):
    (item,) = args.to_pair_list(size=1, suffix="in f")
    return FIRST_COST, item.first()


@_core("r")
@operator_handler
def op_rest(args, options):
    (item,) = args.to_pair_list(size=1, suffix="in r")
    return REST_COST, item.rest()


@_core("l")
@operator_handler
def op_listp(args, options):
    (item,) = args.to_list(size=1, suffix="in l")
    return LISTP_COST, Program.from_bool(item.is_pair)


@_core("x")
@operator_handler
def op_raise(args, options):
    items = args.to_list()
    value = items[0] if len(items) == 1 and items[0].is_atom else args
    raise EvalError(f"The program raised an error with {value}{value.position_suffix}.", value)


@_core("=")
@operator_handler
def op_eq(args, options):
    a, b = args.to_atom_list(size=2, suffix="in =")
    cost = EQ_BASE_COST + (len(a.atom) + len(b.atom)) * EQ_COST_PER_BYTE
    return cost, Program.from_bool(a.atom == b.atom)


# -------------------------------------------------------------------------
# Byte strings
# -------------------------------------------------------------------------

@_core("sha256")
@operator_handler
def op_sha256(args, options):
    items = args.to_atom_list(suffix="in sha256")
    cost = SHA256_BASE_COST + len(items) * SHA256_COST_PER_ARG
    cost += sum(len(item.atom) for item in items) * SHA256_COST_PER_BYTE
    return _malloc_cost(cost, Program.from_bytes(sha256(*(item.atom for item in items))))


@_core("strlen")
@operator_handler
def op_strlen(args, options):
    (item,) = args.to_atom_list(size=1, suffix="in strlen")
    size = len(item.atom)
    return _malloc_cost(STRLEN_BASE_COST + size * STRLEN_COST_PER_BYTE, Program.from_int(size))


@_core("concat")
@operator_handler
def op_concat(args, options):
    items = args.to_atom_list(suffix="in concat")
    blob = b"".join(item.atom for item in items)
    cost = CONCAT_BASE_COST + len(items) * CONCAT_COST_PER_ARG + len(blob) * CONCAT_COST_PER_BYTE
    return _malloc_cost(cost, Program.from_bytes(blob))


# -------------------------------------------------------------------------
# Arithmetic
# -------------------------------------------------------------------------

@_core("+")
@operator_handler
def op_add(args, options):
    total = 0
    cost = ARITH_BASE_COST
    arg_size = 0
    for value, length in _int_args("+", args, options):
        total += value
        arg_size += length
        cost += ARITH_COST_PER_ARG
    cost += arg_size * ARITH_COST_PER_BYTE
    return _malloc_cost(cost, Program.from_int(total))


@_core("-")
@operator_handler
def op_subtract(args, options):
    total = 0
    cost = ARITH_BASE_COST
    arg_size = 0
    sign = 1
    for value, length in _int_args("-", args, options):
        total += sign * value
        sign = -1
        arg_size += length
        cost += ARITH_COST_PER_ARG
    cost += arg_size * ARITH_COST_PER_BYTE
    return _malloc_cost(cost, Program.from_int(total))


@_core("*")
@operator_handler
def op_multiply(args, options):
    cost = MUL_BASE_COST
    operands = _int_args("*", args, options)
    if not operands:
        return _malloc_cost(cost, Program.from_int(1))
    v, vs = operands[0]
    for r, rs in operands[1:]:
        cost += MUL_COST_PER_OP
        cost += (rs + vs) * MUL_LINEAR_COST_PER_BYTE
        cost += (rs * vs) // MUL_SQUARE_COST_PER_BYTE_DIVIDER
        v = v * r
        vs = limbs_for_int(v)
    return _malloc_cost(cost, Program.from_int(v))


@_core(">")
@operator_handler
def op_gr(args, options):
    (a, la), (b, lb) = _int_args(">", args, options, size=2)
    cost = GR_BASE_COST + (la + lb) * GR_COST_PER_BYTE
    return cost, Program.from_bool(a > b)


# -------------------------------------------------------------------------
# Boolean
# -------------------------------------------------------------------------

@_core("not")
@operator_handler
def op_not(args, options):
    (item,) = args.to_list(size=1, suffix="in not")
    return BOOL_BASE_COST, Program.from_bool(item.is_null)


@_core("any")
@operator_handler
def op_any(args, options):
    items = args.to_list(suffix="in any")
    cost = BOOL_BASE_COST + len(items) * BOOL_COST_PER_ARG
    return cost, Program.from_bool(any(not item.is_null for item in items))


@_core("all")
@operator_handler
def op_all(args, options):
    items = args.to_list(suffix="in all")
    cost = BOOL_BASE_COST + len(items) * BOOL_COST_PER_ARG
    return cost, Program.from_bool(all(not item.is_null for item in items))
