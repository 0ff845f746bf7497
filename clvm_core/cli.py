#!/usr/bin/env python3
"""Command-line interface for clvm_core."""

import argparse
import sys

from .errors import ClvmError
from .program import NIL, Program
from .runtime import RunOptions, run_program


def _load(text: str) -> Program:
    return Program.parse(text)


def cmd_run(args) -> int:
    program = _load(args.program)
    env = _load(args.env) if args.env else NIL
    options = RunOptions.from_env()
    if args.max_cost is not None:
        options.max_cost = args.max_cost
    if args.strict:
        options.strict = True
    output = run_program(program, env, options)
    if args.cost:
        print(f"cost = {output.cost}")
    print(output.program.serialize_hex() if args.hex else output.program)
    return 0


def cmd_serialize(args) -> int:
    print(_load(args.program).serialize_hex())
    return 0


def cmd_deserialize(args) -> int:
    if args.file:
        program = Program.deserialize_hex_file(args.file)
    elif args.hex:
        program = Program.deserialize_hex(args.hex)
    else:
        print("deserialize: provide HEX or --file", file=sys.stderr)
        return 2
    print(program)
    return 0


def cmd_treehash(args) -> int:
    print(_load(args.program).tree_hash().hex())
    return 0


def cmd_curry(args) -> int:
    curried = _load(args.program).curry([_load(a) for a in args.args])
    print(curried.serialize_hex() if args.hex else curried)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clvm-core", description="Run and inspect clvm programs")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Evaluate PROGRAM against ENV")
    run.add_argument("program", help="Program source text")
    run.add_argument("env", nargs="?", help="Argument tree source text (default: nil)")
    run.add_argument("--max-cost", type=int, default=None, help="Abort once cost exceeds this")
    run.add_argument("--strict", action="store_true", help="Enable strict operator checks")
    run.add_argument("--cost", action="store_true", help="Print the total cost")
    run.add_argument("--hex", action="store_true", help="Print the result serialized as hex")
    run.set_defaults(func=cmd_run)

    ser = sub.add_parser("serialize", help="Print the hex serialization of PROGRAM")
    ser.add_argument("program")
    ser.set_defaults(func=cmd_serialize)

    de = sub.add_parser("deserialize", help="Print the source form of serialized hex")
    de.add_argument("hex", nargs="?")
    de.add_argument("--file", help="File holding exactly one line of hex")
    de.set_defaults(func=cmd_deserialize)

    th = sub.add_parser("treehash", help="Print the tree hash of PROGRAM")
    th.add_argument("program")
    th.set_defaults(func=cmd_treehash)

    cu = sub.add_parser("curry", help="Curry PROGRAM with ARGs")
    cu.add_argument("program")
    cu.add_argument("args", nargs="*")
    cu.add_argument("--hex", action="store_true", help="Print the result serialized as hex")
    cu.set_defaults(func=cmd_curry)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ClvmError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
