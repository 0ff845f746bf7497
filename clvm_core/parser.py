"""
clvm_core/parser.py

PEG grammar (arpeggio) for the textual program form, and the visitor that
builds Programs from the parse tree.

    program_source <- expression EOF
    expression     <- cons_list / hex_atom / int_atom / quoted_atom / symbol
    cons_list      <- "(" list_body? ")"
    list_body      <- expression+ dot_tail?
    dot_tail       <- "." expression

Comments run from ';' to the end of the line. Operator mnemonics from
keywords.KEYWORDS parse to the operator code; any other symbol is the UTF-8
atom of its text.
"""

import bisect
import threading

from arpeggio import EOF, NoMatch, OneOrMore, Optional, ParserPython, PTNodeVisitor, Terminal, visit_parse_tree
from arpeggio import RegExMatch as _

from .errors import ParseError
from .keywords import code_for
from .program import NIL, Position, Program

# ==========================================
# GRAMMAR
# ==========================================


def comment():
    return _(r';[^\n]*')


def hex_atom():
    return _(r'0[xX][0-9a-fA-F]*(?![^\s()])')


def int_atom():
    return _(r'[+-]?[0-9]+(?![^\s()])')


def quoted_atom():
    return _(r'"[^"]*"|\'[^\']*\'')


def symbol():
    # Must not look like a number
    return _(r'(?![+-]?[0-9])[^\s()"\'.;]+')


def dot_tail():
    return ".", expression


def list_body():
    return OneOrMore(expression), Optional(dot_tail)


def cons_list():
    return "(", Optional(list_body), ")"


def expression():
    return [cons_list, hex_atom, int_atom, quoted_atom, symbol]


def program_source():
    return expression, EOF


# ==========================================
# VISITOR
# ==========================================

class _Tail:
    __slots__ = ("program",)

    def __init__(self, program):
        self.program = program


def _flatten(items):
    flat = []
    for x in items:
        if isinstance(x, list):
            flat.extend(_flatten(x))
        elif x is not None:
            flat.append(x)
    return flat


class ProgramBuilder(PTNodeVisitor):
    """Turns an arpeggio parse tree into a Program, recording positions."""

    def __init__(self, source: str, **kwargs):
        super().__init__(**kwargs)
        self.line_starts = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]

    def _position(self, node) -> Position:
        line = bisect.bisect_right(self.line_starts, node.position)
        return Position(line, node.position - self.line_starts[line - 1] + 1)

    def visit__default__(self, node, children):
        # Punctuation and EOF carry no value; anonymous groups are flattened
        # by the named rules that contain them.
        if isinstance(node, Terminal):
            return None
        return _flatten(children)

    def visit_hex_atom(self, node, children):
        digits = node.value[2:]
        if len(digits) % 2:
            digits = "0" + digits
        return Program.from_hex(digits).at(self._position(node))

    def visit_int_atom(self, node, children):
        return Program.from_int(int(node.value)).at(self._position(node))

    def visit_quoted_atom(self, node, children):
        return Program.from_str(node.value[1:-1]).at(self._position(node))

    def visit_symbol(self, node, children):
        position = self._position(node)
        code = code_for(node.value)
        if code is None:
            return Program.from_str(node.value).at(position)
        return Program.from_int(code).at(position)

    def visit_dot_tail(self, node, children):
        programs = [x for x in _flatten(children) if isinstance(x, Program)]
        return _Tail(programs[0])

    def visit_cons_list(self, node, children):
        items = _flatten(children)
        programs = [x for x in items if isinstance(x, Program)]
        tails = [x for x in items if isinstance(x, _Tail)]
        result = tails[0].program if tails else NIL
        for item in reversed(programs):
            result = Program.cons(item, result)
        if result is NIL:
            # a fresh nil so the position does not leak onto the shared constant
            result = Program.from_bytes(b"")
        return result.at(self._position(node))

    def visit_program_source(self, node, children):
        return [x for x in _flatten(children) if isinstance(x, Program)][0]


# ==========================================
# PARSER INSTANCE
# ==========================================

# One parser instance, serialized with a lock (arpeggio keeps parse state
# on the parser object).
_PARSER = None
_PARSER_LOCK = threading.Lock()


def _get_or_create_parser():
    global _PARSER
    if _PARSER is None:
        _PARSER = ParserPython(program_source, comment, reduce_tree=False)
    return _PARSER


def parse(source: str) -> Program:
    """Parse one program from source text. Raises ParseError on bad input."""
    if source is None or not source.strip():
        raise ParseError("Unexpected end of source.")
    with _PARSER_LOCK:
        parser = _get_or_create_parser()
        try:
            tree = parser.parse(source)
        except NoMatch as e:
            raise ParseError(str(e)) from None
    return visit_parse_tree(tree, ProgramBuilder(source))
