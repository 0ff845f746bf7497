"""
clvm_core/printer.py

Convert a Program into its canonical textual form. parser.parse() is the
exact left inverse of to_source() for every value this package produces.

Atoms:
    empty                       ()
    longer than 2 bytes         "text" / 'text' when printable, else 0x...
    1-2 bytes, minimal integer  decimal
    anything else               0x...

Pairs print as (A B C) or (A B . tail). With show_keywords, a head atom
whose integer value is a known operator code prints as its mnemonic.
"""

import string

from .casts import int_from_bytes, is_canonical_int
from .keywords import keyword_for
from .program import Program

PRINTABLE = frozenset(string.printable)


def _quote_text(atom: bytes):
    """Quoted form of atom, or None when it must be printed as hex."""
    try:
        text = atom.decode("utf-8")
    except UnicodeDecodeError:
        return None
    if any(ch not in PRINTABLE for ch in text):
        return None
    if '"' in text and "'" in text:
        return None
    quote = "'" if '"' in text else '"'
    return quote + text + quote


def atom_to_source(atom: bytes) -> str:
    if len(atom) == 0:
        return "()"
    if len(atom) > 2:
        quoted = _quote_text(atom)
        return quoted if quoted is not None else "0x" + atom.hex()
    if is_canonical_int(atom):
        return str(int_from_bytes(atom))
    return "0x" + atom.hex()


def _atom_text(atom: Program, is_head: bool, show_keywords: bool) -> str:
    if is_head and show_keywords:
        name = keyword_for(atom.as_int())
        if name is not None:
            return name
    return atom_to_source(atom.atom)


def to_source(program: Program, show_keywords: bool = True) -> str:
    # Explicit work stack: strings are emitted as is, (node, is_head) tuples
    # are expanded.
    out = []
    todo = [(program, False)]
    while todo:
        item = todo.pop()
        if isinstance(item, str):
            out.append(item)
            continue
        node, is_head = item
        if node.is_atom:
            out.append(_atom_text(node, is_head, show_keywords))
            continue
        parts = [(node.first(), True)]
        current = node.rest()
        while current.is_pair:
            parts.append(" ")
            parts.append((current.first(), False))
            current = current.rest()
        if not current.is_null:
            parts.append(" . ")
            parts.append((current, False))
        parts.append(")")
        out.append("(")
        todo.extend(reversed(parts))
    return "".join(out)
