"""
clvm_core/serialize.py - Canonical binary codec

Wire format (one tree per encoding):

    empty atom            0x80
    atom b"\\x00".."\\x7f"  the byte itself
    other atom            size header || bytes
    pair                  0xFF || first || rest

The size header is 1-5 bytes. The number of leading 1 bits in its first
byte is (header length - 1); the remaining bits hold the size, most
significant byte first. Sizes of 0x400000000 bytes or more cannot be
encoded.

Encoding is the unique minimal form. Decoding accepts redundant integer
padding inside atoms (it is data, not framing) and returns an equal value.
"""

import io
from pathlib import Path
from typing import Union

from .errors import ParseError, RangeError
from .program import Program

MAX_SINGLE_BYTE = 0x7F
NIL_MARKER = 0x80
CONS_BOX_MARKER = 0xFF
MAX_ATOM_SIZE = 0x400000000

# (exclusive upper bound, header length, prefix bits)
_SIZE_HEADERS = (
    (0x40, 1, 0x80),
    (0x2000, 2, 0xC0),
    (0x100000, 3, 0xE0),
    (0x8000000, 4, 0xF0),
    (MAX_ATOM_SIZE, 5, 0xF8),
)


def encode_size_header(size: int) -> bytes:
    """Length prefix for an atom of `size` bytes (not the single byte case)."""
    for bound, length, prefix in _SIZE_HEADERS:
        if size < bound:
            header = bytearray(size.to_bytes(length, "big"))
            header[0] |= prefix
            return bytes(header)
    raise RangeError(
        f"Cannot serialize an atom of {size} bytes: "
        f"17,179,869,184 or more bytes in size.")


def _atom_to_bytes(program: Program) -> bytes:
    atom = program.atom
    if len(atom) == 0:
        return bytes([NIL_MARKER])
    if len(atom) == 1 and atom[0] <= MAX_SINGLE_BYTE:
        return atom
    try:
        header = encode_size_header(len(atom))
    except RangeError as e:
        raise RangeError(f"{e}{program.position_suffix}") from None
    return header + atom


def serialize(program: Program) -> bytes:
    out = io.BytesIO()
    todo = [program]
    while todo:
        node = todo.pop()
        if node.is_pair:
            out.write(bytes([CONS_BOX_MARKER]))
            todo.append(node.rest())
            todo.append(node.first())
        else:
            out.write(_atom_to_bytes(node))
    return out.getvalue()


def serialize_hex(program: Program) -> str:
    return serialize(program).hex()


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------

def _read_exact(f: io.BytesIO, count: int) -> bytes:
    blob = f.read(count)
    if len(blob) != count:
        raise ParseError("Unexpected end of source.")
    return blob


def _atom_from_stream(f: io.BytesIO, b: int) -> Program:
    if b == NIL_MARKER:
        return Program.from_bytes(b"")
    if b <= MAX_SINGLE_BYTE:
        return Program.from_bytes(bytes([b]))
    bit_count = 0
    bit_mask = 0x80
    while b & bit_mask:
        bit_count += 1
        b &= 0xFF ^ bit_mask
        bit_mask >>= 1
    if bit_count > 5:
        raise ParseError(f"Invalid atom size header of {bit_count} bytes.")
    size_blob = bytes([b])
    if bit_count > 1:
        size_blob += _read_exact(f, bit_count - 1)
    size = int.from_bytes(size_blob, "big")
    if size >= MAX_ATOM_SIZE:
        raise ParseError(f"Atom size {size} is too large.")
    return Program.from_bytes(_read_exact(f, size))


_READ = 0
_CONS = 1


def _program_from_stream(f: io.BytesIO) -> Program:
    ops = [_READ]
    values = []
    while ops:
        op = ops.pop()
        if op == _CONS:
            rest = values.pop()
            first = values.pop()
            values.append(Program.cons(first, rest))
            continue
        b = _read_exact(f, 1)[0]
        if b == CONS_BOX_MARKER:
            ops.extend((_CONS, _READ, _READ))
        else:
            values.append(_atom_from_stream(f, b))
    return values[0]


def deserialize(data: bytes) -> Program:
    """Decode one tree from data. Trailing bytes are ignored."""
    if len(data) == 0:
        raise ParseError("Unexpected end of source.")
    return _program_from_stream(io.BytesIO(bytes(data)))


def deserialize_hex(text: str) -> Program:
    try:
        data = bytes.fromhex(text.strip())
    except ValueError as e:
        raise ParseError(f"Invalid hex input: {e}") from None
    return deserialize(data)


def deserialize_hex_file(path: Union[str, Path]) -> Program:
    """Load a program stored as exactly one non-empty line of hex."""
    lines = Path(path).read_text().splitlines()
    non_empty = [line for line in lines if line.strip()]
    if len(non_empty) != 1:
        raise ParseError(
            f"Invalid file input {path}: should include exactly one line of hex, "
            f"found {len(non_empty)}.")
    return deserialize_hex(non_empty[0])
