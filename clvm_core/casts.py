"""
clvm_core/casts.py

Conversions between atoms and integers.

Atoms are read as big-endian two's complement signed integers. Encoding
always produces the minimal byte string, so int_from_bytes(int_to_bytes(v))
== v for every integer and int_to_bytes(int_from_bytes(b)) == b for every
minimally encoded b.
"""


def int_from_bytes(blob: bytes) -> int:
    if len(blob) == 0:
        return 0
    return int.from_bytes(blob, "big", signed=True)


def int_to_bytes(v: int) -> bytes:
    if v == 0:
        return b""
    byte_count = (v.bit_length() + 8) >> 3
    r = v.to_bytes(byte_count, "big", signed=True)
    # strip redundant sign bytes
    while len(r) > 1 and r[0] == (0xFF if r[1] & 0x80 else 0):
        r = r[1:]
    return r


def is_canonical_int(blob: bytes) -> bool:
    """True when blob is the minimal encoding of the integer it represents."""
    return int_to_bytes(int_from_bytes(blob)) == blob


def limbs_for_int(v: int) -> int:
    """Number of bytes needed to represent v, ignoring the sign bit."""
    if v == 0:
        return 0
    return (v.bit_length() + 7) >> 3
