"""
clvm_core/tree_hash.py - Structural content hash ("tree hash", puzzle hash)

    H(atom) = sha256(0x01 || atom bytes)
    H(pair) = sha256(0x02 || H(first) || H(rest))

Atoms hash their raw bytes, so two atoms that compare equal by integer value
but differ in padding have different tree hashes. The digest is cached on
each node since Programs are immutable.
"""

import hashlib

from .program import Program

ATOM_PREFIX = b"\x01"
PAIR_PREFIX = b"\x02"


def sha256(*chunks: bytes) -> bytes:
    h = hashlib.sha256()
    for chunk in chunks:
        h.update(chunk)
    return h.digest()


def tree_hash(program: Program) -> bytes:
    return program.tree_hash()
