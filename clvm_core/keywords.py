"""
clvm_core Keyword Table (Single Source of Truth)

Bidirectional mapping between operator mnemonics and their integer codes.
Both the printer and the parser MUST import from this module so that
printing and parsing stay exact inverses.

Codes follow the standard clvm operator numbering. Codes without a
mnemonic (0, 15, 28, 31, 35) print structurally.
"""

from typing import Dict, Optional

# Core language (quote, apply, if, cons, first, rest, listp, raise, eq)
CORE_KEYWORDS = {
    "q": 0x01, "a": 0x02, "i": 0x03, "c": 0x04, "f": 0x05,
    "r": 0x06, "l": 0x07, "x": 0x08, "=": 0x09,
}

# Byte string operators
STRING_KEYWORDS = {
    ">s": 0x0A, "sha256": 0x0B, "substr": 0x0C, "strlen": 0x0D, "concat": 0x0E,
}

# Arithmetic and bitwise operators
ARITH_KEYWORDS = {
    "+": 0x10, "-": 0x11, "*": 0x12, "/": 0x13, "divmod": 0x14, ">": 0x15,
    "ash": 0x16, "lsh": 0x17, "logand": 0x18, "logior": 0x19, "logxor": 0x1A,
    "lognot": 0x1B,
}

# Curve operators (no handler in the core set)
CURVE_KEYWORDS = {
    "point_add": 0x1D, "pubkey_for_exp": 0x1E,
}

# Boolean operators
BOOL_KEYWORDS = {
    "not": 0x20, "any": 0x21, "all": 0x22,
}

MISC_KEYWORDS = {
    "softfork": 0x24,
}

KEYWORDS: Dict[str, int] = {
    **CORE_KEYWORDS,
    **STRING_KEYWORDS,
    **ARITH_KEYWORDS,
    **CURVE_KEYWORDS,
    **BOOL_KEYWORDS,
    **MISC_KEYWORDS,
}

KEYWORD_NAMES: Dict[int, str] = {code: name for name, code in KEYWORDS.items()}


def keyword_for(code: int) -> Optional[str]:
    """Mnemonic for an operator code, or None when the code has none."""
    return KEYWORD_NAMES.get(code)


def code_for(name: str) -> Optional[int]:
    """Operator code for a mnemonic, or None when the name is not a keyword."""
    return KEYWORDS.get(name)
