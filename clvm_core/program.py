"""
program.py

Program: the atom/pair tree value
---------------------------------

Every value handled by clvm_core, code or data, is a Program. A Program is
exactly one of:

    atom : an immutable byte string, readable as raw bytes or as a signed
           big-endian integer
    pair : an ordered (first, rest) composition of two Programs

Pairs never copy their children, so subtrees are shared freely between
parents. Nothing mutates first/rest after construction, which keeps every
tree acyclic. The only mutable field is the advisory source position.

Equality compares atoms by integer value (b"\\x00\\x05" == b"\\x05"), except
that the empty atom equals no non-empty atom.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from .casts import int_from_bytes, int_to_bytes
from .errors import ArgumentError, ProgramTypeError

Validator = Callable[["Program"], bool]


@dataclass(frozen=True)
class Position:
    """Source locator (1-based line and column) used only in diagnostics."""
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class Program:
    __slots__ = ("_atom", "_pair", "position", "_hash", "_tree_hash")

    def __init__(self, atom: Optional[bytes] = None,
                 pair: Optional[Tuple["Program", "Program"]] = None):
        if (atom is None) == (pair is None):
            raise ValueError("Program must be exactly one of atom or pair")
        self._atom = bytes(atom) if atom is not None else None
        self._pair = pair
        self.position: Optional[Position] = None
        self._hash: Optional[int] = None
        self._tree_hash: Optional[bytes] = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_bytes(cls, data: bytes) -> "Program":
        return cls(atom=data)

    @classmethod
    def from_hex(cls, text: str) -> "Program":
        return cls(atom=bytes.fromhex(text))

    @classmethod
    def from_int(cls, number: int) -> "Program":
        return cls(atom=int_to_bytes(number))

    @classmethod
    def from_bool(cls, flag: bool) -> "Program":
        return cls(atom=b"\x01" if flag else b"")

    @classmethod
    def from_str(cls, text: str) -> "Program":
        return cls(atom=text.encode("utf-8"))

    @classmethod
    def cons(cls, first: "Program", rest: "Program") -> "Program":
        return cls(pair=(first, rest))

    @classmethod
    def list(cls, items: Sequence["Program"]) -> "Program":
        """Right-fold items into a nil-terminated cons chain."""
        result = NIL
        for item in reversed(items):
            result = cls.cons(item, result)
        return result

    @classmethod
    def parse(cls, source: str) -> "Program":
        from .parser import parse
        return parse(source)

    @classmethod
    def deserialize(cls, data: bytes) -> "Program":
        from .serialize import deserialize
        return deserialize(data)

    @classmethod
    def deserialize_hex(cls, text: str) -> "Program":
        from .serialize import deserialize_hex
        return deserialize_hex(text)

    @classmethod
    def deserialize_hex_file(cls, path) -> "Program":
        from .serialize import deserialize_hex_file
        return deserialize_hex_file(path)

    def at(self, position: Optional[Position]) -> "Program":
        """Attach a source position and return self."""
        self.position = position
        return self

    # ------------------------------------------------------------------
    # Discriminators and accessors
    # ------------------------------------------------------------------

    @property
    def is_atom(self) -> bool:
        return self._atom is not None

    @property
    def is_pair(self) -> bool:
        return self._pair is not None

    @property
    def is_null(self) -> bool:
        return self._atom is not None and len(self._atom) == 0

    @property
    def position_suffix(self) -> str:
        return "" if self.position is None else f" at {self.position}"

    @property
    def atom(self) -> bytes:
        if self._atom is None:
            raise ProgramTypeError(f"Cannot access atom of {self}{self.position_suffix}.")
        return self._atom

    def first(self) -> "Program":
        if self._pair is None:
            raise ProgramTypeError(f"Cannot access first of {self}{self.position_suffix}.")
        return self._pair[0]

    def rest(self) -> "Program":
        if self._pair is None:
            raise ProgramTypeError(f"Cannot access rest of {self}{self.position_suffix}.")
        return self._pair[1]

    def _require_atom(self, kind: str) -> bytes:
        if self._atom is None:
            raise ProgramTypeError(
                f"Cannot convert {self} to {kind} format{self.position_suffix}.")
        return self._atom

    def as_int(self) -> int:
        return int_from_bytes(self._require_atom("int"))

    def as_bool(self) -> bool:
        return len(self._require_atom("boolean")) > 0

    def as_hex(self) -> str:
        return self._require_atom("hex").hex()

    def as_str(self) -> str:
        return self._require_atom("string").decode("utf-8")

    # ------------------------------------------------------------------
    # Equality and hashing
    # ------------------------------------------------------------------

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        todo = [(self, other)]
        while todo:
            a, b = todo.pop()
            if a is b:
                continue
            if a._pair is not None:
                if b._pair is None:
                    return False
                todo.append((a._pair[1], b._pair[1]))
                todo.append((a._pair[0], b._pair[0]))
            elif b._pair is not None:
                return False
            elif (len(a._atom) == 0) != (len(b._atom) == 0):
                return False
            elif int_from_bytes(a._atom) != int_from_bytes(b._atom):
                return False
        return True

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        if self._hash is not None:
            return self._hash
        todo = [self]
        while todo:
            node = todo[-1]
            if node._hash is not None:
                todo.pop()
                continue
            if node._pair is None:
                node._hash = hash(int_from_bytes(node._atom))
                todo.pop()
                continue
            first, rest = node._pair
            pending = [child for child in (rest, first) if child._hash is None]
            if pending:
                todo.extend(pending)
                continue
            node._hash = hash((first._hash, rest._hash))
            todo.pop()
        return self._hash

    def tree_hash(self) -> bytes:
        """sha256 tree hash, computed iteratively and cached on every node."""
        from .tree_hash import ATOM_PREFIX, PAIR_PREFIX, sha256
        if self._tree_hash is not None:
            return self._tree_hash
        todo = [self]
        while todo:
            node = todo[-1]
            if node._tree_hash is not None:
                todo.pop()
                continue
            if node._pair is None:
                node._tree_hash = sha256(ATOM_PREFIX, node._atom)
                todo.pop()
                continue
            first, rest = node._pair
            pending = [child for child in (rest, first) if child._tree_hash is None]
            if pending:
                todo.extend(pending)
                continue
            node._tree_hash = sha256(PAIR_PREFIX, first._tree_hash, rest._tree_hash)
            todo.pop()
        return self._tree_hash

    # ------------------------------------------------------------------
    # Codec and text
    # ------------------------------------------------------------------

    def serialize(self) -> bytes:
        from .serialize import serialize
        return serialize(self)

    def serialize_hex(self) -> str:
        from .serialize import serialize_hex
        return serialize_hex(self)

    def to_source(self, show_keywords: bool = True) -> str:
        from .printer import to_source
        return to_source(self, show_keywords=show_keywords)

    def __str__(self) -> str:
        return self.to_source()

    def __repr__(self) -> str:
        return f"Program({self.to_source()!r})"

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def run(self, args: "Program", options=None):
        """Evaluate self against args. Returns an Output (program, cost)."""
        from .runtime import run_program
        return run_program(self, args, options)

    def curry(self, args: Iterable["Program"]) -> "Program":
        """
        Partially apply self to a fixed prefix of arguments.

        Builds (a (q . self) (c (q . arg1) (c (q . arg2) ... 1))). The
        trailing 1 is the environment path to the outer arguments, so the
        curried program receives (arg1 arg2 ... . outer-args).
        """
        from .keywords import KEYWORDS
        quote = Program.from_int(KEYWORDS["q"])
        current = quote
        for argument in reversed(list(args)):
            current = Program.list([
                Program.from_int(KEYWORDS["c"]),
                Program.cons(quote, argument),
                current,
            ])
        return Program.list([
            Program.from_int(KEYWORDS["a"]),
            Program.cons(quote, self),
            current,
        ])

    # ------------------------------------------------------------------
    # List decoding
    # ------------------------------------------------------------------

    def to_list(self, minimum: Optional[int] = None, maximum: Optional[int] = None,
                size: Optional[int] = None, suffix: Optional[str] = None,
                validator: Optional[Validator] = None,
                type_name: Optional[str] = None) -> List["Program"]:
        """
        Walk a right-nested cons chain and return its elements.

        A non-nil atom terminator is accepted but not included. Each element
        is checked with validator, and the element count against size,
        minimum and maximum (in that order). Failures raise ArgumentError.
        """
        suffix_text = f" {suffix}" if suffix is not None else ""
        result: List[Program] = []
        current = self
        while current._pair is not None:
            item = current._pair[0]
            if validator is not None and not validator(item):
                raise ArgumentError(
                    f"Expected type {type_name} for argument {len(result) + 1}"
                    f"{suffix_text}{item.position_suffix}.",
                    index=len(result) + 1, suffix=suffix, position=item.position)
            result.append(item)
            current = current._pair[1]
        if size is not None and len(result) != size:
            raise ArgumentError(
                f"Expected {size} arguments{suffix_text}{self.position_suffix}.",
                suffix=suffix, position=self.position)
        if minimum is not None and len(result) < minimum:
            raise ArgumentError(
                f"Expected at least {minimum} arguments{suffix_text}{self.position_suffix}.",
                suffix=suffix, position=self.position)
        if maximum is not None and len(result) > maximum:
            raise ArgumentError(
                f"Expected at most {maximum} arguments{suffix_text}{self.position_suffix}.",
                suffix=suffix, position=self.position)
        return result

    def to_atom_list(self, minimum=None, maximum=None, size=None, suffix=None) -> List["Program"]:
        return self.to_list(minimum, maximum, size, suffix,
                            validator=lambda arg: arg.is_atom, type_name="atom")

    def to_bool_list(self, minimum=None, maximum=None, size=None, suffix=None) -> List[bool]:
        items = self.to_list(minimum, maximum, size, suffix,
                             validator=lambda arg: arg.is_atom, type_name="boolean")
        return [not item.is_null for item in items]

    def to_pair_list(self, minimum=None, maximum=None, size=None, suffix=None) -> List["Program"]:
        return self.to_list(minimum, maximum, size, suffix,
                            validator=lambda arg: arg.is_pair, type_name="cons")

    def to_int_list(self, minimum=None, maximum=None, size=None, suffix=None) -> List[int]:
        # machine-sized integers only: at most 8 bytes of two's complement
        items = self.to_list(minimum, maximum, size, suffix,
                             validator=lambda arg: arg.is_atom and len(arg.atom) <= 8,
                             type_name="int")
        return [item.as_int() for item in items]

    def to_big_int_list(self, minimum=None, maximum=None, size=None, suffix=None) -> List[int]:
        items = self.to_list(minimum, maximum, size, suffix,
                             validator=lambda arg: arg.is_atom, type_name="bigint")
        return [item.as_int() for item in items]


NIL = Program.from_bytes(b"")
