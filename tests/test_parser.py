import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from clvm_core import KEYWORDS, NIL, ParseError, Position, Program
from clvm_core.parser import parse
from clvm_core.printer import to_source


class TestParse(unittest.TestCase):

    def test_integers(self):
        self.assertEqual(parse("0").atom, b"")
        self.assertEqual(parse("5").atom, b"\x05")
        self.assertEqual(parse("-1").atom, b"\xff")
        self.assertEqual(parse("+128").atom, b"\x00\x80")

    def test_hex(self):
        self.assertEqual(parse("0x00ff").atom, b"\x00\xff")
        self.assertEqual(parse("0xabc").atom, b"\x0a\xbc")
        self.assertEqual(parse("0x").atom, b"")

    def test_strings(self):
        self.assertEqual(parse('"hello"').atom, b"hello")
        self.assertEqual(parse("'say \"hi\"'").atom, b'say "hi"')
        self.assertEqual(parse('"a;b (c)"').atom, b"a;b (c)")

    def test_keywords(self):
        self.assertEqual(parse("q"), Program.from_int(KEYWORDS["q"]))
        self.assertEqual(parse("sha256"), Program.from_int(0x0B))
        self.assertEqual(parse("(+ 1 2)").first(), Program.from_int(0x10))

    def test_lists(self):
        self.assertTrue(parse("()").is_null)
        program = parse("(1 2 3)")
        self.assertEqual(program.to_int_list(), [1, 2, 3])
        dotted = parse("(1 2 . 3)")
        self.assertEqual(dotted.rest().rest(), Program.from_int(3))
        self.assertEqual(parse("(1 . 2)"), Program.cons(Program.from_int(1), Program.from_int(2)))

    def test_comments_and_whitespace(self):
        self.assertEqual(parse("(+ 1 ; one\n\t 2) ; trailing"), parse("(+ 1 2)"))

    def test_positions(self):
        program = parse("(+ 1\n  2)")
        self.assertEqual(program.position, Position(1, 1))
        self.assertEqual(program.rest().first().position, Position(1, 4))
        self.assertEqual(program.rest().rest().first().position, Position(2, 3))

    def test_malformed(self):
        for text in ["", "   ", "(1 2", "1 2", ")", "(1 . )", "(. 1)", "1.5", '"open']:
            with self.assertRaises(ParseError, msg=repr(text)):
                parse(text)

    def test_unknown_symbol(self):
        self.assertEqual(parse("foo"), Program.from_str("foo"))
        program = parse("(foo 1)")
        self.assertEqual(program.first().atom, b"foo")
        self.assertEqual(program.first().position, Position(1, 2))
        self.assertEqual(parse("(q . bar)").rest().atom, b"bar")


class TestPrint(unittest.TestCase):

    def test_atoms(self):
        self.assertEqual(to_source(NIL), "()")
        self.assertEqual(to_source(Program.from_int(5)), "5")
        self.assertEqual(to_source(Program.from_int(-1)), "-1")
        self.assertEqual(to_source(Program.from_int(300)), "300")
        self.assertEqual(to_source(Program.from_bytes(b"\x00")), "0x00")
        self.assertEqual(to_source(Program.from_bytes(b"\x00\x05")), "0x0005")

    def test_strings(self):
        self.assertEqual(to_source(Program.from_str("hello")), '"hello"')
        self.assertEqual(to_source(Program.from_str('say "hi"')), "'say \"hi\"'")
        self.assertEqual(to_source(Program.from_str("it's \"x\"")), "0x" + "it's \"x\"".encode().hex())

    def test_short_strings_print_as_integers(self):
        self.assertEqual(to_source(Program.from_str("ab")), str(0x6162))

    def test_non_text_prints_as_hex(self):
        self.assertEqual(to_source(Program.from_bytes(b"\xff\xfe\xfd")), "0xfffefd")
        self.assertEqual(to_source(Program.from_bytes(b"\x00\x01\x02")), "0x000102")

    def test_pairs(self):
        self.assertEqual(str(parse("(q . 1)")), "(q . 1)")
        self.assertEqual(str(parse("(100 200 . 300)")), "(100 200 . 300)")
        self.assertEqual(str(Program.list([NIL, Program.from_int(1)])), "(() 1)")
        self.assertEqual(str(parse("((1 2) 3)")), "((q 2) 3)")

    def test_keywords_toggle(self):
        program = parse("(+ 1 2)")
        self.assertEqual(program.to_source(), "(+ 1 2)")
        self.assertEqual(program.to_source(show_keywords=False), "(16 1 2)")

    def test_only_head_uses_keywords(self):
        self.assertEqual(str(parse("(100 1 2)")), "(100 1 2)")
        self.assertEqual(str(parse("(1 + 2)")), "(q 16 2)")
        self.assertEqual(str(parse("(q . (+ 2 5))")), "(q 16 2 5)")

    def test_repr(self):
        self.assertEqual(repr(parse("(q . 1)")), "Program('(q . 1)')")


class TestRoundTrip(unittest.TestCase):

    SAMPLES = [
        "()", "0", "1", "-1", "127", "128", "-129", "0x00", "0x0005", "0xfffefd",
        '"hello world"', "'a \"quoted\" word'",
        "(q . 1)", "(+ 2 5)", "(a (q . (+ 2 5)) (c (q . 3) (c (q . 4) 1)))",
        "(100 200 . 300)", "((1 2) (3 4) . 5)", "(() () ())",
        "(i (= 2 (q . 1)) (q . \"yes\") (q . \"no\"))",
    ]

    def test_print_then_parse(self):
        for text in self.SAMPLES:
            program = parse(text)
            self.assertEqual(parse(str(program)), program, text)

    def test_parse_of_printed_values(self):
        values = [
            Program.from_bytes(bytes(range(n))) for n in range(0, 6)
        ] + [
            Program.from_bytes(b"\x80"),
            Program.from_bytes(b"\x00\x80"),
            Program.from_bytes(b"\xff\xff"),
            Program.from_str("text with spaces"),
            Program.list([Program.from_int(KEYWORDS["c"]), Program.from_str("xyz"), NIL]),
        ]
        for value in values:
            printed = str(value)
            self.assertEqual(parse(printed), value, printed)
            self.assertEqual(str(parse(printed)), printed)


if __name__ == "__main__":
    unittest.main()
