import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from clvm_core import ArgumentError, NIL, Position, Program


class TestToList(unittest.TestCase):

    def test_exact_size(self):
        self.assertEqual(Program.parse("(1 2 3)").to_int_list(size=3), [1, 2, 3])

    def test_size_mismatch(self):
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("(1 2 3)").to_int_list(size=2)
        self.assertIsNone(cm.exception.index)
        self.assertIn("Expected 2 arguments", str(cm.exception))

    def test_minimum(self):
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("(1 2 3)").to_int_list(minimum=4)
        self.assertIn("at least 4", str(cm.exception))
        self.assertEqual(Program.parse("(1 2 3)").to_int_list(minimum=3), [1, 2, 3])

    def test_maximum(self):
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("(1 2 3)").to_int_list(maximum=2)
        self.assertIn("at most 2", str(cm.exception))

    def test_element_type_failure_reports_position(self):
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("(1 (2) 3)").to_int_list()
        err = cm.exception
        self.assertEqual(err.index, 2)
        self.assertEqual(err.position, Position(1, 4))
        self.assertIn("Expected type int for argument 2", str(err))
        self.assertIn("at 1:4", str(err))

    def test_suffix(self):
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("(1 2 3)").to_atom_list(size=2, suffix="in foo")
        self.assertEqual(cm.exception.suffix, "in foo")
        self.assertIn("Expected 2 arguments in foo", str(cm.exception))

    def test_non_nil_terminator_is_dropped(self):
        items = Program.parse("(1 2 . 3)").to_list()
        self.assertEqual(items, [Program.from_int(1), Program.from_int(2)])

    def test_atom_is_empty_list(self):
        self.assertEqual(NIL.to_list(), [])
        self.assertEqual(Program.from_int(5).to_list(), [])

    def test_custom_validator(self):
        even = lambda p: p.is_atom and p.as_int() % 2 == 0
        self.assertEqual(len(Program.parse("(2 4 6)").to_list(validator=even, type_name="even")), 3)
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("(2 5 6)").to_list(validator=even, type_name="even")
        self.assertIn("Expected type even for argument 2", str(cm.exception))


class TestSpecializations(unittest.TestCase):

    def test_atom_list(self):
        self.assertEqual(len(Program.parse('(1 "abc" ())').to_atom_list()), 3)
        with self.assertRaises(ArgumentError):
            Program.parse("(1 (2))").to_atom_list()

    def test_bool_list(self):
        self.assertEqual(Program.parse("(() 1 0x00)").to_bool_list(), [False, True, True])

    def test_pair_list(self):
        items = Program.parse("((1) (2 3))").to_pair_list(size=2)
        self.assertEqual(items[1].to_int_list(), [2, 3])
        with self.assertRaises(ArgumentError) as cm:
            Program.parse("((1) 2)").to_pair_list()
        self.assertEqual(cm.exception.index, 2)

    def test_int_list_is_machine_sized(self):
        big = Program.list([Program.from_int(2 ** 80)])
        with self.assertRaises(ArgumentError):
            big.to_int_list()
        self.assertEqual(big.to_big_int_list(), [2 ** 80])

    def test_int_list_signed(self):
        self.assertEqual(Program.parse("(-1 -128 300)").to_int_list(), [-1, -128, 300])


if __name__ == "__main__":
    unittest.main()
