import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from clvm_core import NIL, Program


class TestCurry(unittest.TestCase):

    def setUp(self):
        self.code = Program.parse("(+ 2 5)")

    def test_curried_matches_direct_run(self):
        args = [Program.from_int(3), Program.from_int(4)]
        curried = self.code.curry(args).run(NIL)
        direct = self.code.run(Program.list(args))
        self.assertEqual(curried.program, direct.program)
        self.assertEqual(curried.program, Program.from_int(7))
        self.assertGreater(curried.cost, direct.cost)

    def test_partial_application(self):
        curried = self.code.curry([Program.from_int(3)])
        self.assertEqual(curried.run(Program.parse("(4)")).program, Program.from_int(7))

    def test_shape(self):
        curried = Program.parse("1").curry([Program.from_int(5)])
        self.assertEqual(str(curried), "(a (q . 1) (c (q . 5) 1))")

    def test_no_arguments(self):
        curried = self.code.curry([])
        self.assertEqual(str(curried), "(a (q 16 2 5) 1)")
        self.assertEqual(curried.run(Program.parse("(3 4)")).program, Program.from_int(7))

    def test_matches_textual_wrapper(self):
        args = [Program.from_int(3), Program.parse("(1 2)")]
        curried = self.code.curry(args)
        text = f"(a (q . {self.code}) (c (q . {args[0]}) (c (q . {args[1]}) 1)))"
        self.assertEqual(curried, Program.parse(text))
        self.assertEqual(Program.parse(str(curried)), curried)

    def test_code_is_not_evaluated(self):
        failing = Program.parse("(x)")
        curried = failing.curry([Program.from_int(1)])
        self.assertEqual(curried.rest().first().rest(), failing)

    def test_tree_hash_stable(self):
        a = self.code.curry([Program.from_int(3)])
        b = Program.parse("(+ 2 5)").curry([Program.from_int(3)])
        self.assertEqual(a.tree_hash(), b.tree_hash())


if __name__ == "__main__":
    unittest.main()
