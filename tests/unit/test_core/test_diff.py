"""
test_diff.py - line diff (LCS)
"""

from docmatch.core.diff import DiffLine, LineOp, apply_diff, diff_lines, original_lines


class TestDiffLines:

    def test_single_substitution(self):
        ops = diff_lines(["a", "b", "c"], ["a", "x", "c"])
        assert ops == [
            DiffLine(LineOp.EQUAL, "a"),
            DiffLine(LineOp.DELETE, "b"),
            DiffLine(LineOp.INSERT, "x"),
            DiffLine(LineOp.EQUAL, "c"),
        ]

    def test_identical(self):
        ops = diff_lines(["a", "b"], ["a", "b"])
        assert all(op.op is LineOp.EQUAL for op in ops)

    def test_empty_expected(self):
        assert diff_lines([], ["a", "b"]) == [
            DiffLine(LineOp.INSERT, "a"),
            DiffLine(LineOp.INSERT, "b"),
        ]

    def test_empty_actual(self):
        assert diff_lines(["a"], []) == [DiffLine(LineOp.DELETE, "a")]

    def test_both_empty(self):
        assert diff_lines([], []) == []

    def test_insertion_in_middle(self):
        ops = diff_lines(["a", "c"], ["a", "b", "c"])
        assert [op.op for op in ops] == [LineOp.EQUAL, LineOp.INSERT, LineOp.EQUAL]


class TestRebuild:

    def test_both_sides_recovered(self):
        expected = ["{", '  "a": 1,', '  "b": 2', "}"]
        actual = ["{", '  "a": 1,', '  "c": 3', "}", ""]
        ops = diff_lines(expected, actual)
        assert original_lines(ops) == expected
        assert apply_diff(ops) == actual
