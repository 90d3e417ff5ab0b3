"""
Line-level diff (longest common subsequence).

Used to show both documents pretty-printed, with `- ` lines that only the
expected side has and `+ ` lines that only the actual side has.
"""

from dataclasses import dataclass
from enum import Enum


class LineOp(str, Enum):
    EQUAL = "equal"
    DELETE = "delete"   # expected only
    INSERT = "insert"   # actual only


@dataclass(frozen=True)
class DiffLine:
    op: LineOp
    text: str


def diff_lines(expected: list[str], actual: list[str]) -> list[DiffLine]:
    """
    Diff two line sequences.

    O(m*n) table of LCS lengths, then a backtrack from the bottom-right
    cell. At each step: equal lines are kept; otherwise an insertion is
    taken unless dropping the expected line keeps a strictly longer common
    subsequence.

    Returns:
        Operations in original line order
    """
    m, n = len(expected), len(actual)

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if expected[i - 1] == actual[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])

    ops: list[DiffLine] = []
    i, j = m, n
    while i > 0 or j > 0:
        if i > 0 and j > 0 and expected[i - 1] == actual[j - 1]:
            ops.append(DiffLine(LineOp.EQUAL, expected[i - 1]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or dp[i][j - 1] >= dp[i - 1][j]):
            ops.append(DiffLine(LineOp.INSERT, actual[j - 1]))
            j -= 1
        else:
            ops.append(DiffLine(LineOp.DELETE, expected[i - 1]))
            i -= 1

    ops.reverse()
    return ops


def apply_diff(ops: list[DiffLine]) -> list[str]:
    """Rebuild the actual side: keep equal and inserted lines, drop deleted ones."""
    return [op.text for op in ops if op.op is not LineOp.DELETE]


def original_lines(ops: list[DiffLine]) -> list[str]:
    """Rebuild the expected side."""
    return [op.text for op in ops if op.op is not LineOp.INSERT]
