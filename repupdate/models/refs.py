"""
Ref Differences — Compare the branch state of two repositories.

A ref state maps branch name to commit sha. Comparing two of them
yields a DifferenceState: one BranchDifference per branch that is not
identical on both sides. An empty DifferenceState means the two
repositories are at the same revision.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

MISSING_LEFT = "missing_left"
MISSING_RIGHT = "missing_right"
DIFFERS = "differs"


@dataclass(frozen=True)
class BranchDifference:
    """Commit pointer of one branch on each side (None = branch absent)."""

    left: Optional[str]
    right: Optional[str]

    @property
    def kind(self) -> str:
        if self.left is None:
            return MISSING_LEFT
        if self.right is None:
            return MISSING_RIGHT
        return DIFFERS

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"kind": self.kind, "left": self.left, "right": self.right}


DifferenceState = Dict[str, BranchDifference]


def compare_ref_states(
    left: Mapping[str, str],
    right: Mapping[str, str],
) -> DifferenceState:
    """Return the per-branch differences between two ref states, sorted by branch."""
    differences: DifferenceState = {}

    for branch in sorted(set(left) | set(right)):
        left_sha = left.get(branch)
        right_sha = right.get(branch)
        if left_sha != right_sha:
            differences[branch] = BranchDifference(left=left_sha, right=right_sha)

    return differences
