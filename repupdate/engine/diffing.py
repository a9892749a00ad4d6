"""
Diffing — Compare two repositories and report divergence in the log.
"""

from __future__ import annotations

import logging
from typing import Protocol

import yaml

from ..errors import GitCommandError
from ..models.refs import DifferenceState
from ..models.repository import Repository

logger = logging.getLogger(__name__)


class RefDiffer(Protocol):
    def find_differences(self, left: Repository, right: Repository) -> DifferenceState: ...


class RefMirror(RefDiffer, Protocol):
    def push(self, source: Repository, destination: Repository) -> bool: ...


def format_differences(state: DifferenceState) -> str:
    """YAML rendering of a DifferenceState for the log."""
    return yaml.safe_dump(
        {"differences": {branch: diff.to_dict() for branch, diff in state.items()}},
        default_flow_style=False,
        sort_keys=False,
    ).rstrip()


def diverges(differ: RefDiffer, ref: Repository, other: Repository) -> bool:
    """
    True if the two repositories are not at the same revision.

    A failed comparison counts as divergence.
    """
    try:
        state = differ.find_differences(ref, other)
    except GitCommandError as e:
        logger.error(
            f"On {ref.name}: cannot compare {ref.host_name} and {other.host_name}: {e}"
        )
        return True

    if not state:
        return False

    logger.warning(
        f"On {ref.name}: differing branch state between "
        f"{ref.host_name} and {other.host_name}"
    )
    logger.info(format_differences(state))
    return True
