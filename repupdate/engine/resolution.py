"""
Source Resolution — Elect one authoritative copy per repository.

Source repositories are grouped by normalized name. When a group has
several members, the first discovered one is compared against each of
the others. If they all agree it stays authoritative; if any comparison
shows a difference, the member on the host with the highest priority is
elected instead (ties go to the host listed first).
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Sequence

from ..models.repository import Repository
from .diffing import RefDiffer, diverges

logger = logging.getLogger(__name__)


def group_by_name(
    source_repositories_by_host: Mapping[str, Sequence[Repository]],
) -> Dict[str, List[Repository]]:
    """Normalized name → repositories, in host order then listing order."""
    groups: Dict[str, List[Repository]] = {}
    for repositories in source_repositories_by_host.values():
        for repository in repositories:
            groups.setdefault(repository.normalized_name, []).append(repository)
    return groups


def elect(group: Sequence[Repository], differ: RefDiffer) -> Repository:
    """Pick the authoritative member of one group."""
    reference = group[0]
    if len(group) == 1:
        return reference

    unmatch_count = 0
    for other in group[1:]:
        if diverges(differ, reference, other):
            unmatch_count += 1

    if unmatch_count == 0:
        logger.info(f"All source repositories for {reference.name} are at the same revision.")
        return reference

    # max() keeps the first of equal priorities, i.e. host order
    winner = max(group, key=lambda r: r.host.priority)
    logger.warning(
        f"On {winner.name}: differences were found between source repositories. "
        f"Using {winner.host_name} as a source."
    )
    return winner


def resolve_sources(
    source_repositories_by_host: Mapping[str, Sequence[Repository]],
    differ: RefDiffer,
) -> Dict[str, Repository]:
    """Normalized name → authoritative source repository."""
    return {
        name: elect(group, differ)
        for name, group in group_by_name(source_repositories_by_host).items()
    }
