"""
Scrub — Delete backups whose source repository no longer exists.

Only repositories carrying the "[backup] <url>" description tag are
candidates. A candidate survives if any source host still has a
repository with the same normalized name, or if its name is on the
keep list. Every other candidate is deleted (logged only in dry-run).

Scrub must only run after a successful backup pass; the caller enforces
that ordering.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence

from ..errors import EXIT_OK, EXIT_SCRUB_FAILURE, HostError
from ..hosts.registry import HostRegistry
from ..models.repository import Repository, normalize_name
from ..models.tag import parse_backup_tag

logger = logging.getLogger(__name__)


@dataclass
class ScrubEntry:
    """Backups sharing one normalized name, and whether a source was found."""

    backups: List[Repository] = field(default_factory=list)
    source_urls: List[str] = field(default_factory=list)  # for logging only
    found: bool = False


RunStatus = Dict[str, ScrubEntry]


def build_run_status(
    registry: HostRegistry,
    backup_repositories_by_host: Mapping[str, Sequence[Repository]],
) -> RunStatus:
    """Collect every tagged backup, keyed by normalized name."""
    status: RunStatus = {}

    for backup_host in registry.backups:
        for backup in backup_repositories_by_host.get(backup_host.name, []):
            source_url = parse_backup_tag(backup.description)
            if source_url is None:
                continue

            logger.info(
                f"{backup.web_url} is a backup of {source_url} (as {backup.normalized_name})"
            )
            entry = status.setdefault(backup.normalized_name, ScrubEntry())
            entry.backups.append(backup)
            entry.source_urls.append(source_url)

    return status


def mark_sources(
    status: RunStatus,
    registry: HostRegistry,
    source_repositories_by_host: Mapping[str, Sequence[Repository]],
) -> None:
    for source_host in registry.sources:
        for source in source_repositories_by_host.get(source_host.name, []):
            entry = status.get(source.normalized_name)
            if entry is not None:
                entry.found = True
            else:
                logger.info(f"{source.web_url} has not been backed up yet")


def mark_kept(status: RunStatus, keep_names: Iterable[str]) -> None:
    for name in keep_names:
        entry = status.get(normalize_name(name))
        if entry is not None:
            logger.debug(f"{name} is on the keep list")
            entry.found = True


def scrub(
    registry: HostRegistry,
    backup_repositories_by_host: Mapping[str, Sequence[Repository]],
    source_repositories_by_host: Mapping[str, Sequence[Repository]],
    keep_names: Iterable[str] = (),
    dry_run: bool = False,
) -> int:
    """
    Delete orphaned backups.

    Returns:
        EXIT_OK, or EXIT_SCRUB_FAILURE if any deletion failed
    """
    status = build_run_status(registry, backup_repositories_by_host)
    mark_sources(status, registry, source_repositories_by_host)
    mark_kept(status, keep_names)

    exit_code = EXIT_OK

    for entry in status.values():
        if entry.found:
            continue

        for backup in entry.backups:
            ctx = {"host": backup.host_name, "repository": backup.normalized_name}
            if dry_run:
                logger.warning(f"{backup.web_url} is to be deleted", extra=ctx)
                continue

            try:
                backup.host.delete_repository(backup)
            except HostError as e:
                logger.error(f"{backup.web_url} error: {e.message}", extra=ctx)
                exit_code = EXIT_SCRUB_FAILURE
                continue
            logger.warning(f"{backup.web_url} deleted", extra=ctx)

    return exit_code
