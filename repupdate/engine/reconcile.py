"""
Backup Reconciliation — Bring every backup host up to date.

For each authoritative source repository and each backup host:

1. Find the backup with the same normalized name, or create it
2. Compare refs; any difference means an update is required
3. Repair the "[backup] <url>" description if it drifted
4. Push all refs from the source when an update is required

Failures are per (repository, backup host) pair: they are logged, turn
the exit code into EXIT_PARTIAL_FAILURE, and the sweep continues.

Dry-run performs and logs every decision but makes no mutating call.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from ..errors import EXIT_OK, EXIT_PARTIAL_FAILURE, HostError
from ..hosts.base import Host
from ..hosts.registry import HostRegistry
from ..models.repository import Repository
from ..models.tag import backup_description
from .diffing import RefMirror, diverges

logger = logging.getLogger(__name__)


def find_backup(
    backups: Sequence[Repository],
    normalized_name: str,
) -> Optional[Repository]:
    """The backup repository matching a normalized name, if any."""
    return next((b for b in backups if b.normalized_name == normalized_name), None)


def reconcile_one(
    source: Repository,
    normalized_name: str,
    backup_host: Host,
    backups: Sequence[Repository],
    mirror: RefMirror,
    dry_run: bool = False,
    force: bool = False,
) -> int:
    """Reconcile one source repository with one backup host. Returns an exit code."""
    exit_code = EXIT_OK
    description = backup_description(source.web_url)
    should_update = force
    ctx = {"host": backup_host.name, "repository": normalized_name}

    backup = find_backup(backups, normalized_name)

    if backup is not None:
        if diverges(mirror, source, backup):
            should_update = True
    else:
        logger.warning(
            f"{source.name} ({normalized_name}) is missing from {backup_host.name}",
            extra=ctx,
        )
        should_update = True

        logger.info(f"Creating repository {source.name} on {backup_host.name}", extra=ctx)
        if not dry_run:
            try:
                backup = backup_host.create_repository(source.name, description)
            except HostError as e:
                logger.error(
                    f"Creating {source.name} on {backup_host.name} failed: {e.message}",
                    extra=ctx,
                )
                return EXIT_PARTIAL_FAILURE
            logger.info(f"Created {backup.web_url}", extra=ctx)

    if backup is not None and backup.description != description:
        logger.info(f"Updating {backup.web_url} description", extra=ctx)
        if not dry_run:
            try:
                backup_host.update_description(backup, description)
            except HostError as e:
                logger.error(
                    f"Updating {backup.web_url} description failed: {e.message}",
                    extra=ctx,
                )
                exit_code = EXIT_PARTIAL_FAILURE

    if not should_update:
        logger.debug(f"{source.name} is up to date on {backup_host.name}", extra=ctx)
        return exit_code

    logger.info(f"Updating {source.name} on {backup_host.name}", extra=ctx)
    if not dry_run:
        if not mirror.push(source, backup):
            logger.error(f"Updating {source.name} on {backup_host.name} failed", extra=ctx)
            exit_code = EXIT_PARTIAL_FAILURE

    return exit_code


def reconcile(
    registry: HostRegistry,
    source_by_name: Mapping[str, Repository],
    backup_repositories_by_host: Mapping[str, Sequence[Repository]],
    mirror: RefMirror,
    dry_run: bool = False,
    force: bool = False,
) -> int:
    """
    Reconcile all sources against all backup hosts.

    Returns:
        EXIT_OK if every pair succeeded, EXIT_PARTIAL_FAILURE otherwise
    """
    exit_code = EXIT_OK

    for normalized_name, source in source_by_name.items():
        for backup_host in registry.backups:
            code = reconcile_one(
                source,
                normalized_name,
                backup_host,
                backup_repositories_by_host.get(backup_host.name, []),
                mirror,
                dry_run=dry_run,
                force=force,
            )
            if code != EXIT_OK:
                exit_code = EXIT_PARTIAL_FAILURE

    return exit_code
