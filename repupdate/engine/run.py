"""
Run — One complete backup and/or scrub pass.

    Discovery → Source Resolution → Backup Reconciliation → (Scrub)

## Usage

    from repupdate.engine.run import RunOptions, run

    code = run(registry, RunOptions(dry_run=True, scrub=True), GitMirror())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from ..errors import EXIT_FATAL, EXIT_OK, FatalDiscoveryError
from ..hosts.registry import HostRegistry
from .diffing import RefMirror
from .discovery import HostRepositories, discover_all
from .reconcile import reconcile
from .resolution import resolve_sources
from .scrub import scrub

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """What the run is allowed to do."""

    dry_run: bool = False
    force: bool = False
    only: List[str] = field(default_factory=list)
    scrub: bool = False
    scrub_only: bool = False
    jobs: int = 1


def _split(
    registry: HostRegistry,
    host_repositories: HostRepositories,
) -> Tuple[HostRepositories, HostRepositories]:
    sources = {h.name: host_repositories.get(h.name, []) for h in registry.sources}
    backups = {h.name: host_repositories.get(h.name, []) for h in registry.backups}
    return sources, backups


def run_backup(registry: HostRegistry, options: RunOptions, mirror: RefMirror) -> int:
    """Discover, resolve sources, reconcile backups."""
    try:
        host_repositories = discover_all(registry, options.only, jobs=options.jobs)
    except FatalDiscoveryError as e:
        logger.error(f"Cannot continue, aborting: {e}")
        return EXIT_FATAL

    sources, backups = _split(registry, host_repositories)
    source_by_name = resolve_sources(sources, mirror)
    logger.info(f"{len(source_by_name)} source repositories to back up")

    return reconcile(
        registry,
        source_by_name,
        backups,
        mirror,
        dry_run=options.dry_run,
        force=options.force,
    )


def run_scrub(registry: HostRegistry, options: RunOptions) -> int:
    """Discover again and delete orphaned backups."""
    try:
        host_repositories = discover_all(registry, options.only, jobs=options.jobs)
    except FatalDiscoveryError as e:
        logger.error(f"Cannot continue, aborting: {e}")
        return EXIT_FATAL

    sources, backups = _split(registry, host_repositories)
    return scrub(
        registry,
        backups,
        sources,
        keep_names=registry.keep_repos,
        dry_run=options.dry_run,
    )


def run(registry: HostRegistry, options: RunOptions, mirror: RefMirror) -> int:
    """Run the passes selected by the options. Returns the process exit code."""
    if options.dry_run:
        logger.info("Dry run: no repository will be created, updated or deleted")

    if options.scrub_only:
        return run_scrub(registry, options)

    code = run_backup(registry, options, mirror)

    if options.scrub:
        if code == EXIT_OK:
            code = run_scrub(registry, options)
        else:
            logger.error("Not continuing with scrub since backup failed")

    return code
