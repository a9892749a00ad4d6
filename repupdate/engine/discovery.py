"""
Discovery — Fetch the repository list of every configured host.

A backup host that cannot be listed aborts the run: without a complete
view of the backups, reconciliation could create duplicates and scrub
could delete the wrong repositories. A source host that cannot be listed
is treated as having no repositories.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Collection, Dict, List, Optional

from ..config.models import BACKUP
from ..errors import FatalDiscoveryError, HostError
from ..hosts.base import Host
from ..hosts.registry import HostRegistry
from ..models.repository import Repository

logger = logging.getLogger(__name__)

HostRepositories = Dict[str, List[Repository]]


def fetch_host_repositories(host: Host) -> List[Repository]:
    """
    List one host, applying the failure policy of its role.

    Raises:
        FatalDiscoveryError: the host is a backup host and listing failed
    """
    logger.info(f"Fetching {host.name} repositories...")
    try:
        return host.list_repositories()
    except HostError as e:
        logger.error(f"{host.name}: failed to fetch repositories: {e.message}")
        if host.use_as == BACKUP:
            raise FatalDiscoveryError(host.name, e) from e
        logger.warning(f"{host.name}: continuing as if it had no repositories")
        return []


def discover_all(
    registry: HostRegistry,
    name_filter: Optional[Collection[str]] = None,
    jobs: int = 1,
) -> HostRepositories:
    """
    Repositories of every host, keyed by host name in configuration order.

    Args:
        registry: Configured hosts
        name_filter: If non-empty, keep only repositories whose raw name is in it
        jobs: Number of hosts listed concurrently

    Raises:
        FatalDiscoveryError: a backup host could not be listed
    """
    only = set(name_filter or ())
    hosts = list(registry.hosts.values())

    if jobs > 1 and len(hosts) > 1:
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="discovery") as pool:
            futures = [pool.submit(fetch_host_repositories, host) for host in hosts]
            # Collect in host order so the first fatal error wins deterministically
            listings = [future.result() for future in futures]
    else:
        listings = [fetch_host_repositories(host) for host in hosts]

    result: HostRepositories = {}
    for host, repositories in zip(hosts, listings):
        if only:
            repositories = [r for r in repositories if r.name in only]
        result[host.name] = list(repositories)
        logger.debug(f"{host.name}: {len(result[host.name])} repositories considered")

    return result
