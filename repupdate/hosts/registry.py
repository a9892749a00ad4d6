"""
Host Registry — Configured hosts grouped by role.

Holds every host of the run in configuration order, plus the list of
repository names that scrub must never delete. Read-only once built.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Type

from ..config.models import BACKUP, SOURCE, HostDefinition, HostsConfig
from ..errors import ConfigError
from ..models.repository import normalize_name
from .base import Host
from .github import GitHubHost
from .gitlab import GitLabHost

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[Host]] = {
    "github": GitHubHost,
    "gitlab": GitLabHost,
}


def build_host(name: str, definition: HostDefinition) -> Host:
    """Instantiate the provider client for one host definition."""
    provider = PROVIDERS.get(definition.type)
    if provider is None:
        raise ConfigError(f"{name}: unknown host type '{definition.type}'")

    token = definition.resolve_token()
    if not token:
        logger.warning(f"{name}: no token configured, API calls will be anonymous")

    common = dict(
        name=name,
        use_as=definition.use_as,
        priority=definition.priority,
        token=token,
        api_url=definition.api_url,
        private=definition.private,
        timeout=definition.timeout,
    )

    if provider is GitHubHost:
        return GitHubHost(organization=definition.organization, **common)
    return GitLabHost(
        group=definition.group,
        namespace_id=definition.namespace_id,
        **common,
    )


class HostRegistry:
    """Hosts by name, in configuration order."""

    def __init__(self, hosts: Iterable[Host], keep_repos: Iterable[str] = ()):
        self.hosts: Dict[str, Host] = {}
        for host in hosts:
            self.register(host)
        self.keep_repos: List[str] = [normalize_name(n) for n in keep_repos]

    @classmethod
    def from_config(cls, config: HostsConfig) -> "HostRegistry":
        """Build all hosts described by a loaded config."""
        hosts = [build_host(name, definition) for name, definition in config.hosts.items()]
        registry = cls(hosts, config.keep)

        logger.info(
            f"Configured {len(registry.sources)} source and "
            f"{len(registry.backups)} backup host(s)"
        )
        return registry

    def register(self, host: Host) -> None:
        if host.name in self.hosts:
            raise ConfigError(f"Duplicate host name: {host.name}")
        self.hosts[host.name] = host

    def get(self, name: str) -> Optional[Host]:
        return self.hosts.get(name)

    def hosts_by_use(self, use_as: str) -> List[Host]:
        return [h for h in self.hosts.values() if h.use_as == use_as]

    @property
    def sources(self) -> List[Host]:
        return self.hosts_by_use(SOURCE)

    @property
    def backups(self) -> List[Host]:
        return self.hosts_by_use(BACKUP)
