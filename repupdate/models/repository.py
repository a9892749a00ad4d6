"""
Repository Model — A repository as seen on one host during one run.

Repositories are read-only snapshots built by host clients at discovery
time. Actions on them (create, describe, delete) go through the owning
host, never through the value itself.

The normalized name is the join key between hosts: two repositories on
different hosts are "the same" repository if and only if their
normalized names are equal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ..hosts.base import Host

_WHITESPACE = re.compile(r"\s+")
_GIT_SUFFIX = ".git"


def normalize_name(raw: str) -> str:
    """
    Normalize a raw repository name into its cross-host key.

    "Owner/My-Repo.git", "my-repo" and "group/sub/MY-REPO/" all
    normalize to "my-repo". Total and idempotent.
    """
    name = (raw or "").strip().rstrip("/")
    name = name.rsplit("/", 1)[-1].lower()

    # "foo.git.git" and "foo.git " must both end up as "foo"
    while True:
        name = name.strip()
        if not name.endswith(_GIT_SUFFIX):
            break
        name = name[: -len(_GIT_SUFFIX)]

    return _WHITESPACE.sub("-", name)


@dataclass(frozen=True)
class Repository:
    """A repository on a single host."""

    host: "Host" = field(repr=False, compare=False)
    name: str
    web_url: str
    push_url: str
    path: str  # provider handle: "owner/name" on GitHub, project id on GitLab
    description: Optional[str] = None

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)

    @property
    def host_name(self) -> str:
        return self.host.name

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict for verbose listings."""
        return {
            "name": self.name,
            "normalized_name": self.normalized_name,
            "host": self.host.name,
            "description": self.description,
            "web_url": self.web_url,
            "push_url": self.push_url,
            "path": self.path,
        }
