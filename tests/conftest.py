"""
Shared fixtures — in-memory hosts and mirror.

FakeHost implements the host capability interface over a plain list and
records every call; FakeMirror keeps ref states per push URL and records
pushes. Together they let the engine run end to end without network or
git.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from repupdate.errors import GitCommandError, HostError
from repupdate.hosts.base import Host
from repupdate.hosts.registry import HostRegistry
from repupdate.models.refs import DifferenceState, compare_ref_states
from repupdate.models.repository import Repository


class FakeHost(Host):
    """Host backed by a list of repositories."""

    def __init__(
        self,
        name: str,
        use_as: str,
        priority: int = 0,
        fail_list: bool = False,
        fail_create: bool = False,
        fail_update: bool = False,
        fail_delete: Iterable[str] = (),
    ):
        super().__init__(name, use_as, priority)
        self.repositories: List[Repository] = []
        self.calls: List[Tuple] = []
        self.fail_list = fail_list
        self.fail_create = fail_create
        self.fail_update = fail_update
        self.fail_delete = set(fail_delete)

    @property
    def provider(self) -> str:
        return "fake"

    def add(self, name: str, description: Optional[str] = None) -> Repository:
        repository = Repository(
            host=self,
            name=name,
            description=description,
            web_url=f"https://{self.name}/{name}",
            push_url=f"git@{self.name}:{name}.git",
            path=name,
        )
        self.repositories.append(repository)
        return repository

    @property
    def mutations(self) -> List[Tuple]:
        return [c for c in self.calls if c[0] != "list"]

    def list_repositories(self) -> List[Repository]:
        self.calls.append(("list",))
        if self.fail_list:
            raise HostError(self.name, "connection refused")
        return list(self.repositories)

    def create_repository(self, name: str, description: str) -> Repository:
        self.calls.append(("create", name, description))
        if self.fail_create:
            raise HostError(self.name, "HTTP 422")
        return self.add(name, description)

    def update_description(self, repository: Repository, description: str) -> None:
        self.calls.append(("update_description", repository.name, description))
        if self.fail_update:
            raise HostError(self.name, "HTTP 403")

    def delete_repository(self, repository: Repository) -> None:
        self.calls.append(("delete", repository.name))
        if repository.name in self.fail_delete:
            raise HostError(self.name, "HTTP 403")


class FakeMirror:
    """Ref states by push URL; pushes copy the source state."""

    def __init__(self, push_result: bool = True):
        self.refs: Dict[str, Dict[str, str]] = {}
        self.pushes: List[Tuple[Repository, Repository]] = []
        self.push_result = push_result
        self.broken: set = set()

    def set_refs(self, repository: Repository, **branches: str) -> None:
        self.refs[repository.push_url] = dict(branches)

    def find_differences(self, left: Repository, right: Repository) -> DifferenceState:
        for repository in (left, right):
            if repository.push_url in self.broken:
                raise GitCommandError("ls-remote", f"{repository.push_url}: unreachable")
        return compare_ref_states(
            self.refs.get(left.push_url, {}),
            self.refs.get(right.push_url, {}),
        )

    def push(self, source: Repository, destination: Repository) -> bool:
        self.pushes.append((source, destination))
        if self.push_result:
            self.refs[destination.push_url] = dict(self.refs.get(source.push_url, {}))
        return self.push_result


def make_registry(*hosts: Host, keep: Iterable[str] = ()) -> HostRegistry:
    return HostRegistry(hosts, keep)


@pytest.fixture
def mirror() -> FakeMirror:
    return FakeMirror()
