"""
Host Base Class — Interface for all git hosting providers.

A host is one account on one provider, used either as a source of
repositories or as a backup target. Each provider implements the same
four capabilities; the engine never needs to know which provider it
talks to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models.repository import Repository


class Host(ABC):
    """
    Abstract base class for all hosts.

    Implementations raise HostError for any provider failure.
    """

    def __init__(self, name: str, use_as: str, priority: int = 0):
        self.name = name
        self.use_as = use_as
        self.priority = priority

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, use_as={self.use_as!r}, "
            f"priority={self.priority})"
        )

    @property
    @abstractmethod
    def provider(self) -> str:
        """The provider identifier (e.g., 'github', 'gitlab')."""
        pass

    @abstractmethod
    def list_repositories(self) -> List[Repository]:
        """List all repositories of this account."""
        pass

    @abstractmethod
    def create_repository(self, name: str, description: str) -> Repository:
        """Create an empty repository and return it."""
        pass

    @abstractmethod
    def update_description(self, repository: Repository, description: str) -> None:
        """Replace the description of a repository."""
        pass

    @abstractmethod
    def delete_repository(self, repository: Repository) -> None:
        """Delete a repository permanently."""
        pass
