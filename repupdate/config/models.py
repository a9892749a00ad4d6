"""
Config Models — Pydantic schema for the hosts file.

    hosts:
      github:
        type: github
        use_as: source
        priority: 10
        token_env: GITHUB_TOKEN
      backup:
        type: gitlab
        use_as: backup
        api_url: https://gitlab.example.com/api/v4
        namespace_id: 42
        token_env: GITLAB_TOKEN
    keep:
      - old-archived-project

Host order in the file is the host order of the run.
"""

from __future__ import annotations

import os
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

SOURCE = "source"
BACKUP = "backup"


class HostDefinition(BaseModel):
    """One git hosting account."""

    type: Literal["github", "gitlab"]
    use_as: Literal["source", "backup"]
    priority: int = 0

    api_url: Optional[str] = None
    organization: Optional[str] = None  # github
    group: Optional[str] = None  # gitlab, listing scope
    namespace_id: Optional[int] = None  # gitlab, where backups are created

    token: Optional[str] = None
    token_env: Optional[str] = None

    private: bool = True
    timeout: float = 30.0

    def resolve_token(self) -> Optional[str]:
        """Inline token wins over the environment variable."""
        if self.token:
            return self.token
        if self.token_env:
            return os.environ.get(self.token_env)
        return None


class HostsConfig(BaseModel):
    """The hosts.yml schema."""

    hosts: Dict[str, HostDefinition] = Field(default_factory=dict)
    keep: List[str] = Field(default_factory=list)
