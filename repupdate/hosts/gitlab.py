"""
GitLab Host — Projects of a GitLab user or group.

Uses the GitLab REST API v4 with a personal access token.

## Configuration

    gitlab-backup:
      type: gitlab
      use_as: backup
      api_url: https://gitlab.example.com/api/v4
      group: backups            # optional, list this group instead of owned projects
      namespace_id: 42          # optional, create backups in this namespace
      token_env: GITLAB_TOKEN
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..errors import HostError
from ..models.repository import Repository
from .base import Host
from .http import USER_AGENT, api_request, response_json

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://gitlab.com/api/v4"
PAGE_SIZE = 100


class GitLabHost(Host):
    """GitLab account accessed through the REST API."""

    def __init__(
        self,
        name: str,
        use_as: str,
        priority: int = 0,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        group: Optional[str] = None,
        namespace_id: Optional[int] = None,
        private: bool = True,
        timeout: float = 30.0,
    ):
        super().__init__(name, use_as, priority)
        self.token = token
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self.group = group
        self.namespace_id = namespace_id
        self.private = private
        self.timeout = timeout

    @property
    def provider(self) -> str:
        return "gitlab"

    def _get_headers(self) -> Dict[str, str]:
        headers = {"User-Agent": USER_AGENT}
        if self.token:
            headers["PRIVATE-TOKEN"] = self.token
        return headers

    def _request(self, method: str, url: str, expected=(200,), **kwargs: Any):
        return api_request(
            self.name,
            method,
            url,
            headers=self._get_headers(),
            timeout=self.timeout,
            expected=expected,
            **kwargs,
        )

    def _to_repository(self, data: Dict[str, Any]) -> Repository:
        try:
            return Repository(
                host=self,
                name=data["path"],
                description=data.get("description"),
                web_url=data["web_url"],
                push_url=data["ssh_url_to_repo"],
                path=str(data["id"]),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise HostError(self.name, f"unexpected project payload: {e!r}") from e

    def list_repositories(self) -> List[Repository]:
        if self.group:
            url = f"{self.api_url}/groups/{self.group.replace('/', '%2F')}/projects"
            params: Dict[str, Any] = {"per_page": PAGE_SIZE}
        else:
            url = f"{self.api_url}/projects"
            params = {"per_page": PAGE_SIZE, "owned": "true"}

        repositories: List[Repository] = []
        page = "1"

        while page:
            resp = self._request("GET", url, params={**params, "page": page})
            items = response_json(self.name, resp)
            if not isinstance(items, list):
                raise HostError(self.name, f"GET {url}: expected a list, got {type(items).__name__}")
            repositories.extend(self._to_repository(item) for item in items)
            page = resp.headers.get("X-Next-Page", "")

        logger.debug(f"[{self.name}] {len(repositories)} repositories")
        return repositories

    def create_repository(self, name: str, description: str) -> Repository:
        payload: Dict[str, Any] = {
            "name": name,
            "path": name,
            "description": description,
            "visibility": "private" if self.private else "public",
        }
        if self.namespace_id is not None:
            payload["namespace_id"] = self.namespace_id

        resp = self._request(
            "POST",
            f"{self.api_url}/projects",
            expected=(201,),
            json=payload,
        )
        return self._to_repository(response_json(self.name, resp))

    def update_description(self, repository: Repository, description: str) -> None:
        self._request(
            "PUT",
            f"{self.api_url}/projects/{repository.path}",
            json={"description": description},
        )

    def delete_repository(self, repository: Repository) -> None:
        self._request(
            "DELETE",
            f"{self.api_url}/projects/{repository.path}",
            expected=(202, 204),
        )
