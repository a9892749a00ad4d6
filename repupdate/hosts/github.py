"""
GitHub Host — Repositories of a GitHub user or organization.

Uses the GitHub REST API. Works against GitHub Enterprise by setting
`api_url` in the host definition.

## Configuration

    github:
      type: github
      use_as: source
      organization: my-org      # optional, defaults to the token's user
      token_env: GITHUB_TOKEN
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..errors import HostError
from ..models.repository import Repository
from .base import Host
from .http import USER_AGENT, api_request, response_json

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PAGE_SIZE = 100


class GitHubHost(Host):
    """GitHub account accessed through the REST API."""

    def __init__(
        self,
        name: str,
        use_as: str,
        priority: int = 0,
        token: Optional[str] = None,
        api_url: Optional[str] = None,
        organization: Optional[str] = None,
        private: bool = True,
        timeout: float = 30.0,
    ):
        super().__init__(name, use_as, priority)
        self.token = token
        self.api_url = (api_url or DEFAULT_API_URL).rstrip("/")
        self.organization = organization
        self.private = private
        self.timeout = timeout

    @property
    def provider(self) -> str:
        return "github"

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
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

    def _repos_url(self) -> str:
        if self.organization:
            return f"{self.api_url}/orgs/{self.organization}/repos"
        return f"{self.api_url}/user/repos"

    def _to_repository(self, data: Dict[str, Any]) -> Repository:
        try:
            return Repository(
                host=self,
                name=data["name"],
                description=data.get("description"),
                web_url=data["html_url"],
                push_url=data["ssh_url"],
                path=data["full_name"],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise HostError(self.name, f"unexpected repository payload: {e!r}") from e

    def list_repositories(self) -> List[Repository]:
        params: Optional[Dict[str, Any]] = {"per_page": PAGE_SIZE}
        if not self.organization:
            params["affiliation"] = "owner"

        repositories: List[Repository] = []
        url: Optional[str] = self._repos_url()

        while url:
            resp = self._request("GET", url, params=params)
            items = response_json(self.name, resp)
            if not isinstance(items, list):
                raise HostError(self.name, f"GET {url}: expected a list, got {type(items).__name__}")
            repositories.extend(self._to_repository(item) for item in items)

            # The next link already carries the query string
            url = resp.links.get("next", {}).get("url")
            params = None

        logger.debug(f"[{self.name}] {len(repositories)} repositories")
        return repositories

    def create_repository(self, name: str, description: str) -> Repository:
        resp = self._request(
            "POST",
            self._repos_url(),
            expected=(201,),
            json={
                "name": name,
                "description": description,
                "private": self.private,
            },
        )
        return self._to_repository(response_json(self.name, resp))

    def update_description(self, repository: Repository, description: str) -> None:
        self._request(
            "PATCH",
            f"{self.api_url}/repos/{repository.path}",
            json={"description": description},
        )

    def delete_repository(self, repository: Repository) -> None:
        self._request(
            "DELETE",
            f"{self.api_url}/repos/{repository.path}",
            expected=(204,),
        )
