"""
GitHub REST API adapter.

Implements the repositories and users collaborators on top of the public
GitHub API. One ``GitHubClient`` is shared per process; its HTTP client is
created on first use and closed at shutdown.
"""

from typing import Any

import httpx

from githunt_api.core.config import GitHubConfig
from githunt_api.core.entities import Repository, User
from githunt_api.core.errors import NotFoundError, UpstreamError
from githunt_api.core.logging import get_logger

logger = get_logger(__name__)


class GitHubClient:
    """Thin async client for the GitHub REST API."""

    def __init__(
        self,
        config: GitHubConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or GitHubConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {
                "Accept": "application/vnd.github+json",
                "User-Agent": "GitHunt-API",
            }
            if self.config.token:
                headers["Authorization"] = f"Bearer {self.config.token}"

            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                headers=headers,
                timeout=httpx.Timeout(self.config.timeout),
                transport=self._transport,
            )

        return self._client

    async def get_json(
        self, path: str, resource: str = "resource", identifier: str | None = None
    ) -> Any:
        """
        GET ``path`` and decode the JSON body.

        Raises:
            NotFoundError: On a 404
            UpstreamError: On any other HTTP or transport failure
        """
        client = self._get_client()
        try:
            response = await client.get(path)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(resource, identifier or path) from e
            logger.warning("GitHub request failed", path=path, status_code=status)
            raise UpstreamError(
                "github", f"GitHub returned {status} for {path}", service_status_code=status
            ) from e
        except httpx.RequestError as e:
            logger.warning("GitHub request error", path=path, error=str(e))
            raise UpstreamError("github", f"GitHub request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError("github", f"GitHub returned invalid JSON for {path}") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _user_from_payload(payload: dict[str, Any]) -> User:
    return User(
        login=payload["login"],
        avatar_url=payload.get("avatar_url") or "",
        html_url=payload.get("html_url") or "",
    )


def _repository_from_payload(payload: dict[str, Any]) -> Repository:
    owner = payload.get("owner")
    return Repository(
        name=payload["name"],
        full_name=payload["full_name"],
        html_url=payload["html_url"],
        stargazers_count=payload.get("stargazers_count") or 0,
        description=payload.get("description"),
        open_issues_count=payload.get("open_issues_count"),
        owner=_user_from_payload(owner) if owner else None,
    )


class GitHubRepositories:
    """Repositories collaborator backed by ``GET /repos/{owner}/{repo}``."""

    def __init__(self, client: GitHubClient):
        self.client = client

    async def get_by_full_name(self, full_name: str) -> Repository:
        payload = await self.client.get_json(
            f"/repos/{full_name}", resource="repository", identifier=full_name
        )
        return _repository_from_payload(payload)


class GitHubUsers:
    """Users collaborator backed by ``GET /users/{login}``."""

    def __init__(self, client: GitHubClient):
        self.client = client

    async def get_by_login(self, login: str) -> User:
        payload = await self.client.get_json(
            f"/users/{login}", resource="user", identifier=login
        )
        return _user_from_payload(payload)


__all__ = ["GitHubClient", "GitHubRepositories", "GitHubUsers"]
