import aiohttp
import logging
from typing import Any, Dict, List, Optional

from src.domain.exceptions import ConfigurationException, GitHubApiException

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
REPO_PAGE_SIZE = 100
PULL_REQUEST_PAGE_SIZE = 50
REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=60, connect=10)


class GitHubRestClient:
    """
    Client for the GitHub REST API endpoints the metrics pipeline needs.
    The bearer token is injected here; every call requires it and nothing is retried.
    """

    def __init__(self, token: Optional[str], api_url: str = DEFAULT_API_URL):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "repo-performance-dashboard",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    @property
    def has_credentials(self) -> bool:
        return bool(self.token)

    async def _get_json(
        self,
        session: aiohttp.ClientSession,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Performs one GET against the API and decodes the JSON body.

        Raises:
            ConfigurationException: If no token is configured.
            GitHubApiException: If GitHub answers with a non-success status.
        """
        if not self.has_credentials:
            raise ConfigurationException("Missing GITHUB_TOKEN")

        url = f"{self.api_url}{path}"
        async with session.get(url, params=params, headers=self.headers, timeout=REQUEST_TIMEOUT) as response:
            if response.status >= 400:
                body = await response.text()
                logger.debug(f"GET {url} failed with {response.status}: {body}")
                raise GitHubApiException(status=response.status, reason=response.reason or "", body=body)
            return await response.json()

    async def list_org_repos_page(
        self,
        session: aiohttp.ClientSession,
        org: str,
        page: int,
        per_page: int = REPO_PAGE_SIZE,
    ) -> List[Dict[str, Any]]:
        """Fetches one page of an organization's repositories, most recently pushed first."""
        return await self._get_json(
            session,
            f"/orgs/{org}/repos",
            params={"per_page": per_page, "page": page, "sort": "pushed"},
        )

    async def get_repository(self, session: aiohttp.ClientSession, owner: str, name: str) -> Dict[str, Any]:
        return await self._get_json(session, f"/repos/{owner}/{name}")

    async def get_repository_languages(self, session: aiohttp.ClientSession, full_name: str) -> Dict[str, int]:
        """Returns the language breakdown (language name -> bytes of code) of a repository."""
        return await self._get_json(session, f"/repos/{full_name}/languages")

    async def list_pull_requests_page(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        name: str,
        page: int,
        per_page: int = PULL_REQUEST_PAGE_SIZE,
        state: str = "all",
        sort: str = "updated",
        direction: str = "desc",
    ) -> List[Dict[str, Any]]:
        """Fetches one page of pull request summaries. Size counters are not included here."""
        return await self._get_json(
            session,
            f"/repos/{owner}/{name}/pulls",
            params={
                "state": state,
                "per_page": per_page,
                "page": page,
                "sort": sort,
                "direction": direction,
            },
        )

    async def get_pull_request(
        self,
        session: aiohttp.ClientSession,
        owner: str,
        name: str,
        number: int,
    ) -> Dict[str, Any]:
        """Fetches the full detail of one pull request, including additions, deletions and commits."""
        return await self._get_json(session, f"/repos/{owner}/{name}/pulls/{number}")
