import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

import aiohttp

from src.domain.exceptions import ConfigurationException, MetricsException
from src.domain.models import Repository
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.github_client import GitHubRestClient, REPO_PAGE_SIZE

logger = logging.getLogger(__name__)

# Upper bound on organization listing pages (500 repositories)
MAX_REPO_PAGES = 5


def split_full_name(full_name: str) -> Tuple[str, str]:
    """
    Splits an 'owner/name' identifier.

    Raises:
        ConfigurationException: If the identifier is not of the form 'owner/name'.
    """
    owner, sep, name = full_name.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        raise ConfigurationException(f"Repository '{full_name}' must be given as 'owner/name'.")
    return owner, name


class RepositorySource:
    """
    Resolves the working set of repositories and their languages.
    """

    def __init__(self, github_client: GitHubRestClient):
        self.github_client = github_client

    async def resolve_repositories(
        self,
        session: aiohttp.ClientSession,
        org: Optional[str] = None,
        repos: Optional[Sequence[str]] = None,
    ) -> List[Repository]:
        """
        An explicit repository list takes precedence over the organization. Explicitly
        listed repositories are fetched one at a time and carry no primary language.

        Raises:
            ConfigurationException: If neither an organization nor repositories are given.
        """
        if repos:
            resolved = []
            for full_name in repos:
                owner, name = split_full_name(full_name)
                raw_repo = await self.github_client.get_repository(session, owner, name)
                resolved.append(GitHubTranslator.to_repository(raw_repo, keep_language=False))
            return resolved

        if org:
            return await self.list_org_repositories(session, org)

        raise ConfigurationException("Either org or repos must be provided")

    async def list_org_repositories(self, session: aiohttp.ClientSession, org: str) -> List[Repository]:
        """Pages through an organization's repositories until a short page or the page ceiling."""
        repositories: List[Repository] = []
        page = 1

        while page <= MAX_REPO_PAGES:
            chunk = await self.github_client.list_org_repos_page(session, org, page, per_page=REPO_PAGE_SIZE)
            repositories.extend(GitHubTranslator.to_repository(raw_repo) for raw_repo in chunk)
            if len(chunk) < REPO_PAGE_SIZE:
                break
            page += 1

        logger.info(f"Listed {len(repositories)} repositories for org '{org}' across {min(page, MAX_REPO_PAGES)} page(s).")
        return repositories

    async def fetch_languages(self, session: aiohttp.ClientSession, repository: Repository) -> List[str]:
        """
        Returns the language names of a repository. Any failure degrades to the
        primary language (or nothing) instead of aborting the build.
        """
        fallback = [repository.language] if repository.language else []
        try:
            breakdown = await self.github_client.get_repository_languages(session, repository.full_name)
        except (MetricsException, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Language lookup failed for {repository.full_name}: {e}. Using primary language.")
            return fallback

        if not isinstance(breakdown, dict):
            logger.warning(f"Unexpected language payload for {repository.full_name}. Using primary language.")
            return fallback
        return list(breakdown.keys())
