import logging
from datetime import timedelta
from typing import Any, Dict, List

import aiohttp

from src.application.repository_source import split_full_name
from src.domain.models import PullRequest, RangeDescriptor
from src.infrastructure.acl import GitHubTranslator
from src.infrastructure.github_client import GitHubRestClient, PULL_REQUEST_PAGE_SIZE

logger = logging.getLogger(__name__)

# Ceiling on listing pages per repository (250 pull requests)
MAX_PULL_REQUEST_PAGES = 5
# Merges older than `since` minus this margin end the scan
STALE_MERGE_MARGIN = timedelta(days=1)


class PullRequestCollector:
    """
    Collects the pull requests of one repository that may have merged inside a window.

    Listings come back most-recently-updated first. The scan stops at the first pull
    request merged more than a day before the window starts, on the assumption that
    update recency tracks merge recency. That is a heuristic: a repository where old
    merged pull requests keep getting updated can push in-window merges past the
    stopping point, and those are missed.
    """

    def __init__(self, github_client: GitHubRestClient):
        self.github_client = github_client

    @staticmethod
    def is_stale_merge(raw_pr: Dict[str, Any], range_descriptor: RangeDescriptor) -> bool:
        """True when the summary was merged before `since` minus the margin."""
        merged_at = raw_pr.get("merged_at")
        if not merged_at:
            return False
        merged_at_dt = GitHubTranslator.to_timestamp(merged_at)
        return merged_at_dt < range_descriptor.since - STALE_MERGE_MARGIN

    async def collect(
        self,
        session: aiohttp.ClientSession,
        full_name: str,
        range_descriptor: RangeDescriptor,
    ) -> List[PullRequest]:
        """
        Returns full-detail pull requests in fetch order. Details are fetched one at a time.
        """
        owner, name = split_full_name(full_name)
        pull_requests: List[PullRequest] = []
        page = 1

        while page <= MAX_PULL_REQUEST_PAGES:
            batch = await self.github_client.list_pull_requests_page(
                session, owner, name, page, per_page=PULL_REQUEST_PAGE_SIZE,
            )

            for raw_pr in batch:
                if self.is_stale_merge(raw_pr, range_descriptor):
                    logger.info(
                        f"[{full_name}] PR #{raw_pr.get('number')} merged before the window. "
                        f"Stopping on page {page} with {len(pull_requests)} PRs."
                    )
                    return pull_requests

                detail = await self.github_client.get_pull_request(session, owner, name, raw_pr["number"])
                pull_requests.append(GitHubTranslator.to_pull_request(detail))

            if len(batch) < PULL_REQUEST_PAGE_SIZE:
                break
            page += 1

        logger.info(f"[{full_name}] Collected {len(pull_requests)} PRs.")
        return pull_requests
