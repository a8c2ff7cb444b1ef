from datetime import datetime
from typing import Any, Dict, Optional
from src.domain.models import PullRequest, Repository

UNKNOWN_AUTHOR = "unknown"


class GitHubTranslator:
    """
    Anti-corruption layer that translates raw GitHub REST JSON payloads into domain models.
    """

    @staticmethod
    def to_timestamp(raw_date: Optional[str]) -> Optional[datetime]:
        """Parses a GitHub ISO-8601 timestamp ('Z' suffix) into an aware datetime."""
        if not raw_date:
            return None
        return datetime.fromisoformat(raw_date.replace("Z", "+00:00"))

    @staticmethod
    def to_repository(raw_repo: Dict[str, Any], keep_language: bool = True) -> Repository:
        """
        Transforms a raw GitHub repository payload into a Repository.

        Args:
            raw_repo (Dict[str, Any]): The repository JSON from /orgs/{org}/repos or /repos/{owner}/{name}.
            keep_language (bool): When False the primary language is dropped, so language lookup
                has nothing to fall back to.

        Returns:
            Repository: The domain model instance representing the repository.
        """
        owner_data = raw_repo.get('owner') or {}
        name = raw_repo.get('name', '')
        owner = owner_data.get('login', '')

        return Repository(
            name=name,
            owner=owner,
            full_name=raw_repo.get('full_name') or f"{owner}/{name}",
            language=raw_repo.get('language') if keep_language else None,
        )

    @staticmethod
    def to_pull_request(raw_pr: Dict[str, Any]) -> PullRequest:
        """
        Transforms a raw single-pull-request payload (/repos/{owner}/{name}/pulls/{number})
        into a PullRequest. Listing payloads lack the size counters, which then default to zero.

        Raises:
            ValueError: If created_at or updated_at is missing.
        """
        user_data = raw_pr.get('user') or {}
        head_data = raw_pr.get('head') or {}
        base_data = raw_pr.get('base') or {}

        created_at = GitHubTranslator.to_timestamp(raw_pr.get('created_at'))
        updated_at = GitHubTranslator.to_timestamp(raw_pr.get('updated_at'))
        if created_at is None or updated_at is None:
            raise ValueError("created_at and updated_at are required to build PullRequest.")

        return PullRequest(
            id=raw_pr.get('id', 0),
            number=raw_pr.get('number', 0),
            title=raw_pr.get('title') or '',
            author=user_data.get('login') or UNKNOWN_AUTHOR,
            avatar_url=user_data.get('avatar_url'),
            created_at=created_at,
            updated_at=updated_at,
            merged_at=GitHubTranslator.to_timestamp(raw_pr.get('merged_at')),
            closed_at=GitHubTranslator.to_timestamp(raw_pr.get('closed_at')),
            additions=raw_pr.get('additions') or 0,
            deletions=raw_pr.get('deletions') or 0,
            changed_files=raw_pr.get('changed_files') or 0,
            commits=raw_pr.get('commits') or 0,
            head_ref=head_data.get('ref', ''),
            base_ref=base_data.get('ref', ''),
            draft=bool(raw_pr.get('draft', False)),
            url=raw_pr.get('html_url', ''),
        )
