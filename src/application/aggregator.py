import logging
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.domain.models import (
    EngineerMetric,
    HighImpactPR,
    PullRequest,
    RangeDescriptor,
    RepoMetric,
    Repository,
)
from src.domain.ranges import range_day_count
from src.domain.scoring import calculate_impact_score, round_half_up

logger = logging.getLogger(__name__)

REPO_HIGH_IMPACT_LIMIT = 10
SECONDS_PER_HOUR = 60 * 60


class RepoAggregate(BaseModel):
    """Everything one repository contributes to a snapshot."""
    repo_metric: RepoMetric
    engineer_metrics: List[EngineerMetric] = Field(default_factory=list)
    high_impact: List[HighImpactPR] = Field(default_factory=list)


def merged_in_window(merged_at: Optional[datetime], range_descriptor: RangeDescriptor) -> bool:
    """A merge counts only if it happened within [since, until], both ends inclusive."""
    if merged_at is None:
        return False
    return range_descriptor.since <= merged_at <= range_descriptor.until


def lead_time_hours(pr: PullRequest) -> float:
    """Hours from creation to merge. Only meaningful for merged pull requests."""
    return (pr.merged_at - pr.created_at).total_seconds() / SECONDS_PER_HOUR


def mean_lead_time_hours(pull_requests: List[PullRequest]) -> int:
    if not pull_requests:
        return 0
    return round_half_up(sum(lead_time_hours(pr) for pr in pull_requests) / len(pull_requests))


def health_score(merged_prs: int, deployment_frequency: int, open_prs: int) -> int:
    """Throughput and deploy cadence add to the score, an open-PR backlog takes away. Clamped to [0, 100]."""
    raw = 0.3 * merged_prs + 6 * deployment_frequency + max(0, 40 - 2 * open_prs)
    return max(0, min(100, round_half_up(raw)))


def to_high_impact(pr: PullRequest, repo_full_name: str) -> HighImpactPR:
    return HighImpactPR(
        id=pr.id,
        title=pr.title,
        repo=repo_full_name,
        author=pr.author,
        merged_at=pr.merged_at,
        additions=pr.additions,
        deletions=pr.deletions,
        changed_files=pr.changed_files,
        lead_time_hours=max(1, round_half_up(lead_time_hours(pr))),
        url=pr.url,
        summary=f"Merged into {pr.base_ref} from {pr.head_ref}",
    )


def aggregate_repository(
    repository: Repository,
    pull_requests: List[PullRequest],
    range_descriptor: RangeDescriptor,
) -> RepoAggregate:
    """
    Folds one repository's pull requests into its repo metric, per-author partial
    metrics and its ten largest in-window merges.

    Pull requests merged outside the window, or never merged, only count as open.
    Every author seen is recorded as a contributor, merged or not.
    """
    repo_metric = RepoMetric(
        name=repository.name,
        owner=repository.owner,
        full_name=repository.full_name,
    )
    engineers: Dict[str, EngineerMetric] = {}
    merged_by_author: Dict[str, List[PullRequest]] = {}
    merged: List[PullRequest] = []
    high_impact: List[HighImpactPR] = []

    for pr in pull_requests:
        engineer = engineers.get(pr.author)
        if engineer is None:
            engineer = EngineerMetric(
                engineer=pr.author,
                avatar_url=pr.avatar_url,
                last_active=pr.updated_at,
            )
            engineers[pr.author] = engineer

        if repository.name not in engineer.repos:
            engineer.repos.append(repository.name)

        if not merged_in_window(pr.merged_at, range_descriptor):
            repo_metric.open_prs += 1
            continue

        repo_metric.merged_prs += 1
        repo_metric.lines_added += pr.additions
        repo_metric.lines_deleted += pr.deletions
        repo_metric.commits += pr.commits

        engineer.merged_prs += 1
        engineer.lines_added += pr.additions
        engineer.lines_deleted += pr.deletions
        engineer.commits += pr.commits
        engineer.impact_score += calculate_impact_score(pr)
        engineer.last_active = max(engineer.last_active, pr.updated_at)

        merged.append(pr)
        merged_by_author.setdefault(pr.author, []).append(pr)
        high_impact.append(to_high_impact(pr, repository.full_name))

    repo_metric.active_contributors = len(engineers)
    repo_metric.deployment_frequency = max(
        1, round_half_up(repo_metric.merged_prs / range_day_count(range_descriptor))
    )
    repo_metric.average_lead_time_hours = mean_lead_time_hours(merged)
    repo_metric.health_score = health_score(
        repo_metric.merged_prs, repo_metric.deployment_frequency, repo_metric.open_prs
    )

    for author, engineer in engineers.items():
        engineer.avg_cycle_time_hours = mean_lead_time_hours(merged_by_author.get(author, []))

    high_impact.sort(key=lambda item: item.churn, reverse=True)

    logger.info(
        f"[{repository.full_name}] {repo_metric.merged_prs} merged, {repo_metric.open_prs} open, "
        f"{repo_metric.active_contributors} contributors."
    )

    return RepoAggregate(
        repo_metric=repo_metric,
        engineer_metrics=list(engineers.values()),
        high_impact=high_impact[:REPO_HIGH_IMPACT_LIMIT],
    )
