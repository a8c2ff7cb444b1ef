import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Union

import aiohttp

from src.application.aggregator import aggregate_repository, merged_in_window
from src.application.pull_request_collector import PullRequestCollector
from src.application.repository_source import RepositorySource
from src.domain.models import (
    EngineerMetric,
    HighImpactPR,
    MetricSnapshot,
    PullRequest,
    RangeDescriptor,
    RepoMetric,
    SnapshotFallback,
    SnapshotRequest,
    TimelinePoint,
)
from src.domain.ranges import resolve_range
from src.domain.sample_data import build_sample_snapshot
from src.domain.scoring import round_half_up
from src.infrastructure.github_client import GitHubRestClient

logger = logging.getLogger(__name__)

GLOBAL_HIGH_IMPACT_LIMIT = 20


def week_start(merged_at: datetime) -> date:
    """Monday (UTC) of the ISO week containing the timestamp."""
    day = merged_at.astimezone(timezone.utc).date()
    return day - timedelta(days=day.weekday())


def merge_engineer(existing: EngineerMetric, incoming: EngineerMetric) -> EngineerMetric:
    """
    Combines two partial records of the same engineer. Averages are merged as a
    plain mean of the two values, not weighted by PR count, so with more than two
    repositories the result drifts towards the most recently merged ones.
    """
    repos = list(existing.repos)
    repos.extend(repo for repo in incoming.repos if repo not in repos)

    return existing.model_copy(update={
        "repos": repos,
        "merged_prs": existing.merged_prs + incoming.merged_prs,
        "commits": existing.commits + incoming.commits,
        "reviews": existing.reviews + incoming.reviews,
        "lines_added": existing.lines_added + incoming.lines_added,
        "lines_deleted": existing.lines_deleted + incoming.lines_deleted,
        "impact_score": existing.impact_score + incoming.impact_score,
        "avg_cycle_time_hours": round_half_up(
            (existing.avg_cycle_time_hours + incoming.avg_cycle_time_hours) / 2
        ),
        "avg_review_turnaround_hours": round_half_up(
            (existing.avg_review_turnaround_hours + incoming.avg_review_turnaround_hours) / 2
        ),
        "last_active": max(existing.last_active, incoming.last_active),
    })


class SnapshotBuilder:
    """
    Accumulates per-repository results into one cross-repository snapshot.
    One builder per snapshot build; nothing is shared between builds.
    """

    def __init__(self, range_descriptor: RangeDescriptor):
        self.range_descriptor = range_descriptor
        self.repo_metrics: List[RepoMetric] = []
        self.engineers: Dict[str, EngineerMetric] = {}
        self.timeline: Dict[str, TimelinePoint] = {}
        self.high_impact: List[HighImpactPR] = []

    def add_engineers(self, engineer_metrics: Sequence[EngineerMetric]) -> None:
        for metric in engineer_metrics:
            existing = self.engineers.get(metric.engineer)
            self.engineers[metric.engineer] = merge_engineer(existing, metric) if existing else metric

    def add_to_timeline(self, pull_requests: Sequence[PullRequest]) -> None:
        for pr in pull_requests:
            if not merged_in_window(pr.merged_at, self.range_descriptor):
                continue
            key = week_start(pr.merged_at).isoformat()
            bucket = self.timeline.setdefault(key, TimelinePoint(week=key))
            bucket.merged_prs += 1
            bucket.commits += pr.commits
            bucket.lines_added += pr.additions
            bucket.lines_deleted += pr.deletions

    def add_repository(
        self,
        repo_metric: RepoMetric,
        engineer_metrics: Sequence[EngineerMetric],
        high_impact: Sequence[HighImpactPR],
        pull_requests: Sequence[PullRequest],
    ) -> None:
        self.repo_metrics.append(repo_metric)
        self.add_engineers(engineer_metrics)
        self.add_to_timeline(pull_requests)
        self.high_impact.extend(high_impact)

    def build(self) -> MetricSnapshot:
        """Ranks and freezes everything accumulated so far into a snapshot."""
        return MetricSnapshot(
            generated_at=datetime.now(timezone.utc),
            range=self.range_descriptor,
            repos=list(self.repo_metrics),
            engineers=sorted(self.engineers.values(), key=lambda item: item.impact_score, reverse=True),
            timeline=[self.timeline[week] for week in sorted(self.timeline)],
            high_impact_prs=sorted(self.high_impact, key=lambda item: item.churn, reverse=True)[
                :GLOBAL_HIGH_IMPACT_LIMIT
            ],
        )


class SnapshotService:
    """
    Service that builds a metrics snapshot for an organization or a list of repositories.

    Repositories are processed strictly one after another, and so are the pull request
    detail fetches inside each repository, to stay within GitHub's rate limits.
    """

    def __init__(
        self,
        github_client: GitHubRestClient,
        repository_source: Optional[RepositorySource] = None,
        collector: Optional[PullRequestCollector] = None,
    ):
        self.github_client = github_client
        self.repository_source = repository_source or RepositorySource(github_client)
        self.collector = collector or PullRequestCollector(github_client)

    async def build_snapshot(
        self,
        range_descriptor: RangeDescriptor,
        org: Optional[str] = None,
        repos: Optional[Sequence[str]] = None,
    ) -> MetricSnapshot:
        """
        Fetches, folds and merges every selected repository. Any failure aborts the
        whole build; no partial snapshot is returned.
        """
        builder = SnapshotBuilder(range_descriptor)

        async with aiohttp.ClientSession() as session:
            repositories = await self.repository_source.resolve_repositories(session, org=org, repos=repos)
            logger.info(f"Building snapshot for {len(repositories)} repositories ({range_descriptor.label}).")

            for repository in repositories:
                pull_requests = await self.collector.collect(session, repository.full_name, range_descriptor)
                aggregate = aggregate_repository(repository, pull_requests, range_descriptor)
                aggregate.repo_metric.languages = await self.repository_source.fetch_languages(session, repository)
                builder.add_repository(
                    aggregate.repo_metric,
                    aggregate.engineer_metrics,
                    aggregate.high_impact,
                    pull_requests,
                )

        snapshot = builder.build()
        logger.info(
            f"Snapshot complete: {len(snapshot.repos)} repos, {len(snapshot.engineers)} engineers, "
            f"{len(snapshot.timeline)} weeks."
        )
        return snapshot

    def fallback(self, error: Exception) -> SnapshotFallback:
        return SnapshotFallback(error=str(error), fallback=build_sample_snapshot())

    async def respond(self, request: SnapshotRequest) -> Union[MetricSnapshot, SnapshotFallback]:
        """
        The "build metrics snapshot" operation. Never raises: without a token the
        illustrative snapshot is returned as-is, and any failure yields the error
        message together with the illustrative snapshot.
        """
        if not self.github_client.has_credentials:
            logger.warning("GITHUB_TOKEN is not set. Serving sample data.")
            return build_sample_snapshot()

        try:
            range_descriptor = resolve_range(request.since, request.until, request.range_days)
            return await self.build_snapshot(range_descriptor, org=request.org, repos=request.repos)
        except Exception as e:
            logger.exception(f"Snapshot build failed: {e}")
            return self.fallback(e)
