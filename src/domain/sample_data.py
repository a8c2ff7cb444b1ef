"""
Illustrative snapshot served when no GitHub credential is configured or a build fails,
so the dashboard always has something to render.
"""
from datetime import datetime, timezone

from src.domain.models import (
    EngineerMetric,
    HighImpactPR,
    MetricSnapshot,
    RangeDescriptor,
    RepoMetric,
    TimelinePoint,
)

SAMPLE_LABEL = "Sample data (illustrative)"


def _ts(day: int, hour: int = 12) -> datetime:
    return datetime(2024, 5, day, hour, tzinfo=timezone.utc)


def build_sample_snapshot() -> MetricSnapshot:
    """Returns a fresh copy of the illustrative snapshot."""
    return MetricSnapshot(
        generated_at=_ts(31, 18),
        range=RangeDescriptor(since=_ts(1, 0), until=_ts(31, 0), label=SAMPLE_LABEL),
        repos=[
            RepoMetric(
                name="web-app",
                owner="acme",
                full_name="acme/web-app",
                active_contributors=4,
                merged_prs=18,
                open_prs=3,
                commits=74,
                lines_added=5210,
                lines_deleted=2380,
                deployment_frequency=1,
                average_lead_time_hours=21,
                health_score=45,
                languages=["TypeScript", "CSS"],
            ),
            RepoMetric(
                name="api",
                owner="acme",
                full_name="acme/api",
                active_contributors=3,
                merged_prs=11,
                open_prs=6,
                commits=39,
                lines_added=3120,
                lines_deleted=1410,
                deployment_frequency=1,
                average_lead_time_hours=34,
                health_score=37,
                languages=["Python"],
            ),
        ],
        engineers=[
            EngineerMetric(
                engineer="octocat",
                repos=["web-app", "api"],
                merged_prs=12,
                commits=47,
                lines_added=3900,
                lines_deleted=1620,
                impact_score=712,
                avg_cycle_time_hours=24,
                last_active=_ts(30),
            ),
            EngineerMetric(
                engineer="hubot",
                repos=["web-app"],
                merged_prs=9,
                commits=36,
                lines_added=2540,
                lines_deleted=1280,
                impact_score=548,
                avg_cycle_time_hours=19,
                last_active=_ts(29),
            ),
            EngineerMetric(
                engineer="monalisa",
                repos=["api"],
                merged_prs=8,
                commits=30,
                lines_added=1890,
                lines_deleted=890,
                impact_score=431,
                avg_cycle_time_hours=38,
                last_active=_ts(27),
            ),
        ],
        timeline=[
            TimelinePoint(week="2024-04-29", merged_prs=5, commits=19, lines_added=1320, lines_deleted=610),
            TimelinePoint(week="2024-05-06", merged_prs=7, commits=26, lines_added=1980, lines_deleted=870),
            TimelinePoint(week="2024-05-13", merged_prs=6, commits=22, lines_added=1710, lines_deleted=790),
            TimelinePoint(week="2024-05-20", merged_prs=8, commits=31, lines_added=2240, lines_deleted=1020),
            TimelinePoint(week="2024-05-27", merged_prs=3, commits=15, lines_added=1080, lines_deleted=500),
        ],
        high_impact_prs=[
            HighImpactPR(
                id=1001,
                title="Rework checkout flow",
                repo="acme/web-app",
                author="octocat",
                merged_at=_ts(22),
                additions=1240,
                deletions=410,
                changed_files=37,
                lead_time_hours=52,
                url="https://github.com/acme/web-app/pull/412",
                summary="Merged into main from feature/checkout",
            ),
            HighImpactPR(
                id=1002,
                title="Add rate limiting middleware",
                repo="acme/api",
                author="monalisa",
                merged_at=_ts(15),
                additions=620,
                deletions=95,
                changed_files=12,
                lead_time_hours=30,
                url="https://github.com/acme/api/pull/208",
                summary="Merged into main from feature/rate-limit",
            ),
        ],
    )
