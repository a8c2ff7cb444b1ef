from datetime import datetime
from typing import List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model that serializes field names in camelCase for the dashboard client.
    Fields can still be populated by their Python names.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RangeDescriptor(CamelModel):
    """
    Immutable, canonical time window for one metrics request.
    """
    model_config = ConfigDict(frozen=True)

    since: datetime = Field(..., description="Inclusive lower bound of the window")
    until: datetime = Field(..., description="Inclusive upper bound of the window")
    label: str = Field(..., description="Human readable description of the window")


class Repository(CamelModel):
    """
    A repository selected for aggregation, as returned by the platform.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    owner: str
    full_name: str
    language: Optional[str] = Field(
        default=None,
        description="Primary language, used as the fallback language set",
    )


class PullRequest(CamelModel):
    """
    Full-detail pull request as fetched from the platform. Read-only downstream.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    number: int
    title: str
    author: str
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    merged_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    changed_files: int = Field(default=0, ge=0)
    commits: int = Field(default=0, ge=0)
    head_ref: str = ""
    base_ref: str = ""
    draft: bool = False
    url: str = ""

    @property
    def churn(self) -> int:
        return self.additions + self.deletions


class RepoMetric(CamelModel):
    """
    Per-repository metrics. Mutated while a repository is folded, then only read.
    """
    name: str
    owner: str
    full_name: str
    active_contributors: int = 0
    merged_prs: int = Field(default=0, alias="mergedPRs")
    open_prs: int = Field(default=0, alias="openPRs")
    commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0
    deployment_frequency: int = 0
    average_lead_time_hours: int = 0
    # No issue data source is wired up; always zero.
    issues_closed: int = 0
    health_score: int = Field(default=0, ge=0, le=100)
    languages: List[str] = Field(default_factory=list)


class EngineerMetric(CamelModel):
    """
    Per-author metrics, first within one repository and then merged across repositories.
    `reviews` and `avg_review_turnaround_hours` have no data source and stay zero.
    """
    engineer: str
    avatar_url: Optional[str] = None
    repos: List[str] = Field(default_factory=list)
    merged_prs: int = Field(default=0, alias="mergedPRs")
    commits: int = 0
    reviews: int = 0
    lines_added: int = 0
    lines_deleted: int = 0
    impact_score: int = 0
    avg_cycle_time_hours: int = 0
    avg_review_turnaround_hours: int = 0
    last_active: datetime


class HighImpactPR(CamelModel):
    """
    Denormalized summary of one merged pull request, ranked by churn for display.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    repo: str
    author: str
    merged_at: datetime
    additions: int
    deletions: int
    changed_files: int
    lead_time_hours: int = Field(..., ge=1)
    url: str
    summary: str

    @property
    def churn(self) -> int:
        return self.additions + self.deletions


class TimelinePoint(CamelModel):
    """
    Merged work for one ISO week, keyed by the week's Monday (UTC) as YYYY-MM-DD.
    """
    week: str
    merged_prs: int = Field(default=0, alias="mergedPRs")
    commits: int = 0
    lines_added: int = 0
    lines_deleted: int = 0


class MetricSnapshot(CamelModel):
    """
    Aggregate root of one metrics build. Never mutated after construction.
    """
    model_config = ConfigDict(frozen=True)

    generated_at: datetime
    range: RangeDescriptor
    repos: List[RepoMetric] = Field(default_factory=list)
    engineers: List[EngineerMetric] = Field(default_factory=list)
    timeline: List[TimelinePoint] = Field(default_factory=list)
    high_impact_prs: List[HighImpactPR] = Field(default_factory=list, alias="highImpactPRs")


class SnapshotRequest(CamelModel):
    """
    Inbound parameters of the "build metrics snapshot" operation.
    """
    org: Optional[str] = None
    repos: Optional[List[str]] = None
    since: Optional[str] = None
    until: Optional[str] = None
    range_days: Optional[Union[int, float, str]] = Field(default=None, alias="range")


class SnapshotFallback(CamelModel):
    """
    Body returned when a build fails: the error text plus the illustrative snapshot.
    """
    error: str
    fallback: MetricSnapshot
