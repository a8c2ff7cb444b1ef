import math

from src.domain.models import PullRequest

SIZE_SATURATION = 30
FILES_SATURATION = 20
COMMITS_SATURATION = 10

SIZE_WEIGHT = 50
FILES_WEIGHT = 30
COMMITS_WEIGHT = 20
DRAFT_PENALTY = 0.9


def round_half_up(value: float) -> int:
    """Rounds to the nearest integer with .5 going up (so 64.5 -> 65, unlike round())."""
    return math.floor(value + 0.5)


def calculate_impact_score(pr: PullRequest) -> int:
    """
    Scores one pull request on a 0-100 scale.

    Size (added + deleted lines), breadth (changed files) and depth (commits) each
    saturate independently and are weighted 50/30/20. Draft pull requests are
    discounted by 10%.
    """
    size_factor = min(SIZE_SATURATION, pr.additions + pr.deletions) / SIZE_SATURATION
    files_factor = min(FILES_SATURATION, pr.changed_files) / FILES_SATURATION
    commits_factor = min(COMMITS_SATURATION, pr.commits) / COMMITS_SATURATION

    raw = SIZE_WEIGHT * size_factor + FILES_WEIGHT * files_factor + COMMITS_WEIGHT * commits_factor
    if pr.draft:
        raw *= DRAFT_PENALTY
    return round_half_up(raw)
