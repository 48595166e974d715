"""
Lifecycle status classification.

Maps the last activity timestamp of a repository to a coarse bucket and
resolves the final status against a manual override.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from project_pm.schemas import Project, ProjectStatus

SECONDS_PER_DAY = 86_400

ACTIVE_DAYS = 7
RECENT_DAYS = 30
STALE_DAYS = 90

# Manifest ordering, most alive first
STATUS_PRIORITY: dict[ProjectStatus, int] = {
    ProjectStatus.ACTIVE: 0,
    ProjectStatus.RECENT: 1,
    ProjectStatus.STALE: 2,
    ProjectStatus.PAUSED: 3,
    ProjectStatus.ABANDONED: 4,
}


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive values are assumed to be UTC. A trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_status(last_commit_date: str | datetime | None, now: datetime) -> ProjectStatus:
    """
    Classify a project by the age of its last commit.

    Args:
        last_commit_date: Last activity timestamp, or None if unknown
        now: Reference instant the age is measured from

    Returns:
        One of active, recent, stale or abandoned. Never paused.
    """
    if not last_commit_date:
        return ProjectStatus.ABANDONED

    days_since = (parse_timestamp(now) - parse_timestamp(last_commit_date)).total_seconds() / SECONDS_PER_DAY

    if days_since <= ACTIVE_DAYS:
        return ProjectStatus.ACTIVE
    if days_since <= RECENT_DAYS:
        return ProjectStatus.RECENT
    if days_since <= STALE_DAYS:
        return ProjectStatus.STALE
    return ProjectStatus.ABANDONED


@dataclass(frozen=True)
class Computed:
    """Status derived from activity."""

    status: ProjectStatus


@dataclass(frozen=True)
class Overridden:
    """Status set by hand; it replaces the computed one."""

    status: ProjectStatus
    computed: ProjectStatus


StatusResolution = Computed | Overridden


def resolve_status(computed: ProjectStatus, override: ProjectStatus | None) -> StatusResolution:
    """Manual status wins, otherwise the computed one stands."""
    if override is not None:
        return Overridden(status=override, computed=computed)
    return Computed(status=computed)


def status_sort_key(project: Project) -> int:
    """Sort key placing projects in manifest order."""
    return STATUS_PRIORITY[project.computed_status]
