"""
Pydantic schemas for project-pm data models.

The manifest is consumed by a separate dashboard, so persisted models
serialize with camelCase keys (``generatedAt``, ``lastCommitDate``, ...).
Always dump them with ``by_alias=True``.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ProjectStatus(str, Enum):
    """Coarse lifecycle bucket of a project."""

    ACTIVE = "active"
    RECENT = "recent"
    STALE = "stale"
    ABANDONED = "abandoned"
    PAUSED = "paused"  # only reachable through a manual override


class ProjectSource(str, Enum):
    """Where a project's data comes from."""

    LOCAL_ONLY = "local-only"
    REMOTE_ONLY = "remote-only"
    SYNCED = "synced"


class Visibility(str, Enum):
    """Repository visibility on the hosting service."""

    PUBLIC = "public"
    PRIVATE = "private"


class CamelModel(BaseModel):
    """Base model for records persisted to the manifest."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LocalRemoteDiff(CamelModel):
    """Divergence between a local checkout and its remote."""

    local_branch: str = Field(default="unknown", description="Currently checked out branch")
    remote_branch: str = Field(..., description="Remote branch compared against")
    ahead_count: int = Field(default=0, ge=0)
    behind_count: int = Field(default=0, ge=0)
    has_uncommitted_changes: bool = False
    local_only_branches: list[str] = Field(default_factory=list)
    remote_only_branches: list[str] = Field(default_factory=list)


def _sorted_unique(values: list[str]) -> list[str]:
    return sorted(set(values))


class Project(CamelModel):
    """One reconciled repository, the unit of output."""

    # Identity
    name: str
    path: str | None = None
    github_url: str | None = None

    # Activity
    last_commit_date: str | None = None
    commit_count_last_30_days: int = Field(default=0, ge=0, alias="commitCountLast30Days")
    open_pr_count: int = Field(default=0, ge=0, alias="openPRCount")
    default_branch: str = "main"
    branch_count: int = Field(default=0, ge=0)

    # Documentation flags
    has_claude: bool = False
    has_readme: bool = False
    has_plan_docs: bool = False
    has_todos: bool = False

    # Derived content
    description: str | None = None
    tech_stack: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)

    # Manual overrides
    tags: list[str] = Field(default_factory=list)
    status: ProjectStatus | None = None
    notes: str | None = None

    computed_status: ProjectStatus
    source: ProjectSource

    # Remote metadata
    visibility: Visibility | None = None
    languages: dict[str, int] = Field(default_factory=dict)
    topics: list[str] = Field(default_factory=list)
    license: str | None = None
    size_kb: int = Field(default=0, ge=0, alias="sizeKB")
    is_archived: bool = False
    is_fork: bool = False

    diff: LocalRemoteDiff | None = None

    @field_validator("tech_stack", "capabilities")
    @classmethod
    def normalize_labels(cls, v: list[str]) -> list[str]:
        """Labels are kept sorted and free of duplicates."""
        return _sorted_unique(v)

    @model_validator(mode="after")
    def check_diff_source(self) -> "Project":
        """A diff only makes sense when both sides exist."""
        if self.diff is not None and self.source != ProjectSource.SYNCED:
            raise ValueError(f"diff is only allowed for synced projects, got {self.source.value}")
        return self


class ProjectManifest(CamelModel):
    """Persisted snapshot of one pipeline run."""

    generated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )
    projects: list[Project] = Field(default_factory=list)


class ProjectOverride(BaseModel):
    """User-supplied values that win over computed ones."""

    model_config = ConfigDict(extra="ignore")

    tags: list[str] | None = None
    status: ProjectStatus | None = None
    notes: str | None = None


class RemoteRepo(BaseModel):
    """Partial project record built from the hosting API."""

    name: str
    github_url: str
    default_branch: str = "main"
    last_commit_date: str | None = None
    branch_count: int = 0
    branch_names: list[str] = Field(default_factory=list)
    open_pr_count: int = 0
    commit_count_last_30_days: int = 0
    visibility: Visibility | None = None
    languages: dict[str, int] = Field(default_factory=dict)
    topics: list[str] = Field(default_factory=list)
    license: str | None = None
    size_kb: int = 0
    is_archived: bool = False
    is_fork: bool = False


class RemoteProjectFiles(BaseModel):
    """Well-known files fetched from the hosting API."""

    claude_content: str | None = None
    readme_content: str | None = None
    dependencies: list[str] | None = None


class LocalProjectData(BaseModel):
    """Signals read from a local checkout."""

    has_claude: bool = False
    has_readme: bool = False
    has_plan_docs: bool = False
    has_todos: bool = False
    claude_content: str | None = None
    readme_content: str | None = None
    file_extensions: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
