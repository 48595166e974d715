"""
Reconciliation of remote repositories with local checkouts.

For each repository on the host, decides whether a local checkout exists,
collects signals from whichever side is available, computes the diff for
synced projects, applies manual overrides and writes the manifest.
"""

import logging
import subprocess
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import TypedDict

from project_pm.config import Credentials, PortfolioConfig
from project_pm.extractor import detect_tech_stack, extract_capabilities, extract_description
from project_pm.git_diff import Runner, compute_local_remote_diff
from project_pm.github_client import RepositoryHost
from project_pm.local_scanner import read_local_project
from project_pm.manifest import load_overrides, write_manifest
from project_pm.remote import fetch_all_repos, fetch_repo_files
from project_pm.result import attempt
from project_pm.schemas import (
    LocalProjectData,
    LocalRemoteDiff,
    Project,
    ProjectManifest,
    ProjectOverride,
    ProjectSource,
    ProjectStatus,
    RemoteProjectFiles,
    RemoteRepo,
)
from project_pm.status import compute_status, resolve_status, status_sort_key

logger = logging.getLogger(__name__)


class OverrideFields(TypedDict):
    """Project fields decided by merging a manual override with computed values."""

    tags: list[str]
    status: ProjectStatus | None
    notes: str | None
    computed_status: ProjectStatus


def classify_source(local_path: str | Path | None, remote_url: str | None) -> ProjectSource:
    """Synced when both sides exist, local-only without a remote, else remote-only."""
    if local_path and remote_url:
        return ProjectSource.SYNCED
    if local_path and not remote_url:
        return ProjectSource.LOCAL_ONLY
    return ProjectSource.REMOTE_ONLY


def find_local_path(name: str, local_dir: str | Path | None) -> Path | None:
    """Locate a checkout named after the repository under the projects root."""
    if not local_dir:
        return None
    candidate = Path(local_dir).expanduser() / name
    try:
        return candidate if candidate.exists() else None
    except OSError:
        return None


def apply_overrides(
    computed: ProjectStatus,
    override: ProjectOverride | None,
) -> OverrideFields:
    """
    Merge a manual override with computed values.

    Tags and notes replace the defaults wholesale; status goes through
    :func:`resolve_status`.

    Returns:
        Field values spread into the Project record
    """
    override = override or ProjectOverride()
    resolution = resolve_status(computed, override.status)
    return OverrideFields(
        tags=list(override.tags) if override.tags is not None else [],
        status=override.status,
        notes=override.notes,
        computed_status=resolution.status,
    )


def build_project(
    repo: RemoteRepo,
    now: datetime,
    local: LocalProjectData | None = None,
    remote_files: RemoteProjectFiles | None = None,
    local_path: Path | None = None,
    override: ProjectOverride | None = None,
    diff: LocalRemoteDiff | None = None,
) -> Project:
    """
    Assemble one project record.

    Documentation comes from the local checkout when there is one, otherwise
    from the files fetched off the host. The agent-instructions file takes
    precedence over the readme for description and capabilities.
    """
    if local is not None:
        claude_content = local.claude_content
        readme_content = local.readme_content
        has_plan_docs = local.has_plan_docs
        has_todos = local.has_todos
        dependencies = local.dependencies
        extensions = local.file_extensions
    else:
        files = remote_files or RemoteProjectFiles()
        claude_content = files.claude_content
        readme_content = files.readme_content
        has_plan_docs = False
        has_todos = False
        dependencies = files.dependencies or []
        extensions = []

    doc_content = claude_content or readme_content or ""

    computed = attempt(
        lambda: compute_status(repo.last_commit_date, now),
        ProjectStatus.ABANDONED,
        f"classify status of {repo.name}",
    ).value

    source = classify_source(local_path, repo.github_url or None)

    return Project(
        name=repo.name,
        path=str(local_path) if local_path else None,
        github_url=repo.github_url or None,
        last_commit_date=repo.last_commit_date,
        commit_count_last_30_days=repo.commit_count_last_30_days,
        open_pr_count=repo.open_pr_count,
        default_branch=repo.default_branch,
        branch_count=repo.branch_count,
        has_claude=claude_content is not None,
        has_readme=readme_content is not None,
        has_plan_docs=has_plan_docs,
        has_todos=has_todos,
        description=extract_description(doc_content),
        tech_stack=detect_tech_stack(dependencies, extensions),
        capabilities=extract_capabilities(doc_content),
        source=source,
        visibility=repo.visibility,
        languages=repo.languages,
        topics=repo.topics,
        license=repo.license,
        size_kb=repo.size_kb,
        is_archived=repo.is_archived,
        is_fork=repo.is_fork,
        diff=diff if source == ProjectSource.SYNCED else None,
        **apply_overrides(computed, override),
    )


def sort_projects(projects: list[Project]) -> list[Project]:
    """Stable sort by status priority."""
    return sorted(projects, key=status_sort_key)


def summarize(projects: list[Project]) -> dict[str, int]:
    """Count projects per computed status, in priority order."""
    counts = Counter(project.computed_status for project in sort_projects(projects))
    return {status.value: count for status, count in counts.items()}


class Reconciler:
    """
    Runs one manifest pass.
    """

    def __init__(
        self,
        config: PortfolioConfig,
        credentials: Credentials,
        host: RepositoryHost,
        now: datetime | None = None,
        diff_runner: Runner = subprocess.run,
    ):
        """
        Initialize the reconciler.

        Args:
            config: Loaded configuration
            credentials: Token and username for the run
            host: Hosting API client (GitHub or a fake)
            now: Reference instant for status classification (default: at run start)
            diff_runner: Process runner used by the diff engine
        """
        self.config = config
        self.credentials = credentials
        self.host = host
        self.now = now
        self.diff_runner = diff_runner

    @property
    def owner(self) -> str:
        return self.config.github.org or self.credentials.username

    def _collect_local(self, local_path: Path) -> LocalProjectData:
        return read_local_project(
            local_path,
            max_depth=self.config.local.max_depth,
            excluded_dirs=self.config.local.excluded_dirs,
        )

    async def reconcile_repo(
        self,
        repo: RemoteRepo,
        now: datetime,
        override: ProjectOverride | None,
    ) -> Project:
        """Collect, diff and assemble a single repository."""
        local_path = find_local_path(repo.name, self.config.local.projects_dir)

        local: LocalProjectData | None = None
        remote_files: RemoteProjectFiles | None = None
        if local_path is not None:
            local = self._collect_local(local_path)
        else:
            remote_files = await fetch_repo_files(self.host, self.owner, repo.name)

        diff: LocalRemoteDiff | None = None
        if classify_source(local_path, repo.github_url or None) == ProjectSource.SYNCED:
            diff = compute_local_remote_diff(
                local_path,
                repo.branch_names,
                repo.default_branch,
                runner=self.diff_runner,
            )

        return build_project(
            repo,
            now,
            local=local,
            remote_files=remote_files,
            local_path=local_path,
            override=override,
            diff=diff,
        )

    async def build_manifest(self) -> ProjectManifest:
        """
        Reconcile every repository without writing anything.

        Returns:
            Manifest with projects sorted by status priority
        """
        now = self.now or datetime.now(timezone.utc)
        overrides = load_overrides(self.config.output.overrides_path)

        logger.info(f"Fetching repos for {self.owner}...")
        repos = await fetch_all_repos(
            self.host,
            self.credentials.username,
            org=self.config.github.org,
            page_size=self.config.github.page_size,
        )
        logger.info(f"Found {len(repos)} repos on GitHub")

        projects: list[Project] = []
        seen: set[str] = set()
        for repo in repos:
            if repo.name in seen:
                logger.warning(f"Skipping duplicate repository {repo.name}")
                continue
            seen.add(repo.name)
            projects.append(await self.reconcile_repo(repo, now, overrides.get(repo.name)))

        return ProjectManifest(projects=sort_projects(projects))

    async def run(self) -> ProjectManifest:
        """
        Reconcile every repository and write the manifest.

        Raises:
            ManifestError: If the manifest can't be written
        """
        manifest = await self.build_manifest()
        path = write_manifest(
            manifest,
            self.config.output.manifest_path,
            pretty=self.config.output.pretty_json,
        )
        logger.info(f"Wrote manifest with {len(manifest.projects)} projects to {path}")

        for status, count in summarize(manifest.projects).items():
            logger.info(f"  {status}: {count}")

        return manifest
