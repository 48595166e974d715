"""
Remote collector.

Lists every repository of a user or organization and enriches each one
with branch, pull request, commit activity and language data. Enrichment
sub-queries run concurrently per repository; repositories themselves are
processed one after another since they share one rate-limited session.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import NonNegativeInt, TypeAdapter

from project_pm.github_client import RepositoryHost, decode_content
from project_pm.local_scanner import AGENT_FILE, DEPENDENCY_MANIFEST, README_FILE, parse_dependency_names
from project_pm.result import Outcome, attempt_async
from project_pm.schemas import RemoteProjectFiles, RemoteRepo, Visibility

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
ACTIVITY_WEEKS = 4
PROGRESS_EVERY = 10

T = TypeVar("T")

# Expected payload shapes of the enrichment lookups
BRANCH_NAMES = TypeAdapter(list[str])
OPEN_PULLS = TypeAdapter(NonNegativeInt)
WEEKLY_ACTIVITY = TypeAdapter(list[dict[str, Any]])
LANGUAGE_BYTES = TypeAdapter(dict[str, NonNegativeInt])


def transform_repo_data(raw: dict[str, Any]) -> RemoteRepo:
    """
    Build a partial record from a repository listing entry.

    Enrichment counters start at zero and are filled in later.
    """
    visibility = raw.get("visibility") or ("private" if raw.get("private") else "public")
    if visibility not in {v.value for v in Visibility}:
        visibility = None
    license_info = raw.get("license") or {}

    return RemoteRepo(
        name=raw["name"],
        github_url=raw.get("html_url") or "",
        default_branch=raw.get("default_branch") or "main",
        last_commit_date=raw.get("pushed_at") or None,
        visibility=visibility,
        topics=raw.get("topics") or [],
        license=license_info.get("spdx_id") or None,
        size_kb=raw.get("size") or 0,
        is_archived=bool(raw.get("archived")),
        is_fork=bool(raw.get("fork")),
    )


def sum_recent_activity(weeks: list[dict[str, Any]], count: int = ACTIVITY_WEEKS) -> int:
    """Sum the commit totals of the last ``count`` weekly buckets."""
    return sum(int(week.get("total", 0)) for week in weeks[-count:])


async def list_all_repositories(
    host: RepositoryHost,
    owner: str,
    org: str | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[dict[str, Any]]:
    """
    Page through the repository listing until it is exhausted.

    Stops on an empty page or on a page shorter than ``page_size``.
    """
    repos: list[dict[str, Any]] = []
    page = 1
    while True:
        listing = await attempt_async(
            lambda: host.list_repositories(owner, org, page=page, per_page=page_size),
            [],
            f"list repositories (page {page})",
        )
        batch = listing.value
        if not batch:
            break
        repos.extend(batch)
        if len(batch) < page_size:
            break
        page += 1
    return repos


async def checked_lookup(
    factory: Callable[[], Awaitable[Any]],
    adapter: TypeAdapter[T],
    default: T,
    description: str,
) -> Outcome[T]:
    """
    Run one host lookup and validate its payload.

    A payload of the wrong shape is handled like a failed request: the
    default is used and a warning logged.
    """

    async def validated() -> T:
        return adapter.validate_python(await factory())

    return await attempt_async(validated, default, description)


async def enrich_repository(host: RepositoryHost, owner: str, repo: RemoteRepo) -> RemoteRepo:
    """
    Fill in branch, pull request, activity and language data.

    Each sub-query falls back to an empty value on its own; one failing
    lookup never affects the others.
    """
    name = repo.name
    branches, pulls, activity, languages = await asyncio.gather(
        checked_lookup(lambda: host.list_branches(owner, name), BRANCH_NAMES, [], f"list branches of {name}"),
        checked_lookup(lambda: host.count_open_pulls(owner, name), OPEN_PULLS, 0, f"count pull requests of {name}"),
        checked_lookup(lambda: host.commit_activity(owner, name), WEEKLY_ACTIVITY, [], f"get commit activity of {name}"),
        checked_lookup(lambda: host.list_languages(owner, name), LANGUAGE_BYTES, {}, f"list languages of {name}"),
    )

    commit_count = 0
    if activity.ok:
        try:
            commit_count = sum_recent_activity(activity.value)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Unreadable commit activity for {name}: {e}")

    return RemoteRepo.model_validate(
        {
            **repo.model_dump(),
            "branch_names": branches.value,
            "branch_count": len(branches.value),
            "open_pr_count": pulls.value,
            "commit_count_last_30_days": max(commit_count, 0),
            "languages": languages.value,
        }
    )


async def fetch_all_repos(
    host: RepositoryHost,
    owner: str,
    org: str | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[RemoteRepo]:
    """
    List and enrich every repository of the target account.

    Args:
        host: Hosting API client
        owner: Account name used for per-repository lookups
        org: Organization to list instead of the authenticated user
        page_size: Listing page size

    Returns:
        Enriched repositories in most-recently-pushed order
    """
    target = org or owner
    raw_repos = await list_all_repositories(host, owner, org, page_size)
    logger.info(f"Fetching details for {len(raw_repos)} repos...")

    projects: list[RemoteRepo] = []
    for raw in raw_repos:
        projects.append(await enrich_repository(host, target, transform_repo_data(raw)))
        if len(projects) % PROGRESS_EVERY == 0:
            logger.info(f"  ...processed {len(projects)}/{len(raw_repos)}")

    return projects


async def fetch_file_text(host: RepositoryHost, owner: str, repo: str, path: str) -> str | None:
    """Fetch and decode one file; absence and failures both give None."""
    outcome = await attempt_async(
        lambda: host.get_file_content(owner, repo, path), None, f"fetch {path} of {repo}"
    )
    return decode_content(outcome.value)


async def fetch_repo_files(host: RepositoryHost, owner: str, repo: str) -> RemoteProjectFiles:
    """
    Fetch the agent-instructions file, readme and package.json of a repository.

    Used when there is no local checkout to read them from.
    """
    claude_content, readme_content, package_json = await asyncio.gather(
        fetch_file_text(host, owner, repo, AGENT_FILE),
        fetch_file_text(host, owner, repo, README_FILE),
        fetch_file_text(host, owner, repo, DEPENDENCY_MANIFEST),
    )

    return RemoteProjectFiles(
        claude_content=claude_content,
        readme_content=readme_content,
        dependencies=parse_dependency_names(package_json) if package_json else None,
    )
