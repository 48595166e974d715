"""
Local/remote divergence for synced repositories.

Shells out to git with explicit argument vectors. Every git call degrades
to an empty string on failure, and the diff as a whole degrades to a fixed
safe default so a flaky checkout never yields a half-filled record.
"""

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path

from project_pm.schemas import LocalRemoteDiff

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 60

Runner = Callable[..., subprocess.CompletedProcess]


def safe_git(
    args: list[str],
    cwd: Path | str,
    description: str,
    runner: Runner = subprocess.run,
) -> str:
    """
    Run a git subcommand and return its trimmed stdout.

    Args:
        args: Subcommand and arguments, e.g. ``["status", "--porcelain"]``
        cwd: Repository working directory
        description: Action description used in the warning log
        runner: Process runner, ``subprocess.run`` outside of tests

    Returns:
        Trimmed stdout, or "" if the command failed for any reason
    """
    argv = ["git", "-C", str(cwd), *args]
    try:
        result = runner(
            argv,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
            check=True,
        )
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
        logger.warning(f"[diff] Failed to {description}: {detail}")
        return ""
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.warning(f"[diff] Failed to {description}: {e}")
        return ""
    return (result.stdout or "").strip()


def safe_default_diff(default_branch: str) -> LocalRemoteDiff:
    """The diff reported when nothing reliable could be computed."""
    return LocalRemoteDiff(
        local_branch="unknown",
        remote_branch=default_branch,
        ahead_count=0,
        behind_count=0,
        has_uncommitted_changes=False,
        local_only_branches=[],
        remote_only_branches=[],
    )


def parse_ahead_behind(output: str) -> tuple[int, int]:
    """Parse ``rev-list --left-right --count`` output into (ahead, behind)."""
    parts = output.split()
    if len(parts) != 2:
        return 0, 0
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return 0, 0


def compute_local_remote_diff(
    local_path: Path | str,
    remote_branches: list[str],
    default_branch: str,
    runner: Runner = subprocess.run,
) -> LocalRemoteDiff:
    """
    Compare a local checkout against its remote.

    Args:
        local_path: Path to the local checkout
        remote_branches: Branch names already fetched from the hosting API
        default_branch: Remote default branch to count against
        runner: Process runner, ``subprocess.run`` outside of tests

    Returns:
        LocalRemoteDiff; the safe default if the current branch can't be
        resolved or anything unexpected goes wrong
    """
    safe_default = safe_default_diff(default_branch)

    def git(args: list[str], description: str) -> str:
        return safe_git(args, local_path, description, runner)

    try:
        local_branch = git(["rev-parse", "--abbrev-ref", "HEAD"], "get local branch")
        if not local_branch:
            return safe_default

        # Stale refs are still usable when there is no remote to fetch from
        git(["fetch", "origin", "--quiet"], "fetch origin")

        ahead_count, behind_count = parse_ahead_behind(
            git(
                ["rev-list", "--left-right", "--count", f"HEAD...origin/{default_branch}"],
                "count commits ahead/behind",
            )
        )

        status_output = git(["status", "--porcelain"], "check git status")
        has_uncommitted_changes = len(status_output) > 0

        local_branches_output = git(["branch", "--format=%(refname:short)"], "list local branches")
        local_branches = [b.strip() for b in local_branches_output.split("\n") if b.strip()]

        remote_set = set(remote_branches)
        local_set = set(local_branches)

        return LocalRemoteDiff(
            local_branch=local_branch,
            remote_branch=default_branch,
            ahead_count=ahead_count,
            behind_count=behind_count,
            has_uncommitted_changes=has_uncommitted_changes,
            local_only_branches=[b for b in local_branches if b not in remote_set],
            remote_only_branches=[b for b in remote_branches if b not in local_set],
        )
    except Exception as e:
        logger.warning(f"[diff] Unexpected error computing diff: {e}")
        return safe_default
