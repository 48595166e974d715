"""Tests for the local/remote diff engine with a fake git runner."""

import subprocess

from project_pm.git_diff import (
    compute_local_remote_diff,
    parse_ahead_behind,
    safe_default_diff,
    safe_git,
)


def failure(subcommand: str) -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(128, ["git", subcommand], stderr="fatal: boom")


class TestSafeGit:
    """Tests for the git call wrapper."""

    def test_returns_trimmed_stdout(self, git_runner):
        """Test that stdout is stripped."""
        runner = git_runner({"rev-parse": "  main\n"})
        assert safe_git(["rev-parse", "--abbrev-ref", "HEAD"], "/repo", "get branch", runner) == "main"

    def test_uses_argument_vector(self, git_runner):
        """Test that git is invoked with -C and explicit args."""
        calls = []
        runner = git_runner({}, calls)
        safe_git(["status", "--porcelain"], "/repo", "check status", runner)
        assert calls == [["git", "-C", "/repo", "status", "--porcelain"]]

    def test_failure_returns_empty(self, git_runner):
        """Test that a failing command gives an empty string."""
        runner = git_runner({"status": failure("status")})
        assert safe_git(["status"], "/repo", "check status", runner) == ""

    def test_missing_git_returns_empty(self, git_runner):
        """Test that a missing executable gives an empty string."""
        runner = git_runner({"status": FileNotFoundError("git")})
        assert safe_git(["status"], "/repo", "check status", runner) == ""

    def test_timeout_returns_empty(self, git_runner):
        """Test that a hung command gives an empty string."""
        runner = git_runner({"fetch": subprocess.TimeoutExpired(["git", "fetch"], 60)})
        assert safe_git(["fetch"], "/repo", "fetch origin", runner) == ""


class TestParseAheadBehind:
    """Tests for rev-list count parsing."""

    def test_tab_separated(self):
        assert parse_ahead_behind("2\t1") == (2, 1)

    def test_empty(self):
        assert parse_ahead_behind("") == (0, 0)

    def test_garbage(self):
        assert parse_ahead_behind("abc def") == (0, 0)
        assert parse_ahead_behind("5") == (0, 0)


class TestComputeLocalRemoteDiff:
    """Tests for the full diff sequence."""

    def test_ahead_and_behind(self, git_runner):
        """Test a synced repo with commits ahead and behind."""
        runner = git_runner({
            "rev-parse": "main",
            "fetch": "",
            "rev-list": "2\t1",
            "status": "",
            "branch": "main\ndev\nfeature/test\n",
        })

        diff = compute_local_remote_diff("/repo", ["main", "develop"], "main", runner=runner)

        assert diff.local_branch == "main"
        assert diff.remote_branch == "main"
        assert diff.ahead_count == 2
        assert diff.behind_count == 1
        assert diff.has_uncommitted_changes is False
        assert diff.local_only_branches == ["dev", "feature/test"]
        assert diff.remote_only_branches == ["develop"]

    def test_uncommitted_changes(self, git_runner):
        """Test that porcelain output means a dirty tree."""
        runner = git_runner({
            "rev-parse": "main",
            "rev-list": "0\t0",
            "status": " M src/index.ts\n?? dist/",
            "branch": "main",
        })

        diff = compute_local_remote_diff("/repo", ["main"], "main", runner=runner)

        assert diff.has_uncommitted_changes is True

    def test_counts_against_default_branch(self, git_runner):
        """Test that rev-list compares HEAD with origin/<default>."""
        calls = []
        runner = git_runner({"rev-parse": "feature"}, calls)

        compute_local_remote_diff("/repo", [], "trunk", runner=runner)

        rev_list = [argv for argv in calls if argv[3] == "rev-list"]
        assert rev_list == [["git", "-C", "/repo", "rev-list", "--left-right", "--count", "HEAD...origin/trunk"]]

    def test_fetch_failure_is_ignored(self, git_runner):
        """Test that a missing remote doesn't stop later steps."""
        runner = git_runner({
            "rev-parse": "main",
            "fetch": failure("fetch"),
            "rev-list": "3\t0",
            "status": "",
            "branch": "main",
        })

        diff = compute_local_remote_diff("/repo", ["main"], "main", runner=runner)

        assert diff.local_branch == "main"
        assert diff.ahead_count == 3

    def test_later_failures_give_zeros(self, git_runner):
        """Test that failing steps after the branch lookup degrade to defaults."""
        runner = git_runner({
            "rev-parse": "main",
            "fetch": failure("fetch"),
            "rev-list": failure("rev-list"),
            "status": failure("status"),
            "branch": failure("branch"),
        })

        diff = compute_local_remote_diff("/repo", [], "main", runner=runner)

        assert diff.ahead_count == 0
        assert diff.behind_count == 0
        assert diff.has_uncommitted_changes is False

    def test_branch_failure_returns_safe_default(self, git_runner):
        """Test that an unresolvable branch returns the safe default."""
        calls = []
        runner = git_runner({
            "rev-parse": failure("rev-parse"),
            "rev-list": "9\t9",
            "status": "M x",
            "branch": "other",
        }, calls)

        diff = compute_local_remote_diff("/invalid", ["main"], "main", runner=runner)

        assert diff == safe_default_diff("main")
        assert len(calls) == 1

    def test_safe_default_fields(self):
        """Test the fixed safe default."""
        diff = safe_default_diff("main")

        assert diff.local_branch == "unknown"
        assert diff.remote_branch == "main"
        assert diff.ahead_count == 0
        assert diff.behind_count == 0
        assert diff.has_uncommitted_changes is False
        assert diff.local_only_branches == []
        assert diff.remote_only_branches == []

    def test_unexpected_error_discards_partial_results(self, git_runner):
        """Test that an unexpected exception gives the safe default."""
        runner = git_runner({
            "rev-parse": "main",
            "rev-list": "1\t1",
            "status": RuntimeError("unexpected"),
        })

        diff = compute_local_remote_diff("/repo", ["main"], "main", runner=runner)

        assert diff == safe_default_diff("main")
