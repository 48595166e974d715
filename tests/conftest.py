"""Shared fixtures: an in-memory repository host and a fake git runner."""

import base64
import subprocess

import pytest


class HostError(Exception):
    """Raised by FakeHost for lookups configured to fail."""


class FakeHost:
    """
    In-memory RepositoryHost.

    ``files`` values may be text, raw bytes, or a ready-made contents-API
    payload returned as is.
    """

    def __init__(
        self,
        repos=None,
        branches=None,
        pulls=None,
        activity=None,
        languages=None,
        files=None,
        failing=None,
    ):
        self.repos = repos or []
        self.branches = branches or {}
        self.pulls = pulls or {}
        self.activity = activity or {}
        self.languages = languages or {}
        self.files = files or {}
        self.failing = set(failing or [])
        self.calls = []

    def _record(self, method, *args):
        self.calls.append((method, *args))
        if method in self.failing:
            raise HostError(f"{method} failed")

    async def list_repositories(self, owner, org, page, per_page):
        self._record("list_repositories", owner, org, page)
        start = (page - 1) * per_page
        return self.repos[start:start + per_page]

    async def list_branches(self, owner, repo):
        self._record("list_branches", owner, repo)
        return self.branches.get(repo, [])

    async def count_open_pulls(self, owner, repo):
        self._record("count_open_pulls", owner, repo)
        return self.pulls.get(repo, 0)

    async def commit_activity(self, owner, repo):
        self._record("commit_activity", owner, repo)
        return self.activity.get(repo, [])

    async def list_languages(self, owner, repo):
        self._record("list_languages", owner, repo)
        return self.languages.get(repo, {})

    async def get_file_content(self, owner, repo, path):
        self._record("get_file_content", owner, repo, path)
        content = self.files.get((repo, path))
        if content is None or isinstance(content, dict):
            return content
        if isinstance(content, str):
            content = content.encode("utf-8")
        return {
            "type": "file",
            "encoding": "base64",
            "content": base64.b64encode(content).decode("ascii"),
        }


def make_git_runner(responses, calls=None):
    """
    Build a subprocess.run stand-in.

    ``responses`` maps a git subcommand (``rev-parse``, ``fetch``, ...) to
    either stdout text or an exception instance to raise.
    """

    def runner(argv, **kwargs):
        if calls is not None:
            calls.append(argv)
        subcommand = argv[3]
        response = responses.get(subcommand, "")
        if isinstance(response, BaseException):
            raise response
        return subprocess.CompletedProcess(argv, 0, stdout=response, stderr="")

    return runner


def raw_repo(name, pushed_at="2026-01-14T12:00:00Z", **extra):
    """A repository listing entry as returned by the GitHub API."""
    data = {
        "name": name,
        "html_url": f"https://github.com/octocat/{name}",
        "default_branch": "main",
        "pushed_at": pushed_at,
        "private": False,
        "topics": [],
        "license": None,
        "size": 10,
        "archived": False,
        "fork": False,
    }
    data.update(extra)
    return data


@pytest.fixture
def fake_host():
    """Factory for FakeHost instances."""
    return FakeHost


@pytest.fixture
def git_runner():
    """Factory for fake git runners."""
    return make_git_runner


@pytest.fixture
def repo_data():
    """Factory for raw repository listing entries."""
    return raw_repo
