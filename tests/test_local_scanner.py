"""Tests for the local checkout scanner."""

import json
import tempfile
from pathlib import Path

import pytest

from project_pm.local_scanner import (
    collect_extensions,
    has_markdown_plans,
    has_todo_file,
    parse_dependency_names,
    read_local_project,
)


@pytest.fixture
def temp_project():
    """Create a temporary project checkout."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)

        (root / "src" / "components").mkdir(parents=True)
        (root / "src" / "components" / "deep").mkdir(parents=True)
        (root / "node_modules" / "react").mkdir(parents=True)
        (root / ".git").mkdir()
        (root / "docs" / "plans").mkdir(parents=True)

        (root / "CLAUDE.md").write_text("# Agent notes\n\nHandles JWT login.")
        (root / "README.md").write_text("# Project\n\nA dashboard.")
        (root / "package.json").write_text(json.dumps({
            "name": "demo",
            "dependencies": {"next": "14.0.0", "react": "18.0.0"},
            "devDependencies": {"tailwindcss": "3.0.0", "react": "18.0.0"},
        }))
        (root / "index.js").write_text("console.log('hi')")
        (root / "src" / "app.tsx").write_text("export default {}")
        (root / "src" / "components" / "Button.ts").write_text("export {}")
        (root / "src" / "components" / "util.py").write_text("pass")
        (root / "src" / "components" / "deep" / "lib.rs").write_text("")
        (root / "node_modules" / "react" / "index.go").write_text("")
        (root / ".git" / "config.rb").write_text("")
        (root / ".env.java").write_text("")
        (root / "docs" / "plans" / "roadmap.md").write_text("# Roadmap")
        (root / "TODOS.md").write_text("- [ ] ship it")

        yield root


class TestParseDependencyNames:
    """Tests for package.json parsing."""

    def test_merges_runtime_and_dev(self):
        """Test that both sections are merged without duplicates."""
        content = json.dumps({"dependencies": {"a": "1"}, "devDependencies": {"b": "1", "a": "2"}})
        assert parse_dependency_names(content) == ["a", "b"]

    def test_malformed_json(self):
        """Test that invalid JSON gives no dependencies."""
        assert parse_dependency_names("{not json") == []

    def test_non_object(self):
        """Test that a JSON array gives no dependencies."""
        assert parse_dependency_names("[1, 2]") == []

    def test_missing_sections(self):
        """Test a manifest without dependency sections."""
        assert parse_dependency_names('{"name": "x"}') == []

    def test_none(self):
        """Test absent content."""
        assert parse_dependency_names(None) == []


class TestCollectExtensions:
    """Tests for the bounded extension walk."""

    def test_depth_limit(self, temp_project):
        """Test that files below the depth limit are not collected."""
        extensions = collect_extensions(temp_project, max_depth=2)
        assert ".py" in extensions
        assert ".rs" not in extensions

    def test_skips_hidden_and_node_modules(self, temp_project):
        """Test that hidden entries and dependency caches are skipped."""
        extensions = collect_extensions(temp_project)
        assert ".go" not in extensions
        assert ".rb" not in extensions
        assert ".java" not in extensions

    def test_collects_visible_extensions(self, temp_project):
        """Test the extensions that should be found."""
        extensions = collect_extensions(temp_project)
        assert {".md", ".json", ".js", ".tsx", ".ts"} <= set(extensions)

    def test_missing_directory(self):
        """Test that a missing directory gives nothing."""
        assert collect_extensions(Path("/nonexistent/project")) == []


class TestMarkers:
    """Tests for plan docs and TODO detection."""

    def test_plan_docs_present(self, temp_project):
        """Test docs/plans with a markdown file."""
        assert has_markdown_plans(temp_project) is True

    def test_plan_docs_without_markdown(self):
        """Test docs/plans holding no markdown."""
        with tempfile.TemporaryDirectory() as tmpdir:
            plans = Path(tmpdir) / "docs" / "plans"
            plans.mkdir(parents=True)
            (plans / "notes.txt").write_text("x")
            assert has_markdown_plans(Path(tmpdir)) is False

    @pytest.mark.parametrize("name", ["TODO.md", "TODO", "TODOS.md", "TO-DOS.md"])
    def test_todo_variants(self, name):
        """Test every accepted TODO file name."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / name).write_text("")
            assert has_todo_file(Path(tmpdir)) is True

    def test_no_todo(self):
        """Test a directory without TODO files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            assert has_todo_file(Path(tmpdir)) is False


class TestReadLocalProject:
    """Tests for the full local scan."""

    def test_full_project(self, temp_project):
        """Test a checkout with every marker."""
        data = read_local_project(temp_project)

        assert data.has_claude is True
        assert data.has_readme is True
        assert data.has_plan_docs is True
        assert data.has_todos is True
        assert "JWT login" in data.claude_content
        assert data.dependencies == ["next", "react", "tailwindcss"]

    def test_only_todo(self):
        """Test a directory containing only TODO.md."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "TODO.md").write_text("- nothing yet")
            data = read_local_project(Path(tmpdir))

        assert data.has_todos is True
        assert data.has_claude is False
        assert data.has_readme is False
        assert data.has_plan_docs is False
        assert data.dependencies == []

    def test_missing_directory(self):
        """Test that a missing directory gives the empty default."""
        data = read_local_project(Path("/nonexistent/project"))

        assert data.has_claude is False
        assert data.has_readme is False
        assert data.has_plan_docs is False
        assert data.has_todos is False
        assert data.file_extensions == []
        assert data.dependencies == []

    def test_malformed_package_json(self):
        """Test that a broken package.json is treated as no dependencies."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "package.json").write_text("{broken")
            data = read_local_project(Path(tmpdir))

        assert data.dependencies == []

    def test_non_utf8_readme_is_present(self):
        """Test that a readme with a stray latin-1 byte still counts as present."""
        with tempfile.TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "README.md").write_bytes(b"# Demo\n\nCaf\xe9 ordering API.\n")
            data = read_local_project(Path(tmpdir))

        assert data.has_readme is True
        assert data.readme_content.startswith("# Demo")
        assert "ordering API." in data.readme_content
        assert "\ufffd" in data.readme_content
