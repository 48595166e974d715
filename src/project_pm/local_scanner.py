"""
Local checkout scanner.

Reads marker documents, file extensions and declared dependencies from a
project directory. Nothing in here raises: unreadable or missing paths
simply count as absent.
"""

import json
import os
from pathlib import Path

from project_pm.schemas import LocalProjectData

AGENT_FILE = "CLAUDE.md"
README_FILE = "README.md"
DEPENDENCY_MANIFEST = "package.json"
PLAN_DOCS_DIR = Path("docs") / "plans"
TODO_FILE_NAMES = ["TODO.md", "TODO", "TODOS.md", "TO-DOS.md"]

DEFAULT_MAX_DEPTH = 2
DEFAULT_EXCLUDED_DIRS = ["node_modules"]


def read_file_or_none(file_path: Path) -> str | None:
    """
    Read a UTF-8 text file, or return None if it can't be read.

    Undecodable bytes are replaced rather than treated as a missing file.
    """
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError:
        return None


def parse_dependency_names(content: str | None) -> list[str]:
    """
    Collect runtime and development dependency names from package.json text.

    Malformed JSON, or sections that aren't objects, yield nothing.
    """
    if not content:
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        return []
    if not isinstance(data, dict):
        return []

    names: set[str] = set()
    for section in ("dependencies", "devDependencies"):
        deps = data.get(section)
        if isinstance(deps, dict):
            names.update(deps.keys())
    return sorted(names)


def collect_extensions(
    project_dir: Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    excluded_dirs: list[str] | None = None,
) -> list[str]:
    """
    Collect distinct file extensions with a bounded-depth walk.

    The project root is depth 0; directories below ``max_depth`` are not
    entered. Hidden entries and excluded directories are skipped.

    Returns:
        Sorted extensions including the leading dot
    """
    if excluded_dirs is None:
        excluded_dirs = DEFAULT_EXCLUDED_DIRS

    extensions: set[str] = set()
    root_path = Path(project_dir)

    # os.walk swallows listing errors (permissions, vanished dirs)
    for root, dirs, filenames in os.walk(root_path):
        current = Path(root)
        depth = len(current.relative_to(root_path).parts)

        if depth >= max_depth:
            dirs[:] = []
        else:
            dirs[:] = [d for d in dirs if not d.startswith(".") and d not in excluded_dirs]

        for filename in filenames:
            if filename.startswith("."):
                continue
            suffix = Path(filename).suffix
            if suffix:
                extensions.add(suffix)

    return sorted(extensions)


def has_markdown_plans(project_dir: Path) -> bool:
    """Check for at least one markdown file in docs/plans."""
    try:
        return any(entry.name.endswith(".md") for entry in (project_dir / PLAN_DOCS_DIR).iterdir())
    except OSError:
        return False


def has_todo_file(project_dir: Path) -> bool:
    """Check for any accepted TODO file name at the project root."""
    try:
        return any((project_dir / name).exists() for name in TODO_FILE_NAMES)
    except OSError:
        return False


def read_local_project(
    project_dir: Path,
    max_depth: int = DEFAULT_MAX_DEPTH,
    excluded_dirs: list[str] | None = None,
) -> LocalProjectData:
    """
    Scan a local checkout.

    Args:
        project_dir: Project root directory
        max_depth: Depth limit for the extension walk
        excluded_dirs: Directory names skipped by the walk

    Returns:
        LocalProjectData; all flags false and lists empty if the
        directory is missing or unreadable
    """
    project_dir = Path(project_dir)

    claude_content = read_file_or_none(project_dir / AGENT_FILE)
    readme_content = read_file_or_none(project_dir / README_FILE)

    return LocalProjectData(
        has_claude=claude_content is not None,
        has_readme=readme_content is not None,
        has_plan_docs=has_markdown_plans(project_dir),
        has_todos=has_todo_file(project_dir),
        claude_content=claude_content,
        readme_content=readme_content,
        file_extensions=collect_extensions(project_dir, max_depth, excluded_dirs),
        dependencies=parse_dependency_names(read_file_or_none(project_dir / DEPENDENCY_MANIFEST)),
    )
