"""
project-pm - personal project portfolio scanner.

Enumerates a developer's GitHub repositories and local checkouts:
1. Collects remote activity and local documentation signals
2. Infers description, capabilities and tech stack
3. Classifies each project's lifecycle status
4. Writes everything to a single JSON manifest
"""

__version__ = "0.1.0"

from project_pm.schemas import (
    LocalRemoteDiff,
    Project,
    ProjectManifest,
    ProjectOverride,
    ProjectSource,
    ProjectStatus,
)

__all__ = [
    "__version__",
    "LocalRemoteDiff",
    "Project",
    "ProjectManifest",
    "ProjectOverride",
    "ProjectSource",
    "ProjectStatus",
]
