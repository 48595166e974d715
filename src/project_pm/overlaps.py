"""Capability overlap grouping across projects."""

from project_pm.schemas import Project

MIN_GROUP_SIZE = 2


def find_overlaps(projects: list[Project]) -> dict[str, list[Project]]:
    """
    Group projects by shared capability.

    Args:
        projects: Projects in manifest order

    Returns:
        Capability -> projects listing it, for capabilities claimed by at
        least two distinct projects. Keys are sorted.
    """
    groups: dict[str, list[Project]] = {}
    for project in projects:
        for capability in dict.fromkeys(project.capabilities):
            group = groups.setdefault(capability, [])
            if all(member.name != project.name for member in group):
                group.append(project)

    return {
        capability: groups[capability]
        for capability in sorted(groups)
        if len(groups[capability]) >= MIN_GROUP_SIZE
    }
