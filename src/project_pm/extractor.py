"""
Text heuristics over project documentation and dependency metadata.

All functions here are pure. Capability matching is a plain substring test
on lower-cased text, so "ses" also matches inside "classes"; downstream
consumers rely on that coarse behavior.
"""

from collections.abc import Iterable

# Keyword -> capability
CAPABILITY_MAP: dict[str, str] = {
    "email": "email-sending",
    "smtp": "email-sending",
    "ses": "email-sending",
    "sendgrid": "email-sending",
    "auth": "authentication",
    "login": "authentication",
    "oauth": "authentication",
    "jwt": "authentication",
    "s3": "file-storage",
    "upload": "file-storage",
    "api": "api-server",
    "express": "api-server",
    "fastify": "api-server",
    "websocket": "realtime",
    "socket": "realtime",
    "database": "database",
    "postgres": "database",
    "mysql": "database",
    "mongo": "database",
    "dynamodb": "database",
    "redis": "caching",
    "cache": "caching",
    "queue": "message-queue",
    "sqs": "message-queue",
    "cron": "scheduling",
    "schedule": "scheduling",
}

# Dependency name -> stack label
DEP_STACK_MAP: dict[str, str] = {
    "next": "next.js",
    "react": "react",
    "express": "express",
    "fastify": "fastify",
    "@aws-sdk/client-s3": "aws-s3",
    "@aws-sdk/client-ses": "aws-ses",
    "@aws-sdk/client-dynamodb": "aws-dynamodb",
    "tailwindcss": "tailwind",
}

# File extension -> stack label
EXT_STACK_MAP: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".py": "python",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".rb": "ruby",
}

# Line prefixes that never carry a description
_STRUCTURAL_PREFIXES = ("#", "![", "[![", "-", "*", "```")


def extract_description(markdown: str) -> str | None:
    """
    Pick the first prose line of a markdown document.

    Headings, badges and images, list items and code fences are skipped.

    Args:
        markdown: Document text

    Returns:
        The first qualifying line, trimmed, or None
    """
    if not markdown.strip():
        return None

    for line in markdown.split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.startswith(_STRUCTURAL_PREFIXES):
            continue
        return trimmed
    return None


def extract_capabilities(markdown: str) -> list[str]:
    """
    Infer capabilities from keyword mentions.

    Args:
        markdown: Document text

    Returns:
        Sorted, de-duplicated capability labels
    """
    lower = markdown.lower()
    found = {capability for keyword, capability in CAPABILITY_MAP.items() if keyword in lower}
    return sorted(found)


def detect_tech_stack(dependencies: Iterable[str], file_extensions: Iterable[str]) -> list[str]:
    """
    Map dependency names and file extensions to stack labels.

    Unknown names and extensions are dropped.

    Args:
        dependencies: Declared dependency names
        file_extensions: Extensions including the leading dot

    Returns:
        Sorted, de-duplicated stack labels
    """
    stack: set[str] = set()

    for dep in dependencies:
        mapped = DEP_STACK_MAP.get(dep)
        if mapped:
            stack.add(mapped)

    for ext in file_extensions:
        mapped = EXT_STACK_MAP.get(ext)
        if mapped:
            stack.add(mapped)

    return sorted(stack)
