"""
Manifest and overrides persistence.

The manifest is written once per run, atomically, and read by consumers
without any locking. The overrides file is owned by the editing interface;
this module only reads it.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from project_pm.errors import manifest_write_failed
from project_pm.schemas import ProjectManifest, ProjectOverride

logger = logging.getLogger(__name__)


def write_manifest(manifest: ProjectManifest, path: Path, pretty: bool = True) -> Path:
    """
    Write the manifest atomically.

    The JSON is written to a temporary file next to ``path`` and moved into
    place, so readers see either the old or the new manifest.

    Raises:
        ManifestError: If the file can't be written
    """
    path = Path(path)
    content = manifest.model_dump_json(by_alias=True, indent=2 if pretty else None)

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as f:
            tmp_name = f.name
            f.write(content)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise manifest_write_failed(str(path), str(e)) from e

    return path


def read_manifest(path: Path) -> ProjectManifest | None:
    """
    Load a manifest.

    Returns:
        The manifest, or None if it doesn't exist yet or can't be parsed
    """
    path = Path(path)
    if not path.exists():
        return None
    try:
        return ProjectManifest.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load manifest {path}: {e}")
        return None


def load_overrides(path: Path) -> dict[str, ProjectOverride]:
    """
    Load manual overrides keyed by project name.

    A missing or malformed file gives no overrides; malformed entries are
    skipped individually.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load overrides {path}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Ignoring overrides {path}: expected an object")
        return {}

    overrides: dict[str, ProjectOverride] = {}
    for name, entry in data.items():
        try:
            overrides[name] = ProjectOverride.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Ignoring override for {name}: {e}")
    return overrides
