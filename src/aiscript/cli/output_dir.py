"""Locate the generated-component directory for a project."""

from pathlib import Path
from typing import Optional

# Checked in order; the first one that exists hosts the output directory
SOURCE_DIRS = ("src", "app", "source")
OUTPUT_DIR_NAME = "aiscript"


def resolve_output_dir(project_root: Path, override: Optional[str] = None) -> Path:
    """
    Pick the output directory.

    An explicit override (relative paths are taken from the project root)
    wins. Otherwise the directory is <root>/<first existing of src, app,
    source>/aiscript, falling back to <root>/aiscript.
    """
    if override:
        path = Path(override).expanduser()
        return path if path.is_absolute() else project_root / path

    for name in SOURCE_DIRS:
        if (project_root / name).is_dir():
            return project_root / name / OUTPUT_DIR_NAME
    return project_root / OUTPUT_DIR_NAME
