"""Render and write the aggregating index module."""

import os
import tempfile
from pathlib import Path
from typing import Sequence

INDEX_NAMES = ("index.ts", "index.js")


def render_index(entries: Sequence[tuple[str, str]], namespace: str = "AIC") -> str:
    """
    Render the index module.

    Args:
        entries: (component name, artifact extension) pairs in index order
        namespace: Name of the exported component map

    Returns:
        Import statements, a blank line, and the exported object literal
    """
    imports = [f"import {name} from './{name}{ext}';" for name, ext in entries]
    members = [f"  {name}," for name, _ in entries]
    export_map = "\n".join([f"export const {namespace} = {{", *members, "};"])
    return "\n".join(imports) + "\n\n" + export_map + "\n"


def index_filename(extensions: Sequence[str]) -> str:
    """index.ts when any indexed artifact is TypeScript, otherwise index.js."""
    return "index.ts" if ".tsx" in extensions else "index.js"


def write_index(output_dir: Path, content: str, filename: str) -> Path:
    """
    Replace the index file with content in one step and remove the other index variant.

    The text is written to a temporary file in output_dir and moved over the
    index, so readers never see a partially written file.
    """
    target = output_dir / filename
    fd, tmp_name = tempfile.mkstemp(dir=output_dir, prefix=".index-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    for other in INDEX_NAMES:
        if other != filename:
            (output_dir / other).unlink(missing_ok=True)
    return target
