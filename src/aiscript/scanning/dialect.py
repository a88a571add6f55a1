"""Infer the framework and language a component should be written in."""

import re
from pathlib import Path

from aiscript.schemas.usage import Dialect, Framework, Language

TYPESCRIPT_EXTENSIONS = {".ts", ".tsx", ".mts", ".cts"}
ARTIFACT_EXTENSIONS = (".tsx", ".jsx", ".vue")

# `typescript` anywhere (imports, comments, <script lang="typescript">) or a lang="ts"/"tsx" attribute
TYPESCRIPT_MARKER = re.compile(r"typescript|\blang\s*=\s*[\"']tsx?[\"']", re.IGNORECASE)


def detect_dialect(file_extension: str, file_content: str) -> Dialect:
    """
    Classify a usage site into the dialect its generated component should use.

    Vue sources get Vue single-file components; everything else gets React.
    The TypeScript check is a heuristic on extension and content, so it can
    misclassify, but it is deterministic for the same input.

    Args:
        file_extension: Extension of the usage file, including the dot
        file_content: Full text of the usage file

    Returns:
        Dialect with the artifact's output extension
    """
    ext = file_extension.lower()
    framework = Framework.VUE if ext == ".vue" else Framework.REACT

    if ext in TYPESCRIPT_EXTENSIONS or TYPESCRIPT_MARKER.search(file_content):
        language = Language.TYPESCRIPT
    else:
        language = Language.JAVASCRIPT

    if framework is Framework.VUE:
        output_extension = ".vue"
    elif language is Language.TYPESCRIPT:
        output_extension = ".tsx"
    else:
        output_extension = ".jsx"

    return Dialect(framework=framework, language=language, output_extension=output_extension)


def dialect_for_file(path: Path) -> Dialect:
    """Read a usage file and detect its dialect. Raises OSError/UnicodeDecodeError on read failure."""
    return detect_dialect(path.suffix, path.read_text(encoding="utf-8"))
