"""Scan a source tree for AIC.* component references."""

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Iterable, Optional

from aiscript.core.config import DEFAULT_INCLUDE_PATTERNS
from aiscript.schemas.usage import UsageMap, UsageRecord

logger = logging.getLogger(__name__)

# Dependency, VCS and build directories never contain usage sites
EXCLUDED_DIRS = {
    ".git", "node_modules", "bower_components", "jspm_packages", ".next", ".nuxt",
    ".svelte-kit", ".turbo", ".cache", "dist", "build", "out", "coverage",
    ".venv", "venv", "__pycache__", ".idea", ".vscode",
    # default name of the generated output directory
    "aiscript",
}


def reference_pattern(namespace: str) -> re.Pattern:
    """
    Build the pattern matching `<namespace>.<Name>`.

    Component names must start with an uppercase letter followed by letters
    or digits, the same rule React applies to component identifiers.
    """
    return re.compile(rf"(?<![\w$]){re.escape(namespace)}\.([A-Z][A-Za-z0-9]*)")


def matches_glob(relative_posix: str, pattern: str) -> bool:
    """fnmatch on a root-relative path, where a leading `**/` also matches files at the root."""
    if fnmatch.fnmatch(relative_posix, pattern):
        return True
    return pattern.startswith("**/") and fnmatch.fnmatch(relative_posix, pattern[3:])


class ReferenceScanner:
    """Builds the usage map for one reconciliation run."""

    def __init__(
        self,
        namespace: str = "AIC",
        include_patterns: Optional[Iterable[str]] = None,
        exclude_patterns: Optional[Iterable[str]] = None,
        output_dir: Optional[str | Path] = None,
    ):
        """
        Initialize scanner.

        Args:
            namespace: Prefix that marks a generated component reference
            include_patterns: Globs (relative to the root) of files to scan
            exclude_patterns: fnmatch patterns on root-relative POSIX paths to skip
            output_dir: Generated output directory, never scanned
        """
        self.namespace = namespace
        self.pattern = reference_pattern(namespace)
        self.include_patterns = list(include_patterns or DEFAULT_INCLUDE_PATTERNS)
        self.exclude_patterns = list(exclude_patterns or [])
        self.output_dir = Path(output_dir).expanduser().resolve() if output_dir else None
        self.errors: list[dict[str, str]] = []

    def _skip_dir(self, path: Path) -> bool:
        return path.name in EXCLUDED_DIRS or path == self.output_dir

    def _wanted(self, relative_posix: str) -> bool:
        if not any(matches_glob(relative_posix, pattern) for pattern in self.include_patterns):
            return False
        return not any(fnmatch.fnmatch(relative_posix, pattern) for pattern in self.exclude_patterns)

    def iter_files(self, root: Path) -> list[Path]:
        """
        Files to scan under root, sorted by relative path so scan order is stable.

        Excluded directories are pruned during the walk and never descended into.
        """
        found: dict[str, Path] = {}
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = [name for name in dirnames if not self._skip_dir(current / name)]
            for filename in filenames:
                path = current / filename
                relative = path.relative_to(root).as_posix()
                if self._wanted(relative):
                    found[relative] = path
        return [found[key] for key in sorted(found)]

    def extract_names(self, content: str) -> list[str]:
        """Component names referenced in content, in left-to-right order, duplicates kept."""
        return self.pattern.findall(content)

    def scan(self, root: str | Path) -> UsageMap:
        """
        Scan a project tree and record the first file referencing each component.

        Args:
            root: Project root directory

        Returns:
            Usage map ordered by discovery

        Raises:
            ValueError: If root does not exist or is not a directory
        """
        root = Path(root).expanduser().resolve()
        if not root.is_dir():
            raise ValueError(f"Project root is not a directory: {root}")

        self.errors = []
        usages: UsageMap = {}
        files = self.iter_files(root)
        logger.debug(f"Scanning {len(files)} files under {root}")

        for file_path in files:
            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                # Unreadable files are skipped; they must not abort the scan
                self.errors.append({"file": str(file_path), "error": str(e), "type": type(e).__name__})
                logger.debug(f"Skipping unreadable file {file_path}: {e}")
                continue

            for name in self.extract_names(content):
                if name not in usages:
                    usages[name] = UsageRecord(component_name=name, source_file=file_path)

        logger.info(f"Found {len(usages)} component references in {len(files)} files")
        return usages
