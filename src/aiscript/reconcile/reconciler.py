"""Keep the generated-component directory in sync with current usages."""

import contextlib
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from aiscript.core.errors import GenerationError
from aiscript.core.logging import StructuredLogger, get_logger
from aiscript.core.progress import ProgressReporter
from aiscript.generation.generator import ComponentGenerator
from aiscript.reconcile.index_writer import index_filename, render_index, write_index
from aiscript.scanning.dialect import ARTIFACT_EXTENSIONS, detect_dialect, dialect_for_file
from aiscript.schemas.report import ComponentOutcome, Outcome, ReconcileReport
from aiscript.schemas.usage import Dialect, UsageMap, UsageRecord


class Reconciler:
    """
    Runs one reconciliation pass: prune orphans, generate missing artifacts, rebuild the index.

    Existing artifacts are never regenerated or diffed; deleting an artifact is
    the way to force regeneration on the next run. Each component writes only
    its own artifact path, and the index is written once, after every
    generation task has finished.
    """

    def __init__(
        self,
        output_dir: Path,
        generator: ComponentGenerator,
        progress: Optional[ProgressReporter] = None,
        workers: int = 1,
        namespace: str = "AIC",
    ):
        """
        Initialize reconciler.

        Args:
            output_dir: Directory holding generated artifacts and the index
            generator: Component generator (wraps the LLM client)
            progress: Progress reporter for human-readable lines (None for silent)
            workers: Maximum concurrent generation requests (1 = strictly sequential)
            namespace: Name of the component map exported by the index
        """
        self.output_dir = Path(output_dir)
        self.generator = generator
        self.progress = progress or ProgressReporter(enabled=False)
        self.workers = max(1, workers)
        self.namespace = namespace
        self.logger: StructuredLogger = get_logger("aiscript.reconciler")

    def reconcile(self, usage_map: UsageMap) -> ReconcileReport:
        """
        Make the output directory match the usage map.

        Args:
            usage_map: Components that should exist, in discovery order

        Returns:
            Report of deleted, skipped, generated and failed components
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        report = ReconcileReport(output_dir=self.output_dir)
        dialects: dict[str, Dialect] = {}

        # Phase 1: prune orphans, before generation
        start_time = time.time()
        self.logger.log_phase("prune", "started")
        report.outcomes.extend(self.prune(usage_map))
        self.logger.log_phase("prune", "completed", duration_ms=(time.time() - start_time) * 1000)

        # Phase 2: generate or skip every usage
        start_time = time.time()
        self.logger.log_phase("generate", "started", components=len(usage_map))
        report.outcomes.extend(self.generate_missing(usage_map, dialects))
        self.logger.log_phase("generate", "completed", duration_ms=(time.time() - start_time) * 1000)

        # Phase 3: rebuild the index once every generation task has finished
        start_time = time.time()
        self.logger.log_phase("index", "started")
        report.index_path, report.indexed = self.rebuild_index(usage_map, dialects)
        self.logger.log_phase("index", "completed", duration_ms=(time.time() - start_time) * 1000)

        return report

    def artifact_path(self, component_name: str, dialect: Dialect) -> Path:
        return self.output_dir / f"{component_name}{dialect.output_extension}"

    def existing_artifacts(self) -> list[Path]:
        """Artifact files currently in the output directory, sorted by name."""
        return sorted(
            path for path in self.output_dir.iterdir()
            if path.is_file() and path.suffix in ARTIFACT_EXTENSIONS
        )

    def prune(self, usage_map: UsageMap) -> list[ComponentOutcome]:
        """
        Delete artifacts whose component is no longer referenced.

        Runs before generation. A file that cannot be deleted is logged and
        left in place.
        """
        outcomes = []
        for path in self.existing_artifacts():
            component_name = path.stem
            if component_name in usage_map:
                continue

            self.progress.deleted(component_name)
            try:
                path.unlink()
            except OSError as e:
                self.logger.bind(component=component_name).warning(f"Could not delete {path}: {e}", error=str(e))
                self.progress.warning(f"Could not delete {path.name}: {e}")
                continue
            outcomes.append(ComponentOutcome(component_name=component_name, outcome=Outcome.DELETED, artifact_path=path))
        return outcomes

    def generate_missing(self, usage_map: UsageMap, dialects: dict[str, Dialect]) -> list[ComponentOutcome]:
        """
        Generate every referenced component that has no artifact yet.

        Detected dialects are stored in `dialects` for the index rebuild.
        Outcomes are returned in usage-map order.
        """
        records = list(usage_map.values())
        if self.workers == 1 or len(records) < 2:
            return [self._process(record, dialects) for record in records]

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = [executor.submit(self._process, record, dialects) for record in records]
            return [future.result() for future in futures]

    def _process(self, record: UsageRecord, dialects: dict[str, Dialect]) -> ComponentOutcome:
        """Generate or skip one component. Never raises for per-component failures."""
        name = record.component_name
        try:
            context_text = record.source_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return self._failed(name, f"cannot read {record.source_file}: {e}")

        dialect = detect_dialect(record.source_file.suffix, context_text)
        dialects[name] = dialect
        path = self.artifact_path(name, dialect)

        if path.exists():
            self.progress.skipped(name)
            return ComponentOutcome(component_name=name, outcome=Outcome.SKIPPED, artifact_path=path)

        self.progress.generating(name)
        try:
            code = self.generator.generate(name, context_text, dialect)
        except GenerationError as e:
            return self._failed(name, e.reason, path)

        try:
            path.write_text(code, encoding="utf-8")
        except OSError as e:
            # A partial artifact would be skipped as "existing" on the next run
            with contextlib.suppress(OSError):
                path.unlink(missing_ok=True)
            return self._failed(name, f"cannot write {path}: {e}", path)

        self.progress.generated(name)
        self.logger.bind(component=name).info(f"Created {path}", path=str(path))
        return ComponentOutcome(component_name=name, outcome=Outcome.GENERATED, artifact_path=path)

    def _failed(self, name: str, message: str, path: Optional[Path] = None) -> ComponentOutcome:
        self.progress.error(name, message)
        self.logger.bind(component=name).error(f"Error generating {name}: {message}")
        return ComponentOutcome(component_name=name, outcome=Outcome.FAILED, artifact_path=path, error=message)

    def rebuild_index(self, usage_map: UsageMap, dialects: dict[str, Dialect]) -> tuple[Path, list[str]]:
        """
        Rewrite the index from the artifacts actually present after generation.

        Components whose artifact is missing (generation failed this run) are
        left out so the index never imports a file that does not exist.

        Returns:
            (index path, indexed component names)
        """
        entries: list[tuple[str, str]] = []
        for name in usage_map:
            dialect = dialects.get(name)
            if dialect is None:
                try:
                    dialect = dialect_for_file(usage_map[name].source_file)
                except (OSError, UnicodeDecodeError) as e:
                    self.logger.bind(component=name).warning(f"Leaving {name} out of the index: {e}")
                    continue
            if self.artifact_path(name, dialect).exists():
                entries.append((name, dialect.output_extension))
            else:
                self.logger.bind(component=name).warning(f"Leaving {name} out of the index: artifact missing")

        content = render_index(entries, namespace=self.namespace)
        filename = index_filename([ext for _, ext in entries])
        index_path = write_index(self.output_dir, content, filename)
        self.logger.info(f"Wrote {index_path}", context={"components": len(entries)})
        return index_path, [name for name, _ in entries]
