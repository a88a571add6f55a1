"""CLI interface for aiscript."""

import json
import sys
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.table import Table

from aiscript.cli.output_dir import resolve_output_dir
from aiscript.core.config import Config
from aiscript.core.errors import ConfigurationError
from aiscript.core.logging import configure_logging
from aiscript.core.progress import ProgressReporter
from aiscript.core.provider_factory import SUPPORTED_PROVIDERS, create_client
from aiscript.generation.generator import ComponentGenerator
from aiscript.reconcile.reconciler import Reconciler
from aiscript.scanning.dialect import dialect_for_file
from aiscript.scanning.scanner import ReferenceScanner


@click.group()
@click.version_option(package_name="aiscript")
def main():
    """
    aiscript - Generate the UI components your code already uses.

    Write `<AIC.UserCard name={user.name} />` (or the Vue equivalent) anywhere
    in your project, then run `aiscript run`. Every AIC.* reference without a
    component gets one generated by an LLM into the aiscript/ directory, and
    aiscript/index exports them all as `AIC`.

    Supported LLM Providers:
      - OpenRouter (requires OPENROUTER_API_KEY)
      - Qwen AI (DashScope API, requires QWEN_API_KEY)
      - Google AI Gemini (requires GEMINI_API_KEY)
      - Ollama (local, requires running Ollama server)
    """
    pass


def _load_config(project_root: Path, config_file: Optional[str], cli_args: dict[str, Any]) -> Config:
    """Load config for a project and apply an explicit config file, then CLI args on top."""
    config_obj = Config.load(project_root=project_root)
    if config_file:
        config_obj.load_file(Path(config_file))
    for key, value in cli_args.items():
        if value is not None and value != ():
            setattr(config_obj, key, list(value) if isinstance(value, tuple) else value)
    return config_obj


def _resolve_root(project_root: str) -> Path:
    root = Path(project_root).expanduser().resolve()
    if not root.is_dir():
        click.echo(f"Error: Project root is not a directory: {root}", err=True)
        sys.exit(1)
    return root


def _make_scanner(config_obj: Config, output_dir: Path) -> ReferenceScanner:
    return ReferenceScanner(
        namespace=config_obj.namespace,
        include_patterns=config_obj.include_patterns,
        exclude_patterns=config_obj.exclude_patterns,
        output_dir=output_dir,
    )


@main.command()
@click.argument("project_root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option(
    "--provider",
    "-p",
    type=click.Choice(SUPPORTED_PROVIDERS, case_sensitive=False),
    default=None,
    help="LLM provider (default: auto - auto-detect)",
)
@click.option("--model", "-m", default=None, help="Model name (provider-specific)")
@click.option("--temperature", "-t", type=float, default=None, help="Temperature for generation (default: 0.0)")
@click.option("--api-key", default=None, help="API key (or use the provider's *_API_KEY env var)")
@click.option("--base-url", default=None, help="Base URL (provider-specific)")
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for generated components (default: src/, app/ or source/ + aiscript)",
)
@click.option("--namespace", default=None, help="Reference prefix and exported map name (default: AIC)")
@click.option("--include", "include_patterns", multiple=True, help="Glob of files to scan (repeatable)")
@click.option("--exclude", "exclude_patterns", multiple=True, help="Glob of paths to skip (repeatable)")
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Concurrent generation requests (default: 1, sequential)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to configuration file (YAML or JSON)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level (default: WARNING)",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Path to log file (default: stderr)")
@click.option("--json-logging/--no-json-logging", default=None, help="Output logs in JSON format")
@click.option("--color/--no-color", default=None, help="Force colored output (default: auto-detect)")
def run(
    project_root: str,
    provider: str | None,
    model: str | None,
    temperature: float | None,
    api_key: str | None,
    base_url: str | None,
    output_dir: str | None,
    namespace: str | None,
    include_patterns: tuple[str, ...],
    exclude_patterns: tuple[str, ...],
    workers: int | None,
    config_file: str | None,
    log_level: str | None,
    log_file: str | None,
    json_logging: bool | None,
    color: bool | None,
):
    """
    Scan PROJECT_ROOT for AIC.* references and reconcile the generated components.

    Unreferenced components are deleted, missing ones are generated and the
    index is rebuilt. Existing components are never regenerated: delete a file
    to have it generated again on the next run.

    Examples:

      # Generate with an auto-detected provider
      aiscript run

      # Use a specific provider and model
      aiscript run ./web --provider openrouter --model anthropic/claude-3.5-sonnet

      # Two generation requests in flight at once
      aiscript run --workers 2
    """
    root = _resolve_root(project_root)
    try:
        config_obj = _load_config(
            root,
            config_file,
            {
                "provider": provider,
                "model": model,
                "temperature": temperature,
                "api_key": api_key,
                "base_url": base_url,
                "output_dir": output_dir,
                "namespace": namespace,
                "include_patterns": include_patterns,
                "exclude_patterns": exclude_patterns,
                "workers": workers,
                "log_level": log_level,
                "log_file": log_file,
                "json_logging": json_logging,
            },
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    configure_logging(level=config_obj.log_level, json_output=config_obj.json_logging, log_file=config_obj.log_file)
    progress = ProgressReporter(color=color)

    # The credential is required before any work is done
    try:
        llm_client = create_client(config_obj)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        out_dir = resolve_output_dir(root, config_obj.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        progress.phase(f"Scanning for {config_obj.namespace} component usages...")
        usage_map = _make_scanner(config_obj, out_dir).scan(root)

        if not usage_map:
            progress.info(f"No {config_obj.namespace} component usages found.")
            return

        progress.found(len(usage_map))
        reconciler = Reconciler(
            output_dir=out_dir,
            generator=ComponentGenerator(llm_client),
            progress=progress,
            workers=config_obj.workers,
            namespace=config_obj.namespace,
        )
        report = reconciler.reconcile(usage_map)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    progress.info(
        f"{len(report.generated)} generated, {len(report.skipped)} existing, "
        f"{len(report.deleted)} deleted, {len(report.failed)} failed"
    )
    if report.has_failures:
        progress.warning(f"Failed components will be retried on the next run: {', '.join(report.failed)}")
    progress.done()


@main.command()
@click.argument("project_root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False), default=None, help="Generated component directory (excluded from the scan)")
@click.option("--namespace", default=None, help="Reference prefix (default: AIC)")
@click.option("--include", "include_patterns", multiple=True, help="Glob of files to scan (repeatable)")
@click.option("--exclude", "exclude_patterns", multiple=True, help="Glob of paths to skip (repeatable)")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), default=None, help="Path to configuration file")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the usage map as JSON")
def scan(
    project_root: str,
    output_dir: str | None,
    namespace: str | None,
    include_patterns: tuple[str, ...],
    exclude_patterns: tuple[str, ...],
    config_file: str | None,
    as_json: bool,
):
    """
    List the AIC.* components referenced under PROJECT_ROOT without generating anything.

    Shows, for each component, the file used as generation context and the
    artifact extension its dialect maps to. No LLM provider is needed.
    """
    root = _resolve_root(project_root)
    try:
        config_obj = _load_config(
            root,
            config_file,
            {
                "output_dir": output_dir,
                "namespace": namespace,
                "include_patterns": include_patterns,
                "exclude_patterns": exclude_patterns,
            },
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    out_dir = resolve_output_dir(root, config_obj.output_dir)
    scanner = _make_scanner(config_obj, out_dir)
    usage_map = scanner.scan(root)

    rows = []
    for name, record in usage_map.items():
        try:
            extension = dialect_for_file(record.source_file).output_extension
        except (OSError, UnicodeDecodeError):
            extension = "?"
        rows.append(
            {
                "component": name,
                "source_file": str(record.source_file.relative_to(root)),
                "artifact": f"{name}{extension}",
                "exists": (out_dir / f"{name}{extension}").exists(),
            }
        )

    if as_json:
        click.echo(json.dumps({"output_dir": str(out_dir), "components": rows}, indent=2))
        return

    if not rows:
        click.echo(f"No {config_obj.namespace} component usages found.")
        return

    table = Table(title=f"{config_obj.namespace} components ({out_dir})", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan")
    table.add_column("Used in")
    table.add_column("Artifact", style="green")
    table.add_column("Exists")
    for row in rows:
        table.add_row(row["component"], row["source_file"], row["artifact"], "yes" if row["exists"] else "no")
    Console().print(table)


@main.group()
def config():
    """Manage configuration."""
    pass


@config.command("show")
@click.option("--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml", help="Output format")
def config_show(format: str):
    """Print the effective configuration (API key redacted)."""
    try:
        config_obj = Config.load()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    data = config_obj.to_dict(redact=True)
    if format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False), nl=False)


@config.command("export")
@click.argument("output", type=click.Path(dir_okay=False), default=".aiscript.yaml")
@click.option("--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml", help="File format")
def config_export(output: str, format: str):
    """Save the effective configuration to OUTPUT (API key is never written)."""
    try:
        config_obj = Config.load()
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    config_obj.save(Path(output), format=format)
    click.echo(f"Configuration exported to: {output}")


if __name__ == "__main__":
    main()
