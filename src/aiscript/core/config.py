"""Configuration management for aiscript."""

import json
from pathlib import Path
from typing import Any, Optional

import yaml

from aiscript.core.errors import ConfigurationError

DEFAULT_INCLUDE_PATTERNS = ["**/*.ts", "**/*.tsx", "**/*.js", "**/*.jsx", "**/*.vue"]

PATTERN_SETTINGS = ("include_patterns", "exclude_patterns")


def _as_pattern_list(key: str, value: Any, source: Path) -> list[str]:
    """Accept a single glob string or a list of glob strings."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    raise ConfigurationError(f"{key} in {source} must be a glob string or a list of glob strings")


class Config:
    """Configuration manager with hierarchy: CLI args > project config > user config > defaults."""

    def __init__(self):
        """Initialize configuration with default values."""
        self.provider: str = "auto"
        self.model: Optional[str] = None
        self.temperature: float = 0.0
        self.max_tokens: int = 4000
        self.base_url: Optional[str] = None
        self.api_key: Optional[str] = None
        self.namespace: str = "AIC"
        self.output_dir: Optional[str] = None
        self.include_patterns: list[str] = list(DEFAULT_INCLUDE_PATTERNS)
        self.exclude_patterns: list[str] = []
        self.workers: int = 1
        self.log_level: str = "WARNING"
        self.json_logging: bool = False
        self.log_file: Optional[str] = None

    @classmethod
    def load(
        cls,
        cli_args: Optional[dict[str, Any]] = None,
        project_root: Optional[Path] = None,
    ) -> "Config":
        """
        Load configuration from hierarchy: CLI args > project config > user config > defaults.

        Args:
            cli_args: Dictionary of CLI arguments to override config
            project_root: Directory holding the project's .aiscript.yaml (default: cwd)

        Returns:
            Config instance with loaded values

        Raises:
            ConfigurationError: If a config file exists but cannot be parsed
        """
        config = cls()

        # Load user config (~/.aiscript/config.yaml)
        user_config_path = Path.home() / ".aiscript" / "config.yaml"
        if user_config_path.exists():
            config.load_file(user_config_path)

        # Load project config (.aiscript.yaml in the project root)
        project_config_path = (project_root or Path.cwd()) / ".aiscript.yaml"
        if project_config_path.exists():
            config.load_file(project_config_path)

        # Override with CLI args
        if cli_args:
            for key, value in cli_args.items():
                if value is not None:
                    setattr(config, key, value)

        return config

    def load_file(self, config_path: Path) -> None:
        """
        Load configuration values from a YAML or JSON file into this config.

        Unknown keys are ignored.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            content = config_path.read_text(encoding="utf-8")
            if config_path.suffix == ".json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load config file {config_path}: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")

        settings = self.to_dict()
        for key, value in data.items():
            if key not in settings or value is None:
                continue
            if key in PATTERN_SETTINGS:
                value = _as_pattern_list(key, value, config_path)
            setattr(self, key, value)

    def to_dict(self, redact: bool = False) -> dict[str, Any]:
        """Convert config to dictionary, optionally masking the API key."""
        api_key = self.api_key
        if redact and api_key:
            api_key = "***"
        return {
            "provider": self.provider,
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "base_url": self.base_url,
            "api_key": api_key,
            "namespace": self.namespace,
            "output_dir": self.output_dir,
            "include_patterns": list(self.include_patterns),
            "exclude_patterns": list(self.exclude_patterns),
            "workers": self.workers,
            "log_level": self.log_level,
            "json_logging": self.json_logging,
            "log_file": self.log_file,
        }

    def save(self, path: Path, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save config file
            format: Format to save as ('yaml' or 'json')
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Never persist the key, and drop unset values for a cleaner file
        data = {k: v for k, v in self.to_dict().items() if v is not None and k != "api_key"}

        if format == "yaml":
            content = yaml.dump(data, default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(data, indent=2)

        path.write_text(content, encoding="utf-8")
