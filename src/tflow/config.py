"""Configuration management for the tflow CLI tool.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .tflowrc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from tflow.icons import DEFAULT_ICON
from tflow.log import LOG_LEVELS
from tflow.pipeline import DEFAULT_CONFIG_FLAG, DEFAULT_PLUGIN_SUFFIX

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]


@dataclass
class TflowConfig:
    """Configuration for the tflow CLI tool.

    Attributes:
        package: Package holding the workflow configurations (default: "tflow")
        resource_dir: Directory of the package to scan (default: "workflows")
        suffix: Suffix of workflow configuration files (default: ".xml")
        config_flag: Flag naming the configuration for the pipeline runner
            (default: "-configResourceFile")
        icon_resource: Resource path of the workflow icon
        plugin_suffix: Tag suffix marking self-describing plugin elements,
            which are closed with -endPlugin (default: "Plugin")
        archive: Zip archive (wheel, jar) to discover workflows in instead
            of the installed package
        pipeline_command: Command that executes expanded pipelines. When unset,
            runs are dry runs that only print the expanded arguments.
        log_level: Minimum log level (default: "warning")
        json_logs: Emit JSON logs instead of console logs (default: False)
    """

    package: str = "tflow"
    resource_dir: str = "workflows"
    suffix: str = ".xml"
    config_flag: str = DEFAULT_CONFIG_FLAG
    icon_resource: str = DEFAULT_ICON
    plugin_suffix: str = DEFAULT_PLUGIN_SUFFIX
    archive: str | None = None
    pipeline_command: str | None = None
    log_level: str = "warning"
    json_logs: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not self.package or not isinstance(self.package, str):
            raise ValueError("package must be a non-empty string")

        if not isinstance(self.resource_dir, str):
            raise ValueError("resource_dir must be a string")

        if not self.suffix or not isinstance(self.suffix, str):
            raise ValueError("suffix must be a non-empty string")
        if not self.suffix.startswith("."):
            raise ValueError("suffix must start with '.'")

        if not self.config_flag or not isinstance(self.config_flag, str):
            raise ValueError("config_flag must be a non-empty string")
        if not self.config_flag.startswith("-"):
            raise ValueError("config_flag must start with '-'")

        if not self.icon_resource or not isinstance(self.icon_resource, str):
            raise ValueError("icon_resource must be a non-empty string")

        if not self.plugin_suffix or not isinstance(self.plugin_suffix, str):
            raise ValueError("plugin_suffix must be a non-empty string")

        if self.archive is not None and not str(self.archive).strip():
            raise ValueError("archive must not be blank")

        if self.pipeline_command is not None and not str(self.pipeline_command).strip():
            raise ValueError("pipeline_command must not be blank")

        if not isinstance(self.log_level, str) or self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")

        if isinstance(self.json_logs, str):
            self.json_logs = self.json_logs.strip().lower() in ("1", "true", "yes", "on")


def _get_config_field_names() -> set[str]:
    """Get the set of valid configuration field names.

    Returns:
        Set of field names from TflowConfig.
    """
    return {f.name for f in fields(TflowConfig)}


def find_config_file(filename: str = ".tflowrc", start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Searches for the specified file starting from start_dir (or current directory)
    and traversing up to the filesystem root.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = start_dir or Path.cwd()
    current = current.resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_tflowrc(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from .tflowrc file.

    Returns:
        Dictionary containing configuration from .tflowrc, or empty dict if not found.
    """
    config_path = find_config_file(".tflowrc", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        valid_fields = _get_config_field_names()
        return {k: v for k, v in data.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from pyproject.toml [tool.tflow] section.

    Returns:
        Dictionary containing configuration from pyproject.toml, or empty dict if not found.
    """
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
        tflow_section = data.get("tool", {}).get("tflow", {})

        valid_fields = _get_config_field_names()
        return {k: v for k, v in tflow_section.items() if k in valid_fields}
    except (tomllib.TOMLDecodeError, OSError):
        return {}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Environment variables are prefixed with TFLOW_ and use uppercase names.
    For example: TFLOW_PACKAGE, TFLOW_RESOURCE_DIR, TFLOW_PIPELINE_COMMAND

    Returns:
        Dictionary containing configuration from environment variables.
    """
    result: dict[str, Any] = {}
    for name in sorted(_get_config_field_names()):
        value = os.environ.get(f"TFLOW_{name.upper()}")
        if value is not None:
            result[name] = value

    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge multiple configuration dictionaries.

    Later dictionaries take precedence over earlier ones.
    """
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> TflowConfig:
    """Load configuration with full precedence chain.

    Loads configuration from multiple sources and merges them with the following
    precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (TFLOW_*)
    3. .tflowrc file
    4. pyproject.toml [tool.tflow] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved TflowConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    pyproject_config = _load_from_pyproject(start_dir)
    tflowrc_config = _load_from_tflowrc(start_dir)
    env_config = _load_from_env()
    cli_config = cli_overrides or {}

    valid_fields = _get_config_field_names()
    cli_config = {k: v for k, v in cli_config.items() if k in valid_fields and v is not None}

    merged = _merge_configs(
        pyproject_config,
        tflowrc_config,
        env_config,
        cli_config,
    )

    # Defaults are applied by the dataclass
    return TflowConfig(**merged)
