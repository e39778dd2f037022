"""CLI utility functions for tflow.

Provides helper functions for:
- Config wiring: Extracting Typer CLI options and passing to load_config
- Error formatting: Consistent user-friendly error messages with exit codes
- Registry wiring: Building the workflow registry the commands query
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NoReturn

import typer

from tflow.config import TflowConfig, load_config
from tflow.discovery import archive_lister, package_lister
from tflow.log import setup_logging
from tflow.pipeline import (
    ConfigResourcePipeline,
    Executor,
    plugin_suffix_predicate,
    subprocess_executor,
)
from tflow.registry import WorkflowRegistry, build_registry

# Exit code conventions
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad input, unknown workflow, etc.)
EXIT_SYSTEM_ERROR = 2  # System error (workflow failed, I/O, etc.)


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Args:
        msg: The error message to display.
        exit_code: Exit code to use (default: EXIT_USER_ERROR=1).

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


# -----------------------------------------------------------------------------
# Config and Registry Wiring
# -----------------------------------------------------------------------------


def wire_config(
    package: str | None = None,
    resource_dir: str | None = None,
    log_level: str | None = None,
    pipeline_command: str | None = None,
    archive: str | None = None,
) -> TflowConfig:
    """Wire CLI options to load_config with appropriate overrides.

    Also configures logging from the resolved config.

    Raises:
        typer.Exit: If configuration is invalid.
    """
    cli_overrides: dict[str, Any] = {}

    if package is not None:
        cli_overrides["package"] = package
    if resource_dir is not None:
        cli_overrides["resource_dir"] = resource_dir
    if log_level is not None:
        cli_overrides["log_level"] = log_level
    if pipeline_command is not None:
        cli_overrides["pipeline_command"] = pipeline_command
    if archive is not None:
        cli_overrides["archive"] = archive

    try:
        config = load_config(cli_overrides=cli_overrides)
    except ValueError as e:
        error(f"Invalid configuration: {e}", exit_code=EXIT_USER_ERROR)

    setup_logging(config.log_level, json_output=config.json_logs)
    return config


def wire_pipeline(config: TflowConfig, executor: Executor) -> ConfigResourcePipeline:
    """Build the pipeline runner that expands workflows for an executor."""
    return ConfigResourcePipeline(
        executor,
        config_flag=config.config_flag,
        is_plugin=plugin_suffix_predicate(config.plugin_suffix),
        archive=config.archive,
    )


def wire_registry(
    config: TflowConfig,
    executor: Executor | None = None,
    on_dry_run: Callable[[list[str]], None] | None = None,
) -> WorkflowRegistry:
    """Build the workflow registry for a command.

    Workflows are discovered in config.archive when it is set, otherwise in
    the installed config.package.

    Args:
        config: Resolved configuration.
        executor: Executor for expanded pipelines. Defaults to running
            config.pipeline_command, or to a dry run when it is unset.
        on_dry_run: Called with the expanded arguments during a dry run.

    Returns:
        The populated registry.
    """
    def _dry_run(args: list[str], parent: Any = None) -> None:  # noqa: ARG001
        if on_dry_run is not None:
            on_dry_run(args)

    if executor is None:
        executor = (
            subprocess_executor(config.pipeline_command)
            if config.pipeline_command
            else _dry_run
        )

    runner = wire_pipeline(config, executor)
    if config.archive:
        lister = archive_lister(config.archive, config.package, config.resource_dir, config.suffix)
    else:
        lister = package_lister(config.package, config.resource_dir, config.suffix)
    return build_registry(lister, runner, config=config)


# -----------------------------------------------------------------------------
# Typer Option Factory Functions
# -----------------------------------------------------------------------------
# Typer consumes Option objects when decorating commands, so each command
# needs a fresh instance.


def package_option() -> Any:
    """Create a Typer Option for --package / -p."""
    return typer.Option(
        None,
        "--package",
        "-p",
        help="Package holding workflow configurations (default: tflow).",
        envvar="TFLOW_PACKAGE",
    )


def resource_dir_option() -> Any:
    """Create a Typer Option for --resource-dir / -r."""
    return typer.Option(
        None,
        "--resource-dir",
        "-r",
        help="Directory of the package to scan (default: workflows).",
        envvar="TFLOW_RESOURCE_DIR",
    )


def log_level_option() -> Any:
    """Create a Typer Option for --log-level."""
    return typer.Option(
        None,
        "--log-level",
        help="Minimum log level: debug, info, warning, error (default: warning).",
        envvar="TFLOW_LOG_LEVEL",
    )


def archive_option() -> Any:
    """Create a Typer Option for --archive / -a."""
    return typer.Option(
        None,
        "--archive",
        "-a",
        help="Zip archive (wheel, jar) to discover workflows in.",
        envvar="TFLOW_ARCHIVE",
    )
