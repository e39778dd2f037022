"""tflow CLI Tool - Main entry point."""

from __future__ import annotations

import json
import shlex
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from tflow import __version__
from tflow.cli_utils import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    archive_option,
    log_level_option,
    package_option,
    resource_dir_option,
    wire_config,
    wire_pipeline,
    wire_registry,
)
from tflow.errors import PipelineConfigError, UnknownWorkflowError, WorkflowError
from tflow.plugin import BasePlugin, ProgressEvent, WorkflowPlugin
from tflow.registry import WorkflowRegistry

app = typer.Typer(
    name="tflow",
    help="tflow - Launch the pipeline workflows bundled with a package.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_success(message: str, quiet: bool = False) -> None:
    """Print a success message."""
    if not quiet:
        console.print(f"[green]Success:[/green] {escape(message)}")


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def _output_info(message: str, quiet: bool = False) -> None:
    """Print an info message."""
    if not quiet:
        console.print(escape(message))


def _exit_error(message: str, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print error and exit."""
    _output_error(message)
    raise typer.Exit(code=exit_code)


def _get_plugin(registry: WorkflowRegistry, label: str) -> BasePlugin:
    """Look up a workflow or exit with an error."""
    try:
        return registry.get(label)
    except UnknownWorkflowError as e:
        _exit_error(str(e))


def _describe(plugin: BasePlugin) -> dict[str, Any]:
    """JSON-friendly description of a plugin."""
    data: dict[str, Any] = {
        "label": plugin.button_name,
        "tooltip": plugin.tool_tip_text,
        "citation": plugin.citation,
        "has_icon": plugin.icon() is not None,
    }
    if isinstance(plugin, WorkflowPlugin):
        data["resource"] = plugin.filename
        data["args"] = list(plugin.args)
    return data


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tflow version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """tflow - Launch the pipeline workflows bundled with a package."""
    pass


# -----------------------------------------------------------------------------
# List Command
# -----------------------------------------------------------------------------


@app.command("list")
def list_workflows(
    package: str | None = package_option(),
    resource_dir: str | None = resource_dir_option(),
    archive: str | None = archive_option(),
    log_level: str | None = log_level_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only print labels.",
    ),
) -> None:
    """List the workflows bundled with the package."""
    config = wire_config(
        package=package, resource_dir=resource_dir, log_level=log_level, archive=archive
    )
    registry = wire_registry(config)
    plugins = registry.plugins()

    if json_output:
        console.print_json(json.dumps({"workflows": [_describe(p) for p in plugins]}))
        return

    if not plugins:
        _output_info(f"No workflows found in {config.package}/{config.resource_dir}.", quiet)
        return

    if quiet:
        for plugin in plugins:
            console.print(escape(plugin.button_name))
        return

    table = Table(title="Bundled Workflows")
    table.add_column("Label", style="cyan")
    table.add_column("Resource", style="green")
    table.add_column("Arguments")

    for plugin in plugins:
        described = _describe(plugin)
        table.add_row(
            escape(described["label"]),
            escape(described.get("resource", "-")),
            escape(" ".join(described.get("args", [])) or "-"),
        )

    console.print(table)


# -----------------------------------------------------------------------------
# Show Command
# -----------------------------------------------------------------------------


@app.command()
def show(
    label: str = typer.Argument(..., help="Display label of the workflow."),
    package: str | None = package_option(),
    resource_dir: str | None = resource_dir_option(),
    archive: str | None = archive_option(),
    log_level: str | None = log_level_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Show the details of one workflow."""
    config = wire_config(
        package=package, resource_dir=resource_dir, log_level=log_level, archive=archive
    )
    registry = wire_registry(config)
    described = _describe(_get_plugin(registry, label))

    if json_output:
        console.print_json(json.dumps(described))
        return

    console.print(f"[bold]{escape(described['label'])}[/bold]")
    console.print(f"  Tooltip:   {escape(described['tooltip'])}")
    if "resource" in described:
        console.print(f"  Resource:  {escape(described['resource'])}")
        console.print(f"  Arguments: {escape(' '.join(described['args']))}")
    console.print(f"  Icon:      {'yes' if described['has_icon'] else 'no'}")
    console.print(f"  Citation:  {escape(described['citation'] or '-')}")


# -----------------------------------------------------------------------------
# Args Command
# -----------------------------------------------------------------------------


@app.command("args")
def expanded_args(
    label: str = typer.Argument(..., help="Display label of the workflow."),
    package: str | None = package_option(),
    resource_dir: str | None = resource_dir_option(),
    archive: str | None = archive_option(),
    log_level: str | None = log_level_option(),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output as JSON.",
    ),
) -> None:
    """Print the pipeline arguments a workflow expands to."""
    config = wire_config(
        package=package, resource_dir=resource_dir, log_level=log_level, archive=archive
    )
    registry = wire_registry(config)
    plugin = _get_plugin(registry, label)
    if not isinstance(plugin, WorkflowPlugin):
        _exit_error(f"Workflow has no launch arguments: {label}")

    pipeline = wire_pipeline(config, lambda args, parent: None)
    try:
        args = pipeline.expand(list(plugin.args))
    except PipelineConfigError as e:
        _exit_error(str(e))

    if json_output:
        console.print_json(json.dumps({"label": label, "args": args}))
        return

    console.print(escape(shlex.join(args)), soft_wrap=True)


# -----------------------------------------------------------------------------
# Run Command
# -----------------------------------------------------------------------------


@app.command()
def run(
    label: str = typer.Argument(..., help="Display label of the workflow."),
    command: str | None = typer.Option(
        None,
        "--command",
        "-c",
        help="Pipeline command to execute (default: dry run).",
        envvar="TFLOW_PIPELINE_COMMAND",
    ),
    package: str | None = package_option(),
    resource_dir: str | None = resource_dir_option(),
    archive: str | None = archive_option(),
    log_level: str | None = log_level_option(),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output for CI.",
    ),
) -> None:
    """Run a workflow through the pipeline.

    Without a pipeline command the run is a dry run: the expanded pipeline
    arguments are printed instead of executed.
    """
    config = wire_config(
        package=package,
        resource_dir=resource_dir,
        log_level=log_level,
        pipeline_command=command,
        archive=archive,
    )
    dry_run = not config.pipeline_command

    def _print_args(args: list[str]) -> None:
        if not quiet:
            console.print(f"Dry run: {escape(shlex.join(args))}", soft_wrap=True)

    registry = wire_registry(config, on_dry_run=_print_args)
    plugin = _get_plugin(registry, label)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        console=err_console,
        disable=quiet,
        transient=True,
    ) as progress:
        task = progress.add_task(escape(plugin.button_name), total=100)

        def _on_progress(event: ProgressEvent) -> None:
            progress.update(task, completed=event.percent)

        plugin.add_listener(_on_progress)
        try:
            registry.activate(label)
        except WorkflowError as e:
            _exit_error(str(e), exit_code=EXIT_SYSTEM_ERROR)
        finally:
            plugin.remove_listener(_on_progress)

    if not dry_run:
        _output_success(f"Workflow completed: {plugin.button_name}", quiet)
