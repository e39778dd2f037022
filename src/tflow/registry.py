"""Workflow registry queried by host applications.

The registry is built once at startup from a file-listing function and then
answers lookups by display label. Hosts show `plugins()` as menu actions and
call `activate()` when the user clicks one.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from tflow.config import TflowConfig
from tflow.discovery import ListFiles
from tflow.errors import UnknownWorkflowError
from tflow.log import get_logger
from tflow.pipeline import PipelineRunner
from tflow.plugin import BasePlugin, get_instances


class WorkflowRegistry:
    """Registry that maps display labels to plugins.

    Example:
        >>> registry = WorkflowRegistry()
        >>> registry.register(plugin)
        >>> registry.activate("SNP Calling")
    """

    def __init__(self, logger: Any = None) -> None:
        """Initialize an empty registry."""
        self._plugins: dict[str, BasePlugin] = {}
        self.logger = logger or get_logger(__name__)

    def register(self, plugin: BasePlugin) -> None:
        """Register a plugin by its button name.

        Raises:
            ValueError: If the plugin has no label or if a plugin with the
                same label is already registered.
        """
        label = plugin.button_name
        if not label:
            raise ValueError(f"Plugin {plugin!r} has no button name")
        if label in self._plugins:
            raise ValueError(
                f"Workflow '{label}' already registered: {self._plugins[label]!r}"
            )
        self._plugins[label] = plugin
        self.logger.debug("workflow_registered", workflow=label)

    def get(self, label: str) -> BasePlugin:
        """Get the plugin registered under a label.

        Raises:
            UnknownWorkflowError: If no plugin has this label.
        """
        plugin = self._plugins.get(label)
        if plugin is None:
            raise UnknownWorkflowError(label, self.list_labels())
        return plugin

    def has(self, label: str) -> bool:
        """Check if a plugin is registered under the given label."""
        return label in self._plugins

    def list_labels(self) -> list[str]:
        """List registered labels in registration order."""
        return list(self._plugins)

    def plugins(self) -> list[BasePlugin]:
        """List registered plugins in registration order."""
        return list(self._plugins.values())

    def activate(self, label: str) -> None:
        """Activate the plugin registered under a label.

        Raises:
            UnknownWorkflowError: If no plugin has this label.
            WorkflowError: If the workflow fails.
        """
        self.get(label).activate()

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[BasePlugin]:
        return iter(self.plugins())

    def __contains__(self, label: object) -> bool:
        return label in self._plugins


def build_registry(
    list_files: ListFiles,
    runner: PipelineRunner,
    parent: Any = None,
    config: TflowConfig | None = None,
    logger: Any = None,
) -> WorkflowRegistry:
    """Discover workflow configurations and register one plugin for each.

    The listing function is called exactly once.

    Args:
        list_files: Returns the resource paths of the workflow configurations.
        runner: Pipeline runner used by every plugin.
        parent: Handle to the host window.
        config: Configuration; defaults to TflowConfig().
        logger: Logger handle passed to the registry and its plugins.

    Returns:
        A populated WorkflowRegistry.
    """
    cfg = config or TflowConfig()
    log = logger or get_logger(__name__)
    filenames = list_files()

    registry = WorkflowRegistry(logger=log)
    plugins = get_instances(
        filenames,
        runner,
        parent,
        config_flag=cfg.config_flag,
        suffix=cfg.suffix,
        icon_resource=cfg.icon_resource,
        logger=log,
    )
    for plugin in plugins:
        if not plugin.button_name:
            log.warning("unlabeled_workflow", filename=getattr(plugin, "filename", None))
            continue
        if plugin.button_name in registry:
            # Two files formatting to the same label, first one wins
            log.warning(
                "duplicate_workflow_label",
                workflow=plugin.button_name,
                filename=getattr(plugin, "filename", None),
            )
            continue
        registry.register(plugin)

    log.info("workflows_discovered", count=len(registry), workflows=registry.list_labels())
    return registry
