"""tflow - Launch bundled pipeline workflows from a host application.

Discovers the workflow configuration files shipped inside a package, exposes
each one as a labeled action, and forwards activations to a pipeline runner.
"""

from __future__ import annotations

__version__ = "0.1.0"

from tflow.errors import (
    PipelineConfigError,
    PipelineExecutionError,
    TflowError,
    UnknownWorkflowError,
    WorkflowError,
)
from tflow.labels import button_name, format_label, stem_of
from tflow.plugin import BasePlugin, WorkflowPlugin, get_instances
from tflow.registry import WorkflowRegistry, build_registry

__all__ = [
    "__version__",
    # Errors
    "PipelineConfigError",
    "PipelineExecutionError",
    "TflowError",
    "UnknownWorkflowError",
    "WorkflowError",
    # Labels
    "button_name",
    "format_label",
    "stem_of",
    # Plugins
    "BasePlugin",
    "WorkflowPlugin",
    "get_instances",
    # Registry
    "WorkflowRegistry",
    "build_registry",
]
