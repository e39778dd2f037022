"""Plugin interface and the workflow entry type.

A plugin is the capability a host application needs to show and trigger an
action: a label, a tooltip, an icon, a citation, and ``activate()``.
`WorkflowPlugin` is the one implementation tflow ships: it launches a bundled
workflow configuration through a pipeline runner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from tflow.errors import WorkflowError
from tflow.icons import DEFAULT_ICON, load_icon
from tflow.labels import button_name
from tflow.log import get_logger
from tflow.pipeline import DEFAULT_CONFIG_FLAG, PipelineRunner

WORKFLOW_CITATION = "Casstevens T, Wang Y. (2015) First Annual Tassel Hackathon."

IconLoader = Callable[[str], bytes | None]

# Citations already logged in this process
_printed_citations: set[str] = set()


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification sent to plugin listeners.

    Attributes:
        percent: Completion percentage between 0 and 100 inclusive.
        source: The plugin that emitted the event.
    """

    percent: int
    source: BasePlugin


ProgressListener = Callable[[ProgressEvent], None]


class BasePlugin(ABC):
    """Abstract base class for actions a host application can display.

    Subclasses implement `process_data()` and the `button_name` property.
    Hosts call `activate()` and may subscribe to progress with
    `add_listener()`.
    """

    citation: str = ""

    def __init__(self, parent: Any = None, logger: Any = None) -> None:
        """Initialize plugin.

        Args:
            parent: Handle to the host window, passed through to collaborators.
            logger: Logger handle; defaults to a logger for this module.
        """
        self.parent = parent
        self.logger = logger or get_logger(__name__)
        self._listeners: list[ProgressListener] = []

    @property
    @abstractmethod
    def button_name(self) -> str:
        """Text shown on the button or menu item."""

    @property
    def tool_tip_text(self) -> str:
        """Tooltip shown when hovering the action."""
        return self.button_name

    def icon(self) -> bytes | None:
        """Icon image bytes, or None when the plugin has no icon."""
        return None

    def add_listener(self, listener: ProgressListener) -> None:
        """Subscribe to progress events."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ProgressListener) -> None:
        """Unsubscribe from progress events. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def fire_progress(self, percent: int) -> None:
        """Notify listeners of progress.

        When progress reaches 100 the citation is logged, once per process.

        Args:
            percent: Completion percentage between 0 and 100 inclusive.

        Raises:
            ValueError: If percent is out of range.
        """
        if percent < 0 or percent > 100:
            raise ValueError(
                f"percent must be between 0 and 100 inclusive, got: {percent}"
            )

        event = ProgressEvent(percent=percent, source=self)
        for listener in list(self._listeners):
            listener(event)

        if percent == 100 and self.citation and self.citation not in _printed_citations:
            self.logger.info(
                "plugin_citation",
                plugin=type(self).__name__,
                citation=self.citation,
            )
            _printed_citations.add(self.citation)

    @abstractmethod
    def process_data(self) -> None:
        """Perform the plugin's work."""

    def activate(self) -> None:
        """Entry point called by the host when the user triggers the action."""
        self.process_data()


class WorkflowPlugin(BasePlugin):
    """A bundled workflow configuration exposed as an action.

    Instances are immutable once created: the label is derived from the
    filename and the launch arguments are fixed at discovery time.

    Attributes:
        filename: Resource path of the workflow configuration.
        args: Arguments handed to the pipeline runner.
    """

    citation = WORKFLOW_CITATION

    def __init__(
        self,
        filename: str,
        label: str,
        args: Iterable[str],
        runner: PipelineRunner,
        parent: Any = None,
        icon_resource: str = DEFAULT_ICON,
        icon_loader: IconLoader = load_icon,
        logger: Any = None,
    ) -> None:
        super().__init__(parent, logger)
        self._filename = filename
        self._label = label
        self._args = tuple(args)
        self._runner = runner
        self._icon_resource = icon_resource
        self._icon_loader = icon_loader

    @classmethod
    def from_filename(
        cls,
        filename: str,
        runner: PipelineRunner,
        parent: Any = None,
        config_flag: str = DEFAULT_CONFIG_FLAG,
        suffix: str = ".xml",
        **kwargs: Any,
    ) -> WorkflowPlugin:
        """Create a plugin for a discovered configuration file.

        Args:
            filename: Resource path of the workflow configuration.
            runner: Pipeline runner invoked on activation.
            parent: Handle to the host window.
            config_flag: Flag that names the configuration for the runner.
            suffix: Suffix stripped from the filename to build the label.
            **kwargs: Passed through to the constructor.

        Returns:
            A WorkflowPlugin launching ``[config_flag, filename]``.
        """
        return cls(
            filename,
            button_name(filename, suffix),
            (config_flag, filename),
            runner,
            parent,
            **kwargs,
        )

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def args(self) -> tuple[str, ...]:
        return self._args

    @property
    def button_name(self) -> str:
        return self._label

    def icon(self) -> bytes | None:
        return self._icon_loader(self._icon_resource)

    def process_data(self) -> None:
        """Run the workflow through the pipeline runner.

        Raises:
            WorkflowError: If the runner fails for any reason.
        """
        try:
            self.logger.debug("workflow_started", workflow=self._label, args=list(self._args))
            self._runner(list(self._args), self.parent)
        except Exception as e:
            self.logger.debug(
                "workflow_failed", workflow=self._label, error=str(e), exc_info=True
            )
            raise WorkflowError(self._label, str(e)) from e
        finally:
            self.fire_progress(100)

    def __repr__(self) -> str:
        return f"WorkflowPlugin(label={self._label!r}, filename={self._filename!r})"


def get_instances(
    filenames: Iterable[str],
    runner: PipelineRunner,
    parent: Any = None,
    **kwargs: Any,
) -> list[WorkflowPlugin]:
    """Create one WorkflowPlugin per configuration file, in the given order."""
    return [
        WorkflowPlugin.from_filename(filename, runner, parent, **kwargs)
        for filename in filenames
    ]
