"""Tests for tflow.plugin module."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from tflow.errors import WorkflowError
from tflow.plugin import (
    WORKFLOW_CITATION,
    BasePlugin,
    ProgressEvent,
    WorkflowPlugin,
    get_instances,
)

SNP_RESOURCE = "/tflow/workflows/SNP-calling.xml"


class RecordingRunner:
    """Pipeline runner that records its calls."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[tuple[list[str], Any]] = []
        self.error = error

    def __call__(self, args: list[str], parent: Any) -> None:
        self.calls.append((args, parent))
        if self.error is not None:
            raise self.error


class TestBasePlugin:
    """Tests for BasePlugin."""

    def test_abstract_method_enforcement(self) -> None:
        """Test that BasePlugin cannot be instantiated directly."""
        with pytest.raises(TypeError):
            BasePlugin()  # type: ignore[abstract]

    def test_activate_calls_process_data(self) -> None:
        """Test activate delegates to process_data."""

        class Counter(BasePlugin):
            button_name = "Counter"  # type: ignore[assignment]

            def __init__(self) -> None:
                super().__init__()
                self.count = 0

            def process_data(self) -> None:
                self.count += 1

        plugin = Counter()
        plugin.activate()
        plugin.activate()
        assert plugin.count == 2
        assert plugin.tool_tip_text == "Counter"
        assert plugin.icon() is None


class TestFireProgress:
    """Tests for progress listeners."""

    def _plugin(self, logger: Any = None) -> WorkflowPlugin:
        return WorkflowPlugin.from_filename(SNP_RESOURCE, RecordingRunner(), logger=logger)

    def test_listeners_receive_events(self) -> None:
        """Test listeners are notified in registration order."""
        plugin = self._plugin(MagicMock())
        received: list[tuple[str, int]] = []
        plugin.add_listener(lambda e: received.append(("first", e.percent)))
        plugin.add_listener(lambda e: received.append(("second", e.percent)))

        plugin.fire_progress(40)

        assert received == [("first", 40), ("second", 40)]

    def test_event_source_is_plugin(self) -> None:
        """Test events carry the emitting plugin."""
        plugin = self._plugin(MagicMock())
        events: list[ProgressEvent] = []
        plugin.add_listener(events.append)
        plugin.fire_progress(10)
        assert events[0].source is plugin

    @pytest.mark.parametrize("percent", [-1, 101])
    def test_out_of_range_raises(self, percent: int) -> None:
        """Test percentages outside 0-100 are rejected."""
        plugin = self._plugin(MagicMock())
        with pytest.raises(ValueError, match="between 0 and 100"):
            plugin.fire_progress(percent)

    def test_remove_listener(self) -> None:
        """Test removed listeners are no longer notified."""
        plugin = self._plugin(MagicMock())
        listener = MagicMock()
        plugin.add_listener(listener)
        plugin.remove_listener(listener)
        plugin.remove_listener(listener)
        plugin.fire_progress(50)
        listener.assert_not_called()

    def test_citation_logged_once(self) -> None:
        """Test the citation is logged the first time progress reaches 100."""
        logger = MagicMock()
        first = self._plugin(logger)
        second = self._plugin(logger)

        first.fire_progress(50)
        assert not logger.info.called

        first.fire_progress(100)
        second.fire_progress(100)

        citation_calls = [
            c for c in logger.info.call_args_list if c.args[0] == "plugin_citation"
        ]
        assert len(citation_calls) == 1
        assert citation_calls[0].kwargs["citation"] == WORKFLOW_CITATION


class TestWorkflowPlugin:
    """Tests for WorkflowPlugin."""

    def test_from_filename(self) -> None:
        """Test label and launch arguments derived from the filename."""
        plugin = WorkflowPlugin.from_filename(SNP_RESOURCE, RecordingRunner())
        assert plugin.button_name == "SNP Calling"
        assert plugin.tool_tip_text == "SNP Calling"
        assert plugin.filename == SNP_RESOURCE
        assert plugin.args == ("-configResourceFile", SNP_RESOURCE)
        assert plugin.citation == WORKFLOW_CITATION

    def test_custom_config_flag(self) -> None:
        """Test the configuration flag can be changed."""
        plugin = WorkflowPlugin.from_filename(
            "/flows/x.xml", RecordingRunner(), config_flag="-configFile"
        )
        assert plugin.args == ("-configFile", "/flows/x.xml")

    def test_activate_runs_pipeline(self) -> None:
        """Test activation passes the arguments and parent to the runner."""
        runner = RecordingRunner()
        parent = object()
        plugin = WorkflowPlugin.from_filename(SNP_RESOURCE, runner, parent, logger=MagicMock())

        plugin.activate()

        assert runner.calls == [(["-configResourceFile", SNP_RESOURCE], parent)]

    def test_activate_reports_completion(self) -> None:
        """Test progress reaches 100 after a successful run."""
        plugin = WorkflowPlugin.from_filename(SNP_RESOURCE, RecordingRunner(), logger=MagicMock())
        percents: list[int] = []
        plugin.add_listener(lambda e: percents.append(e.percent))

        plugin.activate()

        assert percents == [100]

    def test_failure_raises_workflow_error(self) -> None:
        """Test a runner failure becomes a WorkflowError naming the label."""
        runner = RecordingRunner(RuntimeError("disk full"))
        logger = MagicMock()
        plugin = WorkflowPlugin.from_filename(SNP_RESOURCE, runner, logger=logger)
        percents: list[int] = []
        plugin.add_listener(lambda e: percents.append(e.percent))

        with pytest.raises(WorkflowError) as exc_info:
            plugin.activate()

        message = str(exc_info.value)
        assert "SNP Calling" in message
        assert "disk full" in message
        assert exc_info.value.label == "SNP Calling"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert percents == [100]

    def test_failure_logged_at_debug(self) -> None:
        """Test the underlying failure is logged at debug level."""
        logger = MagicMock()
        plugin = WorkflowPlugin.from_filename(
            SNP_RESOURCE, RecordingRunner(ValueError("bad arg")), logger=logger
        )

        with pytest.raises(WorkflowError):
            plugin.activate()

        failed = [c for c in logger.debug.call_args_list if c.args[0] == "workflow_failed"]
        assert len(failed) == 1
        assert failed[0].kwargs["error"] == "bad arg"
        assert failed[0].kwargs["workflow"] == "SNP Calling"

    def test_icon_loaded_from_resource(self) -> None:
        """Test the default icon is bundled."""
        plugin = WorkflowPlugin.from_filename(SNP_RESOURCE, RecordingRunner())
        icon = plugin.icon()
        assert icon is not None
        assert icon.startswith(b"GIF")

    def test_missing_icon_is_none(self) -> None:
        """Test a missing icon resource gives None."""
        plugin = WorkflowPlugin.from_filename(
            SNP_RESOURCE, RecordingRunner(), icon_resource="/tflow/images/Nope.gif"
        )
        assert plugin.icon() is None

    def test_custom_icon_loader(self) -> None:
        """Test an injected icon loader is used."""
        loader = MagicMock(return_value=b"png")
        plugin = WorkflowPlugin.from_filename(
            SNP_RESOURCE, RecordingRunner(), icon_resource="/x/icon.png", icon_loader=loader
        )
        assert plugin.icon() == b"png"
        loader.assert_called_once_with("/x/icon.png")

    def test_args_are_immutable(self) -> None:
        """Test launch arguments are stored as a tuple."""
        args = ["-configResourceFile", SNP_RESOURCE]
        plugin = WorkflowPlugin(SNP_RESOURCE, "SNP Calling", args, RecordingRunner())
        args.append("-extra")
        assert plugin.args == ("-configResourceFile", SNP_RESOURCE)


class TestGetInstances:
    """Tests for get_instances function."""

    def test_one_plugin_per_file(self) -> None:
        """Test plugins are created in the order of the filenames."""
        runner = RecordingRunner()
        plugins = get_instances(
            ["/f/my_workflow_file.xml", "/f/simpleCamelCase.xml"], runner
        )
        assert [p.button_name for p in plugins] == ["My Workflow File", "Simple Camel Case"]
        assert all(p.args[0] == "-configResourceFile" for p in plugins)

    def test_empty_list(self) -> None:
        """Test no filenames give no plugins."""
        assert get_instances([], RecordingRunner()) == []
