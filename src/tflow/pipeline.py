"""Pipeline runner seam and workflow XML handling.

A workflow configuration is a TasselPipeline XML document. Each element
becomes a ``-<tag>`` flag and each non-blank text node becomes a value, so

    <TasselPipeline>
        <fork1>
            <h>mdp_genotype.hmp.txt</h>
        </fork1>
    </TasselPipeline>

expands to ``["-fork1", "-h", "mdp_genotype.hmp.txt"]``.

`ConfigResourcePipeline` is the reference runner: it replaces a
``-configResourceFile <path>`` pair with the expanded arguments of that
resource and hands the result to an executor. Elements whose tag ends in
``Plugin`` are self-describing plugins and are closed with ``-endPlugin``.
"""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from lxml import etree

from tflow.discovery import read_archive_resource, read_resource, resource_exists
from tflow.errors import PipelineConfigError, PipelineExecutionError
from tflow.log import get_logger

DEFAULT_CONFIG_FLAG = "-configResourceFile"
FILE_CONFIG_FLAG = "-configFile"
END_PLUGIN_FLAG = "-endPlugin"
ROOT_TAG = "TasselPipeline"
DEFAULT_PLUGIN_SUFFIX = "Plugin"

FORK_PREFIXES = ("-fork", "-runfork", "-combine")

PluginPredicate = Callable[[str], bool]
Executor = Callable[[list[str], Any], None]


class PipelineRunner(Protocol):
    """Anything that can run a workflow from an argument list."""

    def __call__(self, args: list[str], parent: Any) -> None: ...


def _never_plugin(name: str) -> bool:  # noqa: ARG001
    return False


def plugin_suffix_predicate(suffix: str = DEFAULT_PLUGIN_SUFFIX) -> PluginPredicate:
    """Create a predicate matching plugin tags by suffix (e.g., "KinshipPlugin")."""

    def _is_plugin(name: str) -> bool:
        return name.endswith(suffix)

    return _is_plugin


# -----------------------------------------------------------------------------
# XML -> args
# -----------------------------------------------------------------------------


def _parse_xml(source: bytes | str | Path) -> Any:
    """Parse XML from bytes, a string, or a file path into a root element."""
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        if isinstance(source, Path):
            return etree.parse(str(source), parser).getroot()
        if isinstance(source, str):
            source = source.encode("utf-8")
        return etree.fromstring(source, parser)
    except (etree.XMLSyntaxError, OSError) as e:
        raise PipelineConfigError(f"Invalid workflow XML: {e}") from e


def _collect_flags(element: Any, flags: list[str], is_plugin: PluginPredicate) -> None:
    flag_name = element.tag.strip()
    flags.append(f"-{flag_name}")

    if element.text and element.text.strip():
        flags.append(element.text.strip())
    for child in element:
        # Comments and processing instructions only split the text around them
        if isinstance(child.tag, str):
            _collect_flags(child, flags, is_plugin)
        if child.tail and child.tail.strip():
            flags.append(child.tail.strip())

    if is_plugin(flag_name):
        flags.append(END_PLUGIN_FLAG)


def read_xml_as_args(
    source: bytes | str | Path,
    is_plugin: PluginPredicate | None = None,
) -> list[str]:
    """Expand a TasselPipeline XML document into a flat argument list.

    Args:
        source: XML content (bytes or str) or a path to an XML file.
        is_plugin: Predicate telling whether a tag names a self-describing
            plugin; such elements are closed with ``-endPlugin``.

    Returns:
        The pipeline arguments in document order.

    Raises:
        PipelineConfigError: If the XML is malformed or the root element
            is not TasselPipeline.
    """
    predicate = is_plugin or _never_plugin
    root = _parse_xml(source)
    if root.tag.lower() != ROOT_TAG.lower():
        raise PipelineConfigError(f"Root node must be {ROOT_TAG}: {root.tag}")

    flags: list[str] = []
    for child in root:
        if isinstance(child.tag, str):
            _collect_flags(child, flags, predicate)
    return flags


# -----------------------------------------------------------------------------
# args -> XML
# -----------------------------------------------------------------------------


def _is_fork(arg: str) -> bool:
    return arg.startswith(FORK_PREFIXES)


def _add_text(element: Any, text: str) -> None:
    """Append a text node after the last child of element."""
    children = list(element)
    if children:
        children[-1].tail = (children[-1].tail or "") + text
    else:
        element.text = (element.text or "") + text


def _create_tag(parent: Any, flag: str) -> Any:
    try:
        return etree.SubElement(parent, flag[flag.rfind("-") + 1 :])
    except ValueError as e:
        raise PipelineConfigError(f"Invalid flag name: {flag}") from e


class _XmlWriter:
    """Builds the element tree for an argument list."""

    def __init__(self, args: Sequence[str], known_flags: set[str], is_plugin: PluginPredicate) -> None:
        self.args = args
        self.known_flags = known_flags
        self.is_plugin = is_plugin

    def is_modifier(self, arg: str) -> bool:
        if not arg.startswith("-"):
            return True
        if _is_fork(arg) or arg[1:] in self.known_flags:
            return False
        return not self.is_plugin(arg[1:])

    def build(self) -> Any:
        root = etree.Element(ROOT_TAG)
        args = self.args
        index = 0
        while index < len(args):
            current = args[index]
            if not _is_fork(current):
                raise PipelineConfigError(
                    f"Flag should be either -fork, -combine, or -runfork: {current}"
                )
            element = _create_tag(root, current)
            while True:
                index += 1
                if index >= len(args) or _is_fork(args[index]):
                    break
                if args[index].startswith("-") and self.is_plugin(args[index][1:]):
                    index = self.plugin(element, index)
                elif self.is_modifier(args[index]):
                    index = self.string(element, index)
                else:
                    index = self.flag(element, index)
        return root

    def flag(self, parent: Any, index: int) -> int:
        element = _create_tag(parent, self.args[index])
        while True:
            index += 1
            if index >= len(self.args) or not self.is_modifier(self.args[index]):
                break
            index = self.string(element, index)
        return index - 1

    def plugin(self, parent: Any, index: int) -> int:
        element = _create_tag(parent, self.args[index])
        while True:
            index += 1
            if index >= len(self.args):
                break
            if self.args[index].lower() == END_PLUGIN_FLAG.lower():
                index += 1
                break
            if self.args[index].startswith("-runfork"):
                break
            index = self.string(element, index)
        return index - 1

    def string(self, parent: Any, index: int) -> int:
        current = self.args[index]
        if not current.startswith("-"):
            _add_text(parent, current)
            return index

        element = _create_tag(parent, current)
        while True:
            index += 1
            if index >= len(self.args) or self.args[index].startswith("-"):
                return index - 1
            _add_text(element, self.args[index])


def write_args_as_xml(
    args: Sequence[str],
    known_flags: Iterable[str] = (),
    is_plugin: PluginPredicate | None = None,
) -> bytes:
    """Serialize pipeline arguments as a TasselPipeline XML document.

    Top-level arguments must be grouped under ``-fork``, ``-runfork`` or
    ``-combine`` flags.

    Args:
        args: Pipeline arguments.
        known_flags: Flag names (without the dash) that start a new step
            instead of modifying the previous one.
        is_plugin: Predicate telling whether a flag names a self-describing
            plugin, whose parameters run until ``-endPlugin``.

    Returns:
        The UTF-8 encoded, indented XML document.

    Raises:
        PipelineConfigError: If a top-level argument is not a fork flag, or a
            flag is not a valid element name (e.g., "-5").
    """
    writer = _XmlWriter(args, set(known_flags), is_plugin or _never_plugin)
    root = writer.build()
    etree.indent(root, space="    ")
    result: bytes = etree.tostring(
        root, pretty_print=True, xml_declaration=True, encoding="UTF-8"
    )
    return result


# -----------------------------------------------------------------------------
# Runners and executors
# -----------------------------------------------------------------------------


class ConfigResourcePipeline:
    """Pipeline runner that expands workflow configurations before execution.

    ``-configResourceFile <path>`` pairs are read from the archive when one is
    given, then from package resources, then from the filesystem, so listings
    from any of the discovery functions can be launched. ``-configFile <path>``
    pairs are read from the filesystem only. All other arguments are passed
    through unchanged.

    Usage:
        runner = ConfigResourcePipeline(executor=subprocess_executor("run_pipeline.pl"))
        runner(["-configResourceFile", "/tflow/workflows/SNP-calling.xml"], None)
    """

    def __init__(
        self,
        executor: Executor,
        config_flag: str = DEFAULT_CONFIG_FLAG,
        is_plugin: PluginPredicate | None = None,
        archive: Path | str | None = None,
        logger: Any = None,
    ) -> None:
        self.executor = executor
        self.config_flag = config_flag
        self.is_plugin = is_plugin or plugin_suffix_predicate()
        self.archive = archive
        self.logger = logger or get_logger(__name__)

    def _load(self, flag: str, path: str) -> bytes:
        if flag == self.config_flag:
            if self.archive is not None:
                try:
                    return read_archive_resource(self.archive, path)
                except OSError as e:
                    self.logger.debug("archive_entry_unavailable", path=path, error=str(e))
            if resource_exists(path):
                return read_resource(path)

        file_path = Path(path)
        if not file_path.is_file():
            kind = "resource" if flag == self.config_flag else "file"
            raise PipelineConfigError(f"Workflow {kind} not found: {path}")
        return file_path.read_bytes()

    def expand(self, args: Sequence[str]) -> list[str]:
        """Replace configuration flags with the arguments they describe.

        Raises:
            PipelineConfigError: If a configuration flag has no value, the
                configuration cannot be found, or its XML is invalid.
        """
        expanded: list[str] = []
        index = 0
        while index < len(args):
            current = args[index]
            if current in (self.config_flag, FILE_CONFIG_FLAG):
                if index + 1 >= len(args):
                    raise PipelineConfigError(f"Missing value for {current}")
                data = self._load(current, args[index + 1])
                expanded.extend(read_xml_as_args(data, self.is_plugin))
                index += 2
            else:
                expanded.append(current)
                index += 1
        return expanded

    def __call__(self, args: list[str], parent: Any = None) -> None:
        expanded = self.expand(args)
        self.logger.info("pipeline_expanded", args=args, step_count=len(expanded))
        self.executor(expanded, parent)


def subprocess_executor(command: Sequence[str] | str) -> Executor:
    """Create an executor that runs an external pipeline command.

    The expanded arguments are appended to the command.

    Args:
        command: Command to run, as a list or a shell-like string
            (e.g., "run_pipeline.pl -Xmx4g").

    Returns:
        An executor raising PipelineExecutionError on failure.
    """
    base = shlex.split(command) if isinstance(command, str) else list(command)
    if not base:
        raise ValueError("Pipeline command must not be empty")

    def _execute(args: list[str], parent: Any = None) -> None:  # noqa: ARG001
        try:
            result = subprocess.run(
                [*base, *args],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise PipelineExecutionError(f"Cannot start pipeline command '{base[0]}': {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise PipelineExecutionError(
                f"Pipeline exited with status {result.returncode}: {stderr}",
                returncode=result.returncode,
                stderr=stderr,
            )

    return _execute
