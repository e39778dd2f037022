"""Pytest configuration and fixtures for tflow tests."""

import os
import sys
import zipfile
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")

TFLOW_ENV_VARS = [
    "TFLOW_PACKAGE",
    "TFLOW_RESOURCE_DIR",
    "TFLOW_SUFFIX",
    "TFLOW_CONFIG_FLAG",
    "TFLOW_ICON_RESOURCE",
    "TFLOW_PLUGIN_SUFFIX",
    "TFLOW_ARCHIVE",
    "TFLOW_PIPELINE_COMMAND",
    "TFLOW_LOG_LEVEL",
    "TFLOW_JSON_LOGS",
]

GLM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<TasselPipeline>
    <fork1>
        <h>genotypes.hmp.txt</h>
    </fork1>
    <combine2>
        <input1/>
        <export>results</export>
    </combine2>
</TasselPipeline>
"""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate tests from TFLOW_* variables and global logging state."""
    for var in TFLOW_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    from tflow import plugin

    plugin._printed_citations.clear()
    yield
    plugin._printed_citations.clear()
    structlog.reset_defaults()


@pytest.fixture
def workflow_package(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Create an importable package with bundled workflow configurations.

    Layout:
        demo_flows/
            __init__.py
            workflows/
                GLM_association.xml
                my_workflow_file.xml
                notes.txt
    """
    pkg = tmp_path / "pkgs" / "demo_flows"
    workflows = pkg / "workflows"
    workflows.mkdir(parents=True)
    (pkg / "__init__.py").write_text("")
    (workflows / "GLM_association.xml").write_text(GLM_XML)
    (workflows / "my_workflow_file.xml").write_text(GLM_XML)
    (workflows / "notes.txt").write_text("not a workflow")
    monkeypatch.syspath_prepend(str(tmp_path / "pkgs"))
    monkeypatch.delitem(sys.modules, "demo_flows", raising=False)
    return "demo_flows"


@pytest.fixture
def workflow_archive(tmp_path: Path) -> Path:
    """Create a wheel-like archive bundling the demo_flows workflows.

    The package is not importable; its workflows are only reachable
    through the archive.
    """
    archive = tmp_path / "demo_flows-1.0-py3-none-any.whl"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("demo_flows/__init__.py", "")
        zf.writestr("demo_flows/workflows/GLM_association.xml", GLM_XML)
        zf.writestr("demo_flows/workflows/notes.txt", "not a workflow")
        zf.writestr("demo_flows/other/kinship.xml", GLM_XML)
    return archive
