"""Icon resources for workflow actions."""

from __future__ import annotations

from tflow.discovery import read_resource

DEFAULT_ICON = "/tflow/images/Workflow.gif"


def load_icon(resource: str = DEFAULT_ICON) -> bytes | None:
    """Load an icon image from package resources.

    Args:
        resource: Absolute resource path of the image.

    Returns:
        The raw image bytes, or None if the resource is absent.
    """
    try:
        return read_resource(resource)
    except FileNotFoundError:
        return None
