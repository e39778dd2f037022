"""Discovery of workflow configuration resources.

Resources are addressed with absolute slash paths rooted at a top-level
package, e.g. ``/tflow/workflows/SNP-calling.xml``. Listing functions never
raise: failures are logged at debug level and give an empty list, so a broken
install only means fewer workflows.
"""

from __future__ import annotations

import importlib.resources
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from tflow.log import get_logger

ListFiles = Callable[[], list[str]]

_logger = get_logger(__name__)


def resource_path(package: str, *parts: str) -> str:
    """Build an absolute resource path from a dotted package and path parts.

    Example:
        >>> resource_path("tflow", "workflows", "a.xml")
        '/tflow/workflows/a.xml'
    """
    segments = package.split(".") + [p.strip("/") for p in parts if p.strip("/")]
    return "/" + "/".join(segments)


def _traversable(path: str) -> Any:
    """Resolve an absolute resource path to an importlib.resources Traversable."""
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise FileNotFoundError(f"Empty resource path: {path!r}")
    return importlib.resources.files(parts[0]).joinpath(*parts[1:])


def read_resource(path: str) -> bytes:
    """Read the bytes of a package resource.

    Args:
        path: Absolute resource path (e.g., "/tflow/images/Workflow.gif").

    Returns:
        The resource content.

    Raises:
        FileNotFoundError: If the package or the resource cannot be found.
    """
    try:
        target = _traversable(path)
        if not target.is_file():
            raise FileNotFoundError(f"Resource not found: {path}")
        data: bytes = target.read_bytes()
        return data
    except ModuleNotFoundError as e:
        raise FileNotFoundError(f"Cannot load resource '{path}': {e}") from e


def resource_exists(path: str) -> bool:
    """Check whether a package resource exists."""
    try:
        return bool(_traversable(path).is_file())
    except (ModuleNotFoundError, FileNotFoundError, TypeError):
        return False


def list_package_resources(
    package: str,
    resource_dir: str = "workflows",
    suffix: str = ".xml",
    logger: Any = None,
) -> list[str]:
    """List resources with a suffix inside an importable package.

    Works for regular installs as well as zip imports, since it goes through
    importlib.resources.

    Args:
        package: Dotted package name containing the resources.
        resource_dir: Sub-directory of the package to scan ("" for the root).
        suffix: Resource suffix to match (e.g., ".xml").
        logger: Logger handle; defaults to this module's logger.

    Returns:
        Sorted absolute resource paths, or an empty list on failure.
    """
    log = logger or _logger
    try:
        directory = importlib.resources.files(package)
        if resource_dir:
            directory = directory.joinpath(*resource_dir.strip("/").split("/"))
        names = sorted(
            entry.name
            for entry in directory.iterdir()
            if entry.is_file() and entry.name.endswith(suffix)
        )
    except Exception as e:
        log.debug("resource_listing_failed", package=package, error=str(e), exc_info=True)
        return []

    result = [resource_path(package, resource_dir, name) for name in names]
    log.debug("resources_listed", package=package, count=len(result))
    return result


def read_archive_resource(archive: Path | str, path: str) -> bytes:
    """Read one entry of a zip archive by its resource path.

    Args:
        archive: Path to the archive file.
        path: Absolute resource path (e.g., "/tflow/workflows/a.xml").

    Raises:
        FileNotFoundError: If the archive or the entry cannot be read.
    """
    try:
        with zipfile.ZipFile(archive) as zf:
            return zf.read(path.lstrip("/"))
    except KeyError as e:
        raise FileNotFoundError(f"Resource not found in {archive}: {path}") from e
    except zipfile.BadZipFile as e:
        raise FileNotFoundError(f"Cannot read archive '{archive}': {e}") from e


def list_archive_resources(
    archive: Path | str,
    prefix: str,
    suffix: str = ".xml",
    logger: Any = None,
) -> list[str]:
    """List entries of a zip archive (wheel, jar, egg) under a prefix.

    Args:
        archive: Path to the archive file.
        prefix: Entry name prefix (e.g., "tflow/workflows/").
        suffix: Entry name suffix (e.g., ".xml").
        logger: Logger handle; defaults to this module's logger.

    Returns:
        ``"/" + entry_name`` for every match, in archive order, or an empty
        list if the archive cannot be read.
    """
    log = logger or _logger
    prefix = prefix.lstrip("/")
    try:
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
    except Exception as e:
        log.debug("archive_listing_failed", archive=str(archive), error=str(e), exc_info=True)
        return []

    return [
        "/" + name
        for name in names
        if name.startswith(prefix) and name.endswith(suffix)
    ]


def list_directory_resources(
    directory: Path | str,
    suffix: str = ".xml",
    logger: Any = None,
) -> list[str]:
    """List files with a suffix in a filesystem directory.

    Returns:
        Sorted absolute file paths, or an empty list if the directory
        cannot be read.
    """
    log = logger or _logger
    base = Path(directory)
    try:
        matches = sorted(
            p for p in base.iterdir() if p.is_file() and p.name.endswith(suffix)
        )
    except Exception as e:
        log.debug("directory_listing_failed", directory=str(base), error=str(e), exc_info=True)
        return []
    return [str(p.resolve()) for p in matches]


def package_lister(
    package: str,
    resource_dir: str = "workflows",
    suffix: str = ".xml",
    logger: Any = None,
) -> ListFiles:
    """Create a file-listing function for the resources of a package.

    The returned callable takes no arguments, which is what
    `tflow.registry.build_registry` expects.
    """

    def _list() -> list[str]:
        return list_package_resources(package, resource_dir, suffix, logger)

    return _list


def archive_lister(
    archive: Path | str,
    package: str,
    resource_dir: str = "workflows",
    suffix: str = ".xml",
    logger: Any = None,
) -> ListFiles:
    """Create a file-listing function for a package's resources inside an archive."""
    prefix = resource_path(package, resource_dir) + "/"

    def _list() -> list[str]:
        return list_archive_resources(archive, prefix, suffix, logger)

    return _list
