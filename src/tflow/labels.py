"""Display labels for workflow configuration files.

Turns a filename such as ``/tflow/workflows/SNP-calling.xml`` into the button
text shown to users (``SNP Calling``).
"""

from __future__ import annotations

from pathlib import PurePosixPath

# Characters that start a new word
SEPARATORS = frozenset("_- ")


def stem_of(filename: str, suffix: str = ".xml") -> str:
    """Get the bare name of a resource, without directory or suffix.

    Args:
        filename: Resource path (e.g., "/tflow/workflows/my_flow.xml").
        suffix: Suffix to strip when present.

    Returns:
        The filename stem (e.g., "my_flow").
    """
    name = PurePosixPath(filename.replace("\\", "/")).name
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    return name


def format_label(stem: str) -> str:
    """Format a filename stem as a spaced, capitalized display label.

    Separators become spaces and capitalize the following character.
    A space is inserted before an uppercase character unless the previous
    emitted character is also uppercase, so acronyms stay together.

    Args:
        stem: Filename stem with the suffix already removed.

    Returns:
        The display label. An empty stem gives an empty label.

    Example:
        >>> format_label("SNP-calling")
        'SNP Calling'
        >>> format_label("simpleCamelCase")
        'Simple Camel Case'
    """
    if not stem:
        return ""

    builder = [stem[0].upper()]
    new_word = False
    for current in stem[1:]:
        if current in SEPARATORS:
            builder.append(" ")
            new_word = True
        elif builder[-1][-1].isupper():
            builder.append(current)
            new_word = False
        elif current.isupper():
            builder.append(" ")
            builder.append(current)
            new_word = False
        elif new_word:
            builder.append(current.upper())
            new_word = False
        else:
            builder.append(current)
    return "".join(builder)


def button_name(filename: str, suffix: str = ".xml") -> str:
    """Get the display label for a workflow resource path."""
    return format_label(stem_of(filename, suffix))
