"""Field-path resolution over documents.

Paths are dotted selectors (``a.b.0.c``). Numeric segments index into
sequences; any other segment applied to a sequence is mapped over its
elements.
"""

from collections.abc import Mapping
from typing import Any

from docquery.core.types import MISSING


def _is_index(segment: str) -> bool:
    return segment.isdigit()


def _get_value(value: Any, segment: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(segment, MISSING)
    if isinstance(value, list) and _is_index(segment):
        index = int(segment)
        if index < len(value):
            return value[index]
    return MISSING


def _resolve_path(value: Any, path: list[str], depth: int) -> Any:
    for i, segment in enumerate(path):
        if isinstance(value, list) and not _is_index(segment):
            # Nested arrays are only traversed one level deep
            if i == 0 and depth > 0:
                return MISSING
            rest = path[i:]
            values = []
            for item in value:
                resolved = _resolve_path(item, rest, depth + 1)
                if resolved is not MISSING:
                    values.append(resolved)
            return values
        value = _get_value(value, segment)
        if value is MISSING:
            return MISSING
    return value


def resolve(document: Any, path: str, unwrap_array: bool = False) -> Any:
    """Resolve a dotted path against a document.

    Args:
        document: The document (mapping or sequence) to read from
        path: Dotted field path; an empty path returns the document itself
        unwrap_array: If True, a single-element list result is unwrapped

    Returns:
        The resolved value, or MISSING if the path does not exist
    """
    if path == "":
        value = document
    elif not isinstance(document, (Mapping, list)):
        return MISSING
    else:
        value = _resolve_path(document, path.split("."), 0)

    if unwrap_array and isinstance(value, list) and len(value) == 1:
        return value[0]
    return value
