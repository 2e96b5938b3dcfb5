"""Shared FHIR path utilities.

Element paths in a StructureDefinition are dotted and rooted at the resource
type (``Patient.name.family``). Resources are plain JSON objects, so lookups
walk nested mappings key by key. All functions are pure and handle
missing/malformed data gracefully.
"""

from collections.abc import Mapping
from typing import Any


def strip_type_prefix(path: str, resource_type: str | None) -> str:
    """Make an element path relative to its resource type.

    Examples:
    - ("Patient.name", "Patient") -> "name"
    - ("Patient", "Patient") -> ""
    - ("name", "Patient") -> "name"

    Args:
        path: Dotted element path, usually rooted at the resource type.
        resource_type: The profile's base type.

    Returns:
        Path relative to the resource root ("" for the root itself).
    """
    if not resource_type:
        return path
    if path == resource_type:
        return ""
    prefix = f"{resource_type}."
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def get_path_value(resource: Mapping[str, Any], path: str) -> Any:
    """Walk a JSON object along a dotted path.

    Only mappings are descended into. Hitting a list, a scalar or a missing
    key part-way yields None, which callers treat the same as an explicit
    null.

    Args:
        resource: FHIR resource dict
        path: Dotted path relative to the resource root

    Returns:
        The terminal value, or None if any step is absent
    """
    current: Any = resource
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


def has_path_value(resource: Mapping[str, Any], path: str) -> bool:
    """True if the path resolves to a present, non-null value."""
    return get_path_value(resource, path) is not None
