"""Utilities for handling YAML parsing quirks."""

from typing import Any, Dict, TypeVar

V = TypeVar("V")


def normalize_yaml_dict_keys(data: Dict[Any, V]) -> Dict[str, V]:
    """Normalize dictionary keys from YAML parsing to consistent string keys.

    YAML 1.1 boolean keys (true, false, yes, no, on, off) are loaded as Python
    booleans and numeric keys as ints. Environment variable names and fragment
    names must stay strings, so every key is converted with ``str``.

    Args:
        data: Dictionary that may contain boolean or other non-string keys.

    Returns:
        Dictionary with all keys converted to strings.

    Examples:
        >>> normalize_yaml_dict_keys({True: "a", 8080: "b", "name": "c"})
        {'True': 'a', '8080': 'b', 'name': 'c'}
    """
    return {str(key): value for key, value in data.items()}


def stringify_values(data: Dict[str, Any]) -> Dict[str, str]:
    """Convert scalar mapping values to strings.

    Environment variables are always strings at deploy time; YAML happily
    produces ints, floats and booleans for unquoted values. Booleans map to
    lowercase ``true``/``false``.

    Args:
        data: Mapping with scalar values.

    Returns:
        New mapping with string values.

    Raises:
        ValueError: If a value is a mapping or a list.
    """
    out: Dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            raise ValueError(f"Value for '{key}' must be a scalar, got {type(value).__name__}")
        if isinstance(value, bool):
            out[key] = "true" if value else "false"
        elif value is None:
            out[key] = ""
        else:
            out[key] = str(value)
    return out
