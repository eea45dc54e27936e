"""YAML loader + schema validation for stack declarations.

Provides a single entrypoint to parse a YAML string, normalize keys where
needed, validate against the packaged JSON schema, and return a canonical
dictionary suitable for the parser.
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

import jsonschema
import yaml

from fnstack.errors import DeclarationError
from fnstack.utils.yaml_utils import normalize_yaml_dict_keys

RECOGNIZED_KEYS = frozenset(
    {"parameters", "defaults", "fragments", "bundles", "authorizers", "functions"}
)


@lru_cache(maxsize=1)
def stack_schema() -> Dict[str, Any]:
    """Return the packaged stack JSON schema."""
    with (
        resources.files("fnstack.schemas")
        .joinpath("stack.json")
        .open("r", encoding="utf-8")
    ) as f:
        return json.load(f)


def load_stack_yaml(yaml_str: str) -> Dict[str, Any]:
    """Load, normalize, and validate a stack YAML string.

    Returns a canonical dictionary whose shape is already enforced, so the
    parser can index into it without further type checks.

    Raises:
        yaml.YAMLError: If the text is not valid YAML.
        DeclarationError: If the document is not a mapping or has unknown
            top-level keys.
        jsonschema.ValidationError: If the document does not match the schema.
    """
    data = yaml.safe_load(yaml_str)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DeclarationError("The provided YAML must map to a dictionary at top-level.")

    data = normalize_yaml_dict_keys(data)
    extra = set(data) - RECOGNIZED_KEYS
    if extra:
        raise DeclarationError(
            f"Unrecognized top-level key(s) in stack: {', '.join(sorted(extra))}. "
            f"Allowed keys are {sorted(RECOGNIZED_KEYS)}"
        )

    # YAML 1.1 turns keys like `on`/`yes` into booleans; fragment, bundle and
    # variable names must stay strings
    for section in ("parameters", "fragments", "bundles"):
        if isinstance(data.get(section), dict):
            data[section] = normalize_yaml_dict_keys(data[section])
    functions = data.get("functions")
    if functions is not None and not isinstance(functions, list):
        raise DeclarationError("'functions' must be a list of function definitions")
    for entry in functions or []:
        if isinstance(entry, dict) and isinstance(entry.get("environment"), dict):
            entry["environment"] = normalize_yaml_dict_keys(entry["environment"])

    jsonschema.validate(data, stack_schema())
    return data
