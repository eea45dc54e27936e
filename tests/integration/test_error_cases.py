"""Declaration errors surfaced through the YAML entry point."""

from __future__ import annotations

import jsonschema
import pytest

from fnstack.config import AmbientParameters
from fnstack.errors import (
    DeclarationError,
    DuplicateFragment,
    DuplicateFunctionName,
    DuplicateMethod,
    InvalidBudget,
    InvalidMethod,
    InvalidPath,
    MissingAuthorizer,
    NotFound,
    StackBuildError,
    UnknownBundle,
    UnknownFragment,
    UnknownParameter,
)
from fnstack.stack import Stack

HEADER = """
fragments:
  ReadA:
    actions: s3:GetObject
    resources: "arn:${partition}:s3:::bucket-a/*"
functions:
"""


def build(functions: str) -> Stack:
    return Stack.from_yaml(
        HEADER + functions, params=AmbientParameters(region="r", account="1")
    )


def test_missing_authorizer() -> None:
    with pytest.raises(MissingAuthorizer) as exc_info:
        build(
            """
  - name: a
    code: src/a
    routes:
      - path: items
        methods:
          - {verb: POST, auth: TOKEN_BASED, authorizer: null}
"""
        )
    assert exc_info.value.declaration == "a"
    assert str(exc_info.value).startswith("[a] ")


def test_duplicate_fragment() -> None:
    with pytest.raises(DuplicateFragment) as exc_info:
        build(
            """
  - name: a
    code: src/a
    fragments: [ReadA, ReadA]
"""
        )
    assert exc_info.value.fragment == "ReadA"


def test_unknown_fragment_lists_known() -> None:
    with pytest.raises(UnknownFragment, match="ReadA") as exc_info:
        build(
            """
  - name: a
    code: src/a
    fragments: [ReadB]
"""
        )
    assert exc_info.value.fragment == "ReadB"


def test_unknown_bundle() -> None:
    with pytest.raises(UnknownBundle):
        build(
            """
  - name: a
    code: src/a
    bundles: [basic]
"""
        )


def test_unknown_parameter() -> None:
    doc = """
fragments:
  T:
    actions: s3:GetObject
    resources: "arn:aws:s3:${region}:bucket"
"""
    with pytest.raises(UnknownParameter) as exc_info:
        Stack.from_yaml(doc)
    assert exc_info.value.parameter == "region"
    assert exc_info.value.fragment == "T"


def test_duplicate_function_name() -> None:
    with pytest.raises(DuplicateFunctionName) as exc_info:
        build(
            """
  - name: a
    code: src/a
  - name: a
    code: src/b
"""
        )
    assert exc_info.value.declaration == "a"


def test_duplicate_method_across_functions() -> None:
    with pytest.raises(DuplicateMethod) as exc_info:
        build(
            """
  - name: a
    code: src/a
    routes:
      - {path: items, methods: [GET]}
  - name: b
    code: src/b
    routes:
      - {path: items, methods: [GET]}
"""
        )
    assert exc_info.value.declaration == "b"


def test_invalid_method_and_path() -> None:
    with pytest.raises(InvalidMethod):
        build(
            """
  - name: a
    code: src/a
    routes:
      - {path: items, methods: [FETCH]}
"""
        )
    with pytest.raises(InvalidPath):
        build(
            """
  - name: a
    code: src/a
    routes:
      - {path: items//all, methods: [GET]}
"""
        )


def test_budget_out_of_range() -> None:
    with pytest.raises(InvalidBudget, match="memory"):
        build(
            """
  - name: a
    code: src/a
    memory: 64
"""
        )


def test_unknown_explicit_target() -> None:
    with pytest.raises(NotFound, match="No function named 'ghost'"):
        build(
            """
  - name: a
    code: src/a
    routes:
      - path: items
        methods:
          - {verb: GET, target: ghost}
"""
        )


def test_unknown_auth_mode_is_declaration_error() -> None:
    with pytest.raises(DeclarationError):
        build(
            """
  - name: a
    code: src/a
    routes:
      - path: items
        methods:
          - {verb: GET, auth: IAM}
"""
        )


def test_schema_violation() -> None:
    with pytest.raises(jsonschema.ValidationError):
        build(
            """
  - name: a
"""
        )


def test_errors_are_value_errors() -> None:
    assert issubclass(StackBuildError, ValueError)
