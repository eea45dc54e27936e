"""Stack class for building routes, functions and identities from YAML."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fnstack.assembler import Assembly, assemble
from fnstack.config import BUILD_CONFIG, AmbientParameters, BuildConfig
from fnstack.dsl.loader import load_stack_yaml
from fnstack.dsl.parser import StackDefinition, parse_stack
from fnstack.logging import get_logger
from fnstack.model.functions import FunctionRegistry
from fnstack.model.identity import Identity
from fnstack.model.routes import RouteTree


@dataclass
class Stack:
    """A fully assembled stack.

    Holds the parsed definition alongside the assembly so inspection tools
    can show both what was declared and what was built.

    Typical usage example:

        stack = Stack.from_yaml(yaml_str, params=AmbientParameters.from_env())
        stack.tree.find("orders/create").methods
    """

    definition: StackDefinition
    assembly: Assembly

    _logger = get_logger(__name__)

    @property
    def tree(self) -> RouteTree:
        return self.assembly.tree

    @property
    def registry(self) -> FunctionRegistry:
        return self.assembly.registry

    @property
    def identities(self) -> Dict[str, Identity]:
        return self.assembly.identities

    @classmethod
    def from_definition(cls, definition: StackDefinition) -> Stack:
        """Assemble an already parsed definition."""
        assembly = assemble(
            definition.declarations,
            definition.catalog,
            bundles=definition.bundles,
            authorizers=definition.authorizers,
            config=definition.config,
        )
        return cls(definition=definition, assembly=assembly)

    @classmethod
    def from_yaml(
        cls,
        yaml_str: str,
        params: Optional[AmbientParameters] = None,
        config: BuildConfig = BUILD_CONFIG,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> Stack:
        """Construct a Stack from a YAML string.

        Top-level YAML keys can include:
          - parameters: Ambient values substituted into fragments
          - defaults: Function defaults (memory, timeout, runtime, handler, trust)
          - fragments: Permission catalog entries
          - bundles: Named lists of grants
          - authorizers: Names of the authorizers bindings may reference
          - functions: Function declarations with their routes

        Args:
            yaml_str: The YAML document.
            params: Ambient parameters; document ``parameters`` take precedence.
            config: Base build configuration.
            overrides: Parameters that take precedence over the document.

        Returns:
            The assembled Stack.

        Raises:
            yaml.YAMLError: If the YAML is malformed.
            jsonschema.ValidationError: If the document does not match the schema.
            StackBuildError: On the first declaration error.
        """
        data = load_stack_yaml(yaml_str)
        definition = parse_stack(
            data, params=params, config=config, overrides=overrides
        )
        stack = cls.from_definition(definition)
        cls._logger.debug(
            "Stack constructed: functions=%d, identities=%d, resources=%d",
            len(stack.registry),
            len(stack.identities),
            len(stack.tree) - 1,
        )
        return stack
