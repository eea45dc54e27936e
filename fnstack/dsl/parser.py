"""Parsers turning a validated stack document into build inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from fnstack.assembler import FunctionDeclaration, RouteDeclaration
from fnstack.config import BUILD_CONFIG, AmbientParameters, BuildConfig
from fnstack.errors import DeclarationError
from fnstack.logging import get_logger
from fnstack.model.catalog import PermissionCatalog
from fnstack.model.grants import AccessGrant, GrantBundle
from fnstack.model.routes import MethodBinding
from fnstack.utils.yaml_utils import stringify_values

_logger = get_logger(__name__)


@dataclass
class StackDefinition:
    """Everything ``assemble`` needs, parsed from one document.

    Attributes:
        declarations: Function declarations in document order.
        catalog: Permission catalog with parameters substituted.
        bundles: Grant bundles by name.
        authorizers: Declared authorizer names, or None when the document
            has no ``authorizers`` section (any name is accepted).
        params: Effective ambient parameters.
        config: Build config with document defaults applied.
    """

    declarations: List[FunctionDeclaration] = field(default_factory=list)
    catalog: PermissionCatalog = field(default_factory=PermissionCatalog)
    bundles: Dict[str, GrantBundle] = field(default_factory=dict)
    authorizers: Optional[Tuple[str, ...]] = None
    params: AmbientParameters = field(default_factory=AmbientParameters)
    config: BuildConfig = BUILD_CONFIG


def parse_method(raw: Any) -> MethodBinding:
    """Build a MethodBinding from a method entry.

    Supports string shorthand: ``"GET"`` is ``{verb: GET, auth: NONE}``.
    """
    if isinstance(raw, str):
        return MethodBinding(verb=raw)
    try:
        return MethodBinding(
            verb=raw["verb"],
            auth=raw.get("auth"),
            target=raw.get("target"),
            authorizer=raw.get("authorizer"),
            query_params=tuple(raw.get("query", ())),
        )
    except ValueError as exc:
        raise DeclarationError(str(exc)) from exc


def parse_route(raw: Dict[str, Any]) -> RouteDeclaration:
    """Build a RouteDeclaration from ``{path, methods}``."""
    return RouteDeclaration(
        path=raw["path"],
        methods=tuple(parse_method(m) for m in raw["methods"]),
    )


def parse_function(raw: Dict[str, Any]) -> FunctionDeclaration:
    """Build a FunctionDeclaration from one ``functions`` entry."""
    name = raw["name"]
    try:
        grants = tuple(AccessGrant.from_dict(g) for g in raw.get("grants", []))
        environment = stringify_values(raw.get("environment", {}))
    except ValueError as exc:
        raise DeclarationError(str(exc), declaration=name) from exc
    return FunctionDeclaration(
        name=name,
        code=raw["code"],
        role=raw.get("role"),
        trust=raw.get("trust"),
        bundles=tuple(raw.get("bundles", [])),
        grants=grants,
        fragments=tuple(raw.get("fragments", [])),
        memory_mb=raw.get("memory"),
        timeout_s=raw.get("timeout"),
        handler=raw.get("handler"),
        runtime=raw.get("runtime"),
        environment=environment,
        extensions=tuple(raw.get("layers", [])),
        routes=tuple(parse_route(r) for r in raw.get("routes", [])),
    )


def parse_bundles(raw: Dict[str, List[Dict[str, Any]]]) -> Dict[str, GrantBundle]:
    """Build grant bundles from ``{name: [grant, ...]}``."""
    return {
        name: GrantBundle(name, tuple(AccessGrant.from_dict(g) for g in grants))
        for name, grants in raw.items()
    }


def parse_stack(
    data: Dict[str, Any],
    params: Optional[AmbientParameters] = None,
    config: BuildConfig = BUILD_CONFIG,
    overrides: Optional[Mapping[str, Any]] = None,
) -> StackDefinition:
    """Parse a validated stack document.

    Parameter precedence, lowest first: ``params``, the document's
    ``parameters`` section, then ``overrides``. Document ``defaults``
    override the function defaults in ``config``.

    Args:
        data: Output of ``load_stack_yaml``.
        params: Ambient parameters from the environment or caller.
        config: Base build configuration.
        overrides: Values that win over the document, such as command-line
            parameters.

    Returns:
        A StackDefinition ready for ``assemble``.

    Raises:
        DeclarationError: On invalid defaults, grants or methods.
        UnknownParameter: If a fragment references an undefined parameter.
    """
    effective = (params or AmbientParameters()).merged(data.get("parameters", {}))
    if overrides:
        effective = effective.merged(overrides)

    try:
        effective_config = config.with_overrides(data.get("defaults", {}))
    except ValueError as exc:
        raise DeclarationError(str(exc)) from exc

    catalog = PermissionCatalog.from_dict(data.get("fragments", {}), effective)
    bundles = parse_bundles(data.get("bundles", {}))
    authorizers = data.get("authorizers")
    declarations = [parse_function(f) for f in data.get("functions", [])]

    _logger.debug(
        "Parsed stack: functions=%d, fragments=%d, bundles=%d, authorizers=%s",
        len(declarations),
        len(catalog),
        len(bundles),
        "any" if authorizers is None else len(authorizers),
    )
    return StackDefinition(
        declarations=declarations,
        catalog=catalog,
        bundles=bundles,
        authorizers=tuple(authorizers) if authorizers is not None else None,
        params=effective,
        config=effective_config,
    )
