"""Stack assembly: identities, function registry and route tree in one pass.

The assembler walks the declarations in order. For each one it composes the
identity, registers the deployable unit and adds its routes. The first error
aborts the whole pass and nothing is returned, so callers either get a
complete Assembly or an exception naming the offending declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import (
    Any,
    Callable,
    Collection,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
)

from fnstack.config import BUILD_CONFIG, BuildConfig
from fnstack.errors import (
    DuplicateFunctionName,
    DuplicateRole,
    NotFound,
    StackBuildError,
    UnknownBundle,
)
from fnstack.logging import get_logger
from fnstack.model.catalog import PermissionCatalog
from fnstack.model.functions import DeployableUnit, FunctionRegistry, ResourceBudget
from fnstack.model.grants import AccessGrant, GrantBundle, TrustRelationship
from fnstack.model.identity import Identity, compose
from fnstack.model.routes import MethodBinding, PathSpec, RouteTree

LOGGER = get_logger(__name__)

# Collaborators supplied by the packaging/deployment side
CodeLocationResolver = Callable[[str], Any]
TargetResolver = Callable[[str], Any]


@dataclass(frozen=True)
class RouteDeclaration:
    """A logical path and the methods exposed on it.

    Bindings without a target are served by the declaring function.
    """

    path: str
    methods: Tuple[MethodBinding, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "methods", tuple(self.methods))


@dataclass(frozen=True)
class FunctionDeclaration:
    """Everything needed to build one function.

    Attributes:
        name: Function name, unique across the stack.
        code: Code location.
        role: Role name; defaults to ``<name>-role``. Declarations naming the
            same explicit role share one Identity; derived names are never
            shared.
        trust: Principal allowed to assume the role; build default when None.
        bundles: Names of grant bundles to include.
        grants: Inline grants.
        fragments: Catalog fragment names.
        memory_mb: Memory size; build default when None.
        timeout_s: Timeout; build default when None.
        handler: Entry point; build default when None.
        runtime: Runtime; build default when None.
        environment: Environment variables.
        extensions: Extension bundle tokens (layers).
        routes: Routes served by the function.
    """

    name: str
    code: str
    role: Optional[str] = None
    trust: Optional[str] = None
    bundles: Tuple[str, ...] = ()
    grants: Tuple[AccessGrant, ...] = ()
    fragments: Tuple[str, ...] = ()
    memory_mb: Optional[int] = None
    timeout_s: Optional[int] = None
    handler: Optional[str] = None
    runtime: Optional[str] = None
    environment: Dict[str, str] = field(default_factory=dict)
    extensions: Tuple[str, ...] = ()
    routes: Tuple[RouteDeclaration, ...] = ()

    def __post_init__(self) -> None:
        for name in ("bundles", "grants", "fragments", "extensions", "routes"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def role_name(self) -> str:
        return self.role or f"{self.name}-role"

    @property
    def declares_permissions(self) -> bool:
        return bool(self.bundles or self.grants or self.fragments)


@dataclass
class Assembly:
    """The finished build: route tree, registry and identities.

    Attributes:
        tree: Route tree rooted at the API root.
        registry: Registered deployable units.
        identities: Composed identities keyed by role name, in composition order.
    """

    tree: RouteTree = field(default_factory=RouteTree)
    registry: FunctionRegistry = field(default_factory=FunctionRegistry)
    identities: Dict[str, Identity] = field(default_factory=dict)

    def code_artifacts(self, resolver: CodeLocationResolver) -> Dict[str, Any]:
        """Map each function name to ``resolver(unit.code)``."""
        return {unit.name: resolver(unit.code) for unit in self.registry}

    def route_targets(self, resolver: TargetResolver) -> Dict[Tuple[str, str], Any]:
        """Map each ``(path, verb)`` to ``resolver(binding.target)``."""
        return {
            (path, binding.verb): resolver(binding.target)
            for path, binding in self.tree.bindings()
        }


def _resolve_bundles(
    names: Iterable[str], bundles: Mapping[str, GrantBundle]
) -> List[GrantBundle]:
    out: List[GrantBundle] = []
    for name in names:
        if name not in bundles:
            raise UnknownBundle(name)
        out.append(bundles[name])
    return out


def _identity_for(
    decl: FunctionDeclaration,
    identities: Dict[str, Identity],
    role_owners: Dict[str, str],
    registry: FunctionRegistry,
    catalog: PermissionCatalog,
    bundles: Mapping[str, GrantBundle],
    config: BuildConfig,
) -> Identity:
    role = decl.role_name
    existing = identities.get(role)
    if existing is not None:
        owner = role_owners[role]
        if decl.role is None:
            # A derived name is taken either by the same function name or by
            # an explicit role elsewhere; neither is shared
            if decl.name in registry:
                raise DuplicateFunctionName(decl.name)
            raise DuplicateRole(role, owner, derived=True)
        if decl.declares_permissions:
            raise DuplicateRole(role, owner)
        return existing

    identity = compose(
        role,
        TrustRelationship(decl.trust or config.default_trust_principal),
        _resolve_bundles(decl.bundles, bundles),
        decl.grants,
        decl.fragments,
        catalog,
    )
    identities[role] = identity
    role_owners[role] = decl.name
    return identity


def _unit_for(
    decl: FunctionDeclaration, identity: Identity, config: BuildConfig
) -> DeployableUnit:
    budget = ResourceBudget(
        memory_mb=decl.memory_mb if decl.memory_mb is not None else config.default_memory_mb,
        timeout_s=decl.timeout_s if decl.timeout_s is not None else config.default_timeout_s,
    )
    budget.check(decl.name, config)
    return DeployableUnit(
        name=decl.name,
        code=decl.code,
        identity=identity,
        budget=budget,
        handler=decl.handler or config.default_handler,
        runtime=decl.runtime or config.default_runtime,
        environment=dict(decl.environment),
        extensions=frozenset(decl.extensions),
    )


def _bindings_for(
    decl: FunctionDeclaration,
    route: RouteDeclaration,
    authorizers: Optional[Collection[str]],
) -> List[MethodBinding]:
    bindings: List[MethodBinding] = []
    for binding in route.methods:
        if (
            authorizers is not None
            and binding.authorizer
            and binding.authorizer not in authorizers
        ):
            raise NotFound("authorizer", binding.authorizer)
        if binding.target is None:
            binding = replace(binding, target=decl.name)
        bindings.append(binding)
    return bindings


def assemble(
    declarations: Iterable[FunctionDeclaration],
    catalog: PermissionCatalog,
    bundles: Optional[Mapping[str, GrantBundle]] = None,
    authorizers: Optional[Collection[str]] = None,
    config: BuildConfig = BUILD_CONFIG,
) -> Assembly:
    """Build the route tree, registry and identities for ``declarations``.

    Args:
        declarations: Function declarations, processed in order.
        catalog: Permission catalog used for every identity.
        bundles: Grant bundles by name.
        authorizers: Known authorizer names. When given, bindings naming any
            other authorizer are rejected.
        config: Build defaults and limits.

    Returns:
        The complete Assembly.

    Raises:
        StackBuildError: The first error encountered, tagged with the name of
            the declaration being processed.
    """
    bundles = bundles or {}
    tree = RouteTree()
    registry = FunctionRegistry()
    identities: Dict[str, Identity] = {}
    role_owners: Dict[str, str] = {}
    pending_targets: List[Tuple[str, str]] = []

    for decl in declarations:
        try:
            identity = _identity_for(
                decl, identities, role_owners, registry, catalog, bundles, config
            )
            registry.register(_unit_for(decl, identity, config))
            for route in decl.routes:
                spec = PathSpec.parse(route.path, config.path_separator)
                tree.add_route(spec, _bindings_for(decl, route, authorizers))
                pending_targets.extend(
                    (decl.name, b.target) for b in route.methods if b.target is not None
                )
        except StackBuildError as exc:
            exc.with_declaration(decl.name)
            raise

    # Explicit targets may point at functions declared later
    for decl_name, target in pending_targets:
        if target not in registry:
            raise NotFound("function", target).with_declaration(decl_name)

    routes = sum(1 for _ in tree.bindings())
    LOGGER.info(
        "Assembled stack: functions=%d, identities=%d, resources=%d, methods=%d",
        len(registry),
        len(identities),
        len(tree) - 1,
        routes,
    )
    return Assembly(tree=tree, registry=registry, identities=identities)
