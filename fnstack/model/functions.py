"""Deployable units and the append-only function registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterator, List, NamedTuple

from fnstack.config import BUILD_CONFIG, BuildConfig
from fnstack.errors import DuplicateFunctionName, InvalidBudget, NotFound
from fnstack.logging import get_logger
from fnstack.model.identity import Identity

_logger = get_logger(__name__)


@dataclass(frozen=True)
class ResourceBudget:
    """Memory and time allotted to one function invocation.

    Attributes:
        memory_mb: Memory size in MB.
        timeout_s: Timeout in seconds.
    """

    memory_mb: int = BUILD_CONFIG.default_memory_mb
    timeout_s: int = BUILD_CONFIG.default_timeout_s

    def check(self, function: str, config: BuildConfig = BUILD_CONFIG) -> None:
        """Validate against the provider limits in ``config``.

        Raises:
            InvalidBudget: If memory or timeout is out of range.
        """
        if not config.min_memory_mb <= self.memory_mb <= config.max_memory_mb:
            raise InvalidBudget(
                function,
                f"memory {self.memory_mb} MB outside "
                f"[{config.min_memory_mb}, {config.max_memory_mb}]",
            )
        if not config.min_timeout_s <= self.timeout_s <= config.max_timeout_s:
            raise InvalidBudget(
                function,
                f"timeout {self.timeout_s} s outside "
                f"[{config.min_timeout_s}, {config.max_timeout_s}]",
            )


@dataclass(frozen=True)
class DeployableUnit:
    """The packaged compute artifact backing one function.

    ``code`` is an opaque code location handed to the packaging step, and
    ``extensions`` are opaque tokens naming shared layers. Two units may
    point at the same code location under different names.

    Attributes:
        name: Globally unique function name.
        code: Code location (e.g. a source directory).
        identity: Role the function runs with, shared by reference.
        budget: Memory and timeout.
        handler: Entry point inside the package.
        runtime: Runtime identifier.
        environment: Environment variables.
        extensions: Extension bundle tokens.
    """

    name: str
    code: str
    identity: Identity
    budget: ResourceBudget = field(default_factory=ResourceBudget)
    handler: str = BUILD_CONFIG.default_handler
    runtime: str = BUILD_CONFIG.default_runtime
    environment: Dict[str, str] = field(default_factory=dict)
    extensions: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "extensions", frozenset(self.extensions))


class RegistryHandle(NamedTuple):
    """Returned by ``FunctionRegistry.register``."""

    name: str
    index: int


class FunctionRegistry:
    """Append-only mapping from function name to DeployableUnit.

    There is no update or delete: changing a function means running the
    build again.
    """

    __slots__ = ("_units",)

    def __init__(self) -> None:
        self._units: Dict[str, DeployableUnit] = {}

    def register(self, unit: DeployableUnit) -> RegistryHandle:
        """Register ``unit`` under its name.

        Raises:
            DuplicateFunctionName: If the name is taken; the first unit stays.
        """
        if unit.name in self._units:
            raise DuplicateFunctionName(unit.name)
        self._units[unit.name] = unit
        _logger.debug(
            "Registered function '%s' (code=%s, memory=%d MB, timeout=%d s)",
            unit.name,
            unit.code,
            unit.budget.memory_mb,
            unit.budget.timeout_s,
        )
        return RegistryHandle(unit.name, len(self._units) - 1)

    def lookup(self, name: str) -> DeployableUnit:
        """Return the unit registered as ``name``.

        Raises:
            NotFound: If nothing is registered under ``name``.
        """
        try:
            return self._units[name]
        except KeyError:
            raise NotFound("function", name) from None

    def names(self) -> List[str]:
        return list(self._units)

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[DeployableUnit]:
        return iter(list(self._units.values()))
