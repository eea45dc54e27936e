"""Route tree: gateway resources built as a trie keyed by path segment.

Routes are added one logical path at a time. Each path segment maps to one
resource node; routes sharing a prefix share the ancestor nodes, so
``orders/create`` and ``orders/get-by-id`` produce a single ``orders``
resource. Nodes live in an arena owned by the tree and are addressed by
integer id; the tree keeps a parent-to-children map, and nodes never point
back at their parent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from fnstack.errors import (
    DuplicateMethod,
    InvalidMethod,
    InvalidPath,
    MissingAuthorizer,
    NotFound,
)
from fnstack.logging import get_logger

LOGGER = get_logger(__name__)

HTTP_METHODS = frozenset(
    {"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "ANY"}
)

# Literal lowercase-hyphenated segment, or a literal {param} resource segment
_SEGMENT_RE = re.compile(r"^(?:[a-z0-9]+(?:-[a-z0-9]+)*|\{[a-zA-Z_][a-zA-Z0-9_]*\})$")


class AuthorizationMode(str, Enum):
    """Policy gate on a method binding."""

    NONE = "NONE"
    TOKEN_BASED = "TOKEN_BASED"

    @classmethod
    def parse(cls, value: Union[str, AuthorizationMode, None]) -> AuthorizationMode:
        """Accept enum members and case-insensitive names; None means NONE."""
        if value is None:
            return cls.NONE
        if isinstance(value, AuthorizationMode):
            return value
        key = str(value).strip().upper().replace("-", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(
                f"Unknown authorization mode '{value}'. "
                f"Expected one of {[m.value for m in cls]}"
            ) from None


@dataclass(frozen=True)
class PathSpec:
    """A parsed logical path.

    Examples::

        PathSpec.parse("orders/create")  -> PathSpec(("orders", "create"))
        PathSpec.parse("/orders/")       -> PathSpec(("orders",))
        PathSpec.parse("")               -> PathSpec(())   # the root
    """

    segments: Tuple[str, ...] = ()

    @classmethod
    def parse(cls, path: str, separator: str = "/") -> PathSpec:
        """Split ``path`` on ``separator`` and validate each segment.

        Raises:
            InvalidPath: On empty segments or segments outside the
                lowercase-hyphenated syntax.
        """
        stripped = path.strip(separator)
        if not stripped:
            return cls(())
        segments = stripped.split(separator)
        for seg in segments:
            if not seg:
                raise InvalidPath(path, "empty segment")
            if not _SEGMENT_RE.match(seg):
                raise InvalidPath(
                    path,
                    f"segment '{seg}' must be lowercase letters, digits and "
                    "single hyphens, or a '{name}' parameter",
                )
        return cls(tuple(segments))

    @property
    def is_root(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return "/".join(self.segments)


@dataclass(frozen=True)
class MethodBinding:
    """One HTTP method on a resource, bound to a callable target.

    Attributes:
        verb: HTTP method, normalised to upper case.
        auth: Authorization mode.
        target: Reference to the function that serves the method.
        authorizer: Authorizer reference, required for TOKEN_BASED.
        query_params: Declared query-string parameter names (metadata only).
    """

    verb: str
    auth: AuthorizationMode = AuthorizationMode.NONE
    target: Optional[str] = None
    authorizer: Optional[str] = None
    query_params: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "verb", str(self.verb).strip().upper())
        object.__setattr__(self, "auth", AuthorizationMode.parse(self.auth))
        object.__setattr__(self, "query_params", tuple(self.query_params))


@dataclass
class ResourceNode:
    """A gateway resource: one path segment plus its method bindings.

    Attributes:
        node_id: Index of the node in its tree's arena.
        segment: Path segment; empty for the root.
        path: Full logical path from the root.
        bindings: Method bindings keyed by verb.
    """

    node_id: int
    segment: str
    path: str
    bindings: Dict[str, MethodBinding] = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.node_id == 0

    @property
    def methods(self) -> List[str]:
        """Bound verbs, sorted."""
        return sorted(self.bindings)


class RouteTree:
    """Arena of resource nodes rooted at an empty-segment node.

    Usage::

        tree = RouteTree()
        tree.add_route(PathSpec.parse("orders/create"), [MethodBinding("POST")])
        tree.find("orders").segment   # "orders"
    """

    __slots__ = ("_children", "_nodes")

    def __init__(self) -> None:
        self._nodes: List[ResourceNode] = [ResourceNode(node_id=0, segment="", path="")]
        self._children: Dict[int, Dict[str, int]] = {0: {}}

    @property
    def root(self) -> ResourceNode:
        return self._nodes[0]

    def __len__(self) -> int:
        """Number of nodes, root included."""
        return len(self._nodes)

    def children(self, node: ResourceNode) -> Dict[str, ResourceNode]:
        """Return the children of ``node`` keyed by segment."""
        return {
            seg: self._nodes[child_id]
            for seg, child_id in self._children[node.node_id].items()
        }

    def _child(self, node: ResourceNode, segment: str) -> ResourceNode:
        """Return the child for ``segment``, creating it on first use."""
        siblings = self._children[node.node_id]
        child_id = siblings.get(segment)
        if child_id is not None:
            return self._nodes[child_id]

        child_id = len(self._nodes)
        path = f"{node.path}/{segment}" if node.path else segment
        child = ResourceNode(node_id=child_id, segment=segment, path=path)
        self._nodes.append(child)
        self._children[child_id] = {}
        siblings[segment] = child_id
        LOGGER.debug("Created resource node '/%s'", path)
        return child

    def add_route(
        self,
        path: Union[PathSpec, str],
        bindings: Sequence[MethodBinding],
    ) -> ResourceNode:
        """Add a route and attach ``bindings`` to its terminal node.

        All bindings are validated before any node is created or any binding
        attached, so a failing call leaves the tree unchanged. (A verb
        conflict can only occur on a node that already existed.)

        Args:
            path: Parsed path or a raw logical path string.
            bindings: Methods to attach.

        Returns:
            The terminal ResourceNode.

        Raises:
            InvalidMethod: If a verb is not a supported HTTP method.
            MissingAuthorizer: If a TOKEN_BASED binding has no authorizer.
            DuplicateMethod: If a verb is already bound on the node, or listed
                twice in ``bindings``.
        """
        spec = PathSpec.parse(path) if isinstance(path, str) else path
        route = str(spec)

        pending: Dict[str, MethodBinding] = {}
        for binding in bindings:
            if binding.verb not in HTTP_METHODS:
                raise InvalidMethod(binding.verb, route)
            if binding.auth is AuthorizationMode.TOKEN_BASED and not binding.authorizer:
                raise MissingAuthorizer(binding.verb, route)
            if binding.verb in pending:
                raise DuplicateMethod(binding.verb, route)
            pending[binding.verb] = binding

        node = self.root
        for segment in spec.segments:
            node = self._child(node, segment)

        for verb in pending:
            if verb in node.bindings:
                raise DuplicateMethod(verb, route)
        node.bindings.update(pending)
        return node

    def find(self, path: Union[PathSpec, str]) -> ResourceNode:
        """Return the node at ``path``.

        Raises:
            NotFound: If no node exists at that path.
        """
        spec = PathSpec.parse(path) if isinstance(path, str) else path
        node_id = 0
        for segment in spec.segments:
            child_id = self._children[node_id].get(segment)
            if child_id is None:
                raise NotFound("resource", f"/{spec}")
            node_id = child_id
        return self._nodes[node_id]

    def walk(self) -> Iterator[Tuple[int, ResourceNode]]:
        """Yield ``(depth, node)`` depth first, siblings in segment order."""
        stack: List[Tuple[int, int]] = [(0, 0)]
        while stack:
            depth, node_id = stack.pop()
            yield depth, self._nodes[node_id]
            children = self._children[node_id]
            for seg in sorted(children, reverse=True):
                stack.append((depth + 1, children[seg]))

    def bindings(self) -> Iterator[Tuple[str, MethodBinding]]:
        """Yield ``(path, binding)`` for every bound method, in walk order."""
        for _depth, node in self.walk():
            for verb in node.methods:
                yield node.path, node.bindings[verb]


def add_route(
    tree: RouteTree,
    path: Union[PathSpec, str],
    bindings: Sequence[MethodBinding],
) -> ResourceNode:
    """Add a route to ``tree``; see ``RouteTree.add_route``."""
    return tree.add_route(path, bindings)
