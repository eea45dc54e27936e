"""Permission catalog: named, reusable access-grant fragments."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

from fnstack.config import AmbientParameters
from fnstack.dsl.variables import substitute_vars
from fnstack.errors import UnknownFragment, UnknownParameter
from fnstack.logging import get_logger
from fnstack.model.grants import AccessGrant

_logger = get_logger(__name__)


class PermissionCatalog:
    """Read-only mapping from fragment name to AccessGrant.

    The catalog is built once per build pass and handed explicitly to every
    identity composition. Ambient parameters are substituted while the
    catalog is built; resolution is a plain lookup.

    Example (YAML-like):
        fragments:
          ReadOrders:
            actions: [dynamodb:GetItem, dynamodb:Query]
            resources:
              - arn:${partition}:dynamodb:${region}:${account}:table/orders
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, AccessGrant]] = None) -> None:
        self._entries: Mapping[str, AccessGrant] = MappingProxyType(dict(entries or {}))

    def resolve(self, name: str) -> AccessGrant:
        """Return the grant registered under ``name``.

        Raises:
            UnknownFragment: If the catalog has no such entry.
        """
        try:
            return self._entries[name]
        except KeyError:
            raise UnknownFragment(name, self._entries.keys()) from None

    def names(self) -> List[str]:
        """Return fragment names in definition order."""
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"PermissionCatalog({len(self._entries)} fragments)"

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Dict[str, Any]],
        params: Optional[AmbientParameters] = None,
    ) -> PermissionCatalog:
        """Build a catalog from raw fragment definitions.

        Every ``$name``/``${name}`` placeholder in actions and resources is
        replaced with the matching ambient parameter.

        Args:
            data: Mapping of fragment name to ``{actions, resources, effect?, sid?}``.
            params: Ambient parameters; defaults to an empty set (partition only).

        Returns:
            A new PermissionCatalog.

        Raises:
            UnknownParameter: If a placeholder has no value.
        """
        values = (params or AmbientParameters()).as_dict()
        entries: Dict[str, AccessGrant] = {}
        for name, raw in data.items():
            for key in ("actions", "resources"):
                if key not in raw:
                    raise ValueError(f"Fragment '{name}' is missing '{key}'.")
            try:
                resolved = {
                    **raw,
                    "actions": [substitute_vars(a, values) for a in _as_list(raw["actions"])],
                    "resources": [
                        substitute_vars(r, values) for r in _as_list(raw["resources"])
                    ],
                }
            except KeyError as exc:
                raise UnknownParameter(str(exc.args[0]), str(name)) from None
            entries[str(name)] = AccessGrant.from_dict(resolved)

        _logger.debug(
            "Built permission catalog: %d fragments (params: %s)",
            len(entries),
            ", ".join(sorted(values)),
        )
        return cls(entries)


def _as_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    return list(value)
