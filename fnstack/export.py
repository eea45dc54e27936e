"""Serialise an assembly for the deployment step and for policy review.

The output is plain JSON-compatible data: lists and dicts of strings and
numbers, with every collection sorted or kept in declaration order so the
same declarations always export the same document.
"""

from __future__ import annotations

from typing import Any, Dict, List

from fnstack.assembler import Assembly
from fnstack.model.functions import DeployableUnit
from fnstack.model.identity import Identity
from fnstack.model.routes import RouteTree


def routes_to_list(tree: RouteTree) -> List[Dict[str, Any]]:
    """One entry per resource node (root excluded), depth first."""
    out: List[Dict[str, Any]] = []
    for _depth, node in tree.walk():
        if node.is_root:
            continue
        parent = node.path.rpartition("/")[0]
        out.append(
            {
                "path": node.path,
                "segment": node.segment,
                "parent": parent,
                "methods": [
                    {
                        "verb": b.verb,
                        "auth": b.auth.value,
                        "target": b.target,
                        "authorizer": b.authorizer,
                        "query": list(b.query_params),
                    }
                    for b in (node.bindings[v] for v in node.methods)
                ],
            }
        )
    return out


def unit_to_dict(unit: DeployableUnit) -> Dict[str, Any]:
    return {
        "name": unit.name,
        "code": unit.code,
        "handler": unit.handler,
        "runtime": unit.runtime,
        "memory": unit.budget.memory_mb,
        "timeout": unit.budget.timeout_s,
        "role": unit.identity.name,
        "environment": dict(sorted(unit.environment.items())),
        "layers": sorted(unit.extensions),
    }


def identity_policy_document(identity: Identity) -> Dict[str, Any]:
    """Render ``identity`` as trust policy plus permissions policy.

    Returns:
        ``{"name", "trust_policy", "policy", "bundles", "fragments"}``
    """
    return {
        "name": identity.name,
        "trust_policy": identity.trust.to_document(),
        "policy": identity.policy_document(),
        "bundles": list(identity.bundles),
        "fragments": list(identity.fragments),
    }


def assembly_to_dict(assembly: Assembly) -> Dict[str, Any]:
    """Return ``{"routes", "functions", "identities"}`` for ``assembly``."""
    return {
        "routes": routes_to_list(assembly.tree),
        "functions": [unit_to_dict(u) for u in assembly.registry],
        "identities": [
            identity_policy_document(i) for i in assembly.identities.values()
        ],
    }
