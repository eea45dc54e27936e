"""Core build model: grants, identities, routes and functions."""

from __future__ import annotations

from fnstack.model.catalog import PermissionCatalog
from fnstack.model.functions import (
    DeployableUnit,
    FunctionRegistry,
    RegistryHandle,
    ResourceBudget,
)
from fnstack.model.grants import AccessGrant, Effect, GrantBundle, TrustRelationship
from fnstack.model.identity import Identity, compose
from fnstack.model.routes import (
    HTTP_METHODS,
    AuthorizationMode,
    MethodBinding,
    PathSpec,
    ResourceNode,
    RouteTree,
    add_route,
)

__all__ = [
    "AccessGrant",
    "AuthorizationMode",
    "DeployableUnit",
    "Effect",
    "FunctionRegistry",
    "GrantBundle",
    "HTTP_METHODS",
    "Identity",
    "MethodBinding",
    "PathSpec",
    "PermissionCatalog",
    "RegistryHandle",
    "ResourceBudget",
    "ResourceNode",
    "RouteTree",
    "TrustRelationship",
    "add_route",
    "compose",
]
