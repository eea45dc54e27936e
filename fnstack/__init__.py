"""fnstack: declarative composition of function routes and identities.

fnstack turns a list of function declarations into the three artifacts a
deployment step needs: a gateway route tree (one resource per path segment,
shared across routes with a common prefix), a registry of deployable units,
and one execution identity per role built from grant bundles, inline grants
and named permission fragments.

Primary API:
    Stack.from_yaml() - Load, validate and assemble a YAML stack document
    assemble() - Assemble in-memory declarations
    compose() - Compose a single identity
    RouteTree - Trie of gateway resources
    PermissionCatalog - Named access-grant fragments

Example:
    from fnstack import AmbientParameters, Stack

    stack = Stack.from_yaml(text, params=AmbientParameters(region="eu-west-1"))
    node = stack.tree.find("orders/create")
    node.bindings["POST"].auth   # AuthorizationMode.TOKEN_BASED
"""

from __future__ import annotations

from fnstack import cli, logging
from fnstack._version import __version__
from fnstack.assembler import (
    Assembly,
    FunctionDeclaration,
    RouteDeclaration,
    assemble,
)
from fnstack.config import BUILD_CONFIG, AmbientParameters, BuildConfig
from fnstack.errors import (
    DeclarationError,
    DuplicateFragment,
    DuplicateFunctionName,
    DuplicateMethod,
    DuplicateRole,
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
from fnstack.export import assembly_to_dict, identity_policy_document
from fnstack.model import (
    AccessGrant,
    AuthorizationMode,
    DeployableUnit,
    Effect,
    FunctionRegistry,
    GrantBundle,
    Identity,
    MethodBinding,
    PathSpec,
    PermissionCatalog,
    RegistryHandle,
    ResourceBudget,
    ResourceNode,
    RouteTree,
    TrustRelationship,
    add_route,
    compose,
)
from fnstack.stack import Stack

__all__ = [
    # Version
    "__version__",
    # Model
    "AccessGrant",
    "AuthorizationMode",
    "DeployableUnit",
    "Effect",
    "FunctionRegistry",
    "GrantBundle",
    "Identity",
    "MethodBinding",
    "PathSpec",
    "PermissionCatalog",
    "RegistryHandle",
    "ResourceBudget",
    "ResourceNode",
    "RouteTree",
    "TrustRelationship",
    # Operations
    "add_route",
    "compose",
    "assemble",
    "Assembly",
    "FunctionDeclaration",
    "RouteDeclaration",
    "Stack",
    # Config
    "AmbientParameters",
    "BuildConfig",
    "BUILD_CONFIG",
    # Export
    "assembly_to_dict",
    "identity_policy_document",
    # Errors
    "StackBuildError",
    "DeclarationError",
    "DuplicateFragment",
    "DuplicateFunctionName",
    "DuplicateMethod",
    "DuplicateRole",
    "InvalidBudget",
    "InvalidMethod",
    "InvalidPath",
    "MissingAuthorizer",
    "NotFound",
    "UnknownBundle",
    "UnknownFragment",
    "UnknownParameter",
    # Utilities
    "cli",
    "logging",
]
