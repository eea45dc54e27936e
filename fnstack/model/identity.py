"""Execution identities and their composition from grants and fragments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

from fnstack.errors import DuplicateFragment
from fnstack.logging import get_logger
from fnstack.model.catalog import PermissionCatalog
from fnstack.model.grants import AccessGrant, Effect, GrantBundle, TrustRelationship

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Identity:
    """The role a deployable unit runs with.

    Attributes:
        name: Role name.
        trust: Principal allowed to assume the role.
        grants: Resolved grants: bundle grants, then inline grants, then
            fragment grants, each group in declaration order.
        bundles: Names of the bundles the grants came from.
        fragments: Fragment names resolved into the trailing grants.
    """

    name: str
    trust: TrustRelationship
    grants: Tuple[AccessGrant, ...] = field(default_factory=tuple)
    bundles: Tuple[str, ...] = field(default_factory=tuple)
    fragments: Tuple[str, ...] = field(default_factory=tuple)

    def actions(self) -> List[str]:
        """Return every allowed action, sorted and de-duplicated."""
        allowed = set()
        for grant in self.grants:
            if grant.effect is Effect.ALLOW:
                allowed.update(grant.actions)
        return sorted(allowed)

    def policy_document(self) -> Dict[str, Any]:
        """Render the grants as a provider policy document."""
        return {
            "Version": "2012-10-17",
            "Statement": [grant.to_statement() for grant in self.grants],
        }


def compose(
    name: str,
    trust: TrustRelationship,
    bundles: Sequence[GrantBundle],
    inline_grants: Sequence[AccessGrant],
    fragment_names: Sequence[str],
    catalog: PermissionCatalog,
) -> Identity:
    """Compose an identity from bundles, inline grants and catalog fragments.

    Fragment names are checked for duplicates before any of them is resolved,
    and a failed resolution aborts the composition, so either a complete
    Identity is returned or nothing is. Semantically identical grants coming
    from different categories are kept as they are.

    Args:
        name: Role name.
        trust: Trust relationship of the role.
        bundles: Pre-built grant bundles, in order.
        inline_grants: Grants declared directly on the function.
        fragment_names: Names to resolve against ``catalog``.
        catalog: The permission catalog for this build.

    Returns:
        A fresh Identity.

    Raises:
        DuplicateFragment: If a fragment name is listed twice.
        UnknownFragment: If a fragment name is not in the catalog.
    """
    seen = set()
    for fragment in fragment_names:
        if fragment in seen:
            raise DuplicateFragment(fragment, name)
        seen.add(fragment)

    resolved = [catalog.resolve(fragment) for fragment in fragment_names]

    grants: List[AccessGrant] = []
    for bundle in bundles:
        grants.extend(bundle.grants)
    grants.extend(inline_grants)
    grants.extend(resolved)

    LOGGER.debug(
        "Composed identity '%s': bundles=%d, inline=%d, fragments=%d",
        name,
        len(bundles),
        len(inline_grants),
        len(resolved),
    )
    return Identity(
        name=name,
        trust=trust,
        grants=tuple(grants),
        bundles=tuple(b.name for b in bundles),
        fragments=tuple(fragment_names),
    )
