"""Access grants, grant bundles and trust relationships.

These are the immutable value types that identities are composed from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union


class Effect(str, Enum):
    """Whether a grant allows or denies its actions."""

    ALLOW = "Allow"
    DENY = "Deny"

    @classmethod
    def parse(cls, value: Union[str, Effect]) -> Effect:
        """Accept ``allow``/``Allow``/``ALLOW`` and Effect members."""
        if isinstance(value, Effect):
            return value
        lowered = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(f"Unknown effect '{value}'. Expected 'allow' or 'deny'.")


def _as_frozenset(values: Union[str, Iterable[str]]) -> FrozenSet[str]:
    if isinstance(values, str):
        return frozenset({values})
    return frozenset(values)


@dataclass(frozen=True)
class AccessGrant:
    """One access statement: actions permitted (or denied) on resources.

    Attributes:
        actions: Provider action names, e.g. ``dynamodb:GetItem``.
        resources: Resource identifiers the actions apply to.
        effect: Allow or deny.
        sid: Optional statement identifier carried into policy documents.
    """

    actions: FrozenSet[str]
    resources: FrozenSet[str]
    effect: Effect = Effect.ALLOW
    sid: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "actions", _as_frozenset(self.actions))
        object.__setattr__(self, "resources", _as_frozenset(self.resources))
        object.__setattr__(self, "effect", Effect.parse(self.effect))
        if not self.actions:
            raise ValueError("AccessGrant requires at least one action.")
        if not self.resources:
            raise ValueError("AccessGrant requires at least one resource.")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AccessGrant:
        """Build a grant from ``{actions, resources, effect?, sid?}``."""
        return cls(
            actions=data["actions"],
            resources=data["resources"],
            effect=data.get("effect", Effect.ALLOW),
            sid=data.get("sid"),
        )

    def to_statement(self) -> Dict[str, Any]:
        """Render as a provider policy statement with sorted lists."""
        statement: Dict[str, Any] = {
            "Effect": self.effect.value,
            "Action": sorted(self.actions),
            "Resource": sorted(self.resources),
        }
        if self.sid:
            statement = {"Sid": self.sid, **statement}
        return statement


@dataclass(frozen=True)
class GrantBundle:
    """A named, pre-built list of grants (a managed policy).

    Attributes:
        name: Bundle name referenced from declarations.
        grants: Grants contributed, in order.
    """

    name: str
    grants: Tuple[AccessGrant, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "grants", tuple(self.grants))


@dataclass(frozen=True)
class TrustRelationship:
    """Which service principal may assume an identity.

    Attributes:
        principal: Service principal, e.g. ``lambda.amazonaws.com``.
    """

    principal: str = "lambda.amazonaws.com"

    def to_document(self) -> Dict[str, Any]:
        """Render the assume-role policy document."""
        return {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"Service": self.principal},
                    "Action": "sts:AssumeRole",
                }
            ],
        }
