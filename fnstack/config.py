"""Configuration classes for fnstack builds."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class BuildConfig:
    """Defaults and bounds applied while assembling a stack."""

    # Function defaults used when a declaration omits a value
    default_memory_mb: int = 128
    default_timeout_s: int = 3
    default_runtime: str = "python3.12"
    default_handler: str = "handler.handler"

    # Provider limits for a single function
    min_memory_mb: int = 128
    max_memory_mb: int = 10240
    min_timeout_s: int = 1
    max_timeout_s: int = 900

    # Principal allowed to assume function identities
    default_trust_principal: str = "lambda.amazonaws.com"

    path_separator: str = "/"

    def with_overrides(self, overrides: Mapping[str, Any]) -> BuildConfig:
        """Return a copy with function defaults replaced by ``overrides``.

        Only the ``default_*`` fields can be overridden from a declaration
        document; bounds stay fixed.

        Args:
            overrides: Mapping using the short names ``memory``, ``timeout``,
                ``runtime``, ``handler`` and ``trust``.

        Returns:
            A new BuildConfig.

        Raises:
            ValueError: If an unknown key is present.
        """
        mapping = {
            "memory": "default_memory_mb",
            "timeout": "default_timeout_s",
            "runtime": "default_runtime",
            "handler": "default_handler",
            "trust": "default_trust_principal",
        }
        unknown = set(overrides) - set(mapping)
        if unknown:
            raise ValueError(
                f"Unrecognized default(s): {', '.join(sorted(unknown))}. "
                f"Allowed keys are {sorted(mapping)}"
            )
        values = {mapping[k]: v for k, v in overrides.items()}
        return replace(self, **values)


# Global configuration instance
BUILD_CONFIG = BuildConfig()


@dataclass(frozen=True)
class AmbientParameters:
    """Account-level values substituted into permission fragments.

    Attributes:
        region: Deployment region (e.g. ``eu-west-1``).
        account: Account identifier.
        partition: Provider partition, ``aws`` unless running in a special region.
        extra: Additional named values available as ``${name}`` placeholders.
    """

    region: Optional[str] = None
    account: Optional[str] = None
    partition: str = "aws"
    extra: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> AmbientParameters:
        """Build parameters from ``FNSTACK_REGION``, ``FNSTACK_ACCOUNT`` and
        ``FNSTACK_PARTITION``.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``.

        Returns:
            AmbientParameters with unset variables left as None.
        """
        env = os.environ if environ is None else environ
        return cls(
            region=env.get("FNSTACK_REGION"),
            account=env.get("FNSTACK_ACCOUNT"),
            partition=env.get("FNSTACK_PARTITION", "aws"),
        )

    def as_dict(self) -> Dict[str, str]:
        """Return all defined values as a flat placeholder mapping."""
        values: Dict[str, str] = dict(self.extra)
        if self.region is not None:
            values["region"] = self.region
        if self.account is not None:
            values["account"] = str(self.account)
        values["partition"] = self.partition
        return values

    def merged(self, overrides: Mapping[str, Any]) -> AmbientParameters:
        """Return new parameters with ``overrides`` taking precedence.

        Keys ``region``, ``account`` and ``partition`` replace the named
        attributes; any other key lands in ``extra``.
        """
        extra = dict(self.extra)
        region, account, partition = self.region, self.account, self.partition
        for key, value in overrides.items():
            if key == "region":
                region = str(value)
            elif key == "account":
                account = str(value)
            elif key == "partition":
                partition = str(value)
            else:
                extra[str(key)] = str(value)
        return AmbientParameters(
            region=region, account=account, partition=partition, extra=extra
        )
