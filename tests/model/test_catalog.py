"""Tests for the permission catalog."""

import pytest

from fnstack.config import AmbientParameters
from fnstack.errors import UnknownFragment, UnknownParameter
from fnstack.model.catalog import PermissionCatalog
from fnstack.model.grants import AccessGrant


def test_resolve_returns_grant(catalog: PermissionCatalog) -> None:
    grant = catalog.resolve("WriteOrders")
    assert grant.actions == frozenset({"dynamodb:PutItem"})
    assert grant.resources == frozenset(
        {"arn:aws:dynamodb:eu-west-1:123456789012:table/orders"}
    )


def test_resolve_unknown_lists_known(catalog: PermissionCatalog) -> None:
    with pytest.raises(UnknownFragment, match="ReadC") as exc_info:
        catalog.resolve("ReadC")
    assert exc_info.value.fragment == "ReadC"
    assert "ReadA" in str(exc_info.value)


def test_unknown_fragment_is_value_error(catalog: PermissionCatalog) -> None:
    with pytest.raises(ValueError):
        catalog.resolve("nope")


def test_substitution_happens_once_at_build_time() -> None:
    extra = {"bucket": "first"}
    params = AmbientParameters(extra=extra)
    catalog = PermissionCatalog.from_dict(
        {"Read": {"actions": "s3:GetObject", "resources": "arn:aws:s3:::${bucket}/*"}},
        params,
    )
    # Changing the caller's mapping afterwards has no effect
    extra["bucket"] = "second"
    assert catalog.resolve("Read").resources == frozenset({"arn:aws:s3:::first/*"})
    assert catalog.resolve("Read") is catalog.resolve("Read")


def test_dollar_shorthand_substituted() -> None:
    catalog = PermissionCatalog.from_dict(
        {"Topic": {"actions": "sns:Publish", "resources": "arn:$partition:sns:$region:1:t"}},
        AmbientParameters(region="us-east-1", partition="aws-cn"),
    )
    assert catalog.resolve("Topic").resources == frozenset({"arn:aws-cn:sns:us-east-1:1:t"})


def test_undefined_parameter_fails_build() -> None:
    with pytest.raises(UnknownParameter, match="region") as exc_info:
        PermissionCatalog.from_dict(
            {"Q": {"actions": "sqs:SendMessage", "resources": "arn:aws:sqs:${region}:1:q"}}
        )
    assert exc_info.value.fragment == "Q"


def test_missing_resources_rejected() -> None:
    with pytest.raises(ValueError, match="missing 'resources'"):
        PermissionCatalog.from_dict({"Bad": {"actions": ["s3:GetObject"]}})


def test_catalog_is_read_only(catalog: PermissionCatalog) -> None:
    assert len(catalog) == 3
    assert "ReadA" in catalog
    assert catalog.names() == ["ReadA", "ReadB", "WriteOrders"]
    with pytest.raises(TypeError):
        catalog._entries["New"] = AccessGrant(actions=["x:Y"], resources=["*"])  # type: ignore[index]


def test_empty_catalog() -> None:
    catalog = PermissionCatalog()
    assert len(catalog) == 0
    assert list(catalog) == []
