"""Global pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from fnstack.config import AmbientParameters
from fnstack.model.catalog import PermissionCatalog

INTEGRATION_DIR = Path(__file__).parent / "integration"


@pytest.fixture
def params() -> AmbientParameters:
    return AmbientParameters(region="eu-west-1", account="123456789012")


@pytest.fixture
def catalog(params: AmbientParameters) -> PermissionCatalog:
    """Small catalog with two read fragments and one write fragment."""
    return PermissionCatalog.from_dict(
        {
            "ReadA": {
                "actions": ["s3:GetObject"],
                "resources": ["arn:${partition}:s3:::bucket-a/*"],
            },
            "ReadB": {
                "actions": ["s3:GetObject"],
                "resources": ["arn:${partition}:s3:::bucket-b/*"],
            },
            "WriteOrders": {
                "actions": ["dynamodb:PutItem"],
                "resources": [
                    "arn:${partition}:dynamodb:${region}:${account}:table/orders"
                ],
            },
        },
        params,
    )


@pytest.fixture
def orders_yaml() -> str:
    return (INTEGRATION_DIR / "orders_stack.yaml").read_text()
