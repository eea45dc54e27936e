"""Tests for `fnstack.config` focusing on behavior and correctness."""

import dataclasses

import pytest

from fnstack.config import BUILD_CONFIG, AmbientParameters, BuildConfig


def test_default_config_values() -> None:
    assert BUILD_CONFIG.default_memory_mb == 128
    assert BUILD_CONFIG.default_timeout_s == 3
    assert BUILD_CONFIG.default_trust_principal == "lambda.amazonaws.com"
    assert BUILD_CONFIG.path_separator == "/"


def test_config_is_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        BUILD_CONFIG.default_memory_mb = 1  # type: ignore[misc]


def test_with_overrides_returns_copy() -> None:
    base = BuildConfig()
    updated = base.with_overrides({"memory": 1024, "runtime": "python3.13", "trust": "x"})
    assert updated.default_memory_mb == 1024
    assert updated.default_runtime == "python3.13"
    assert updated.default_trust_principal == "x"
    assert updated.max_memory_mb == base.max_memory_mb
    assert base.default_memory_mb == 128


def test_with_overrides_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unrecognized default"):
        BuildConfig().with_overrides({"max_memory_mb": 1})


def test_ambient_from_env() -> None:
    params = AmbientParameters.from_env(
        {"FNSTACK_REGION": "eu-west-1", "FNSTACK_ACCOUNT": "42", "UNRELATED": "x"}
    )
    assert params.region == "eu-west-1"
    assert params.account == "42"
    assert params.partition == "aws"


def test_ambient_from_os_environ(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FNSTACK_PARTITION", "aws-us-gov")
    monkeypatch.delenv("FNSTACK_REGION", raising=False)
    params = AmbientParameters.from_env()
    assert params.partition == "aws-us-gov"
    assert params.region is None


def test_ambient_as_dict_skips_unset() -> None:
    assert AmbientParameters().as_dict() == {"partition": "aws"}
    params = AmbientParameters(region="r", account="a", extra={"table": "t"})
    assert params.as_dict() == {"region": "r", "account": "a", "partition": "aws", "table": "t"}


def test_ambient_merged_overrides() -> None:
    base = AmbientParameters(region="r1", account="a1", extra={"k": "v"})
    merged = base.merged({"region": "r2", "account": 123, "table": "orders"})
    assert merged.region == "r2"
    assert merged.account == "123"
    assert merged.extra == {"k": "v", "table": "orders"}
    assert base.region == "r1"
    assert base.extra == {"k": "v"}
