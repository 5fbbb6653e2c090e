# tests/core/test_config.py
"""
Tests for the Config class.
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

from nodemeta.core.config import Config


def test_defaults():
    cfg = Config()

    assert cfg.EKS_REGION is None
    assert cfg.IMDS_ENDPOINT == "http://169.254.169.254"
    assert cfg.IMDS_TOKEN_TTL_SECONDS == 21600
    assert cfg.EC2_MAX_ATTEMPTS == 1
    assert cfg.VALIDATE_CREDENTIALS is True
    assert cfg.has_static_metadata is False
    cfg.validate_instance()


def test_static_metadata_from_env(monkeypatch):
    monkeypatch.setenv("EKS_REGION", "eu-west-1")
    monkeypatch.setenv("EKS_ACCOUNT_ID", "123456789012")
    monkeypatch.setenv("EKS_CLUSTER_NAME", "prod")

    cfg = Config()

    assert cfg.has_static_metadata is True
    assert (cfg.EKS_REGION, cfg.EKS_ACCOUNT_ID, cfg.EKS_CLUSTER_NAME) == ("eu-west-1", "123456789012", "prod")
    cfg.validate_instance()


def test_partial_static_metadata_is_flagged_not_rejected(monkeypatch):
    monkeypatch.setenv("EKS_REGION", "eu-west-1")

    cfg = Config()

    assert cfg.has_partial_static_metadata is True
    assert cfg.has_static_metadata is False
    cfg.validate_instance()


def test_empty_override_counts_as_unset(monkeypatch):
    monkeypatch.setenv("EKS_REGION", "")

    cfg = Config()

    assert cfg.EKS_REGION is None
    cfg.validate_instance()


def test_endpoint_trailing_slash_is_stripped(monkeypatch):
    monkeypatch.setenv("AWS_EC2_METADATA_SERVICE_ENDPOINT", "http://[fd00:ec2::254]/")

    assert Config().IMDS_ENDPOINT == "http://[fd00:ec2::254]"


@pytest.mark.parametrize(
    "key,value",
    [
        ("DEFAULT_TIMEOUT_CONNECT", "0"),
        ("DEFAULT_TIMEOUT_READ", "-1"),
        ("IMDS_TOKEN_TTL_SECONDS", "0"),
        ("IMDS_TOKEN_TTL_SECONDS", "21601"),
        ("EC2_MAX_ATTEMPTS", "0"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(ValueError):
        Config().validate_instance()


@pytest.mark.parametrize("value,expected", [("false", False), ("0", False), ("yes", True), ("True", True)])
def test_validate_credentials_flag(monkeypatch, value, expected):
    monkeypatch.setenv("VALIDATE_CREDENTIALS", value)

    assert Config().VALIDATE_CREDENTIALS is expected


def test_log_level_is_read_at_access_time(monkeypatch):
    cfg = Config()
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    assert cfg.LOG_LEVEL == "DEBUG"


def test_import_with_partial_static_metadata():
    """The library must stay importable whatever EKS_* overrides are in the environment."""
    env = dict(os.environ)
    env["EKS_REGION"] = "eu-west-1"
    env.pop("EKS_ACCOUNT_ID", None)
    env.pop("EKS_CLUSTER_NAME", None)
    src_dir = str(Path(__file__).resolve().parents[2] / "src")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [src_dir, env.get("PYTHONPATH")]))

    result = subprocess.run(
        [sys.executable, "-c", "from nodemeta.clients import new, with_metadata"],
        env=env,
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0, result.stderr
