# tests/conftest.py

import pytest


@pytest.fixture(autouse=True)
def mock_settings_env_vars(monkeypatch):
    """
    Pytest fixture to mock environment variables for the config module.

    This fixture runs automatically for every test (`autouse=True`). It clears
    the static metadata overrides and provides dummy AWS credentials, so that
    neither the config nor boto3 reads anything from the real environment.
    """
    for key in (
        "EKS_REGION",
        "EKS_ACCOUNT_ID",
        "EKS_CLUSTER_NAME",
        "AWS_EC2_METADATA_SERVICE_ENDPOINT",
        "IMDS_TOKEN_TTL_SECONDS",
        "EC2_MAX_ATTEMPTS",
        "VALIDATE_CREDENTIALS",
        "AWS_PROFILE",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    # Keep boto3's credential chain away from the real metadata service.
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")


@pytest.fixture
def identity_document():
    return {
        "accountId": "123456789012",
        "region": "us-east-1",
        "instanceId": "i-0123456789abcdef0",
        "availabilityZone": "us-east-1a",
        "instanceType": "m5.large",
        "imageId": "ami-0abcdef1234567890",
        "architecture": "x86_64",
        "privateIp": "10.0.0.12",
        "pendingTime": "2024-01-01T00:00:00Z",
    }
