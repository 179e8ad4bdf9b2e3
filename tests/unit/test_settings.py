"""Unit tests for reprocessor.toml settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from reprocessor.infrastructure.config.settings import (
    MaterializationSettings,
    ResolutionSettings,
    RetrySettings,
    Settings,
)

ENV_KEYS = [
    "ENTITY_STORE_URL",
    "ENTITY_STORE_TOKEN",
    "PERMISSIONS_URL",
    "STAGING_BUCKET",
    "STAGING_ENDPOINT_URL",
    "BATCH_QUEUE_URL",
    "AWS_REGION",
    "REPROCESSOR_CONFIG",
    "RETRY_JITTER",
]

TOML = """
[entity_store]
url = "http://store.local"
timeout_seconds = 12.5

[permissions]
url = "http://permissions.local"

[staging]
bucket = "toml-bucket"
endpoint_url = "http://minio.local:9000"
root = "reprocess-staging"

[queue]
url = "http://sqs.local/queue"

[materialization]
max_entity_workers = 2
max_component_workers = 16

[resolution]
max_hops = 25

[retry]
max_attempts = 5
base_delay = 0.5
max_delay = 10.0

[service]
status_base_url = "https://status.local"
"""


@pytest.fixture
def clean_env(monkeypatch, tmp_path: Path):
    """Unset every setting variable and run from an empty directory."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults_without_config_file(clean_env, tmp_path: Path):
    settings = Settings.from_toml(tmp_path / "missing.toml")

    assert settings.entity_store.url == ""
    assert settings.staging.root == "reprocessing"
    assert settings.staging.region == "us-east-1"
    assert settings.materialization.max_entity_workers == 4
    assert settings.materialization.max_component_workers == 8
    assert settings.resolution.max_hops == 100
    assert settings.retry.max_attempts == 3
    assert settings.service.status_base_url == "https://orchestrator.arke.institute"


def test_load_from_toml(clean_env, tmp_path: Path):
    config = tmp_path / "reprocessor.toml"
    config.write_text(TOML)

    settings = Settings.from_toml(config)

    assert settings.entity_store.url == "http://store.local"
    assert settings.entity_store.timeout_seconds == 12.5
    assert settings.permissions.url == "http://permissions.local"
    assert settings.staging.bucket == "toml-bucket"
    assert settings.staging.endpoint_url == "http://minio.local:9000"
    assert settings.staging.root == "reprocess-staging"
    assert settings.queue.url == "http://sqs.local/queue"
    assert settings.materialization.max_component_workers == 16
    assert settings.resolution.max_hops == 25
    assert settings.service.status_base_url == "https://status.local"

    policy = settings.retry.to_policy()
    assert policy.max_attempts == 5
    assert policy.base_delay == 0.5
    assert policy.max_delay == 10.0


def test_env_overrides_toml(clean_env, tmp_path: Path):
    """Test environment variables take precedence over TOML values."""
    config = tmp_path / "reprocessor.toml"
    config.write_text(TOML)
    clean_env.setenv("STAGING_BUCKET", "env-bucket")
    clean_env.setenv("ENTITY_STORE_URL", "http://env-store.local")
    clean_env.setenv("AWS_REGION", "eu-central-1")
    clean_env.setenv("RETRY_JITTER", "false")

    settings = Settings.from_toml(config)

    assert settings.staging.bucket == "env-bucket"
    assert settings.entity_store.url == "http://env-store.local"
    assert settings.staging.region == "eu-central-1"
    assert settings.queue.region == "eu-central-1"
    assert settings.retry.jitter is False


def test_config_path_from_environment(clean_env, tmp_path: Path):
    config = tmp_path / "elsewhere.toml"
    config.write_text(TOML)
    clean_env.setenv("REPROCESSOR_CONFIG", str(config))

    assert Settings.from_toml().staging.bucket == "toml-bucket"


def test_default_config_path_in_working_directory(clean_env, tmp_path: Path):
    (tmp_path / "reprocessor.toml").write_text(TOML)

    assert Settings.from_toml().queue.url == "http://sqs.local/queue"


def test_missing_required(clean_env, tmp_path: Path):
    settings = Settings.from_toml(tmp_path / "missing.toml")
    assert set(settings.missing_required()) == {
        "ENTITY_STORE_URL",
        "PERMISSIONS_URL",
        "STAGING_BUCKET",
        "BATCH_QUEUE_URL",
    }

    config = tmp_path / "reprocessor.toml"
    config.write_text(TOML)
    assert Settings.from_toml(config).missing_required() == {}


def test_invalid_values_rejected(clean_env):
    with pytest.raises(PydanticValidationError):
        MaterializationSettings(max_entity_workers=0)
    with pytest.raises(PydanticValidationError):
        ResolutionSettings(max_hops=0)
    with pytest.raises(ValueError, match="max_attempts"):
        RetrySettings(max_attempts=0).to_policy()
