"""Pydantic settings for reprocessor.toml configuration."""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ...domain.policy.retry_policy import RetryPolicy
from .environment import REQUIRED_VARIABLES, get_env, get_env_bool, load_environment_variables

DEFAULT_CONFIG_PATH = "reprocessor.toml"


def _apply_env(data: dict[str, Any], field: str, env_key: str) -> None:
    """Override a field with an environment variable when it is set (env > TOML > default)."""
    value = get_env(env_key)
    if value is not None:
        data[field] = value


class EntityStoreSettings(BaseModel):
    """Entity and content store API settings."""

    url: str = ""
    token: str = ""
    timeout_seconds: float = 30.0

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        load_environment_variables()
        _apply_env(data, "url", "ENTITY_STORE_URL")
        _apply_env(data, "token", "ENTITY_STORE_TOKEN")
        super().__init__(**data)


class PermissionsSettings(BaseModel):
    """Permission service settings."""

    url: str = ""
    timeout_seconds: float = 10.0

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        load_environment_variables()
        _apply_env(data, "url", "PERMISSIONS_URL")
        super().__init__(**data)


class StagingSettings(BaseModel):
    """Staging bucket settings."""

    bucket: str = ""
    endpoint_url: str | None = None
    region: str = "us-east-1"
    root: str = "reprocessing"

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        load_environment_variables()
        _apply_env(data, "bucket", "STAGING_BUCKET")
        _apply_env(data, "endpoint_url", "STAGING_ENDPOINT_URL")
        _apply_env(data, "region", "AWS_REGION")
        super().__init__(**data)


class QueueSettings(BaseModel):
    """Batch queue settings."""

    url: str = ""
    region: str = "us-east-1"

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        load_environment_variables()
        _apply_env(data, "url", "BATCH_QUEUE_URL")
        _apply_env(data, "region", "AWS_REGION")
        super().__init__(**data)


class MaterializationSettings(BaseModel):
    """Concurrency bounds for component materialization."""

    max_entity_workers: int = 4
    max_component_workers: int = 8

    @field_validator("max_entity_workers", "max_component_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"worker count must be >= 1, got {v}")
        return v


class ResolutionSettings(BaseModel):
    """Ancestor walk settings."""

    max_hops: int = 100

    @field_validator("max_hops")
    @classmethod
    def validate_max_hops(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_hops must be >= 1, got {v}")
        return v


class RetrySettings(BaseModel):
    """Retry policy for external calls."""

    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    jitter: bool = True

    def __init__(self, **data: Any) -> None:
        """Initialize with environment variable precedence."""
        load_environment_variables()
        if get_env("RETRY_JITTER") is not None:
            data["jitter"] = get_env_bool("RETRY_JITTER", True)
        super().__init__(**data)

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            jitter=self.jitter,
        )


class ServiceSettings(BaseModel):
    """Settings of the reprocessing surface itself."""

    status_base_url: str = "https://orchestrator.arke.institute"


class Settings(BaseModel):
    """Main settings loaded from reprocessor.toml."""

    entity_store: EntityStoreSettings = Field(default_factory=EntityStoreSettings)
    permissions: PermissionsSettings = Field(default_factory=PermissionsSettings)
    staging: StagingSettings = Field(default_factory=StagingSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    materialization: MaterializationSettings = Field(default_factory=MaterializationSettings)
    resolution: ResolutionSettings = Field(default_factory=ResolutionSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)

    @classmethod
    def from_toml(cls, toml_path: Path | str | None = None) -> "Settings":
        """
        Load settings from reprocessor.toml with environment variable precedence.

        Environment variables (system env > .env file) override TOML values.

        Args:
            toml_path: Path to the TOML file (defaults to $REPROCESSOR_CONFIG,
                then reprocessor.toml)

        Returns:
            Settings instance with loaded configuration
        """
        load_environment_variables()

        toml_path = Path(toml_path or get_env("REPROCESSOR_CONFIG") or DEFAULT_CONFIG_PATH)

        if not toml_path.exists():
            return cls()

        with toml_path.open("rb") as f:
            data = tomllib.load(f)

        return cls(
            entity_store=EntityStoreSettings(**data.get("entity_store", {})),
            permissions=PermissionsSettings(**data.get("permissions", {})),
            staging=StagingSettings(**data.get("staging", {})),
            queue=QueueSettings(**data.get("queue", {})),
            materialization=MaterializationSettings(**data.get("materialization", {})),
            resolution=ResolutionSettings(**data.get("resolution", {})),
            retry=RetrySettings(**data.get("retry", {})),
            service=ServiceSettings(**data.get("service", {})),
        )

    def missing_required(self) -> dict[str, str]:
        """
        Required settings that are still empty.

        Returns:
            Environment variable name -> description, for each missing value
        """
        values = {
            "ENTITY_STORE_URL": self.entity_store.url,
            "PERMISSIONS_URL": self.permissions.url,
            "STAGING_BUCKET": self.staging.bucket,
            "BATCH_QUEUE_URL": self.queue.url,
        }
        return {key: REQUIRED_VARIABLES[key] for key, value in values.items() if not value}
