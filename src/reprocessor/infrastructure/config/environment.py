"""Environment variable loading from .env files with precedence support."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Optional settings (defaults apply when missing)
OPTIONAL_VARIABLES = {
    "REPROCESSOR_CONFIG": "Custom configuration file path (defaults to reprocessor.toml)",
    "STAGING_ENDPOINT_URL": "S3-compatible endpoint for the staging bucket (defaults to AWS)",
    "AWS_REGION": "AWS region for staging and queue clients (defaults to us-east-1)",
    "ENTITY_STORE_TOKEN": "Bearer token for the entity store",
}

# Settings that must be present before a batch can be published
REQUIRED_VARIABLES = {
    "ENTITY_STORE_URL": "Base URL of the entity/content store API",
    "PERMISSIONS_URL": "Base URL of the permission service",
    "STAGING_BUCKET": "Bucket receiving staged components and manifests",
    "BATCH_QUEUE_URL": "URL of the queue receiving batch messages",
}


def load_environment_variables(dotenv_path: Path | str | None = None) -> None:
    """
    Load environment variables from .env file with automatic detection.

    Environment variables from system environment take precedence over .env
    file values (python-dotenv's override=False).

    Args:
        dotenv_path: Optional path to .env file. If None, searches for .env file in:
                     - Current working directory
                     - Parent directories (up to 3 levels)
    """
    if dotenv_path is None:
        current = Path.cwd()
        search_paths = [
            current / ".env",
            current.parent / ".env",
            current.parent.parent / ".env",
            current.parent.parent.parent / ".env",
        ]

        for path in search_paths:
            if path.exists():
                dotenv_path = path
                logger.debug(f"Loading .env file from: {path}")
                break

        if dotenv_path is None:
            load_dotenv(override=False)
            return

    dotenv_path = Path(dotenv_path)
    if dotenv_path.exists():
        load_dotenv(dotenv_path, override=False)
        logger.debug(f"Loaded .env file from: {dotenv_path}")
    else:
        logger.debug(f".env file not found at: {dotenv_path}")


def get_env(key: str, default: str | None = None) -> str | None:
    """
    Get environment variable value.

    Args:
        key: Environment variable name
        default: Default value if not found

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """
    Get boolean environment variable.

    Accepts: 'true', '1', 'yes', 'on' (case-insensitive) → True
            'false', '0', 'no', 'off' (case-insensitive) → False

    Args:
        key: Environment variable name
        default: Default value if not set or unrecognized

    Returns:
        Boolean value
    """
    value = os.getenv(key, "").lower().strip()
    if value in ("true", "1", "yes", "on"):
        return True
    if value in ("false", "0", "no", "off"):
        return False
    return default


# Auto-load on import (common pattern for environment modules)
load_environment_variables()
