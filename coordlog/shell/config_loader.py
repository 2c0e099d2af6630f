"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

The Config model is defined in coordlog/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from coordlog.core.config import Config
from coordlog.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


# Config keys read as integers
_INT_FIELDS = (
    "recent_default_count",
    "recent_min_count",
    "recent_max_count",
    "search_default_radius",
    "search_display_limit",
    "export_cap",
    "export_max_chars",
    "notification_timeout",
)

# Config keys read as strings (placeholders resolved)
_STR_FIELDS = (
    "store_backend",
    "coordinates_file",
    "firestore_database",
    "firestore_collection",
    "slack_webhook_url",
    "admin_api_key",
)


# Config keys read as booleans ("true"/"1"/"yes" from env vars)
_BOOL_FIELDS = (
    "notify_inline",
)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get a Secret Manager client.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value, or None if a placeholder could not be resolved
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if var_spec.startswith("secret:"):
            logger.warning("Secret %s needs GCP_PROJECT, leaving it unset", var_spec)
            return None
        env_value = os.environ.get(var_spec)
        if env_value:
            return env_value
        logger.warning("Environment variable %s not set", var_spec)
        return None

    return value


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    Unknown keys are ignored; missing keys and unresolved placeholders
    keep their defaults, so a literal "${ADMIN_API_KEY}" never becomes
    a usable key.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()
    kwargs: dict[str, Any] = {}

    for key in _INT_FIELDS + _STR_FIELDS + _BOOL_FIELDS:
        if data.get(key) is None:
            continue
        value = _resolve_value(data[key], secret_client)
        if value is None:
            continue
        if key in _INT_FIELDS:
            kwargs[key] = int(value)
        elif key in _BOOL_FIELDS:
            kwargs[key] = _parse_bool(value)
        else:
            kwargs[key] = str(value)

    return Config(**kwargs)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: %s backend, notifications %s",
        config.store_backend,
        "enabled" if config.slack_webhook_url else "disabled",
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        STORE_BACKEND: memory, json or firestore
        COORDINATES_FILE: JSON file path for the json backend
        FIRESTORE_DATABASE: Firestore database name
        FIRESTORE_COLLECTION: Firestore collection for coordinates
        SLACK_WEBHOOK_URL: Webhook URL for notifications
        SLACK_WEBHOOK_SECRET: Secret name in Secret Manager (alternative to SLACK_WEBHOOK_URL)
        ADMIN_API_KEY: Key for destructive API endpoints
        EXPORT_CAP: Maximum coordinates per export
        NOTIFY_INLINE: "true" to send notifications before responding

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()
    webhook_url = None

    secret_name = os.environ.get("SLACK_WEBHOOK_SECRET")
    if secret_client and secret_name:
        webhook_url = secret_client.get_secret(secret_name)
        if webhook_url:
            logger.info("Using Slack webhook from Secret Manager")

    if not webhook_url:
        webhook_url = os.environ.get("SLACK_WEBHOOK_URL")

    if not webhook_url:
        logger.warning("SLACK_WEBHOOK_URL not set and no secret found")

    data: dict[str, Any] = {
        "store_backend": os.environ.get("STORE_BACKEND"),
        "coordinates_file": os.environ.get("COORDINATES_FILE"),
        "firestore_database": os.environ.get("FIRESTORE_DATABASE"),
        "firestore_collection": os.environ.get("FIRESTORE_COLLECTION"),
        "slack_webhook_url": webhook_url,
        "admin_api_key": os.environ.get("ADMIN_API_KEY"),
        "export_cap": os.environ.get("EXPORT_CAP"),
        "notify_inline": os.environ.get("NOTIFY_INLINE"),
    }

    return load_config_from_dict(data)
