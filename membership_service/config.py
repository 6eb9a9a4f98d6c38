"""Configuration loading.

Settings come from membership.yaml (CONFIG_PATH, or config/membership.yaml
next to the package). A handful of deployment values, SMTP credentials
above all, can be overridden from the environment so they stay out of the
file; see ENV_OVERRIDES.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from membership_service.logging_config import get_logger
from membership_service.models import ServiceConfig

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "membership.yaml"

# Environment variable -> (section, key) in membership.yaml
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "STORAGE_BACKEND": ("storage", "backend"),
    "FIRESTORE_PROJECT_ID": ("storage", "project_id"),
    "FIRESTORE_DATABASE": ("storage", "database"),
    "SMTP_HOST": ("email", "host"),
    "SMTP_PORT": ("email", "port"),
    "SMTP_USERNAME": ("email", "username"),
    "SMTP_PASSWORD": ("email", "password"),
    "EMAIL_FROM": ("email", "from_email"),
    "PUBSUB_ENABLED": ("pubsub", "enabled"),
    "PUBSUB_PROJECT_ID": ("pubsub", "project_id"),
    "PUBSUB_TOPIC": ("pubsub", "topic"),
}


class ConfigurationError(Exception):
    """Raised when configuration is invalid or missing."""


def apply_env_overrides(raw: dict[str, Any], environ: Optional[dict[str, str]] = None) -> list[str]:
    """Copy set ENV_OVERRIDES variables into the raw config mapping.

    Values stay strings; pydantic coerces them ("587" -> 587, "true" -> True)
    during validation. Empty variables are ignored.

    Returns:
        Names of the variables that were applied
    """
    environ = os.environ if environ is None else environ
    applied = []
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if not value:
            continue
        target = raw.get(section)
        if not isinstance(target, dict):
            target = raw[section] = {}
        target[key] = value
        applied.append(variable)
    return applied


class Config:
    """Validated service configuration.

    Args:
        config_path: Path to membership.yaml; falls back to CONFIG_PATH, then the bundled file
    """

    def __init__(self, config_path: Optional[str] = None):
        self._config_path = Path(config_path or os.getenv("CONFIG_PATH") or DEFAULT_CONFIG_PATH)
        self._settings: Optional[ServiceConfig] = None
        self._load_config()

    def _read_yaml(self) -> dict[str, Any]:
        if not self._config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self._config_path}\n"
                f"Create config/membership.yaml or set the CONFIG_PATH environment variable"
            )
        try:
            with open(self._config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}")

        if not raw:
            raise ConfigurationError(f"Configuration file is empty: {self._config_path}")
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {self._config_path}")
        return raw

    def _load_config(self) -> None:
        raw = self._read_yaml()
        overridden = apply_env_overrides(raw)
        try:
            self._settings = ServiceConfig(**raw)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}")

        logger.debug(
            "config_loaded",
            path=str(self._config_path),
            env_overrides=overridden,
            plans=len(self._settings.seed_plans),
            users=len(self._settings.seed_users),
        )

    @property
    def settings(self) -> ServiceConfig:
        if self._settings is None:
            raise ConfigurationError("Configuration not loaded")
        return self._settings

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def storage(self):
        return self.settings.storage

    @property
    def email(self):
        return self.settings.email

    @property
    def pubsub(self):
        return self.settings.pubsub

    @property
    def seed_plans(self):
        return self.settings.seed_plans

    @property
    def seed_users(self):
        return self.settings.seed_users

    @property
    def service_name(self) -> str:
        return self.settings.service.name

    @property
    def service_version(self) -> str:
        return self.settings.service.version

    def reload(self) -> None:
        """Re-read the file and the environment."""
        self._load_config()


_config_instance: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """Global configuration instance; config_path only matters on the first call."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_path)
    return _config_instance


def reload_config() -> None:
    global _config_instance
    if _config_instance:
        _config_instance.reload()
    else:
        _config_instance = Config()
