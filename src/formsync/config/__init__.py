"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .form_fields import FormFieldsConfig, get_form_fields_config
from .logging import configure_logging
from .storage import StorageConfig, get_database_uri, get_storage_config

__all__ = [
    "ConfigurationError",
    "FormFieldsConfig",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_database_uri",
    "get_form_fields_config",
    "get_storage_config",
    "require_env_vars",
]
