"""Application configuration helpers."""

from __future__ import annotations

from .adobe_sign import AdobeSignConfig, get_adobe_sign_config
from .env import env_float, env_int, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .workflow import WorkflowConfig, get_workflow_config

__all__ = [
    "AdobeSignConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "WorkflowConfig",
    "env_float",
    "env_int",
    "get_adobe_sign_config",
    "get_database_config",
    "get_storage_config",
    "get_workflow_config",
    "require_env_vars",
]
