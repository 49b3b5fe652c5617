"""Application configuration helpers."""

from __future__ import annotations

from .env import ENV_PREFIX, env_name, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .netbox import NetboxConfig, get_netbox_config, netbox_resilience
from .service import ServiceConfig, get_service_config

__all__ = [
    "ENV_PREFIX",
    "ConfigurationError",
    "MissingConfigurationError",
    "NetboxConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ServiceConfig",
    "env_name",
    "get_netbox_config",
    "get_service_config",
    "netbox_resilience",
    "require_env_vars",
]
