"""Service-level settings for the reconciler process."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_name, int_env_var, optional_env_var
from .netbox import NetboxConfig, get_netbox_config

DEFAULT_LOG_LEVEL = "info"
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_BATCH_SIZE = 100


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    netbox: NetboxConfig
    log_level: str = DEFAULT_LOG_LEVEL
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    batch_size: int = DEFAULT_BATCH_SIZE


def get_service_config() -> ServiceConfig:
    return ServiceConfig(
        netbox=get_netbox_config(),
        log_level=optional_env_var(env_name("LOG_LEVEL")) or DEFAULT_LOG_LEVEL,
        max_concurrency=int_env_var(
            env_name("MAX_CONCURRENCY"), DEFAULT_MAX_CONCURRENCY, minimum=1
        ),
        batch_size=int_env_var(env_name("BATCH_SIZE"), DEFAULT_BATCH_SIZE, minimum=1),
    )
