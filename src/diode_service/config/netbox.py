"""NetBox endpoint configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_name, float_env_var, optional_env_var, require_env_vars
from .http_resilience import ResilienceConfig

NETBOX_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class NetboxConfig:
    """Holds the NetBox API endpoint and HTTP behaviour."""

    endpoint: str
    resilience: ResilienceConfig
    token: str | None = None


def netbox_resilience(
    endpoint: str,
    *,
    token: str | None = None,
    timeout_seconds: float = NETBOX_TIMEOUT_SECONDS,
) -> ResilienceConfig:
    headers = {"Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Token {token}"
    return ResilienceConfig(
        name="netbox",
        base_url=endpoint.rstrip("/") + "/",
        timeout_seconds=timeout_seconds,
        default_headers=headers,
    )


def get_netbox_config(*, resilience: ResilienceConfig | None = None) -> NetboxConfig:
    endpoint_var = env_name("NETBOX_ENDPOINT")
    endpoint = require_env_vars((endpoint_var,))[endpoint_var].strip()
    token = optional_env_var(env_name("NETBOX_TOKEN"))
    timeout = float_env_var(env_name("NETBOX_TIMEOUT_SECONDS"), NETBOX_TIMEOUT_SECONDS)
    return NetboxConfig(
        endpoint=endpoint,
        token=token,
        resilience=resilience
        or netbox_resilience(endpoint, token=token, timeout_seconds=timeout),
    )
