"""Public interface for the discovery adapter."""

from __future__ import annotations

from .schema import (
    FACT_PAYLOAD_ADAPTER,
    DevicePayload,
    DeviceTypePayload,
    FactPayload,
    InterfacePayload,
    IpAddressPayload,
    SitePayload,
)
from .source import JsonLinesDiscoverySource, QueueDiscoverySource
from .translator import parse_fact, parse_fact_payload

__all__ = [
    "FACT_PAYLOAD_ADAPTER",
    "DevicePayload",
    "DeviceTypePayload",
    "FactPayload",
    "InterfacePayload",
    "IpAddressPayload",
    "JsonLinesDiscoverySource",
    "QueueDiscoverySource",
    "SitePayload",
    "parse_fact",
    "parse_fact_payload",
]
