"""Raw discovery facts as delivered by the upstream agent pipeline.

Values are kept in the agent's vocabulary (``alive``/``dead``, ``up``/``down``)
and are only validated by the normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class SiteFact:
    name: str
    status: str
    slug: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceTypeFact:
    manufacturer: str
    model: str


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceFact:
    name: str
    site: str
    model: str
    role: str
    status: str
    serial: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class InterfaceFact:
    device: str
    name: str
    state: str
    type: str | None = None
    speed: int | None = None
    mtu: int | None = None
    mac_address: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class IpAddressFact:
    address: str
    device: str
    interface: str


type DiscoveryFact = SiteFact | DeviceTypeFact | DeviceFact | InterfaceFact | IpAddressFact
