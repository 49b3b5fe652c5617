"""Pydantic models for raw discovery facts as emitted by the agent pipeline.

Each record carries a ``kind`` discriminator; the remaining fields stay in
the agent's vocabulary and are validated later by the normalizer.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class DiscoveryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)


class SitePayload(DiscoveryBaseModel):
    kind: Literal["site"]
    name: str
    status: str
    slug: str | None = None


class DeviceTypePayload(DiscoveryBaseModel):
    kind: Literal["device_type"]
    manufacturer: str
    model: str


class DevicePayload(DiscoveryBaseModel):
    kind: Literal["device"]
    name: str
    site: str
    model: str
    role: str
    status: str
    serial: str = ""


class InterfacePayload(DiscoveryBaseModel):
    kind: Literal["interface"]
    device: str
    name: str
    state: str
    type: str | None = None
    speed: int | None = None
    mtu: int | None = None
    mac_address: str | None = Field(default=None, alias="mac")


class IpAddressPayload(DiscoveryBaseModel):
    kind: Literal["ip_address"]
    address: str
    device: str
    interface: str


FactPayload = Annotated[
    SitePayload | DeviceTypePayload | DevicePayload | InterfacePayload | IpAddressPayload,
    Field(discriminator="kind"),
]

FACT_PAYLOAD_ADAPTER: TypeAdapter[FactPayload] = TypeAdapter(FactPayload)
