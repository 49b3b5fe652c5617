"""NetBox-shaped value objects produced by normalization.

Entities are transient: they are built per discovery batch and only live for
one reconciliation pass. Cross-entity references are expressed as local keys
(kind + natural key parts); the pusher swaps them for NetBox ids once the
referenced entity has been upserted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .enums import EntityKind, Status
from .vocabulary import DEFAULT_INTERFACE_TYPE, INTERFACE_OBJ_TYPE

type LocalKey = tuple[str, ...]


def local_key(kind: EntityKind, *parts: str) -> LocalKey:
    return (kind.value, *parts)


def describe_key(key: LocalKey) -> str:
    """Render ``key`` as ``kind:part/part`` for logs and error messages."""

    kind, *parts = key
    return f"{kind}:{'/'.join(parts)}"


@dataclass(frozen=True, slots=True, kw_only=True)
class NetboxObject:
    """Name + slug object referenced by other entities (manufacturer, role)."""

    KIND: ClassVar[EntityKind]

    name: str
    slug: str

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def key(self) -> LocalKey:
        return local_key(self.KIND, self.slug)

    @property
    def references(self) -> tuple[LocalKey, ...]:
        return ()

    @property
    def implied(self) -> tuple[NetboxObject, ...]:
        return ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Manufacturer(NetboxObject):
    KIND: ClassVar[EntityKind] = EntityKind.MANUFACTURER


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceRole(NetboxObject):
    KIND: ClassVar[EntityKind] = EntityKind.DEVICE_ROLE


@dataclass(frozen=True, slots=True, kw_only=True)
class Site:
    KIND: ClassVar[EntityKind] = EntityKind.SITE

    name: str
    slug: str
    status: Status

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def key(self) -> LocalKey:
        return local_key(self.KIND, self.slug)

    @property
    def references(self) -> tuple[LocalKey, ...]:
        return ()

    @property
    def implied(self) -> tuple[NetboxObject, ...]:
        return ()


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceType:
    """Hardware model; ``slug`` is derived from ``model`` so reruns agree."""

    KIND: ClassVar[EntityKind] = EntityKind.DEVICE_TYPE

    manufacturer: Manufacturer
    model: str
    slug: str

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def key(self) -> LocalKey:
        return local_key(self.KIND, self.slug)

    @property
    def references(self) -> tuple[LocalKey, ...]:
        return (self.manufacturer.key,)

    @property
    def implied(self) -> tuple[NetboxObject, ...]:
        return (self.manufacturer,)


@dataclass(frozen=True, slots=True, kw_only=True)
class Device:
    KIND: ClassVar[EntityKind] = EntityKind.DEVICE

    site: str
    role: DeviceRole
    device_type: str
    name: str
    slug: str
    status: Status
    serial: str = ""

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def key(self) -> LocalKey:
        return local_key(self.KIND, self.slug)

    @property
    def site_key(self) -> LocalKey:
        return local_key(EntityKind.SITE, self.site)

    @property
    def device_type_key(self) -> LocalKey:
        return local_key(EntityKind.DEVICE_TYPE, self.device_type)

    @property
    def references(self) -> tuple[LocalKey, ...]:
        return (self.site_key, self.role.key, self.device_type_key)

    @property
    def implied(self) -> tuple[NetboxObject, ...]:
        return (self.role,)


@dataclass(frozen=True, slots=True, kw_only=True)
class Interface:
    KIND: ClassVar[EntityKind] = EntityKind.INTERFACE

    device: str
    name: str
    enabled: bool
    type: str = DEFAULT_INTERFACE_TYPE
    speed: int | None = None
    mtu: int | None = None
    mac_address: str | None = None

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def key(self) -> LocalKey:
        return local_key(self.KIND, self.device, self.name)

    @property
    def device_key(self) -> LocalKey:
        return local_key(EntityKind.DEVICE, self.device)

    @property
    def references(self) -> tuple[LocalKey, ...]:
        return (self.device_key,)

    @property
    def implied(self) -> tuple[NetboxObject, ...]:
        return ()


@dataclass(frozen=True, slots=True, kw_only=True)
class IPAddress:
    KIND: ClassVar[EntityKind] = EntityKind.IP_ADDRESS

    address: str
    device: str
    interface: str
    assigned_object_type: str = INTERFACE_OBJ_TYPE

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def key(self) -> LocalKey:
        return local_key(self.KIND, self.device, self.interface, self.address)

    @property
    def interface_key(self) -> LocalKey:
        return local_key(EntityKind.INTERFACE, self.device, self.interface)

    @property
    def references(self) -> tuple[LocalKey, ...]:
        return (self.interface_key,)

    @property
    def implied(self) -> tuple[NetboxObject, ...]:
        return ()


type NormalizedEntity = Site | Manufacturer | DeviceRole | DeviceType | Device | Interface | IPAddress
