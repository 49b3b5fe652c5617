"""Public domain model surface."""

from __future__ import annotations

from diode_service.domain.model.entities import (
    Device,
    DeviceRole,
    DeviceType,
    Interface,
    IPAddress,
    LocalKey,
    Manufacturer,
    NetboxObject,
    NormalizedEntity,
    Site,
    describe_key,
    local_key,
)
from diode_service.domain.model.enums import EntityKind, Status, UpsertAction
from diode_service.domain.model.slugs import make_slug
from diode_service.domain.model.vocabulary import (
    DEFAULT_INTERFACE_TYPE,
    DEVICE_STATUS_MAP,
    INTERFACE_MTU_MIN,
    INTERFACE_OBJ_TYPE,
    INTERFACE_SPEED_MAX,
    INTERFACE_SPEED_MIN,
    INTERFACE_STATE_MAP,
)

__all__ = [
    "DEFAULT_INTERFACE_TYPE",
    "DEVICE_STATUS_MAP",
    "INTERFACE_MTU_MIN",
    "INTERFACE_OBJ_TYPE",
    "INTERFACE_SPEED_MAX",
    "INTERFACE_SPEED_MIN",
    "INTERFACE_STATE_MAP",
    "Device",
    "DeviceRole",
    "DeviceType",
    "EntityKind",
    "IPAddress",
    "Interface",
    "LocalKey",
    "Manufacturer",
    "NetboxObject",
    "NormalizedEntity",
    "Site",
    "Status",
    "UpsertAction",
    "describe_key",
    "local_key",
    "make_slug",
]
