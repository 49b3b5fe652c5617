"""NetBox lookup filters and write payloads for normalized entities.

References are swapped for resolved NetBox ids here, so a payload can only be
built once every dependency sits in the resolution cache.
"""

from __future__ import annotations

from functools import singledispatch
from typing import TYPE_CHECKING

from diode_service.domain.model import (
    Device,
    DeviceType,
    Interface,
    IPAddress,
    NetboxObject,
    Site,
)

from .cache import ResolutionCache  # noqa: TC001

if TYPE_CHECKING:
    from diode_service.domain.model import NormalizedEntity

type LookupKey = dict[str, str | int]
type Payload = dict[str, object]


def lookup_key(entity: NormalizedEntity, cache: ResolutionCache) -> LookupKey:
    """Filter that finds the remote object matching ``entity``'s natural key."""

    return _lookup(entity, cache)


def build_payload(entity: NormalizedEntity, cache: ResolutionCache) -> Payload:
    """Body sent on create and on update."""

    return _payload(entity, cache)


@singledispatch
def _lookup(entity: object, _cache: ResolutionCache) -> LookupKey:
    raise TypeError(f"No lookup key for {type(entity).__name__}")


@_lookup.register
def _(entity: NetboxObject, _cache: ResolutionCache) -> LookupKey:
    return {"slug": entity.slug}


@_lookup.register
def _(entity: Site, _cache: ResolutionCache) -> LookupKey:
    return {"slug": entity.slug}


@_lookup.register
def _(entity: DeviceType, _cache: ResolutionCache) -> LookupKey:
    return {"slug": entity.slug}


@_lookup.register
def _(entity: Device, cache: ResolutionCache) -> LookupKey:
    # device names are unique per site
    return {"name": entity.name, "site_id": cache.require(entity.site_key)}


@_lookup.register
def _(entity: Interface, cache: ResolutionCache) -> LookupKey:
    return {"device_id": cache.require(entity.device_key), "name": entity.name}


@_lookup.register
def _(entity: IPAddress, cache: ResolutionCache) -> LookupKey:
    return {"address": entity.address, "interface_id": cache.require(entity.interface_key)}


@singledispatch
def _payload(entity: object, _cache: ResolutionCache) -> Payload:
    raise TypeError(f"No payload for {type(entity).__name__}")


@_payload.register
def _(entity: NetboxObject, _cache: ResolutionCache) -> Payload:
    return {"name": entity.name, "slug": entity.slug}


@_payload.register
def _(entity: Site, _cache: ResolutionCache) -> Payload:
    return {"name": entity.name, "slug": entity.slug, "status": entity.status.value}


@_payload.register
def _(entity: DeviceType, cache: ResolutionCache) -> Payload:
    return {
        "manufacturer": cache.require(entity.manufacturer.key),
        "model": entity.model,
        "slug": entity.slug,
    }


@_payload.register
def _(entity: Device, cache: ResolutionCache) -> Payload:
    return {
        "name": entity.name,
        "site": cache.require(entity.site_key),
        "role": cache.require(entity.role.key),
        "device_type": cache.require(entity.device_type_key),
        "status": entity.status.value,
        "serial": entity.serial,
    }


@_payload.register
def _(entity: Interface, cache: ResolutionCache) -> Payload:
    payload: Payload = {
        "device": cache.require(entity.device_key),
        "name": entity.name,
        "type": entity.type,
        "enabled": entity.enabled,
    }
    if entity.speed is not None:
        payload["speed"] = entity.speed
    if entity.mtu is not None:
        payload["mtu"] = entity.mtu
    if entity.mac_address is not None:
        payload["mac_address"] = entity.mac_address
    return payload


@_payload.register
def _(entity: IPAddress, cache: ResolutionCache) -> Payload:
    return {
        "address": entity.address,
        "assigned_object_type": entity.assigned_object_type,
        "assigned_object_id": cache.require(entity.interface_key),
    }
