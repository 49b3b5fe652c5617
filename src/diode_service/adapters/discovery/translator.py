"""Translate validated discovery payloads into domain facts."""

from __future__ import annotations

from collections.abc import Mapping
from functools import singledispatch

from pydantic import ValidationError

from diode_service.domain.errors import MalformedFactError
from diode_service.domain.facts import (
    DeviceFact,
    DeviceTypeFact,
    DiscoveryFact,
    InterfaceFact,
    IpAddressFact,
    SiteFact,
)

from .schema import (
    FACT_PAYLOAD_ADAPTER,
    DevicePayload,
    DeviceTypePayload,
    FactPayload,
    InterfacePayload,
    IpAddressPayload,
    SitePayload,
)


def parse_fact(raw: Mapping[str, object] | str | bytes) -> DiscoveryFact:
    """Validate one raw record (decoded mapping or JSON text) into a domain fact."""

    try:
        if isinstance(raw, Mapping):
            payload = FACT_PAYLOAD_ADAPTER.validate_python(raw)
        else:
            payload = FACT_PAYLOAD_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise MalformedFactError(f"Invalid discovery record: {exc.error_count()} error(s)") from exc
    return parse_fact_payload(payload)


def parse_fact_payload(payload: FactPayload) -> DiscoveryFact:
    return _to_fact(payload)


@singledispatch
def _to_fact(payload: object) -> DiscoveryFact:
    raise MalformedFactError(f"Unsupported discovery payload: {type(payload).__name__}")


@_to_fact.register
def _(payload: SitePayload) -> DiscoveryFact:
    return SiteFact(name=payload.name, status=payload.status, slug=payload.slug)


@_to_fact.register
def _(payload: DeviceTypePayload) -> DiscoveryFact:
    return DeviceTypeFact(manufacturer=payload.manufacturer, model=payload.model)


@_to_fact.register
def _(payload: DevicePayload) -> DiscoveryFact:
    return DeviceFact(
        name=payload.name,
        site=payload.site,
        model=payload.model,
        role=payload.role,
        status=payload.status,
        serial=payload.serial,
    )


@_to_fact.register
def _(payload: InterfacePayload) -> DiscoveryFact:
    return InterfaceFact(
        device=payload.device,
        name=payload.name,
        state=payload.state,
        type=payload.type,
        speed=payload.speed,
        mtu=payload.mtu,
        mac_address=payload.mac_address,
    )


@_to_fact.register
def _(payload: IpAddressPayload) -> DiscoveryFact:
    return IpAddressFact(
        address=payload.address, device=payload.device, interface=payload.interface
    )
