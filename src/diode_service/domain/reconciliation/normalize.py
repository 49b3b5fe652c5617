"""Normalization stage: raw discovery facts to NetBox-shaped entities.

Responsibilities of this stage:
- map agent vocabularies (status, link state) through the fixed tables
- reject numeric values outside NetBox bounds instead of truncating them
- derive deterministic slugs so repeated runs address the same objects

Every function here is pure. Failures are raised to the caller, which records
them against the offending fact; nothing is logged from this module.
"""

from __future__ import annotations

import ipaddress
from functools import singledispatch

from diode_service.domain.errors import (
    MalformedFactError,
    OutOfRangeError,
    UnknownStateError,
    UnknownStatusError,
)
from diode_service.domain.facts import (
    DeviceFact,
    DeviceTypeFact,
    InterfaceFact,
    IpAddressFact,
    SiteFact,
)
from diode_service.domain.model import (
    DEFAULT_INTERFACE_TYPE,
    DEVICE_STATUS_MAP,
    INTERFACE_MTU_MIN,
    INTERFACE_SPEED_MAX,
    INTERFACE_SPEED_MIN,
    INTERFACE_STATE_MAP,
    Device,
    DeviceRole,
    DeviceType,
    EntityKind,
    Interface,
    IPAddress,
    LocalKey,
    Manufacturer,
    NormalizedEntity,
    Site,
    Status,
    local_key,
    make_slug,
)


def normalize_status(value: str) -> Status:
    try:
        return DEVICE_STATUS_MAP[value]
    except KeyError:
        raise UnknownStatusError(value) from None


def normalize_state(value: str) -> bool:
    try:
        return INTERFACE_STATE_MAP[value]
    except KeyError:
        raise UnknownStateError(value) from None


def check_speed(value: int | None) -> int | None:
    if value is None:
        return None
    if not INTERFACE_SPEED_MIN <= value <= INTERFACE_SPEED_MAX:
        raise OutOfRangeError(
            "speed",
            value,
            minimum=INTERFACE_SPEED_MIN,
            maximum=INTERFACE_SPEED_MAX,
        )
    return value


def check_mtu(value: int | None) -> int | None:
    if value is None:
        return None
    if value < INTERFACE_MTU_MIN:
        raise OutOfRangeError("mtu", value, minimum=INTERFACE_MTU_MIN)
    return value


def normalize_address(value: str) -> str:
    """Return ``value`` in canonical CIDR form (``10.0.0.1/24``)."""

    text = value.strip()
    if "/" not in text:
        raise MalformedFactError(f"Address is not in CIDR notation: {value!r}")
    try:
        return str(ipaddress.ip_interface(text))
    except ValueError as exc:
        raise MalformedFactError(f"Invalid address: {value!r}") from exc


def normalize_fact(fact: object) -> NormalizedEntity:
    """Translate one discovery fact into a validated entity."""

    return _normalize(fact)


@singledispatch
def _normalize(fact: object) -> NormalizedEntity:
    raise MalformedFactError(f"Unsupported discovery fact: {type(fact).__name__}")


@_normalize.register
def _(fact: SiteFact) -> NormalizedEntity:
    name = _require_text("site name", fact.name)
    slug = make_slug(fact.slug) if fact.slug else make_slug(name)
    return Site(
        name=name,
        slug=_require_text("site slug", slug),
        status=normalize_status(fact.status),
    )


@_normalize.register
def _(fact: DeviceTypeFact) -> NormalizedEntity:
    model = _require_text("device model", fact.model)
    return DeviceType(
        manufacturer=_manufacturer(fact.manufacturer),
        model=model,
        slug=_require_text("device type slug", make_slug(model)),
    )


@_normalize.register
def _(fact: DeviceFact) -> NormalizedEntity:
    name = _require_text("device name", fact.name)
    role_name = _require_text("device role", fact.role)
    return Device(
        site=_require_text("site reference", make_slug(fact.site)),
        role=DeviceRole(name=role_name, slug=make_slug(role_name)),
        device_type=_require_text("device type reference", make_slug(fact.model)),
        name=name,
        slug=_require_text("device slug", make_slug(name)),
        status=normalize_status(fact.status),
        serial=fact.serial.strip(),
    )


@_normalize.register
def _(fact: InterfaceFact) -> NormalizedEntity:
    return Interface(
        device=_require_text("device reference", make_slug(fact.device)),
        name=_require_text("interface name", fact.name),
        enabled=normalize_state(fact.state),
        type=(fact.type or "").strip() or DEFAULT_INTERFACE_TYPE,
        speed=check_speed(fact.speed),
        mtu=check_mtu(fact.mtu),
        mac_address=(fact.mac_address or "").strip() or None,
    )


@_normalize.register
def _(fact: IpAddressFact) -> NormalizedEntity:
    return IPAddress(
        address=normalize_address(fact.address),
        device=_require_text("device reference", make_slug(fact.device)),
        interface=_require_text("interface reference", fact.interface),
    )


def _manufacturer(name: str) -> Manufacturer:
    text = _require_text("manufacturer", name)
    return Manufacturer(name=text, slug=_require_text("manufacturer slug", make_slug(text)))


def _require_text(field: str, value: str) -> str:
    text = value.strip()
    if not text:
        raise MalformedFactError(f"Missing {field}")
    return text


def fact_identity(fact: object) -> tuple[EntityKind | None, LocalKey | None]:
    """Best-effort kind and local key of ``fact``, even when it fails to normalize.

    Used to report rejected facts and to skip entities that depend on them.
    """

    kind, parts = _identity(fact)
    if kind is None or not all(parts):
        return kind, None
    return kind, local_key(kind, *parts)


@singledispatch
def _identity(_fact: object) -> tuple[EntityKind | None, tuple[str, ...]]:
    return None, ()


@_identity.register
def _(fact: SiteFact) -> tuple[EntityKind | None, tuple[str, ...]]:
    return EntityKind.SITE, (make_slug(fact.slug or fact.name),)


@_identity.register
def _(fact: DeviceTypeFact) -> tuple[EntityKind | None, tuple[str, ...]]:
    return EntityKind.DEVICE_TYPE, (make_slug(fact.model),)


@_identity.register
def _(fact: DeviceFact) -> tuple[EntityKind | None, tuple[str, ...]]:
    return EntityKind.DEVICE, (make_slug(fact.name),)


@_identity.register
def _(fact: InterfaceFact) -> tuple[EntityKind | None, tuple[str, ...]]:
    return EntityKind.INTERFACE, (make_slug(fact.device), fact.name.strip())


@_identity.register
def _(fact: IpAddressFact) -> tuple[EntityKind | None, tuple[str, ...]]:
    return EntityKind.IP_ADDRESS, (
        make_slug(fact.device),
        fact.interface.strip(),
        fact.address.strip(),
    )
