from __future__ import annotations

import pytest

from diode_service.domain.errors import (
    MalformedFactError,
    OutOfRangeError,
    UnknownStateError,
    UnknownStatusError,
)
from diode_service.domain.facts import SiteFact
from diode_service.domain.model import (
    INTERFACE_SPEED_MAX,
    Device,
    DeviceType,
    EntityKind,
    Interface,
    IPAddress,
    Site,
    Status,
)
from diode_service.domain.reconciliation import fact_identity, normalize_fact
from diode_service.domain.reconciliation.normalize import (
    check_mtu,
    check_speed,
    normalize_address,
    normalize_state,
    normalize_status,
)
from tests.support.discovery import (
    make_device,
    make_device_type,
    make_interface,
    make_ip,
)


@pytest.mark.parametrize("value", [0, 1, 1_000_000, INTERFACE_SPEED_MAX])
def test_speed_inside_bounds_is_identity(value: int) -> None:
    assert check_speed(value) == value


@pytest.mark.parametrize("value", [-1, INTERFACE_SPEED_MAX + 1])
def test_speed_outside_bounds_is_rejected(value: int) -> None:
    with pytest.raises(OutOfRangeError) as excinfo:
        check_speed(value)

    assert excinfo.value.field == "speed"
    assert excinfo.value.value == value


def test_mtu_lower_bound() -> None:
    assert check_mtu(1) == 1
    assert check_mtu(9216) == 9216
    assert check_mtu(None) is None
    with pytest.raises(OutOfRangeError):
        check_mtu(0)


def test_status_vocabulary() -> None:
    assert normalize_status("alive") is Status.ACTIVE
    assert normalize_status("dead") is Status.OFFLINE
    with pytest.raises(UnknownStatusError):
        normalize_status("zombie")
    with pytest.raises(UnknownStatusError):
        normalize_status("Alive")


def test_state_vocabulary() -> None:
    assert normalize_state("up") is True
    assert normalize_state("down") is False
    with pytest.raises(UnknownStateError):
        normalize_state("flapping")


def test_address_is_canonical_cidr() -> None:
    assert normalize_address("10.0.0.1/24") == "10.0.0.1/24"
    assert normalize_address(" 2001:DB8::1/64 ") == "2001:db8::1/64"


@pytest.mark.parametrize("value", ["10.0.0.1", "10.0.0.300/24", "not-an-ip/8"])
def test_address_rejects_non_cidr(value: str) -> None:
    with pytest.raises(MalformedFactError):
        normalize_address(value)


def test_normalize_site_derives_slug() -> None:
    site = normalize_fact(SiteFact(name="Berlin HQ", status="alive"))

    assert site == Site(name="Berlin HQ", slug="berlin-hq", status=Status.ACTIVE)


def test_normalize_device_carries_role_and_references() -> None:
    device = normalize_fact(make_device(name="Core SW 01", role="Core Switch"))

    assert isinstance(device, Device)
    assert device.slug == "core-sw-01"
    assert device.role.slug == "core-switch"
    assert device.references == (
        ("site", "hq"),
        ("device_role", "core-switch"),
        ("device_type", "c9300-48p"),
    )
    assert device.implied == (device.role,)


def test_normalize_device_type_implies_manufacturer() -> None:
    device_type = normalize_fact(make_device_type(manufacturer="Juniper Networks", model="MX204"))

    assert isinstance(device_type, DeviceType)
    assert device_type.manufacturer.slug == "juniper-networks"
    assert device_type.references == (("manufacturer", "juniper-networks"),)


def test_normalize_interface_defaults_type() -> None:
    interface = normalize_fact(make_interface(state="down", speed=None, mtu=None))

    assert isinstance(interface, Interface)
    assert interface.enabled is False
    assert interface.type == "other"
    assert interface.device_key == (EntityKind.DEVICE.value, "core-sw-01")


def test_normalize_ip_references_interface() -> None:
    address = normalize_fact(make_ip(address="192.0.2.10/32"))

    assert isinstance(address, IPAddress)
    assert address.assigned_object_type == "dcim.interface"
    assert address.references == (("interface", "core-sw-01", "Gi1/0/1"),)


def test_normalize_rejects_blank_names() -> None:
    with pytest.raises(MalformedFactError, match="site name"):
        normalize_fact(SiteFact(name="   ", status="alive"))


def test_normalize_rejects_unknown_fact_types() -> None:
    with pytest.raises(MalformedFactError):
        normalize_fact(object())


def test_fact_identity_survives_invalid_values() -> None:
    kind, key = fact_identity(make_interface(device="Core SW 01", name="eth0", state="sideways"))

    assert kind is EntityKind.INTERFACE
    assert key == ("interface", "core-sw-01", "eth0")


def test_fact_identity_without_usable_name() -> None:
    assert fact_identity(SiteFact(name="", status="alive")) == (EntityKind.SITE, None)
    assert fact_identity(object()) == (None, None)
