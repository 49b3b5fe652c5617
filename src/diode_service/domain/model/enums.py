"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Discriminator for the NetBox object kinds the reconciler writes."""

    SITE = "site"
    MANUFACTURER = "manufacturer"
    DEVICE_ROLE = "device_role"
    DEVICE_TYPE = "device_type"
    DEVICE = "device"
    INTERFACE = "interface"
    IP_ADDRESS = "ip_address"


class Status(StrEnum):
    """NetBox status vocabulary used by sites and devices."""

    ACTIVE = "active"
    OFFLINE = "offline"


class UpsertAction(StrEnum):
    """What happened to one entity during a push."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"
