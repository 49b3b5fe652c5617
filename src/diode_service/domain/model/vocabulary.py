"""Fixed NetBox vocabularies and bounds.

Tables are read-only mappings so every entity kind shares one lookup and
tests can exercise them directly.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from .enums import Status

if TYPE_CHECKING:
    from collections.abc import Mapping

INTERFACE_SPEED_MIN = 0
INTERFACE_SPEED_MAX = 2147483647
INTERFACE_MTU_MIN = 1

INTERFACE_OBJ_TYPE = "dcim.interface"
DEFAULT_INTERFACE_TYPE = "other"

DEVICE_STATUS_MAP: Mapping[str, Status] = MappingProxyType(
    {
        "alive": Status.ACTIVE,
        "dead": Status.OFFLINE,
    }
)

INTERFACE_STATE_MAP: Mapping[str, bool] = MappingProxyType(
    {
        "up": True,
        "down": False,
    }
)
