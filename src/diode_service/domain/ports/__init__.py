"""Domain port definitions for adapters."""

from __future__ import annotations

from .discovery import DiscoverySource
from .inventory import InventoryClient

__all__ = [
    "DiscoverySource",
    "InventoryClient",
]
