"""Public interface for the NetBox adapter."""

from __future__ import annotations

from .client import ENDPOINTS, NetboxClient
from .schema import ListResponse, ObjectRef, StatusResponse

__all__ = [
    "ENDPOINTS",
    "ListResponse",
    "NetboxClient",
    "ObjectRef",
    "StatusResponse",
]
