"""Port for the NetBox-side "push entity" capability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from diode_service.domain.model import EntityKind


@runtime_checkable
class InventoryClient(Protocol):
    """Create-or-update primitives against the inventory system.

    Implementations raise ``RemoteCallError`` for any failure; timeouts are
    theirs to enforce. Nothing here is transactional across kinds.
    """

    async def check(self) -> None:
        """Probe the endpoint once at startup."""
        ...

    async def find_by_key(
        self, kind: EntityKind, key: Mapping[str, str | int]
    ) -> int | None: ...

    async def create(self, kind: EntityKind, payload: Mapping[str, object]) -> int: ...

    async def update(
        self, kind: EntityKind, remote_id: int, payload: Mapping[str, object]
    ) -> None: ...


__all__ = ["InventoryClient"]
