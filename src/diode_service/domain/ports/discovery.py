"""Port for the upstream discovery producer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Sequence

    from diode_service.domain.facts import DiscoveryFact


@runtime_checkable
class DiscoverySource(Protocol):
    """Stream of discovery batches; may be unbounded and may yield empty batches.

    ``batches`` is expected to be an async generator so the driver can close it
    when it stops consuming.
    """

    def batches(self) -> AsyncGenerator[Sequence[DiscoveryFact], None]: ...


__all__ = ["DiscoverySource"]
