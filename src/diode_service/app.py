"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from logging import getLogger
from typing import TYPE_CHECKING

from diode_service.adapters.netbox import NetboxClient
from diode_service.domain.service import ReconcilerService

if TYPE_CHECKING:
    from diode_service.config import ServiceConfig
    from diode_service.domain.ports import DiscoverySource, InventoryClient
    from diode_service.domain.service import ReportHook

log = getLogger(__name__)


def build_service(
    config: ServiceConfig,
    *,
    source: DiscoverySource,
    inventory: InventoryClient,
    on_report: ReportHook | None = None,
) -> ReconcilerService:
    return ReconcilerService(
        source=source,
        inventory=inventory,
        max_concurrency=config.max_concurrency,
        on_report=on_report,
    )


async def run_reconciler(
    config: ServiceConfig,
    *,
    source: DiscoverySource,
    inventory: InventoryClient | None = None,
    stop_event: asyncio.Event | None = None,
    on_report: ReportHook | None = None,
) -> ReconcilerService:
    """Run the reconciler until the source is exhausted or ``stop_event`` is set.

    Without an explicit ``inventory`` a ``NetboxClient`` is opened from
    ``config.netbox`` and closed on exit. Startup failures propagate as
    ``ServiceStartError``; a crashed consume loop is re-raised after stopping.
    """

    async with AsyncExitStack() as stack:
        if inventory is None:
            inventory = await stack.enter_async_context(NetboxClient(config.netbox))
        service = build_service(config, source=source, inventory=inventory, on_report=on_report)
        log.info(
            "Starting reconciler: endpoint=%s, max_concurrency=%s, batch_size=%s",
            config.netbox.endpoint,
            config.max_concurrency,
            config.batch_size,
        )
        await service.start()
        try:
            await _serve(service, stop_event)
        finally:
            await service.stop()

    log.info("Reconciler finished after %s batch(es)", service.batches_processed)
    return service


async def _serve(service: ReconcilerService, stop_event: asyncio.Event | None) -> None:
    finished = asyncio.create_task(service.wait())
    if stop_event is None:
        await finished
        return

    stopping = asyncio.create_task(stop_event.wait())
    await asyncio.wait({finished, stopping}, return_when=asyncio.FIRST_COMPLETED)
    if not stopping.done():
        stopping.cancel()
    else:
        log.info("Stop requested")
        await service.stop()
    await finished
