"""Async driver: consume discovery batches and reconcile them until stopped.

Lifecycle: ``STOPPED -> STARTING -> RUNNING -> STOPPING -> STOPPED``.

The driver owns one ``CancellationToken`` per run and hands it to every
suspension point that could dispatch more work. Stopping never aborts a
NetBox call mid-flight; it only prevents further dispatches.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing
from enum import StrEnum
from typing import TYPE_CHECKING

from diode_service.domain.cancellation import CancellationToken
from diode_service.domain.errors import (
    CancelledBeforeDispatchError,
    RemoteCallError,
    ServiceStartError,
    ServiceStateError,
)
from diode_service.domain.model import describe_key
from diode_service.domain.reconciliation import (
    BatchReport,
    Pusher,
    ReconciliationEngine,
    ResolutionCache,
)
from diode_service.domain.reconciliation.push import DEFAULT_MAX_CONCURRENCY

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable, Sequence

    from diode_service.domain.facts import DiscoveryFact
    from diode_service.domain.ports import DiscoverySource, InventoryClient

    from .reconciliation import EntityOutcome

type ReportHook = Callable[[BatchReport], None]

log = logging.getLogger(__name__)


class LifecycleState(StrEnum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ReconcilerService:
    """Drive the consume -> normalize -> resolve -> push loop.

    ``start`` probes the inventory and launches the loop; ``stop`` is
    idempotent and may be called in any state. ``wait`` returns once the loop
    has ended (source exhausted or stopped) and re-raises a loop crash.
    """

    def __init__(
        self,
        *,
        source: DiscoverySource,
        inventory: InventoryClient,
        engine: ReconciliationEngine | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        on_report: ReportHook | None = None,
    ) -> None:
        self._source = source
        self._inventory = inventory
        self._engine = engine or ReconciliationEngine(
            pusher=Pusher(client=inventory, max_concurrency=max_concurrency)
        )
        self._on_report = on_report
        self._cache = ResolutionCache()
        self._token = CancellationToken()
        self._task: asyncio.Task[None] | None = None
        self._state = LifecycleState.STOPPED
        self.batches_processed = 0

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    async def start(self) -> None:
        if self._state is not LifecycleState.STOPPED:
            raise ServiceStateError(f"Cannot start reconciler in state {self._state}")

        self._state = LifecycleState.STARTING
        token = self._token = CancellationToken()
        self._cache.clear()
        self.batches_processed = 0

        try:
            await self._inventory.check()
        except RemoteCallError as exc:
            self._state = LifecycleState.STOPPED
            raise ServiceStartError(f"Inventory endpoint is not usable: {exc}") from exc
        except BaseException:
            self._state = LifecycleState.STOPPED
            raise

        if token.cancelled:
            log.info("Reconciler stopped during startup")
            self._state = LifecycleState.STOPPED
            return

        self._task = asyncio.create_task(self._run(token), name="diode-reconcile-loop")
        self._state = LifecycleState.RUNNING
        log.info("Reconciler started")

    async def stop(self) -> None:
        if self._state is LifecycleState.STOPPED:
            return

        self._state = LifecycleState.STOPPING
        self._token.cancel()
        task = self._task
        if task is not None:
            await asyncio.wait({task})
            if not task.cancelled() and task.exception() is not None:
                log.error("Reconcile loop had crashed before stop", exc_info=task.exception())
        self._state = LifecycleState.STOPPED
        log.info("Reconciler stopped after %s batch(es)", self.batches_processed)

    async def wait(self) -> None:
        task = self._task
        if task is None:
            return
        await asyncio.shield(task)

    async def _run(self, token: CancellationToken) -> None:
        async with aclosing(self._source.batches()) as batches:
            while not token.cancelled:
                batch = await self._next_batch(batches, token)
                if batch is None:
                    break
                await self._reconcile(batch, token)
        log.debug("Reconcile loop finished (cancelled=%s)", token.cancelled)

    async def _next_batch(
        self,
        batches: AsyncGenerator[Sequence[DiscoveryFact], None],
        token: CancellationToken,
    ) -> Sequence[DiscoveryFact] | None:
        pull = asyncio.create_task(_pull(batches))
        stopped = asyncio.create_task(token.wait())
        done, _pending = await asyncio.wait({pull, stopped}, return_when=asyncio.FIRST_COMPLETED)
        if pull in done:
            stopped.cancel()
            return pull.result()
        pull.cancel()
        await asyncio.wait({pull})
        return None

    async def _reconcile(self, batch: Sequence[DiscoveryFact], token: CancellationToken) -> None:
        try:
            report = await self._engine.reconcile(batch, cache=self._cache, token=token)
        except Exception:  # noqa: BLE001
            log.exception("Reconciliation batch of %s fact(s) failed", len(batch))
            return

        self.batches_processed += 1
        _log_report(report)
        if self._on_report is not None:
            self._on_report(report)


async def _pull(
    batches: AsyncGenerator[Sequence[DiscoveryFact], None],
) -> Sequence[DiscoveryFact] | None:
    try:
        return await anext(batches)
    except StopAsyncIteration:
        return None


def _log_report(report: BatchReport) -> None:
    summary = report.summary()
    log.info(
        "Reconciled batch: created=%s, updated=%s, skipped=%s, failed=%s, cancelled=%s",
        summary["created"],
        summary["updated"],
        summary["skipped"],
        summary["failed"],
        summary["cancelled"],
        extra={f"batch_{name}": value for name, value in summary.items()},
    )
    for outcome in report.problems:
        _log_outcome(outcome)


def _log_outcome(outcome: EntityOutcome) -> None:
    level = (
        logging.INFO
        if isinstance(outcome.error, CancelledBeforeDispatchError)
        else logging.WARNING
    )
    subject = describe_key(outcome.key) if outcome.key is not None else str(outcome.kind)
    log.log(
        level,
        "%s %s: %s",
        outcome.action,
        subject,
        outcome.error,
        extra={
            "entity_kind": outcome.kind,
            "entity_key": subject,
            "action": outcome.action,
        },
    )
