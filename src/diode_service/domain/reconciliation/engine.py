"""Orchestrator for one reconciliation batch.

The engine composes the stage callables but does not prescribe concrete
adapters, so tests and alternative drivers can swap any stage.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from diode_service.domain.errors import ReconciliationError
from diode_service.domain.model import NormalizedEntity, UpsertAction

from .normalize import fact_identity, normalize_fact
from .report import BatchReport, EntityOutcome
from .resolve import ResolveBatch, resolve_batch

if TYPE_CHECKING:
    from collections.abc import Iterable

    from diode_service.domain.cancellation import CancellationToken
    from diode_service.domain.model import LocalKey

    from .cache import ResolutionCache
    from .push import Pusher

type NormalizeFact = Callable[[object], NormalizedEntity]


@dataclass(slots=True)
class ReconciliationEngine:
    """Run normalize -> resolve -> push for one batch of discovery facts."""

    pusher: Pusher
    normalize: NormalizeFact = field(default=normalize_fact)
    resolve: ResolveBatch = field(default=resolve_batch)

    async def reconcile(
        self,
        facts: Iterable[object],
        *,
        cache: ResolutionCache,
        token: CancellationToken | None = None,
    ) -> BatchReport:
        """Reconcile ``facts``; per-entity failures end up in the report, not raised."""

        entities: list[NormalizedEntity] = []
        rejected: list[EntityOutcome] = []
        failed_keys: list[LocalKey] = []
        for fact in facts:
            try:
                entities.append(self.normalize(fact))
            except ReconciliationError as exc:
                kind, key = fact_identity(fact)
                rejected.append(
                    EntityOutcome(kind=kind, key=key, action=UpsertAction.FAILED, error=exc)
                )
                if key is not None:
                    failed_keys.append(key)

        plan = self.resolve(entities, cache=cache, failed_keys=failed_keys)
        pushed = await self.pusher.push(plan, cache=cache, token=token)
        return BatchReport(outcomes=[*rejected, *pushed.outcomes], cancelled=pushed.cancelled)
