"""Push stage: create-or-update planned entities against the inventory.

Responsibilities of this stage:
- upsert each planned entity (lookup by natural key, then update or create)
- retry a failed remote call once per entity unless cancelled, then record the failure
- record an unexpected error from one entity as that entity's failure
- skip entities whose dependencies failed earlier in the batch
- dispatch independent entities of one stage concurrently, stages in order
- write resolved ids to the cache only after a stage has drained

Cancellation is cooperative: the token is checked at each stage boundary and
before each dispatch. Calls already in flight are allowed to finish.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from diode_service.domain.errors import (
    CancelledBeforeDispatchError,
    DependencyFailedError,
    RemoteCallError,
    UnresolvedReferenceError,
)
from diode_service.domain.model import UpsertAction, describe_key

from .payloads import build_payload, lookup_key
from .report import BatchReport, EntityOutcome

if TYPE_CHECKING:
    from diode_service.domain.cancellation import CancellationToken
    from diode_service.domain.errors import ReconciliationError
    from diode_service.domain.model import LocalKey, NormalizedEntity
    from diode_service.domain.ports import InventoryClient

    from .cache import ResolutionCache
    from .plan import PlanStage, ReconciliationPlan

log = getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_MAX_ATTEMPTS = 2

_RESOLVING_ACTIONS = frozenset({UpsertAction.CREATED, UpsertAction.UPDATED})


@dataclass(slots=True, kw_only=True)
class Pusher:
    """Execute a reconciliation plan against an ``InventoryClient``."""

    client: InventoryClient
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def push(
        self,
        plan: ReconciliationPlan,
        *,
        cache: ResolutionCache,
        token: CancellationToken | None = None,
    ) -> BatchReport:
        report = BatchReport()
        report.extend(plan.rejected)
        failed: set[LocalKey] = {
            outcome.key for outcome in plan.rejected if outcome.key is not None
        }

        for stage in plan.stages:
            if not stage.entities:
                continue
            if token is not None and token.cancelled:
                report.cancelled = True
                report.extend(_cancelled(entity) for entity in stage.entities)
                continue

            outcomes = await self._run_stage(stage, cache=cache, failed=failed, token=token)

            cache.update(
                {
                    outcome.key: outcome.remote_id
                    for outcome in outcomes
                    if outcome.action in _RESOLVING_ACTIONS
                    and outcome.key is not None
                    and outcome.remote_id is not None
                }
            )
            failed.update(
                outcome.key
                for outcome in outcomes
                if outcome.action not in _RESOLVING_ACTIONS and outcome.key is not None
            )
            if any(isinstance(outcome.error, CancelledBeforeDispatchError) for outcome in outcomes):
                report.cancelled = True
            report.extend(outcomes)

        return report

    async def upsert(
        self, entity: NormalizedEntity, *, cache: ResolutionCache
    ) -> tuple[int, UpsertAction]:
        """Create ``entity`` if its natural key is unknown remotely, else update it."""

        key = lookup_key(entity, cache)
        payload = build_payload(entity, cache)
        remote_id = await self.client.find_by_key(entity.kind, key)
        if remote_id is None:
            return await self.client.create(entity.kind, payload), UpsertAction.CREATED
        await self.client.update(entity.kind, remote_id, payload)
        return remote_id, UpsertAction.UPDATED

    async def _run_stage(
        self,
        stage: PlanStage,
        *,
        cache: ResolutionCache,
        failed: set[LocalKey],
        token: CancellationToken | None,
    ) -> list[EntityOutcome]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def dispatch(entity: NormalizedEntity) -> EntityOutcome:
            async with semaphore:
                if token is not None and token.cancelled:
                    return _cancelled(entity)
                return await self._push_entity(entity, cache=cache, failed=failed, token=token)

        async with asyncio.TaskGroup() as group:
            tasks = [group.create_task(dispatch(entity)) for entity in stage.entities]
        return [task.result() for task in tasks]

    async def _push_entity(
        self,
        entity: NormalizedEntity,
        *,
        cache: ResolutionCache,
        failed: set[LocalKey],
        token: CancellationToken | None = None,
    ) -> EntityOutcome:
        for reference in entity.references:
            if reference in failed:
                return _outcome(entity, UpsertAction.SKIPPED, error=DependencyFailedError(reference))

        attempt = 1
        while True:
            try:
                remote_id, action = await self.upsert(entity, cache=cache)
            except UnresolvedReferenceError as exc:
                return _outcome(entity, UpsertAction.FAILED, error=exc)
            except RemoteCallError as exc:
                if attempt >= self.max_attempts:
                    return _outcome(entity, UpsertAction.FAILED, error=exc)
                if token is not None and token.cancelled:
                    return _cancelled(entity)
                log.info(
                    "Retrying %s after remote error (attempt %s/%s): %s",
                    describe_key(entity.key),
                    attempt,
                    self.max_attempts,
                    exc,
                )
                attempt += 1
                continue
            except Exception as exc:
                log.exception("Unexpected error while pushing %s", describe_key(entity.key))
                error = RemoteCallError(f"{type(exc).__name__}: {exc}", kind=entity.kind)
                error.__cause__ = exc
                return _outcome(entity, UpsertAction.FAILED, error=error)
            return _outcome(entity, action, remote_id=remote_id)


def _outcome(
    entity: NormalizedEntity,
    action: UpsertAction,
    *,
    remote_id: int | None = None,
    error: ReconciliationError | None = None,
) -> EntityOutcome:
    return EntityOutcome(
        kind=entity.kind,
        key=entity.key,
        action=action,
        remote_id=remote_id,
        error=error,
    )


def _cancelled(entity: NormalizedEntity) -> EntityOutcome:
    return _outcome(entity, UpsertAction.SKIPPED, error=CancelledBeforeDispatchError())
