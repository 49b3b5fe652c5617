"""Dependency resolution: order a normalized batch into upsert stages.

Responsibilities of this stage:
- expand implied objects (manufacturers, device roles) from their owners
- collapse entities sharing a local key (first position, last value)
- check that every reference is either cached or planned in an earlier stage
- reject entities with unresolved references and skip their dependents

Out of scope for this stage:
- remote lookups
- cache mutation
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from diode_service.domain.errors import DependencyFailedError, UnresolvedReferenceError
from diode_service.domain.model import UpsertAction

from .plan import STAGE_KINDS, PlanStage, ReconciliationPlan
from .report import EntityOutcome

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from diode_service.domain.model import LocalKey, NormalizedEntity

    from .cache import ResolutionCache


class ResolveBatch(Protocol):
    """Order normalized entities into a reconciliation plan."""

    def __call__(
        self,
        entities: Iterable[NormalizedEntity],
        *,
        cache: ResolutionCache,
        failed_keys: Collection[LocalKey] = (),
    ) -> ReconciliationPlan: ...


def resolve_batch(
    entities: Iterable[NormalizedEntity],
    *,
    cache: ResolutionCache,
    failed_keys: Collection[LocalKey] = (),
) -> ReconciliationPlan:
    """Build the ordered plan for ``entities``.

    ``failed_keys`` names facts of this batch that never became entities
    (normalization failures); anything referencing them is skipped rather than
    silently linked to a stale cached id.
    """

    collapsed = _collapse(entities)
    blocked: set[LocalKey] = set(failed_keys).difference(entity.key for entity in collapsed)
    planned: set[LocalKey] = set()
    plan = ReconciliationPlan()

    for index, kinds in enumerate(STAGE_KINDS):
        stage = PlanStage(index=index, kinds=kinds)
        for entity in collapsed:
            if entity.kind not in kinds:
                continue
            rejection = _check_references(
                entity,
                cache=cache,
                planned=planned,
                blocked=blocked,
            )
            if rejection is not None:
                plan.reject(rejection)
                blocked.add(entity.key)
                continue
            stage.entities.append(entity)
        planned.update(entity.key for entity in stage.entities)
        plan.add_stage(stage)

    return plan


def _collapse(entities: Iterable[NormalizedEntity]) -> list[NormalizedEntity]:
    by_key: dict[LocalKey, NormalizedEntity] = {}
    for entity in entities:
        for implied in entity.implied:
            by_key.setdefault(implied.key, implied)
        by_key[entity.key] = entity
    return list(by_key.values())


def _check_references(
    entity: NormalizedEntity,
    *,
    cache: ResolutionCache,
    planned: set[LocalKey],
    blocked: set[LocalKey],
) -> EntityOutcome | None:
    for reference in entity.references:
        if reference in blocked:
            return EntityOutcome(
                kind=entity.kind,
                key=entity.key,
                action=UpsertAction.SKIPPED,
                error=DependencyFailedError(reference),
            )
        if reference in planned or reference in cache:
            continue
        return EntityOutcome(
            kind=entity.kind,
            key=entity.key,
            action=UpsertAction.FAILED,
            error=UnresolvedReferenceError(reference),
        )
    return None
