"""Ordered upsert plan shared by the resolver and pusher stages.

The plan is the contract between:
- dependency resolution (read-only ordering and reference checks)
- the pusher (remote create-or-update in stage order)

Stages follow the NetBox foreign-key graph; kinds within one stage never
reference each other.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from diode_service.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from diode_service.domain.model import NormalizedEntity

    from .report import EntityOutcome


STAGE_KINDS: tuple[frozenset[EntityKind], ...] = (
    frozenset({EntityKind.SITE, EntityKind.MANUFACTURER, EntityKind.DEVICE_ROLE}),
    frozenset({EntityKind.DEVICE_TYPE}),
    frozenset({EntityKind.DEVICE}),
    frozenset({EntityKind.INTERFACE}),
    frozenset({EntityKind.IP_ADDRESS}),
)


def stage_index(kind: EntityKind) -> int:
    for index, kinds in enumerate(STAGE_KINDS):
        if kind in kinds:
            return index
    raise ValueError(f"No stage for entity kind {kind}")


@dataclass(slots=True, kw_only=True)
class PlanStage:
    """Entities of one dependency level, in stable input order."""

    index: int
    kinds: frozenset[EntityKind]
    entities: list[NormalizedEntity] = field(default_factory=list["NormalizedEntity"])

    def __len__(self) -> int:
        return len(self.entities)


@dataclass(slots=True)
class ReconciliationPlan:
    """Aggregate plan for one batch.

    ``rejected`` holds outcomes for entities the resolver refused to schedule
    (unresolved references and their cascaded skips).
    """

    stages: list[PlanStage] = field(default_factory=list["PlanStage"])
    rejected: list[EntityOutcome] = field(default_factory=list["EntityOutcome"])

    @property
    def entities(self) -> Iterator[NormalizedEntity]:
        for stage in self.stages:
            yield from stage.entities

    @property
    def is_empty(self) -> bool:
        return not any(self.stages)

    def add_stage(self, stage: PlanStage) -> None:
        self.stages.append(stage)

    def reject(self, outcome: EntityOutcome) -> None:
        self.rejected.append(outcome)
