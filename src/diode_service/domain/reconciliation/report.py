"""Per-batch reconciliation outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from diode_service.domain.model import UpsertAction

if TYPE_CHECKING:
    from collections.abc import Iterable

    from diode_service.domain.errors import ReconciliationError
    from diode_service.domain.model import EntityKind, LocalKey


@dataclass(slots=True, kw_only=True)
class EntityOutcome:
    """What happened to one entity (or one rejected fact)."""

    kind: EntityKind | None
    key: LocalKey | None
    action: UpsertAction
    remote_id: int | None = None
    error: ReconciliationError | None = None


@dataclass(slots=True)
class BatchReport:
    """Summary of one batch: counts plus every individual outcome."""

    outcomes: list[EntityOutcome] = field(default_factory=list["EntityOutcome"])
    cancelled: bool = False

    def record(self, outcome: EntityOutcome) -> None:
        self.outcomes.append(outcome)

    def extend(self, outcomes: Iterable[EntityOutcome]) -> None:
        self.outcomes.extend(outcomes)

    def count(self, action: UpsertAction) -> int:
        return sum(1 for outcome in self.outcomes if outcome.action is action)

    @property
    def created(self) -> int:
        return self.count(UpsertAction.CREATED)

    @property
    def updated(self) -> int:
        return self.count(UpsertAction.UPDATED)

    @property
    def skipped(self) -> int:
        return self.count(UpsertAction.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(UpsertAction.FAILED)

    @property
    def problems(self) -> tuple[EntityOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if outcome.error is not None)

    def outcome_for(self, key: LocalKey) -> EntityOutcome | None:
        for outcome in self.outcomes:
            if outcome.key == key:
                return outcome
        return None

    def summary(self) -> dict[str, int | bool]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
            "cancelled": self.cancelled,
        }
