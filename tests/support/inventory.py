"""In-memory ``InventoryClient`` fake with failure injection."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from diode_service.domain.errors import RemoteCallError
from diode_service.domain.model import EntityKind

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

# lookup filter name -> stored payload field
_FILTER_FIELDS = {
    "site_id": "site",
    "device_id": "device",
    "interface_id": "assigned_object_id",
}


@dataclass(slots=True)
class _Failure:
    operation: str
    kind: EntityKind
    remaining: int
    when: Callable[[Mapping[str, object]], bool] | None = None
    error: Callable[[], Exception] | None = None

    def matches(self, operation: str, kind: EntityKind, data: Mapping[str, object]) -> bool:
        if self.remaining <= 0 or operation != self.operation or kind is not self.kind:
            return False
        return self.when is None or self.when(data)


@dataclass(slots=True)
class InMemoryInventory:
    """Stores NetBox-like records per kind and records every call."""

    delay: float = 0.0
    check_error: Exception | None = None
    on_call: Callable[[str, EntityKind], None] | None = None
    records: dict[EntityKind, dict[int, dict[str, object]]] = field(
        default_factory=dict[EntityKind, dict[int, dict[str, object]]]
    )
    calls: list[tuple[str, EntityKind]] = field(default_factory=list[tuple[str, EntityKind]])
    in_flight: int = 0
    max_in_flight: int = 0
    checks: int = 0
    _failures: list[_Failure] = field(default_factory=list[_Failure])
    _next_id: int = 1

    def fail(
        self,
        operation: str,
        kind: EntityKind,
        *,
        times: int = 1,
        when: Callable[[Mapping[str, object]], bool] | None = None,
        error: Callable[[], Exception] | None = None,
    ) -> None:
        """Make the next ``times`` matching calls raise.

        ``error`` builds the exception; by default a ``RemoteCallError``.
        """
        self._failures.append(_Failure(operation, kind, times, when, error))

    def seed(self, kind: EntityKind, payload: Mapping[str, object]) -> int:
        remote_id = self._next_id
        self._next_id += 1
        self.records.setdefault(kind, {})[remote_id] = dict(payload)
        return remote_id

    def count(self, kind: EntityKind | None = None) -> int:
        if kind is None:
            return sum(len(records) for records in self.records.values())
        return len(self.records.get(kind, {}))

    def calls_for(self, operation: str, kind: EntityKind | None = None) -> int:
        return sum(
            1
            for call_operation, call_kind in self.calls
            if call_operation == operation and (kind is None or call_kind is kind)
        )

    def only(self, kind: EntityKind) -> dict[str, object]:
        (record,) = self.records[kind].values()
        return record

    async def check(self) -> None:
        self.checks += 1
        if self.check_error is not None:
            raise self.check_error

    async def find_by_key(
        self, kind: EntityKind, key: Mapping[str, str | int]
    ) -> int | None:
        await self._enter("find", kind, key)
        matches = [
            remote_id
            for remote_id, record in self.records.get(kind, {}).items()
            if all(record.get(_FILTER_FIELDS.get(name, name)) == value for name, value in key.items())
        ]
        if len(matches) > 1:
            raise RemoteCallError(f"Ambiguous {kind} lookup", kind=kind)
        return matches[0] if matches else None

    async def create(self, kind: EntityKind, payload: Mapping[str, object]) -> int:
        await self._enter("create", kind, payload)
        return self.seed(kind, payload)

    async def update(
        self, kind: EntityKind, remote_id: int, payload: Mapping[str, object]
    ) -> None:
        await self._enter("update", kind, payload)
        self.records[kind][remote_id].update(payload)

    async def _enter(
        self, operation: str, kind: EntityKind, data: Mapping[str, object]
    ) -> None:
        self.calls.append((operation, kind))
        if self.on_call is not None:
            self.on_call(operation, kind)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        for failure in self._failures:
            if failure.matches(operation, kind, data):
                failure.remaining -= 1
                if failure.error is not None:
                    raise failure.error()
                raise RemoteCallError(f"Injected {operation} failure for {kind}", kind=kind)
