"""In-run mapping from local natural keys to NetBox identifiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from diode_service.domain.errors import UnresolvedReferenceError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from diode_service.domain.model import LocalKey


@dataclass(slots=True)
class ResolutionCache:
    """Resolved ids for keys upserted during the current run.

    Only the pusher writes, and only once a stage has drained; later stages
    read it without locking.
    """

    _ids: dict[LocalKey, int] = field(default_factory=dict["LocalKey", int], repr=False)

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[LocalKey]:
        return iter(self._ids)

    def get(self, key: LocalKey) -> int | None:
        return self._ids.get(key)

    def require(self, key: LocalKey) -> int:
        try:
            return self._ids[key]
        except KeyError:
            raise UnresolvedReferenceError(key) from None

    def update(self, resolved: Mapping[LocalKey, int]) -> None:
        self._ids.update(resolved)

    def clear(self) -> None:
        self._ids.clear()
