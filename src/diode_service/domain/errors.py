"""Error taxonomy for normalization, ordering and pushing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from diode_service.domain.model import describe_key

if TYPE_CHECKING:
    from diode_service.domain.model import EntityKind, LocalKey


class ReconciliationError(RuntimeError):
    """Base class for per-entity reconciliation failures."""


class UnknownStatusError(ReconciliationError):
    """Raised when a source status has no NetBox equivalent."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown status: {value!r}")
        self.value = value


class UnknownStateError(ReconciliationError):
    """Raised when a link state is neither ``up`` nor ``down``."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown interface state: {value!r}")
        self.value = value


class OutOfRangeError(ReconciliationError):
    """Raised when a numeric field falls outside NetBox bounds."""

    def __init__(
        self,
        field: str,
        value: int,
        *,
        minimum: int | None = None,
        maximum: int | None = None,
    ) -> None:
        lower = "-inf" if minimum is None else str(minimum)
        upper = "inf" if maximum is None else str(maximum)
        super().__init__(f"{field}={value} outside [{lower}, {upper}]")
        self.field = field
        self.value = value
        self.minimum = minimum
        self.maximum = maximum


class MalformedFactError(ReconciliationError):
    """Raised when a fact is structurally unusable (blank names, bad CIDR)."""


class UnresolvedReferenceError(ReconciliationError):
    """Raised when a dependency is neither cached nor planned in the batch."""

    def __init__(self, missing: LocalKey) -> None:
        super().__init__(f"Unresolved reference: {describe_key(missing)}")
        self.missing = missing


class DependencyFailedError(ReconciliationError):
    """Recorded on entities skipped because something they reference failed."""

    def __init__(self, dependency: LocalKey) -> None:
        super().__init__(f"Dependency failed: {describe_key(dependency)}")
        self.dependency = dependency


class CancelledBeforeDispatchError(ReconciliationError):
    """Recorded on entities left undispatched because the run was stopped."""

    def __init__(self) -> None:
        super().__init__("Reconciliation cancelled before dispatch")


class RemoteCallError(ReconciliationError):
    """Raised when a NetBox call fails; the transport error is chained."""

    def __init__(
        self,
        message: str,
        *,
        kind: EntityKind | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class ServiceError(RuntimeError):
    """Base class for lifecycle failures surfaced to the bootstrap layer."""


class ServiceStateError(ServiceError):
    """Raised when a lifecycle transition is not allowed from the current state."""


class ServiceStartError(ServiceError):
    """Raised when the service cannot start consuming discovery data."""
