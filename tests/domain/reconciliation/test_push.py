from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from diode_service.domain.cancellation import CancellationToken
from diode_service.domain.errors import (
    CancelledBeforeDispatchError,
    DependencyFailedError,
    RemoteCallError,
)
from diode_service.domain.model import EntityKind, UpsertAction
from diode_service.domain.reconciliation import (
    Pusher,
    ResolutionCache,
    normalize_fact,
    resolve_batch,
)
from tests.support.discovery import make_device_type, make_site, sample_batch
from tests.support.inventory import InMemoryInventory

if TYPE_CHECKING:
    from collections.abc import Sequence

    from diode_service.domain.reconciliation import ReconciliationPlan


def _plan(facts: Sequence[object], cache: ResolutionCache) -> ReconciliationPlan:
    return resolve_batch([normalize_fact(fact) for fact in facts], cache=cache)


def test_pusher_validates_limits() -> None:
    inventory = InMemoryInventory()

    with pytest.raises(ValueError, match="max_concurrency"):
        Pusher(client=inventory, max_concurrency=0)
    with pytest.raises(ValueError, match="max_attempts"):
        Pusher(client=inventory, max_attempts=0)


def test_upsert_creates_then_updates() -> None:
    inventory = InMemoryInventory()
    pusher = Pusher(client=inventory)
    site = normalize_fact(make_site())
    cache = ResolutionCache()

    first_id, first_action = asyncio.run(pusher.upsert(site, cache=cache))
    second_id, second_action = asyncio.run(pusher.upsert(site, cache=cache))

    assert first_action is UpsertAction.CREATED
    assert second_action is UpsertAction.UPDATED
    assert first_id == second_id
    assert inventory.count(EntityKind.SITE) == 1


def test_push_resolves_ids_into_cache() -> None:
    inventory = InMemoryInventory()
    cache = ResolutionCache()

    report = asyncio.run(Pusher(client=inventory).push(_plan(sample_batch(), cache), cache=cache))

    assert report.created == 7
    assert len(cache) == 7
    device = inventory.only(EntityKind.DEVICE)
    assert device["site"] == cache.get(("site", "hq"))
    assert device["role"] == cache.get(("device_role", "core-switch"))
    assert device["device_type"] == cache.get(("device_type", "c9300-48p"))
    address = inventory.only(EntityKind.IP_ADDRESS)
    assert address["assigned_object_id"] == cache.get(("interface", "core-sw-01", "Gi1/0/1"))


def test_remote_failure_is_retried_once() -> None:
    inventory = InMemoryInventory()
    inventory.fail("create", EntityKind.SITE, times=1)
    cache = ResolutionCache()

    report = asyncio.run(Pusher(client=inventory).push(_plan([make_site()], cache), cache=cache))

    assert report.created == 1
    assert report.failed == 0
    assert inventory.calls_for("create", EntityKind.SITE) == 2


def test_remote_failure_after_retry_fails_and_skips_dependents() -> None:
    inventory = InMemoryInventory()
    inventory.fail("create", EntityKind.MANUFACTURER, times=2)
    cache = ResolutionCache()

    report = asyncio.run(
        Pusher(client=inventory).push(_plan([make_device_type()], cache), cache=cache)
    )

    manufacturer = report.outcome_for(("manufacturer", "cisco"))
    device_type = report.outcome_for(("device_type", "c9300-48p"))
    assert manufacturer is not None
    assert manufacturer.action is UpsertAction.FAILED
    assert isinstance(manufacturer.error, RemoteCallError)
    assert device_type is not None
    assert device_type.action is UpsertAction.SKIPPED
    assert isinstance(device_type.error, DependencyFailedError)
    assert inventory.calls_for("create", EntityKind.MANUFACTURER) == 2
    assert inventory.count(EntityKind.DEVICE_TYPE) == 0
    assert ("manufacturer", "cisco") not in cache


def test_stage_concurrency_is_bounded() -> None:
    inventory = InMemoryInventory(delay=0.01)
    cache = ResolutionCache()
    facts: list[object] = [make_site(f"Site {index}") for index in range(10)]

    report = asyncio.run(
        Pusher(client=inventory, max_concurrency=3).push(_plan(facts, cache), cache=cache)
    )

    assert report.created == 10
    assert 1 < inventory.max_in_flight <= 3


def test_cancelled_token_dispatches_nothing() -> None:
    inventory = InMemoryInventory()
    cache = ResolutionCache()
    token = CancellationToken()
    token.cancel()

    report = asyncio.run(
        Pusher(client=inventory).push(_plan(sample_batch(), cache), cache=cache, token=token)
    )

    assert report.cancelled is True
    assert report.skipped == 7
    assert all(isinstance(outcome.error, CancelledBeforeDispatchError) for outcome in report.outcomes)
    assert inventory.calls == []


def test_cancellation_mid_stage_lets_in_flight_calls_finish() -> None:
    token = CancellationToken()

    def cancel_on_first_create(operation: str, _kind: EntityKind) -> None:
        if operation == "create":
            token.cancel()

    inventory = InMemoryInventory(delay=0.01, on_call=cancel_on_first_create)
    cache = ResolutionCache()
    facts: list[object] = [make_site(f"Site {index}") for index in range(5)]
    facts.append(make_device_type())

    report = asyncio.run(
        Pusher(client=inventory, max_concurrency=1).push(
            _plan(facts, cache), cache=cache, token=token
        )
    )

    assert report.cancelled is True
    assert report.created == 1
    assert report.skipped == 6
    assert inventory.count() == 1
    assert len(cache) == 1
    device_type = report.outcome_for(("device_type", "c9300-48p"))
    assert device_type is not None
    assert isinstance(device_type.error, CancelledBeforeDispatchError)


def test_unexpected_error_fails_one_entity_and_spares_its_siblings() -> None:
    inventory = InMemoryInventory(delay=0.01)
    inventory.fail(
        "create",
        EntityKind.SITE,
        when=lambda payload: payload.get("name") == "Site 0",
        error=lambda: KeyError("slug"),
    )
    cache = ResolutionCache()
    facts: list[object] = [make_site(f"Site {index}") for index in range(4)]

    report = asyncio.run(
        Pusher(client=inventory, max_concurrency=4).push(_plan(facts, cache), cache=cache)
    )

    assert report.created == 3
    assert report.failed == 1
    broken = report.outcome_for(("site", "site-0"))
    assert broken is not None
    assert broken.action is UpsertAction.FAILED
    assert isinstance(broken.error, RemoteCallError)
    assert isinstance(broken.error.__cause__, KeyError)
    assert inventory.count(EntityKind.SITE) == 3
    assert inventory.calls_for("create", EntityKind.SITE) == 4
    assert ("site", "site-0") not in cache


def test_cancellation_prevents_retry_of_failed_call() -> None:
    token = CancellationToken()

    def cancel_on_create(operation: str, _kind: EntityKind) -> None:
        if operation == "create":
            token.cancel()

    inventory = InMemoryInventory(on_call=cancel_on_create)
    inventory.fail("create", EntityKind.SITE, times=1)
    cache = ResolutionCache()

    report = asyncio.run(
        Pusher(client=inventory).push(_plan([make_site()], cache), cache=cache, token=token)
    )

    assert inventory.calls_for("create", EntityKind.SITE) == 1
    assert report.cancelled is True
    assert report.skipped == 1
    (outcome,) = report.outcomes
    assert outcome.action is UpsertAction.SKIPPED
    assert isinstance(outcome.error, CancelledBeforeDispatchError)
    assert inventory.count(EntityKind.SITE) == 0
