"""HTTP client for the NetBox REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from diode_service.adapters.http_resilience import ResilientClient
from diode_service.domain.errors import RemoteCallError
from diode_service.domain.model import EntityKind

from .schema import ListResponse, ObjectRef, StatusResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from diode_service.config import NetboxConfig
    from diode_service.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

ENDPOINTS: Mapping[EntityKind, str] = MappingProxyType(
    {
        EntityKind.SITE: "dcim/sites/",
        EntityKind.MANUFACTURER: "dcim/manufacturers/",
        EntityKind.DEVICE_ROLE: "dcim/device-roles/",
        EntityKind.DEVICE_TYPE: "dcim/device-types/",
        EntityKind.DEVICE: "dcim/devices/",
        EntityKind.INTERFACE: "dcim/interfaces/",
        EntityKind.IP_ADDRESS: "ipam/ip-addresses/",
    }
)
STATUS_ENDPOINT = "status/"
_ERROR_BODY_LIMIT = 200


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class NetboxClient:
    """``InventoryClient`` backed by the NetBox REST API.

    One HTTP connection pool is opened lazily and reused until ``aclose``.
    Every failure (transport, HTTP status, unexpected payload) surfaces as
    ``RemoteCallError`` with the original exception chained.
    """

    config: NetboxConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _http: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> NetboxClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def check(self) -> None:
        response = await self._call(None, "GET", STATUS_ENDPOINT)
        status = _parse(StatusResponse, response, kind=None)
        log.info(
            "Connected to NetBox at %s (version %s)",
            self.config.endpoint,
            status.netbox_version or "unknown",
        )

    async def find_by_key(
        self, kind: EntityKind, key: Mapping[str, str | int]
    ) -> int | None:
        params: dict[str, str | int] = {**key, "limit": 2}
        response = await self._call(kind, "GET", ENDPOINTS[kind], params=params)
        listing = _parse(ListResponse, response, kind=kind)
        if listing.count == 0 or not listing.results:
            return None
        if listing.count > 1:
            raise RemoteCallError(
                f"Ambiguous {kind} lookup {dict(key)}: {listing.count} matches", kind=kind
            )
        return listing.results[0].id

    async def create(self, kind: EntityKind, payload: Mapping[str, object]) -> int:
        response = await self._call(kind, "POST", ENDPOINTS[kind], json=dict(payload))
        created = _parse(ObjectRef, response, kind=kind)
        log.debug("Created %s #%s", kind, created.id)
        return created.id

    async def update(
        self, kind: EntityKind, remote_id: int, payload: Mapping[str, object]
    ) -> None:
        await self._call(kind, "PATCH", f"{ENDPOINTS[kind]}{remote_id}/", json=dict(payload))
        log.debug("Updated %s #%s", kind, remote_id)

    def _client(self) -> ResilientClient:
        if self._http is None:
            self._http = self.client_factory(self.config.resilience)
        return self._http

    async def _call(
        self,
        kind: EntityKind | None,
        method: str,
        url: str,
        *,
        params: Mapping[str, str | int] | None = None,
        json: object = None,
    ) -> httpx.Response:
        client = self._client()
        try:
            if method == "GET":
                response = await client.get(url, params=params)
            elif method == "POST":
                response = await client.post(url, json=json)
            else:
                response = await client.patch(url, json=json)
        except httpx.HTTPError as exc:
            raise RemoteCallError(f"{method} {url} failed: {exc}", kind=kind) from exc

        if response.is_error:
            body = response.text[:_ERROR_BODY_LIMIT]
            raise RemoteCallError(
                f"{method} {url} returned HTTP {response.status_code}: {body}",
                kind=kind,
                status_code=response.status_code,
            )
        return response


def _parse[M: BaseModel](
    model: type[M], response: httpx.Response, *, kind: EntityKind | None
) -> M:
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError) as exc:
        raise RemoteCallError(
            f"Unexpected NetBox payload from {response.request.url}",
            kind=kind,
            status_code=response.status_code,
        ) from exc
