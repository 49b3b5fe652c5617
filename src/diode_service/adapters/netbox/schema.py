"""Pydantic models for the slices of NetBox REST responses the client reads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class NetboxBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ObjectRef(NetboxBaseModel):
    id: int


class ListResponse(NetboxBaseModel):
    count: int
    results: list[ObjectRef] = Field(default_factory=list[ObjectRef])


class StatusResponse(NetboxBaseModel):
    netbox_version: str | None = Field(default=None, alias="netbox-version")
    python_version: str | None = Field(default=None, alias="python-version")
