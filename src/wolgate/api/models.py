"""Pydantic request models for the wolgate API."""

from typing import Optional

from pydantic import BaseModel, Field


class WakeRequest(BaseModel):
    mac: Optional[str] = None
    interface: Optional[str] = None


class WakeAllRequest(BaseModel):
    mac: Optional[str] = None


class InterfaceSummary(BaseModel):
    name: str
    ip: str
    broadcast: str


class HealthInterfaces(BaseModel):
    local: Optional[InterfaceSummary]
    docker: Optional[InterfaceSummary]


class HealthResponse(BaseModel):
    status: str = "ok"
    auto_detect: bool = Field(serialization_alias="autoDetect")
    interfaces: HealthInterfaces
    all_interfaces: int = Field(serialization_alias="allInterfaces")
