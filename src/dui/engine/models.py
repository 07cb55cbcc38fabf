"""Typed records parsed from engine output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EngineRecord(BaseModel):
    """Immutable record validated from one line of engine JSON output."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Container(EngineRecord):
    id: str = Field(..., alias="ID")
    name: str = Field(..., alias="Names")
    image: str = Field(..., alias="Image")
    status: str = Field(..., alias="Status")
    ports: str = Field(default="", alias="Ports")

    @property
    def short_id(self) -> str:
        return self.id[:12]

    @property
    def running(self) -> bool:
        return self.status.startswith("Up")


class Image(EngineRecord):
    id: str = Field(..., alias="ID")
    repository: str = Field(..., alias="Repository")
    tag: str = Field(..., alias="Tag")
    size: str = Field(..., alias="Size")
    created: str = Field(..., alias="CreatedAt")

    @property
    def short_id(self) -> str:
        return self.id.removeprefix("sha256:")[:12]

    @property
    def reference(self) -> str:
        """``repository:tag`` as accepted by the engine."""
        return f"{self.repository}:{self.tag}"


class ContainerStats(EngineRecord):
    name: str = Field(..., alias="Name")
    cpu_percent: str = Field(..., alias="CPUPerc")
    memory_usage: str = Field(..., alias="MemUsage")
    memory_percent: str = Field(..., alias="MemPerc")
    network_io: str = Field(..., alias="NetIO")
    block_io: str = Field(..., alias="BlockIO")

    @property
    def cpu(self) -> float:
        return _percent(self.cpu_percent)

    @property
    def memory(self) -> float:
        return _percent(self.memory_percent)


class Network(EngineRecord):
    id: str = Field(..., alias="ID")
    name: str = Field(..., alias="Name")
    driver: str = Field(..., alias="Driver")
    scope: str = Field(..., alias="Scope")


class Volume(EngineRecord):
    name: str = Field(..., alias="Name")
    driver: str = Field(..., alias="Driver")
    mountpoint: str = Field(..., alias="Mountpoint")


class ContainerProcess(EngineRecord):
    """One row of ``docker top`` tabular output."""

    pid: str
    user: str
    time: str
    command: str


def _percent(text: str) -> float:
    try:
        return float(text.strip().rstrip("%"))
    except ValueError:
        return 0.0
