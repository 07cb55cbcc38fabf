"""Engine boundary: subprocess client and readiness probe."""

from .client import EngineClient, EngineResult
from .models import Container, ContainerProcess, ContainerStats, Image, Network, Volume
from .readiness import ReadinessProber, StartStrategy, platform_start_strategies

__all__ = [
    "Container",
    "ContainerProcess",
    "ContainerStats",
    "EngineClient",
    "EngineResult",
    "Image",
    "Network",
    "ReadinessProber",
    "StartStrategy",
    "Volume",
    "platform_start_strategies",
]
