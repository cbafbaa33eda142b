"""Data types shared by the pool components."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class MediaServerNode:
    """One registered streaming backend.

    Records are immutable; the registry swaps in a new record on every
    update so readers never see a half-applied probe result.
    """

    id: str
    url: str
    host: str
    healthy: bool = True
    active_streams: int = 0
    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    last_probe_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary for API responses.

        Returns:
            Dictionary representation
        """
        return {
            "id": self.id,
            "url": self.url,
            "host": self.host,
            "healthy": self.healthy,
            "active_streams": self.active_streams,
            "cpu_percent": self.cpu_percent,
            "memory_percent": self.memory_percent,
            "last_probe_at": self.last_probe_at.isoformat() if self.last_probe_at else None,
        }


class HealthStats(BaseModel):
    """Stats payload returned by a media server's health endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    active_streams: int = Field(0, ge=0, alias="activeStreams")
    cpu_usage: float = Field(0.0, ge=0, le=100, alias="cpuUsage")
    memory_usage: float = Field(0.0, ge=0, le=100, alias="memoryUsage")
    uptime: float = Field(0.0, ge=0, alias="uptime")

    @field_validator("active_streams", "cpu_usage", "memory_usage", "uptime", mode="before")
    @classmethod
    def null_as_zero(cls, value: Any) -> Any:
        """Treat explicit nulls like missing fields."""
        return 0 if value is None else value

    @classmethod
    def from_payload(cls, payload: Any) -> "HealthStats":
        """Parse a decoded JSON body.

        Args:
            payload: Decoded JSON value

        Returns:
            HealthStats instance

        Raises:
            ValueError: If the payload is not a JSON object, has bad field types
                or reports values out of range
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Expected JSON object, got {type(payload).__name__}")
        return cls.model_validate(payload)


class ScalingAction(str, Enum):
    """Scaling recommendation levels."""

    NONE = "none"
    WARNING = "warning"
    SCALE_UP = "scale_up"


@dataclass
class ScalingRecommendation:
    """Recommended scaling action with a human-readable reason."""

    action: ScalingAction
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"action": self.action.value, "message": self.message}


@dataclass
class PoolStats:
    """Aggregate view of the pool at one instant."""

    total_servers: int
    healthy_servers: int
    unhealthy_servers: int
    total_active_streams: int
    average_cpu_usage: float
    average_memory_usage: float
    servers: List[MediaServerNode] = field(default_factory=list)

    @property
    def average_streams_per_server(self) -> float:
        """Average active streams per healthy server (0 when none are healthy)."""
        if self.healthy_servers == 0:
            return 0.0
        return self.total_active_streams / self.healthy_servers

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary for API responses.

        Returns:
            Dictionary representation
        """
        return {
            "total_servers": self.total_servers,
            "healthy_servers": self.healthy_servers,
            "unhealthy_servers": self.unhealthy_servers,
            "total_active_streams": self.total_active_streams,
            "average_cpu_usage": self.average_cpu_usage,
            "average_memory_usage": self.average_memory_usage,
            "servers": [server.to_dict() for server in self.servers],
        }
