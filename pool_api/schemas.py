"""Request and response models for the pool API."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from media_pool import MediaServerNode, ScalingAction


class SelectionPolicy(str, Enum):
    """Server selection policies."""

    LEAST_CONNECTIONS = "least_connections"
    ROUND_ROBIN = "round_robin"


class AddServerRequest(BaseModel):
    """Add server request."""

    url: str = Field(..., description="Media server base URL, e.g. http://10.0.0.5:3001")


class MediaServerOut(BaseModel):
    """Media server as returned by the API."""

    id: str
    url: str
    host: str
    healthy: bool
    active_streams: int
    cpu_percent: float
    memory_percent: float
    last_probe_at: Optional[datetime] = None

    @classmethod
    def from_node(cls, node: MediaServerNode) -> "MediaServerOut":
        return cls(
            id=node.id,
            url=node.url,
            host=node.host,
            healthy=node.healthy,
            active_streams=node.active_streams,
            cpu_percent=node.cpu_percent,
            memory_percent=node.memory_percent,
            last_probe_at=node.last_probe_at,
        )


class ScalingRecommendationOut(BaseModel):
    """Scaling recommendation."""

    action: ScalingAction
    message: str


class PoolStatsResponse(BaseModel):
    """Pool statistics with scaling advice."""

    total_servers: int
    healthy_servers: int
    unhealthy_servers: int
    total_active_streams: int
    average_cpu_usage: float
    average_memory_usage: float
    servers: List[MediaServerOut]
    recommendation: ScalingRecommendationOut
    has_capacity: bool


class AddServerResponse(BaseModel):
    """Add server response."""

    message: str
    server: MediaServerOut


class RemoveServerResponse(BaseModel):
    """Remove server response."""

    message: str
    server_id: str


class SelectionResponse(BaseModel):
    """Server chosen for a new stream."""

    server_id: str
    url: str
    host: str
    active_streams: int
    policy: SelectionPolicy
