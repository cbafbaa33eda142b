"""Media Server Pool module.

Keeps a registry of streaming media servers, probes their health endpoints,
and answers which server should host the next stream and whether the pool
needs to scale.

Main Components:
    - MediaServerPool: Facade owned by the application's composition root
    - HealthProber: Periodic concurrent health checks
    - ServerSelector: Least-connections and round-robin selection
    - CapacityAdvisor: Scaling recommendations
    - PoolMetrics: Prometheus exporter

Example:
    >>> from media_pool import MediaServerPool, PoolConfig
    >>> pool = MediaServerPool.from_config(PoolConfig(media_servers=["http://10.0.0.5:3001"]))
    >>> pool.select_server().id
    'media-server-1'
"""

from media_pool.capacity import CapacityAdvisor, compute_pool_stats
from media_pool.config import PoolConfig, get_config
from media_pool.health_checks import HealthProber, ProbeFailure
from media_pool.metrics import PoolMetrics
from media_pool.models import (
    HealthStats,
    MediaServerNode,
    PoolStats,
    ScalingAction,
    ScalingRecommendation,
)
from media_pool.pool import MediaServerPool
from media_pool.registry import InvalidNodeURLError, NodeRegistry
from media_pool.selector import ServerSelector

__all__ = [
    "MediaServerPool",
    "PoolConfig",
    "get_config",
    "NodeRegistry",
    "InvalidNodeURLError",
    "HealthProber",
    "ProbeFailure",
    "ServerSelector",
    "CapacityAdvisor",
    "compute_pool_stats",
    "PoolMetrics",
    "MediaServerNode",
    "HealthStats",
    "PoolStats",
    "ScalingAction",
    "ScalingRecommendation",
]

__version__ = "1.0.0"
