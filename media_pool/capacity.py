"""Pool-wide aggregates and scaling recommendations."""

from typing import Iterable, Optional

from media_pool.config import PoolConfig
from media_pool.models import MediaServerNode, PoolStats, ScalingAction, ScalingRecommendation


def compute_pool_stats(nodes: Iterable[MediaServerNode]) -> PoolStats:
    """Aggregate load across the pool.

    Stream totals and averages only count healthy nodes; the last-known load
    of an unhealthy node is not live capacity.

    Args:
        nodes: All registered nodes

    Returns:
        PoolStats snapshot
    """
    servers = list(nodes)
    healthy = [node for node in servers if node.healthy]
    count = len(healthy)

    return PoolStats(
        total_servers=len(servers),
        healthy_servers=count,
        unhealthy_servers=len(servers) - count,
        total_active_streams=sum(node.active_streams for node in healthy),
        average_cpu_usage=sum(node.cpu_percent for node in healthy) / count if count else 0.0,
        average_memory_usage=(
            sum(node.memory_percent for node in healthy) / count if count else 0.0
        ),
        servers=servers,
    )


class CapacityAdvisor:
    """Turns pool aggregates into a scaling recommendation.

    Stream and CPU thresholds are checked independently; either one alone is
    enough to trigger a level.
    """

    def __init__(self, config: Optional[PoolConfig] = None):
        self.config = config or PoolConfig()

    def recommend(self, stats: PoolStats) -> ScalingRecommendation:
        """Recommend a scaling action for the given stats.

        Args:
            stats: Current pool stats

        Returns:
            ScalingRecommendation
        """
        return self.recommend_for(
            healthy_servers=stats.healthy_servers,
            avg_streams=stats.average_streams_per_server,
            avg_cpu=stats.average_cpu_usage,
        )

    def recommend_for(
        self, healthy_servers: int, avg_streams: float, avg_cpu: float
    ) -> ScalingRecommendation:
        """Recommend a scaling action from raw averages.

        Args:
            healthy_servers: Number of healthy nodes
            avg_streams: Average active streams per healthy node
            avg_cpu: Average CPU percentage over healthy nodes

        Returns:
            ScalingRecommendation
        """
        if healthy_servers == 0:
            return ScalingRecommendation(
                action=ScalingAction.SCALE_UP,
                message="CRITICAL: No healthy servers available!",
            )

        load = f"{avg_streams:.1f} streams/server, {avg_cpu:.1f}% CPU"

        if (
            avg_streams > self.config.scale_up_streams_per_server
            or avg_cpu > self.config.scale_up_cpu_percent
        ):
            return ScalingRecommendation(
                action=ScalingAction.SCALE_UP,
                message=f"HIGH LOAD: Add media server ({load})",
            )

        if (
            avg_streams > self.config.warning_streams_per_server
            or avg_cpu > self.config.warning_cpu_percent
        ):
            return ScalingRecommendation(
                action=ScalingAction.WARNING,
                message=f"MODERATE LOAD: Consider adding server soon ({load})",
            )

        return ScalingRecommendation(
            action=ScalingAction.NONE,
            message=f"Capacity OK ({load})",
        )
