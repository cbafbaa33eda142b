"""Media server pool: registry, probing, selection and scaling advice."""

import logging
from typing import Iterable, List, Optional

from media_pool.capacity import CapacityAdvisor, compute_pool_stats
from media_pool.config import PoolConfig
from media_pool.health_checks import HealthProber
from media_pool.metrics import PoolMetrics
from media_pool.models import MediaServerNode, PoolStats, ScalingRecommendation
from media_pool.registry import NodeRegistry
from media_pool.selector import ServerSelector

logger = logging.getLogger(__name__)


class MediaServerPool:
    """Pool of streaming media servers for horizontal scaling.

    Features:
    - Static registration at startup plus hot add/remove
    - Periodic concurrent health checks with per-probe timeouts
    - Least-connections and round-robin server selection
    - Capacity check and scaling recommendations

    The pool is constructed and owned by the application's composition root,
    which also starts and stops its health checks.

    Example:
        >>> pool = MediaServerPool.from_config(PoolConfig.from_env())
        >>> pool.start_health_checks()
        >>> server = pool.select_server()
        >>> if server is None:
        ...     raise RuntimeError("No media server capacity")
    """

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        metrics: Optional[PoolMetrics] = None,
    ):
        """Initialize an empty pool.

        Args:
            config: Pool configuration
            metrics: Optional Prometheus exporter
        """
        if config is None:
            from media_pool.config import get_config

            config = get_config()

        self.config = config
        self.metrics = metrics
        self.registry = NodeRegistry()
        self.selector = ServerSelector(self.registry)
        self.advisor = CapacityAdvisor(config)
        self.prober = HealthProber(self.registry, config, metrics)

    @classmethod
    def from_config(
        cls, config: PoolConfig, metrics: Optional[PoolMetrics] = None
    ) -> "MediaServerPool":
        """Create a pool and register the configured servers.

        Args:
            config: Pool configuration
            metrics: Optional Prometheus exporter

        Returns:
            MediaServerPool instance

        Raises:
            InvalidNodeURLError: If a configured URL is malformed
        """
        pool = cls(config, metrics)
        pool.initialize(config.media_servers)
        return pool

    def initialize(self, urls: Iterable[str]) -> List[str]:
        """Register the startup server list.

        An empty list is valid; the pool simply has no capacity until servers
        are added.

        Args:
            urls: Server base URLs

        Returns:
            Assigned server ids
        """
        server_ids = self.registry.initialize(urls)
        if not server_ids:
            logger.warning(
                "No media servers configured. "
                "Pool starting empty; add servers via the management API."
            )
        else:
            logger.info(f"Media server pool initialized with {len(server_ids)} server(s)")
        self._refresh_metrics()
        return server_ids

    def add_server(self, url: str) -> str:
        """Add a server to the pool without a restart.

        Args:
            url: Server base URL

        Returns:
            New server id

        Raises:
            InvalidNodeURLError: If the URL is malformed
        """
        server_id = self.registry.add(url)
        logger.info(f"Added media server {server_id} ({url})")
        self._refresh_metrics()
        return server_id

    def remove_server(self, server_id: str) -> bool:
        """Remove a server from the pool.

        Args:
            server_id: Server id

        Returns:
            True if the server was removed
        """
        removed = self.registry.remove(server_id)
        if removed:
            logger.info(f"Removed media server {server_id}")
            if self.metrics:
                self.metrics.remove_server(server_id)
            self._refresh_metrics()
        return removed

    def get_server(self, server_id: str) -> Optional[MediaServerNode]:
        return self.registry.get(server_id)

    def get_all_servers(self) -> List[MediaServerNode]:
        return self.registry.get_all()

    def get_healthy_servers(self) -> List[MediaServerNode]:
        return self.registry.get_healthy()

    def select_server(self) -> Optional[MediaServerNode]:
        """Select the best server for a new stream (least connections).

        Returns:
            Selected server, or None when no healthy server exists
        """
        selected = self.selector.select_least_connections()
        if selected is None:
            logger.error("No healthy media servers available!")
        else:
            logger.debug(f"Selected {selected.id} ({selected.active_streams} active streams)")
        if self.metrics:
            self.metrics.record_selection("least_connections", selected is not None)
        return selected

    def select_server_round_robin(self) -> Optional[MediaServerNode]:
        """Select a server by cycling through healthy servers.

        Returns:
            Selected server, or None when no healthy server exists
        """
        selected = self.selector.select_round_robin()
        if selected is None:
            logger.error("No healthy media servers available for round-robin selection!")
        if self.metrics:
            self.metrics.record_selection("round_robin", selected is not None)
        return selected

    def has_capacity(self) -> bool:
        """Check if the pool can take another stream."""
        return self.selector.has_capacity(self.config.capacity_ceiling)

    def get_pool_stats(self) -> PoolStats:
        return compute_pool_stats(self.registry.get_all())

    def get_scaling_recommendation(self) -> ScalingRecommendation:
        """Get recommended scaling action based on current load."""
        return self.advisor.recommend(self.get_pool_stats())

    @property
    def is_running(self) -> bool:
        return self.prober.is_running

    def start_health_checks(self) -> None:
        """Start periodic health checks (requires a running event loop)."""
        self.prober.start()

    def stop_health_checks(self) -> None:
        """Stop periodic health checks. Safe to call repeatedly."""
        self.prober.stop()

    async def aclose(self) -> None:
        """Stop health checks and wait for in-flight probes to be cancelled."""
        await self.prober.aclose()

    def _refresh_metrics(self) -> None:
        if self.metrics:
            self.metrics.update_pool(self.registry.get_all())
