"""Prometheus metrics for the media server pool."""

import logging
from typing import Dict, Iterable, Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from media_pool.models import MediaServerNode

logger = logging.getLogger(__name__)


class PoolMetrics:
    """Prometheus exporter for pool health and load.

    Provides gauges for pool and per-server load, counters for probe and
    selection outcomes, and a histogram of probe latency.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize Prometheus metrics.

        Args:
            registry: Collector registry (defaults to the global registry)
        """
        self.registry = registry if registry is not None else REGISTRY

        # Counters
        self.probes_total = Counter(
            "media_pool_probes_total",
            "Total number of health probes",
            ["result"],  # success, failure
            registry=self.registry,
        )

        self.selections_total = Counter(
            "media_pool_selections_total",
            "Total number of server selections",
            ["policy", "result"],  # result: selected, no_capacity
            registry=self.registry,
        )

        # Gauges
        self.servers = Gauge(
            "media_pool_servers",
            "Number of registered servers by health",
            ["state"],  # healthy, unhealthy
            registry=self.registry,
        )

        self.active_streams = Gauge(
            "media_pool_active_streams",
            "Active streams across healthy servers",
            registry=self.registry,
        )

        self.server_healthy = Gauge(
            "media_pool_server_healthy",
            "Server health (1=healthy, 0=unhealthy)",
            ["server_id"],
            registry=self.registry,
        )

        self.server_active_streams = Gauge(
            "media_pool_server_active_streams",
            "Last known active streams per server",
            ["server_id"],
            registry=self.registry,
        )

        self.server_cpu_percent = Gauge(
            "media_pool_server_cpu_percent",
            "Last known CPU usage per server",
            ["server_id"],
            registry=self.registry,
        )

        self.server_memory_percent = Gauge(
            "media_pool_server_memory_percent",
            "Last known memory usage per server",
            ["server_id"],
            registry=self.registry,
        )

        # Histograms
        self.probe_duration_seconds = Histogram(
            "media_pool_probe_duration_seconds",
            "Health probe duration in seconds",
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
            registry=self.registry,
        )

        logger.info("Pool metrics initialized")

    def record_probe(self, success: bool, duration_seconds: float) -> None:
        """Record a probe result.

        Args:
            success: Whether the probe succeeded
            duration_seconds: Probe duration
        """
        self.probes_total.labels(result="success" if success else "failure").inc()
        self.probe_duration_seconds.observe(duration_seconds)

    def record_selection(self, policy: str, selected: bool) -> None:
        """Record a selection attempt.

        Args:
            policy: Selection policy name
            selected: False when no server could be selected
        """
        self.selections_total.labels(
            policy=policy, result="selected" if selected else "no_capacity"
        ).inc()

    def update_server(self, node: MediaServerNode) -> None:
        """Update per-server gauges from a node record."""
        self.server_healthy.labels(server_id=node.id).set(1 if node.healthy else 0)
        self.server_active_streams.labels(server_id=node.id).set(node.active_streams)
        self.server_cpu_percent.labels(server_id=node.id).set(node.cpu_percent)
        self.server_memory_percent.labels(server_id=node.id).set(node.memory_percent)

    def remove_server(self, server_id: str) -> None:
        """Drop per-server series for a removed node."""
        for gauge in (
            self.server_healthy,
            self.server_active_streams,
            self.server_cpu_percent,
            self.server_memory_percent,
        ):
            try:
                gauge.remove(server_id)
            except KeyError:
                # Never probed or already removed
                pass

    def update_pool(self, nodes: Iterable[MediaServerNode]) -> None:
        """Update pool-wide gauges.

        Args:
            nodes: All registered nodes
        """
        servers = list(nodes)
        healthy = [node for node in servers if node.healthy]
        self.servers.labels(state="healthy").set(len(healthy))
        self.servers.labels(state="unhealthy").set(len(servers) - len(healthy))
        self.active_streams.set(sum(node.active_streams for node in healthy))

    def get_metrics(self) -> bytes:
        """Generate Prometheus metrics output.

        Returns:
            Prometheus metrics in text format
        """
        return generate_latest(self.registry)

    def get_metrics_summary(self) -> Dict:
        """Get current pool metrics as a dictionary.

        Returns:
            Dictionary with current metric values
        """
        return {
            "healthy_servers": self.servers.labels(state="healthy")._value.get(),
            "unhealthy_servers": self.servers.labels(state="unhealthy")._value.get(),
            "active_streams": self.active_streams._value.get(),
            "probes": {
                "success": self.probes_total.labels(result="success")._value.get(),
                "failure": self.probes_total.labels(result="failure")._value.get(),
            },
        }
