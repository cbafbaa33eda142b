"""Tests for Prometheus pool metrics."""

from prometheus_client import CollectorRegistry

from media_pool.metrics import PoolMetrics
from media_pool.models import MediaServerNode


def make_node(index, healthy=True, streams=0):
    return MediaServerNode(
        id=f"media-server-{index}",
        url=f"http://10.0.0.{index}:3001",
        host=f"10.0.0.{index}",
        healthy=healthy,
        active_streams=streams,
        cpu_percent=12.5,
        memory_percent=40.0,
    )


class TestPoolMetrics:
    """Test cases for PoolMetrics."""

    def test_initialization(self, metrics):
        assert metrics.probes_total is not None
        assert metrics.selections_total is not None
        assert metrics.servers is not None
        assert metrics.probe_duration_seconds is not None

    def test_separate_registries_do_not_collide(self):
        PoolMetrics(registry=CollectorRegistry())
        PoolMetrics(registry=CollectorRegistry())

    def test_record_probe(self, metrics):
        metrics.record_probe(True, 0.12)
        metrics.record_probe(False, 5.0)
        metrics.record_probe(False, 5.0)

        assert metrics.probes_total.labels(result="success")._value.get() == 1
        assert metrics.probes_total.labels(result="failure")._value.get() == 2

    def test_record_selection(self, metrics):
        metrics.record_selection("least_connections", True)
        metrics.record_selection("least_connections", False)

        assert (
            metrics.selections_total.labels(
                policy="least_connections", result="no_capacity"
            )._value.get()
            == 1
        )

    def test_update_pool(self, metrics):
        metrics.update_pool([make_node(1, streams=4), make_node(2, streams=3), make_node(3, False, 9)])

        summary = metrics.get_metrics_summary()
        assert summary["healthy_servers"] == 2
        assert summary["unhealthy_servers"] == 1
        assert summary["active_streams"] == 7

    def test_update_and_remove_server(self, metrics):
        metrics.update_server(make_node(1, streams=6))

        assert metrics.server_active_streams.labels(server_id="media-server-1")._value.get() == 6
        assert metrics.server_healthy.labels(server_id="media-server-1")._value.get() == 1

        metrics.remove_server("media-server-1")
        output = metrics.get_metrics().decode()

        assert 'server_id="media-server-1"' not in output

    def test_remove_unknown_server(self, metrics):
        metrics.remove_server("media-server-99")

    def test_get_metrics(self, metrics):
        metrics.record_probe(True, 0.1)

        output = metrics.get_metrics()

        assert isinstance(output, bytes)
        assert b"media_pool_probes_total" in output
        assert b"media_pool_probe_duration_seconds" in output
