"""Tests for server selection."""

from dataclasses import replace

import pytest

from media_pool.registry import NodeRegistry
from media_pool.selector import ServerSelector


def set_node(registry, node_id, **changes):
    registry.replace(replace(registry.get(node_id), **changes))


class TestServerSelector:
    """Test cases for ServerSelector."""

    @pytest.fixture
    def registry(self):
        registry = NodeRegistry()
        registry.initialize(["http://a", "http://b", "http://c"])
        return registry

    @pytest.fixture
    def selector(self, registry):
        return ServerSelector(registry)

    def test_least_connections_picks_lowest(self, registry, selector):
        set_node(registry, "media-server-1", active_streams=8)
        set_node(registry, "media-server-2", active_streams=3)
        set_node(registry, "media-server-3", active_streams=5)

        assert selector.select_least_connections().id == "media-server-2"

    def test_least_connections_tie_break_is_registration_order(self, registry, selector):
        """Test equal loads always resolve to the first registered node."""
        set_node(registry, "media-server-1", active_streams=4)
        set_node(registry, "media-server-2", active_streams=2)
        set_node(registry, "media-server-3", active_streams=2)

        for _ in range(5):
            assert selector.select_least_connections().id == "media-server-2"

    def test_least_connections_skips_unhealthy(self, registry, selector):
        set_node(registry, "media-server-1", healthy=False, active_streams=0)
        set_node(registry, "media-server-2", active_streams=9)
        set_node(registry, "media-server-3", active_streams=7)

        assert selector.select_least_connections().id == "media-server-3"

    def test_no_healthy_nodes(self, registry, selector):
        for node in registry.get_all():
            set_node(registry, node.id, healthy=False)

        assert selector.select_least_connections() is None
        assert selector.select_round_robin() is None
        assert selector.has_capacity(25) is False

    def test_empty_pool(self):
        selector = ServerSelector(NodeRegistry())

        assert selector.select_least_connections() is None
        assert selector.select_round_robin() is None
        assert selector.has_capacity(25) is False

    def test_round_robin_visits_each_node_once(self, selector):
        """Test three calls over three healthy nodes cover all, in order."""
        picks = [selector.select_round_robin().id for _ in range(3)]

        assert picks == ["media-server-1", "media-server-2", "media-server-3"]

    def test_round_robin_wraps(self, selector):
        picks = [selector.select_round_robin().id for _ in range(4)]

        assert picks[3] == "media-server-1"

    def test_round_robin_cursor_uses_current_healthy_count(self, registry, selector):
        """Test the cursor is applied modulo the healthy set at call time."""
        assert selector.select_round_robin().id == "media-server-1"
        assert selector.select_round_robin().id == "media-server-2"

        set_node(registry, "media-server-3", healthy=False)

        # cursor 2 % 2 healthy nodes -> first healthy node again
        assert selector.select_round_robin().id == "media-server-1"

    def test_round_robin_cursor_unchanged_without_healthy_nodes(self, registry, selector):
        selector.select_round_robin()
        for node in registry.get_all():
            set_node(registry, node.id, healthy=False)
        assert selector.select_round_robin() is None

        for node in registry.get_all():
            set_node(registry, node.id, healthy=True)

        assert selector.select_round_robin().id == "media-server-2"

    def test_has_capacity_below_ceiling(self, registry, selector):
        set_node(registry, "media-server-1", active_streams=24)
        set_node(registry, "media-server-2", active_streams=30)
        set_node(registry, "media-server-3", active_streams=26)

        assert selector.has_capacity(25) is True

    def test_has_capacity_at_ceiling(self, registry, selector):
        for node in registry.get_all():
            set_node(registry, node.id, active_streams=25)

        assert selector.has_capacity(25) is False
