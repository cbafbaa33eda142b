"""Server selection policies."""

from typing import Optional

from media_pool.models import MediaServerNode
from media_pool.registry import NodeRegistry


class ServerSelector:
    """Picks the node that should host the next stream.

    Selection never raises for an empty or fully unhealthy pool; it returns
    None and leaves the decision to the caller.
    """

    def __init__(self, registry: NodeRegistry):
        self.registry = registry
        self._cursor = 0

    def select_least_connections(self) -> Optional[MediaServerNode]:
        """Return the healthy node with the fewest active streams.

        Ties go to the node registered first.

        Returns:
            Selected node, or None if no node is healthy
        """
        healthy = self.registry.get_healthy()
        if not healthy:
            return None
        # min() keeps the first of equal keys
        return min(healthy, key=lambda node: node.active_streams)

    def select_round_robin(self) -> Optional[MediaServerNode]:
        """Cycle through the healthy nodes.

        The cursor is taken modulo the healthy count at call time, so when the
        healthy set changes between calls a node may be skipped or repeated.

        Returns:
            Selected node, or None if no node is healthy
        """
        healthy = self.registry.get_healthy()
        if not healthy:
            return None

        selected = healthy[self._cursor % len(healthy)]
        self._cursor += 1
        return selected

    def has_capacity(self, ceiling: int) -> bool:
        """Check whether the least-loaded healthy node is below the ceiling.

        Args:
            ceiling: Maximum concurrent streams per node

        Returns:
            True if a new stream can be placed
        """
        best = self.select_least_connections()
        if best is None:
            return False
        return best.active_streams < ceiling
