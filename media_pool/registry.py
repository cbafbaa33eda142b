"""In-memory registry of media server nodes."""

import logging
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

from media_pool.models import MediaServerNode

logger = logging.getLogger(__name__)


class InvalidNodeURLError(ValueError):
    """Raised when a node URL cannot be registered."""


def parse_node_url(url: str) -> tuple[str, str]:
    """Normalize a node base URL and extract its hostname.

    Args:
        url: Base URL such as ``http://10.0.0.5:3001``

    Returns:
        Tuple of (normalized url, hostname)

    Raises:
        InvalidNodeURLError: If the URL is not an absolute http(s) URL
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidNodeURLError("Server URL is required")

    normalized = url.strip().rstrip("/")
    try:
        parsed = urlparse(normalized)
        hostname = parsed.hostname
        # Raises for non-numeric or out-of-range ports
        parsed.port
    except ValueError as e:
        raise InvalidNodeURLError(f"Invalid URL format: {url} ({e})") from e

    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidNodeURLError(f"Invalid URL format: {url}")

    return normalized, hostname


class NodeRegistry:
    """Owns the mapping from node id to MediaServerNode.

    Insertion order is registration order, which selection relies on for
    deterministic tie-breaking. Ids come from a counter that only moves
    forward, so an id is never handed out twice.
    """

    ID_PREFIX = "media-server-"

    def __init__(self):
        self._nodes: Dict[str, MediaServerNode] = {}
        self._next_index = 1

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def initialize(self, urls: Iterable[str]) -> List[str]:
        """Register the startup node list.

        All URLs are validated before any node is registered.

        Args:
            urls: Base URLs in registration order

        Returns:
            Ids assigned to the registered nodes

        Raises:
            InvalidNodeURLError: If any URL is malformed
        """
        parsed = [parse_node_url(url) for url in urls]
        return [self._register(url, host) for url, host in parsed]

    def add(self, url: str) -> str:
        """Hot-add a node.

        Args:
            url: Node base URL

        Returns:
            The new node id

        Raises:
            InvalidNodeURLError: If the URL is malformed
        """
        normalized, host = parse_node_url(url)
        return self._register(normalized, host)

    def remove(self, node_id: str) -> bool:
        """Remove a node.

        Args:
            node_id: Node id

        Returns:
            True if the node was registered and has been removed
        """
        return self._nodes.pop(node_id, None) is not None

    def get(self, node_id: str) -> Optional[MediaServerNode]:
        return self._nodes.get(node_id)

    def get_all(self) -> List[MediaServerNode]:
        return list(self._nodes.values())

    def get_healthy(self) -> List[MediaServerNode]:
        return [node for node in self._nodes.values() if node.healthy]

    def replace(self, node: MediaServerNode) -> bool:
        """Swap in an updated record for an existing node.

        Args:
            node: Updated record

        Returns:
            False (and no change) if the node is no longer registered
        """
        if node.id not in self._nodes:
            return False
        self._nodes[node.id] = node
        return True

    def _register(self, url: str, host: str) -> str:
        node_id = f"{self.ID_PREFIX}{self._next_index}"
        self._next_index += 1
        self._nodes[node_id] = MediaServerNode(id=node_id, url=url, host=host)
        logger.debug(f"Registered {node_id} at {url}")
        return node_id
