"""Periodic health probing of media server nodes."""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import List, Optional, Set, Tuple

import aiohttp

from media_pool.config import PoolConfig
from media_pool.metrics import PoolMetrics
from media_pool.models import HealthStats, MediaServerNode
from media_pool.registry import NodeRegistry

logger = logging.getLogger(__name__)


class ProbeFailure(Exception):
    """A health probe did not return a usable 200 response."""


@dataclass
class ProbeOutcome:
    """Result of probing one node."""

    node_id: str
    success: bool
    checked_at: datetime
    stats: Optional[HealthStats] = None
    error: Optional[str] = None
    duration_seconds: float = 0.0


@dataclass
class ProbeEvent:
    """Log line produced by a node state transition."""

    level: int
    message: str
    details: dict = field(default_factory=dict)


def apply_probe_outcome(
    node: MediaServerNode, outcome: ProbeOutcome, overload_threshold: int
) -> Tuple[MediaServerNode, List[ProbeEvent]]:
    """Compute a node's next state from a probe outcome.

    A failed probe only touches ``healthy`` and ``last_probe_at`` so the last
    known load stays visible.

    Args:
        node: Current node record
        outcome: Probe outcome for this node
        overload_threshold: Stream count above which a warning is emitted

    Returns:
        Tuple of (updated node, events to log)
    """
    events: List[ProbeEvent] = []

    if not outcome.success:
        if node.healthy:
            events.append(
                ProbeEvent(
                    level=logging.ERROR,
                    message=f"{node.id} health check failed: {outcome.error}",
                    details={"server_id": node.id, "url": node.url},
                )
            )
        return replace(node, healthy=False, last_probe_at=outcome.checked_at), events

    stats = outcome.stats or HealthStats()
    updated = replace(
        node,
        healthy=True,
        active_streams=stats.active_streams,
        cpu_percent=stats.cpu_usage,
        memory_percent=stats.memory_usage,
        last_probe_at=outcome.checked_at,
    )

    if not node.healthy:
        events.append(
            ProbeEvent(
                level=logging.WARNING,
                message=f"{node.id} recovered: health check succeeded after failure",
                details={"server_id": node.id, "url": node.url},
            )
        )

    if stats.active_streams > overload_threshold:
        events.append(
            ProbeEvent(
                level=logging.WARNING,
                message=(
                    f"{node.id} is overloaded: {stats.active_streams} streams, "
                    f"{stats.cpu_usage}% CPU"
                ),
                details={"server_id": node.id, "active_streams": stats.active_streams},
            )
        )

    return updated, events


class HealthProber:
    """Probes every registered node on a fixed interval.

    Each firing runs as its own task, so a cycle held up by slow nodes never
    delays the next firing. Every probe is bounded by the configured timeout
    and cancelled when it expires.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        config: Optional[PoolConfig] = None,
        metrics: Optional[PoolMetrics] = None,
    ):
        """Initialize health prober.

        Args:
            registry: Node registry to probe and update
            config: Pool configuration
            metrics: Optional Prometheus exporter
        """
        if config is None:
            from media_pool.config import get_config

            config = get_config()

        self.registry = registry
        self.config = config
        self.metrics = metrics

        self._loop_task: Optional[asyncio.Task] = None
        self._cycle_tasks: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start the periodic probe loop.

        Must be called from a running event loop. Calling it while already
        running is a no-op.
        """
        if self.is_running:
            logger.debug("Health checks already running")
            return

        self._loop_task = asyncio.create_task(self._run())
        logger.info(
            f"Health checks started (interval: {self.config.health_check_interval}s, "
            f"timeout: {self.config.health_check_timeout}s)"
        )

    def stop(self) -> None:
        """Stop the probe loop and cancel in-flight probes. Idempotent."""
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None
            logger.info("Health checks stopped")

        for task in list(self._cycle_tasks):
            task.cancel()

    async def aclose(self) -> None:
        """Stop probing and wait for cancelled tasks to finish."""
        loop_task = self._loop_task
        pending = list(self._cycle_tasks)
        self.stop()

        if loop_task is not None:
            pending.append(loop_task)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.config.health_check_interval)
            cycle = asyncio.create_task(self.check_all_servers())
            self._cycle_tasks.add(cycle)
            cycle.add_done_callback(self._on_cycle_done)

    def _on_cycle_done(self, task: asyncio.Task) -> None:
        self._cycle_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Health check cycle failed: {exc}", exc_info=exc)

    async def check_all_servers(self) -> List[ProbeOutcome]:
        """Probe every node registered at this instant, concurrently.

        Each result is applied as soon as its own probe finishes. Nodes added
        during the cycle wait for the next one; results for nodes removed
        during the cycle are discarded.

        Returns:
            Outcomes in registry order
        """
        nodes = self.registry.get_all()
        if not nodes:
            logger.debug("No media servers registered, skipping health checks")
            return []

        timeout = aiohttp.ClientTimeout(total=self.config.health_check_timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            outcomes = await asyncio.gather(
                *(self._probe_and_apply(session, node) for node in nodes)
            )

        return list(outcomes)

    async def _probe_and_apply(
        self, session: aiohttp.ClientSession, node: MediaServerNode
    ) -> ProbeOutcome:
        outcome = await self.probe_node(session, node)
        self.apply_outcome(outcome)
        if self.metrics:
            self.metrics.update_pool(self.registry.get_all())
        return outcome

    async def probe_node(
        self, session: aiohttp.ClientSession, node: MediaServerNode
    ) -> ProbeOutcome:
        """Probe a single node's health endpoint.

        Never raises for network, timeout, status or payload errors; those
        become a failed outcome.

        Args:
            session: HTTP session for this cycle
            node: Node to probe

        Returns:
            ProbeOutcome for the node
        """
        started = time.monotonic()
        try:
            stats = await asyncio.wait_for(
                self._fetch_stats(session, node),
                timeout=self.config.health_check_timeout,
            )
        except asyncio.TimeoutError:
            error = f"timeout after {self.config.health_check_timeout}s"
        except (ProbeFailure, aiohttp.ClientError, ValueError) as e:
            error = str(e) or e.__class__.__name__
        else:
            return ProbeOutcome(
                node_id=node.id,
                success=True,
                checked_at=datetime.now(),
                stats=stats,
                duration_seconds=time.monotonic() - started,
            )

        return ProbeOutcome(
            node_id=node.id,
            success=False,
            checked_at=datetime.now(),
            error=error,
            duration_seconds=time.monotonic() - started,
        )

    async def _fetch_stats(
        self, session: aiohttp.ClientSession, node: MediaServerNode
    ) -> HealthStats:
        url = f"{node.url}{self.config.health_check_path}"
        async with session.get(url) as response:
            if response.status != 200:
                raise ProbeFailure(f"HTTP {response.status}")
            payload = await response.json(content_type=None)
        return HealthStats.from_payload(payload)

    def apply_outcome(self, outcome: ProbeOutcome) -> Optional[MediaServerNode]:
        """Apply a probe outcome to the registry and log its events.

        Args:
            outcome: Probe outcome

        Returns:
            The updated node, or None if the node was removed meanwhile
        """
        current = self.registry.get(outcome.node_id)
        if current is None:
            logger.debug(f"Discarding probe result for removed server {outcome.node_id}")
            return None

        updated, events = apply_probe_outcome(current, outcome, self.config.overload_threshold)
        if not self.registry.replace(updated):
            return None

        for event in events:
            logger.log(event.level, event.message, extra=event.details)

        if self.metrics:
            self.metrics.record_probe(outcome.success, outcome.duration_seconds)
            self.metrics.update_server(updated)

        return updated
