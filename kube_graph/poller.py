"""Timer-driven poll, build and broadcast cycle."""

import asyncio
from enum import Enum

from kube_graph.broadcast import BroadcastChannel, Viewer
from kube_graph.builder import build_graph
from kube_graph.config import GraphConfig
from kube_graph.exceptions import KubeGraphError
from kube_graph.fetcher import ResourceFetcher
from kube_graph.logging_config import get_logger
from kube_graph.models.graph import GraphSnapshot
from kube_graph.namespaces import NamespaceRegistry
from kube_graph.roles import RoleClassifier, get_classifier

logger = get_logger(__name__)


class PollState(str, Enum):
    """Stage of the most recently advanced poll cycle."""

    IDLE = "idle"
    FETCHING_PODS = "fetching_pods"
    FETCHING_NODES = "fetching_nodes"
    BUILDING = "building"
    BROADCASTING = "broadcasting"


class PollLoop:
    """Fetch pods then nodes, build the graph and broadcast it once per interval.

    Cycles are scheduled by wall clock, not chained: a new cycle starts every
    ``polling_interval_secs`` even if the previous one is still waiting on the
    API. Set ``skip_overlapping_ticks`` to skip timer ticks while a cycle is
    in flight.
    """

    def __init__(
        self,
        config: GraphConfig,
        fetcher: ResourceFetcher,
        registry: NamespaceRegistry,
        channel: BroadcastChannel,
        classifier: RoleClassifier | None = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.registry = registry
        self.channel = channel
        self.classifier = classifier or get_classifier(config.role_classifier)
        self.state = PollState.IDLE
        self.last_snapshot: GraphSnapshot | None = None
        self.cycles_started = 0
        self.cycles_completed = 0
        self.cycles_failed = 0
        self._tasks: set[asyncio.Task] = set()
        self._stopped: asyncio.Event | None = None

        channel.on_connect(self._on_viewer_connect)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def poll_once(self) -> GraphSnapshot | None:
        """Run one cycle.

        Returns:
            The broadcast snapshot, or None if the cycle was aborted
        """
        self.cycles_started += 1
        namespace = self.registry.current

        try:
            self.state = PollState.FETCHING_PODS
            pods = await self.fetcher.fetch_pods(namespace)

            self.state = PollState.FETCHING_NODES
            nodes = await self.fetcher.fetch_nodes()

            self.state = PollState.BUILDING
            snapshot = build_graph(nodes, pods, self.config, self.classifier)

            self.state = PollState.BROADCASTING
            delivered = await self.channel.publish_snapshot(snapshot)
        except KubeGraphError as e:
            self.cycles_failed += 1
            await self.report_error(e)
            return None
        except Exception as e:
            self.cycles_failed += 1
            logger.error(f"Unexpected error in poll cycle: {e}", exc_info=True)
            await self.channel.publish_error(
                f"Unable to extract information from k8s response.\nError message: {e}"
            )
            return None
        finally:
            self.state = PollState.IDLE

        self.cycles_completed += 1
        self.last_snapshot = snapshot
        logger.debug(
            f"Cycle for namespace {namespace} delivered {len(snapshot.nodes)} nodes "
            f"to {delivered} viewers"
        )
        return snapshot

    async def report_error(self, error: KubeGraphError) -> None:
        """Log a hard error and push it to every viewer."""
        logger.error(error.format_message())
        await self.channel.publish_error(error.message)

    async def refresh_namespaces(self) -> list[str] | None:
        """One-shot namespace listing, independent of the poll cycle."""
        try:
            names = await self.fetcher.fetch_namespaces()
        except KubeGraphError as e:
            await self.report_error(e)
            return None

        self.registry.update_known(names)
        return names

    def trigger(self) -> asyncio.Task:
        """Start an out-of-band cycle without waiting for it."""
        task = asyncio.create_task(self.poll_once())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _on_viewer_connect(self, viewer: Viewer) -> None:
        logger.debug(f"Immediate poll for new viewer {viewer!r}")
        self.trigger()

    async def run(self) -> None:
        """Start a cycle every polling interval until ``stop`` is called."""
        self._stopped = asyncio.Event()
        interval = self.config.polling_interval_secs
        logger.info(
            f"Polling every {interval}s, namespace {self.registry.current}, "
            f"master detection by {self.classifier.name}"
        )

        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while not self._stopped.is_set():
            if self.config.skip_overlapping_ticks and self._tasks:
                logger.debug(f"Skipping tick, {len(self._tasks)} cycle(s) in flight")
            else:
                self.trigger()

            next_tick += interval
            if next_tick < loop.time():
                logger.debug("Poll loop fell behind, resetting the tick schedule")
                next_tick = loop.time()
            try:
                await asyncio.wait_for(self._stopped.wait(), max(0, next_tick - loop.time()))
            except asyncio.TimeoutError:
                pass

        logger.info("Poll loop stopped")

    async def stop(self) -> None:
        """Stop the timer and cancel in-flight cycles."""
        if self._stopped is not None:
            self._stopped.set()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
