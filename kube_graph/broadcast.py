"""Fan-out of graph snapshots and error notices to connected viewers."""

import asyncio
from collections.abc import Callable
from typing import Any, Protocol

from kube_graph.logging_config import get_logger
from kube_graph.models.graph import GraphSnapshot
from kube_graph.namespaces import NamespaceRegistry

logger = get_logger(__name__)

# Server -> viewer
EVENT_UPDATE = "update"
EVENT_ERROR = "error"
# Viewer -> server
EVENT_CHANGE_NAMESPACE = "changeNamespace"


class Viewer(Protocol):
    """A connected client of the broadcast channel."""

    async def send(self, event: str, data: Any) -> None: ...


class QueueViewer:
    """In-process viewer that buffers received events in an asyncio queue."""

    def __init__(self, name: str = "queue", maxsize: int = 0):
        self.name = name
        self.queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue(maxsize=maxsize)

    async def send(self, event: str, data: Any) -> None:
        self.queue.put_nowait((event, data))

    async def receive(self, timeout: float | None = None) -> tuple[str, Any]:
        return await asyncio.wait_for(self.queue.get(), timeout)

    def drain(self) -> list[tuple[str, Any]]:
        """Return and remove everything received so far."""
        events = []
        while not self.queue.empty():
            events.append(self.queue.get_nowait())
        return events

    def __repr__(self) -> str:
        return f"QueueViewer({self.name!r})"


class BroadcastChannel:
    """Best-effort push of events to every connected viewer.

    Delivery is at most once per broadcast. Viewers that connect later get
    nothing replayed; connect listeners (the poll loop) start an immediate
    fetch for them instead.
    """

    def __init__(self, registry: NamespaceRegistry):
        self.registry = registry
        self._viewers: list[Viewer] = []
        self._connect_listeners: list[Callable[[Viewer], None]] = []

    @property
    def viewers(self) -> list[Viewer]:
        return list(self._viewers)

    def on_connect(self, listener: Callable[[Viewer], None]) -> None:
        """Register a callback run for every newly connected viewer."""
        self._connect_listeners.append(listener)

    def connect(self, viewer: Viewer) -> None:
        if viewer in self._viewers:
            return
        self._viewers.append(viewer)
        logger.info(f"Viewer connected: {viewer!r} ({len(self._viewers)} connected)")
        for listener in self._connect_listeners:
            listener(viewer)

    def disconnect(self, viewer: Viewer) -> None:
        if viewer in self._viewers:
            self._viewers.remove(viewer)
            logger.info(f"Viewer disconnected: {viewer!r} ({len(self._viewers)} connected)")

    async def broadcast(self, event: str, data: Any) -> int:
        """Send an event to all connected viewers.

        Viewers whose send fails are disconnected.

        Returns:
            Number of viewers the event was delivered to
        """
        delivered = 0
        for viewer in self.viewers:
            try:
                await viewer.send(event, data)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping viewer {viewer!r} after failed '{event}' send: {e}")
                self.disconnect(viewer)
        return delivered

    async def publish_snapshot(self, snapshot: GraphSnapshot) -> int:
        return await self.broadcast(EVENT_UPDATE, snapshot.to_payload())

    async def publish_error(self, message: str) -> int:
        return await self.broadcast(EVENT_ERROR, message)

    def handle_message(self, viewer: Viewer, event: str, data: Any) -> None:
        """Dispatch an event received from a viewer."""
        if event == EVENT_CHANGE_NAMESPACE:
            self.registry.change(data)
        else:
            logger.warning(f"Ignoring unknown event '{event}' from {viewer!r}")
