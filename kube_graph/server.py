"""Websocket transport for the broadcast channel."""

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from kube_graph import __version__
from kube_graph.broadcast import BroadcastChannel
from kube_graph.config import GraphConfig
from kube_graph.fetcher import ResourceFetcher
from kube_graph.logging_config import get_logger
from kube_graph.namespaces import NamespaceRegistry
from kube_graph.poller import PollLoop

logger = get_logger(__name__)


class WebSocketViewer:
    """A viewer connected over a websocket; frames are ``{"event", "data"}`` JSON."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        client = websocket.client
        self.peer = f"{client.host}:{client.port}" if client else "unknown"

    async def send(self, event: str, data: Any) -> None:
        await self.websocket.send_json({"event": event, "data": data})

    def __repr__(self) -> str:
        return f"WebSocketViewer({self.peer})"


def create_app(
    config: GraphConfig | None = None,
    fetcher: ResourceFetcher | None = None,
    start_polling: bool = True,
) -> FastAPI:
    """Build the FastAPI app around a poll loop.

    Args:
        config: Pipeline configuration, read from the environment if omitted
        fetcher: Resource fetcher, created from ``config`` if omitted
        start_polling: Run the timer-driven poll loop for the app's lifetime
    """
    config = config or GraphConfig.from_env()
    fetcher = fetcher or ResourceFetcher(config)
    registry = NamespaceRegistry(default=config.namespace)
    channel = BroadcastChannel(registry)
    poll_loop = PollLoop(config, fetcher, registry, channel)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await poll_loop.refresh_namespaces()
        runner = asyncio.create_task(poll_loop.run()) if start_polling else None
        try:
            yield
        finally:
            await poll_loop.stop()
            if runner is not None:
                await runner
            fetcher.close()

    app = FastAPI(title="kube-graph", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.channel = channel
    app.state.poll_loop = poll_loop

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/api/namespaces")
    async def namespaces():
        """Namespace names for the initial page render."""
        await poll_loop.refresh_namespaces()
        return {"namespaces": registry.known, "current": registry.current}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket.accept()
        viewer = WebSocketViewer(websocket)
        channel.connect(viewer)
        try:
            while True:
                text = await websocket.receive_text()
                try:
                    message = json.loads(text)
                except ValueError:
                    message = None
                if not isinstance(message, dict) or "event" not in message:
                    logger.warning(f"Ignoring malformed message from {viewer!r}: {message!r}")
                    continue
                channel.handle_message(viewer, message["event"], message.get("data"))
        except WebSocketDisconnect:
            logger.debug(f"{viewer!r} closed the connection")
        finally:
            channel.disconnect(viewer)

    return app
