"""Terminal viewer for the live cluster graph."""

from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import DataTable, Footer, Header, Static

from kube_graph.broadcast import EVENT_CHANGE_NAMESPACE, EVENT_ERROR, EVENT_UPDATE, BroadcastChannel
from kube_graph.config import GraphConfig
from kube_graph.fetcher import ResourceFetcher
from kube_graph.logging_config import get_logger
from kube_graph.namespaces import NamespaceRegistry
from kube_graph.poller import PollLoop

logger = get_logger(__name__)

STATUS_STYLES = {
    "ready": "green",
    "": "green",
    "start": "yellow",
    "notReady": "red",
    "pulse": "red",
    "delete": "dim",
}


class GraphTUI(App):
    """Terminal UI that connects to the broadcast channel as a viewer."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-container {
        height: 100%;
    }

    #nodes-container {
        height: 50%;
        border: solid $primary;
        margin: 1;
    }

    #links-container {
        height: 30%;
        border: solid $primary;
        margin: 1;
    }

    #events-container {
        height: 20%;
        border: solid $primary;
        margin: 1;
    }

    DataTable {
        height: 100%;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("r", "refresh", "Refresh", priority=True),
        Binding("n", "next_namespace", "Next namespace", priority=True),
        Binding("h", "help", "Help", priority=True),
        Binding("escape", "quit", "Quit", show=False),
    ]

    def __init__(self, config: GraphConfig | None = None, poll_loop: PollLoop | None = None):
        """Initialize the TUI.

        Args:
            config: Pipeline configuration, defaults apply if omitted
            poll_loop: Poll loop to watch; one is built from ``config`` if omitted
        """
        super().__init__()
        self.graph_config = config or GraphConfig()
        if poll_loop is None:
            registry = NamespaceRegistry(default=self.graph_config.namespace)
            fetcher = ResourceFetcher(self.graph_config)
            poll_loop = PollLoop(self.graph_config, fetcher, registry, BroadcastChannel(registry))
        self.poll_loop = poll_loop
        self.updates_received = 0
        self.last_error: str | None = None

    @property
    def registry(self) -> NamespaceRegistry:
        return self.poll_loop.registry

    @property
    def channel(self) -> BroadcastChannel:
        return self.poll_loop.channel

    def compose(self) -> ComposeResult:
        """Compose the TUI layout."""
        yield Header(show_clock=True)
        with Vertical(id="main-container"):
            with Container(id="nodes-container"):
                yield DataTable(id="nodes-table", cursor_type="row")
            with Container(id="links-container"):
                yield DataTable(id="links-table", cursor_type="row")
            with Container(id="events-container"):
                yield Static("Waiting for first update", id="events-content")
        yield Footer()

    def on_mount(self) -> None:
        """Set up tables, start polling and connect as a viewer."""
        self._update_title()
        self.sub_title = "Q quit, R refresh, N next namespace, H help"

        self.query_one("#nodes-container").border_title = "Nodes"
        self.query_one("#links-container").border_title = "Links"
        self.query_one("#events-container").border_title = "Events"

        self.query_one("#nodes-table", DataTable).add_columns(
            "Id", "Type", "Status", "Group", "Restarts"
        )
        self.query_one("#links-table", DataTable).add_columns("Source", "Target", "Length", "Style")

        self.run_worker(self.poll_loop.refresh_namespaces(), name="namespaces")
        self.run_worker(self.poll_loop.run(), name="poll_loop")
        self.channel.connect(self)

    async def send(self, event: str, data: Any) -> None:
        """Receive an event from the broadcast channel."""
        if event == EVENT_UPDATE:
            self.updates_received += 1
            self._update_display(data)
        elif event == EVENT_ERROR:
            self._show_error(data)

    def _update_display(self, payload: dict) -> None:
        """Replace table contents with a snapshot payload."""
        nodes_table = self.query_one("#nodes-table", DataTable)
        nodes_table.clear()
        for node in payload["nodes"]:
            status = node.get("status")
            status_text = Text(status or "-", style=STATUS_STYLES.get(status, "dim"))
            restarts = node.get("restarts")
            nodes_table.add_row(
                node["id"],
                node["type"],
                status_text,
                node.get("color") or "",
                "" if restarts is None else str(restarts),
            )

        links_table = self.query_one("#links-table", DataTable)
        links_table.clear()
        for link in payload["links"]:
            links_table.add_row(
                link["source"],
                link["target"] or "unscheduled",
                str(link["length"]),
                "dotted" if link["dotted"] else "solid",
            )

        if self.last_error is not None:
            self.last_error = None
            self.notify("Connection restored", severity="information")
        self.query_one("#events-content", Static).update(
            f"{len(payload['nodes'])} nodes, {len(payload['links'])} links "
            f"in namespace {self.registry.current}"
        )

    def _show_error(self, message: str) -> None:
        if self.last_error is None:
            self.notify(
                "Unable to read cluster state. Will retry automatically.",
                title="Cluster API Error",
                severity="warning",
                timeout=10,
            )
        self.last_error = message
        self.query_one("#events-content", Static).update(Text(message, style="red"))

    def _update_title(self) -> None:
        self.title = f"Namespace: {self.registry.current}"

    async def action_quit(self) -> None:
        """Quit the application."""
        self.channel.disconnect(self)
        await self.poll_loop.stop()
        self.exit()

    def action_refresh(self) -> None:
        """Manually trigger a poll cycle."""
        self.poll_loop.trigger()

    def action_next_namespace(self) -> None:
        """Switch every viewer to the next known namespace."""
        namespace = self.registry.next_known()
        if namespace is None:
            self.notify("No namespaces known yet", severity="warning")
            return
        self.channel.handle_message(self, EVENT_CHANGE_NAMESPACE, namespace)
        self._update_title()
        self.poll_loop.trigger()

    def action_help(self) -> None:
        """Show help information."""
        help_text = (
            "Keyboard Shortcuts:\n"
            "  Q / ESC - Quit application\n"
            "  R - Poll the cluster now\n"
            "  N - Switch to the next namespace\n"
            "  H - Show this help\n\n"
            f"Auto-refresh: Every {self.graph_config.polling_interval_secs} seconds"
        )
        self.notify(help_text, title="Help", timeout=10)

    def __repr__(self) -> str:
        return "GraphTUI()"
