"""Property-based tests for the terminal viewer.

Feature: live-cluster-graph
"""

import asyncio

from hypothesis import given
from hypothesis import strategies as st
from textual.widgets import DataTable

from kube_graph.broadcast import BroadcastChannel
from kube_graph.config import GraphConfig
from kube_graph.namespaces import NamespaceRegistry
from kube_graph.poller import PollLoop
from kube_graph.tui import GraphTUI


@given(
    namespace=st.text(
        min_size=1,
        max_size=50,
        alphabet=st.characters(whitelist_categories=("Ll", "Nd"), whitelist_characters="-"),
    ),
    polling_interval=st.integers(min_value=1, max_value=60),
)
def test_property_keyboard_navigation(namespace: str, polling_interval: int) -> None:
    """
    Feature: live-cluster-graph, TUI keyboard navigation

    For any configuration, all documented keyboard shortcuts should be registered
    and should trigger their corresponding actions (refresh, next namespace, quit, etc.).
    """
    config = GraphConfig(namespace=namespace, polling_interval_secs=polling_interval)
    app = GraphTUI(config=config)

    binding_keys = {binding.key for binding in app.BINDINGS}

    required_bindings = {"q", "r", "n", "h", "escape"}
    assert required_bindings.issubset(
        binding_keys
    ), f"Missing required keyboard bindings. Expected: {required_bindings}, Got: {binding_keys}"

    for binding in app.BINDINGS:
        action_name = f"action_{binding.action}"
        assert hasattr(app, action_name), (
            f"Binding '{binding.key}' references action '{binding.action}' "
            f"but method '{action_name}' does not exist"
        )
        assert callable(getattr(app, action_name))

    assert app.registry.current == namespace


def test_tui_initialization() -> None:
    """Test that TUI initializes with default configuration."""
    app = GraphTUI()

    assert app.graph_config.namespace == "default"
    assert app.graph_config.polling_interval_secs == 1
    assert app.updates_received == 0
    assert app.last_error is None


def test_tui_uses_given_poll_loop(config, fake_fetcher) -> None:
    """Test that TUI watches the poll loop it is given."""
    registry = NamespaceRegistry()
    poll_loop = PollLoop(config, fake_fetcher, registry, BroadcastChannel(registry))

    app = GraphTUI(config=config, poll_loop=poll_loop)

    assert app.poll_loop is poll_loop
    assert app.channel is poll_loop.channel


def test_tui_renders_updates_and_switches_namespace(config, fake_fetcher) -> None:
    """Test that the TUI fills its tables from broadcasts and cycles namespaces."""
    registry = NamespaceRegistry()
    poll_loop = PollLoop(config, fake_fetcher, registry, BroadcastChannel(registry))
    app = GraphTUI(config=config, poll_loop=poll_loop)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.pause(0.3)
            nodes_rows = app.query_one("#nodes-table", DataTable).row_count
            links_rows = app.query_one("#links-table", DataTable).row_count

            await pilot.press("n")
            await pilot.pause(0.3)
            return nodes_rows, links_rows

    nodes_rows, links_rows = asyncio.run(scenario())

    assert app.updates_received >= 1
    assert nodes_rows == 3
    assert links_rows == 2
    assert registry.current == "kube-system"
    assert ("pods", "kube-system") in fake_fetcher.calls
