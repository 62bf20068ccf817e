"""Terminal viewer for the live cluster graph."""

from kube_graph.tui.app import GraphTUI

__all__ = ["GraphTUI", "main"]


def main() -> None:
    """Main entry point for the graph TUI."""
    from kube_graph.config import GraphConfig

    app = GraphTUI(config=GraphConfig.from_env())
    app.run()
