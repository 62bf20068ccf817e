"""Main CLI entry point for kube-graph."""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from kube_graph.config import GraphConfig
from kube_graph.exceptions import ConfigurationError, KubeGraphError
from kube_graph.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="kube-graph",
    help="Live graph of Kubernetes nodes and pods for connected viewers",
    add_completion=False,
)

console = Console(soft_wrap=True)
logger = get_logger(__name__)

CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="YAML configuration file (environment variables otherwise)"
)
NAMESPACE_OPTION = typer.Option(None, "--namespace", "-n", help="Namespace to poll")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_level: str = typer.Option("INFO", "--log-level", help="Console logging level"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    try:
        setup_logging(level=log_level, verbose=verbose, log_file=log_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    logger.debug("Logging initialized")


def _load_config(config_path: str | None, **overrides) -> GraphConfig:
    """Load configuration or exit with a readable error."""
    try:
        if config_path:
            return GraphConfig.load(config_path, **overrides)
        return GraphConfig.from_env(**overrides)
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {e.message}")
        if e.details:
            console.print(f"\n{e.details}")
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show version information."""
    from kube_graph import __version__

    typer.echo(f"kube-graph version {__version__}")


@app.command()
def config_init(
    path: str = typer.Argument("kube-graph.yml", help="Where to write the configuration"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Write a configuration file with every setting at its default.
    """
    target = Path(path)
    if target.exists() and not force:
        console.print(f"[red]Error:[/red] {target} already exists (use --force to overwrite)")
        raise typer.Exit(code=1)

    GraphConfig().save(str(target))
    console.print(f"[green]✓[/green] Wrote default configuration to {target}")


@app.command()
def namespaces(config_path: str | None = CONFIG_OPTION) -> None:
    """
    List the namespaces known to the cluster API.
    """
    from kube_graph.fetcher import ResourceFetcher

    config = _load_config(config_path)
    fetcher = ResourceFetcher(config)
    try:
        names = asyncio.run(fetcher.fetch_namespaces())
    except KubeGraphError as e:
        logger.error(f"Namespace listing failed: {e}")
        console.print(f"[red]Cluster API Error:[/red] {e.message}")
        raise typer.Exit(code=1)
    finally:
        fetcher.close()

    for name in names:
        marker = " [green](default)[/green]" if name == config.namespace else ""
        console.print(f"{name}{marker}")


@app.command()
def snapshot(
    config_path: str | None = CONFIG_OPTION,
    namespace: str | None = NAMESPACE_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the update payload as JSON"),
) -> None:
    """
    Run a single poll cycle and print the resulting graph.

    Examples:
        # Graph of the default namespace
        kube-graph snapshot

        # Raw payload for kube-system, as viewers receive it
        kube-graph snapshot --namespace kube-system --json
    """
    from kube_graph.builder import build_graph
    from kube_graph.fetcher import ResourceFetcher
    from kube_graph.roles import get_classifier

    config = _load_config(config_path, namespace=namespace)
    fetcher = ResourceFetcher(config)

    async def fetch():
        pods = await fetcher.fetch_pods(config.namespace)
        nodes = await fetcher.fetch_nodes()
        return nodes, pods

    try:
        nodes, pods = asyncio.run(fetch())
    except KubeGraphError as e:
        logger.error(f"Snapshot failed: {e}")
        console.print(f"[red]Cluster API Error:[/red] {e.message}")
        raise typer.Exit(code=1)
    finally:
        fetcher.close()

    graph = build_graph(nodes, pods, config, get_classifier(config.role_classifier))

    if as_json:
        typer.echo(json.dumps(graph.to_payload(), indent=2))
        return

    nodes_table = Table(title=f"Graph for namespace {config.namespace}")
    nodes_table.add_column("Id", style="cyan")
    nodes_table.add_column("Type", style="magenta")
    nodes_table.add_column("Status", style="green")
    nodes_table.add_column("Group", style="yellow")
    nodes_table.add_column("Restarts")
    for node in graph.nodes:
        nodes_table.add_row(
            node.id,
            node.type,
            node.status or "-",
            node.color or "",
            "" if node.restarts is None else str(node.restarts),
        )
    console.print(nodes_table)

    console.print(f"\n[bold]Links:[/bold] {len(graph.links)}")
    if graph.master:
        console.print(f"[bold]Master:[/bold] {graph.master}")
    else:
        console.print("[yellow]⚠ No master identified[/yellow]")


@app.command()
def serve(
    config_path: str | None = CONFIG_OPTION,
    namespace: str | None = NAMESPACE_OPTION,
    host: str | None = typer.Option(None, "--host", help="Address to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
) -> None:
    """
    Serve the live graph to websocket viewers.

    Viewers connect to /ws and receive 'update' and 'error' events; sending
    a 'changeNamespace' event switches the polled namespace for everyone.
    """
    import uvicorn

    from kube_graph.server import create_app

    config = _load_config(config_path, namespace=namespace, host=host, port=port)
    logger.info(f"Running on http://{config.host}:{config.port}")
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


@app.command()
def watch(
    config_path: str | None = CONFIG_OPTION,
    namespace: str | None = NAMESPACE_OPTION,
) -> None:
    """
    Watch the live graph in the terminal.
    """
    from kube_graph.tui import GraphTUI

    config = _load_config(config_path, namespace=namespace)
    GraphTUI(config=config).run()


if __name__ == "__main__":
    app()
