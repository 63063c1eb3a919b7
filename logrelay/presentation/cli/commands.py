"""CLI commands for the JSON log relay."""

from __future__ import annotations

import json
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from logrelay.errors import RelayError
from logrelay.relay.events import EventContext
from logrelay.relay.registry import DestinationRegistry
from logrelay.relay.renderer import RequestRenderer
from logrelay.server.runner import bootstrap, serve as run_server
from logrelay.services import ConfigService, Settings
from logrelay.services.logging_setup import configure_logging

console = Console()

app = typer.Typer(
    help="JSON log relay - fan inbound JSON writes out to templated HTTP destinations"
)

CONFIG_OPTION = typer.Option(
    None, "--config", "-c", help="Remote loggers YAML file (default: $REMOTE_LOGGERS_PATH)"
)

STARTUP_ERRORS = (RelayError, ValidationError, yaml.YAMLError, OSError, ValueError)


def _config_service(config_path: Optional[str]) -> ConfigService:
    return ConfigService(config_path or Settings.from_env().remote_loggers_path)


def _load_registry(config_path: Optional[str]) -> DestinationRegistry:
    return DestinationRegistry.from_config(_config_service(config_path).load_config())


@app.command()
def serve(
    config: Optional[str] = CONFIG_OPTION,
    addr: Optional[str] = typer.Option(None, help="Listen address, e.g. :8080"),
) -> None:
    """Start the HTTP listener."""
    settings = Settings.from_env()
    if addr:
        settings = settings.model_copy(update={"addr": addr})
    configure_logging(settings.log_level, settings.log_format)
    try:
        dispatcher = bootstrap(settings, config)
    except STARTUP_ERRORS as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    run_server(settings, dispatcher)


@app.command("check-config")
def check_config(config: Optional[str] = CONFIG_OPTION) -> None:
    """Validate the configuration and compile every template chain."""
    try:
        service = _config_service(config)
        console.print(f"[blue]Configuration: {escape(service.get_config_path())}[/blue]")
        registry = DestinationRegistry.from_config(service.load_config())
    except STARTUP_ERRORS as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if not len(registry):
        console.print("[yellow]No destination configured[/yellow]")
        return

    table = Table(title="Destinations")
    table.add_column("Name", style="bold")
    table.add_column("Method")
    table.add_column("URL")
    table.add_column("Auth")
    table.add_column("Headers", justify="right")
    table.add_column("Templates", justify="right")
    for destination in registry:
        table.add_row(
            destination.name,
            destination.method,
            destination.url,
            "basic" if destination.basic_auth else "-",
            str(len(destination.headers)),
            str(len(destination.templates)),
        )
    console.print(table)
    console.print(f"[green][SUCCESS] {len(registry)} destination(s) compiled[/green]")


@app.command()
def render(
    name: str = typer.Argument(..., help="Destination name"),
    body: str = typer.Option("{}", "--body", "-b", help="Sample inbound JSON body"),
    path: str = typer.Option("/", help="Sample inbound path"),
    config: Optional[str] = CONFIG_OPTION,
) -> None:
    """Render a destination's template chain against a sample event, sending nothing."""
    try:
        registry = _load_registry(config)
        decoded = json.loads(body)
    except STARTUP_ERRORS as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    destination = registry.get(name)
    if destination is None:
        console.print(f"[red][ERROR] Unknown destination '{name}'[/red]")
        raise typer.Exit(code=1)

    event = EventContext.from_request(
        host="localhost",
        header_items=[("Content-Type", "application/json")],
        method="POST",
        path=path,
        query_items=[],
        body=decoded,
    )
    try:
        outputs = RequestRenderer().evaluate(
            destination.name, destination.templates, event
        )
    except RelayError as e:
        console.print(f"[red][ERROR] {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if not outputs:
        console.print(f"[yellow]{name} has no body template, request is bodyless[/yellow]")
        return
    for index, output in enumerate(outputs):
        console.print(Panel(Text(output), title=f"{name}-body-{index}"))
    console.print("[green]Request body:[/green]", Text(outputs[-1]))


if __name__ == "__main__":  # pragma: no cover
    app()
