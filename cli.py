"""
CLI tool for the agent relay.

Runs the server and talks to a running relay's control surface.
"""

import copy

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from relay.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="relay-cli",
    help="Agent Relay CLI - Run the relay and manage connected agents",
    add_completion=False,
)
console = Console()

DEFAULT_URL = f"http://127.0.0.1:{app_settings.HTTP_PORT}"


def _parse_payload(items: list[str] | None) -> dict[str, str]:
    """Turn ``key=value`` options into a payload map."""
    payload: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            console.print(
                f"[red]✗[/red] Invalid payload entry [yellow]{item}[/yellow], "
                "expected key=value"
            )
            raise typer.Exit(code=2)
        payload[key] = value
    return payload


def _error_detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except ValueError:
        return response.text


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(
        app_settings.HTTP_HOST, "--host", help="Control surface bind host"
    ),
    port: int = typer.Option(
        app_settings.HTTP_PORT, "--port", "-p", help="Control surface port"
    ),
    reload: bool = typer.Option(
        False, "--reload", help="Reload on code changes (development)"
    ),
):
    """
    Run the HTTP control surface and the agent listener.

    Example:
        python cli.py serve --port 8080
    """
    import uvicorn
    from uvicorn.config import LOGGING_CONFIG

    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config.setdefault("filters", {})["exclude_metrics"] = {
        "()": "relay.uvicorn_filters.ExcludeMetricsFilter"
    }
    log_config["handlers"]["access"]["filters"] = ["exclude_metrics"]

    console.print(
        Panel.fit(
            f"[bold cyan]Agent relay[/bold cyan]\n\n"
            f"HTTP:   {host}:{port}\n"
            f"Agents: {app_settings.AGENT_HOST}:{app_settings.AGENT_PORT}"
            + ("" if app_settings.AGENT_LISTENER_ENABLED else " [dim](disabled)[/dim]"),
            border_style="cyan",
        )
    )

    uvicorn.run(
        "relay:application",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=log_config,
    )


@typer_app.command(name="clients")
def clients(
    url: str = typer.Option(DEFAULT_URL, "--url", help="Relay base URL"),
):
    """
    Display a table of connected agents.

    Example:
        python cli.py clients --url http://127.0.0.1:8080
    """
    try:
        response = httpx.get(f"{url}/api/clients", timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPError as ex:
        console.print(f"[red]✗ Could not list clients:[/red] {ex}")
        raise typer.Exit(code=1)

    entries = response.json()

    table = Table(
        "ID",
        "Remote address",
        "Connected",
        "Last active",
        "Streaming",
        "Info",
        title="Connected agents",
        show_lines=True,
    )
    fixed = {"id", "remote_addr", "connected_at", "last_active", "streaming"}
    for entry in entries:
        info = ", ".join(
            f"{key}={value}"
            for key, value in sorted(entry.items())
            if key not in fixed
        )
        table.add_row(
            f"[green]{entry.get('id', '')}[/green]",
            entry.get("remote_addr", ""),
            entry.get("connected_at", ""),
            entry.get("last_active", ""),
            "[yellow]yes[/yellow]" if entry.get("streaming") else "no",
            info or "[dim]-[/dim]",
        )

    console.print()
    console.print(table)
    console.print(f"[bold]Total:[/bold] {len(entries)} agent(s)")
    console.print()


@typer_app.command(name="send")
def send(
    client_id: str = typer.Argument(..., help="Target agent ID"),
    command_type: str = typer.Argument(..., help="Command type, e.g. exec"),
    payload: list[str] = typer.Option(
        None,
        "--payload",
        "-d",
        help="Payload entry key=value (can specify multiple: -d cmd=uptime -d cwd=/)",
    ),
    url: str = typer.Option(DEFAULT_URL, "--url", help="Relay base URL"),
):
    """
    Send a command to a connected agent.

    Example:
        python cli.py send 1718031234567891234 exec -d cmd=uptime
    """
    body = {
        "client_id": client_id,
        "type": command_type,
        "payload": _parse_payload(payload),
    }

    try:
        response = httpx.post(f"{url}/api/command", json=body, timeout=10.0)
    except httpx.HTTPError as ex:
        console.print(f"[red]✗ Could not reach relay:[/red] {ex}")
        raise typer.Exit(code=1)

    if response.status_code != 200:
        console.print(
            f"[red]✗ {response.status_code}[/red] {_error_detail(response)}"
        )
        raise typer.Exit(code=1)

    console.print(
        f"[green]✓[/green] Sent [yellow]{command_type}[/yellow] to "
        f"[cyan]{client_id}[/cyan]"
    )


if __name__ == "__main__":
    typer_app()
