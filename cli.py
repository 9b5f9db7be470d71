"""CLI entry point for openhim-auth-mediator."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from auth import check_auth
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg in ("--check", "--auth"):
            sys.exit(0 if check_auth(config) else 1)

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Mediator started", port=config.server.port, register=config.register)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Mediator stopped", duration=str(duration))
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]OpenHIM Basic Auth Mediator[/bold cyan]

Relays OpenHIM requests upstream, injecting Basic auth for mapped clients.

[bold]Usage:[/bold]
    openhim-auth-mediator              Start with live dashboard
    openhim-auth-mediator --check      Check OpenHIM API authentication
    openhim-auth-mediator --config     Show config and log locations
    openhim-auth-mediator --help       Show this help

[bold]Registration:[/bold]
    With "register": true the mediator registers with OpenHIM at startup,
    fetches its config and keeps it current through heartbeats.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
