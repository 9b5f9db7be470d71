"""Real-time CLI dashboard for mediator monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.live_config import MediatorConfig
from ui.log_utils import write_cli_log

console = Console()


class RelayInfo:
    """Info about a single relayed request."""

    def __init__(
        self,
        method: str,
        path: str,
        client_id: str | None,
        status: str,
        upstream_status: int | None,
        timestamp: datetime,
    ):
        self.method = method
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.client_id = client_id or "-"
        self.status = status
        self.upstream_status = upstream_status
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing relays, active config and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._relays: list[RelayInfo] = []
        self._max_relays = 8
        self._counts = {"Successful": 0, "Failed": 0}
        self._errors: list[str] = []
        self._active: MediatorConfig | None = None
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_relay(
        self,
        method: str,
        path: str,
        client_id: str | None,
        *,
        status: str,
        upstream_status: int | None,
    ) -> None:
        """Log a relayed request and its envelope status."""
        with self._lock:
            self._counts[status] = self._counts.get(status, 0) + 1
            info = RelayInfo(method, path, client_id, status, upstream_status, datetime.now())
            self._relays.insert(0, info)
            self._relays = self._relays[: self._max_relays]
            self._refresh()
            write_cli_log(
                "RELAY",
                f"{method} {path}",
                client=client_id or "-",
                status=status,
                upstream=upstream_status if upstream_status is not None else "-",
            )

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def log_config(self, config: MediatorConfig, *, source: str) -> None:
        """Log a newly installed mediator config."""
        with self._lock:
            self._active = config
            self._refresh()
            write_cli_log(
                "CONFIG",
                f"Applied {source} config",
                upstream=config.upstream_url,
                mappings=len(config.mapping),
            )

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=4),
        )

        layout["body"].split_row(
            Layout(name="config", ratio=1),
            Layout(name="relays", ratio=2),
        )

        layout["header"].update(self._build_header())
        layout["config"].update(self._build_config_panel())
        layout["relays"].update(self._build_relays_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append(self.config.mediator.name, style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Successful: {self._counts['Successful']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['Failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_config_panel(self) -> Panel:
        """Build active config panel."""
        if self._active:
            content = Table.grid(padding=(0, 1))
            content.add_column()
            content.add_column()

            content.add_row("[bold]Upstream:[/bold]", self._active.upstream_url)
            content.add_row("[bold]Mappings:[/bold]", str(len(self._active.mapping)))
            clients = ", ".join(m.client_id for m in self._active.mapping[:4])
            if len(self._active.mapping) > 4:
                clients += f" (+{len(self._active.mapping) - 4})"
            content.add_row("[bold]Clients:[/bold]", clients or "[dim]none[/dim]")
        else:
            content = Text("Waiting for config...", style="dim")

        return Panel(content, title="[blue]Active Config[/blue]", border_style="blue")

    def _build_relays_panel(self) -> Panel:
        """Build recent relays panel."""
        if self._relays:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Client", width=16)
            table.add_column("Request", ratio=2)
            table.add_column("Upstream", width=8)
            table.add_column("Status", width=10)

            for relay in self._relays:
                style = "green" if relay.status == "Successful" else "red"
                table.add_row(
                    relay.timestamp.strftime("%H:%M:%S"),
                    relay.client_id[:16],
                    f"{relay.method} {relay.path}",
                    str(relay.upstream_status) if relay.upstream_status is not None else "-",
                    Text(relay.status, style=style),
                )

            content = table
        else:
            content = Text("No requests relayed yet...", style="dim")

        return Panel(content, title="[magenta]Recent Relays[/magenta]", border_style="magenta")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            api = self.config.api.api_url if self.config.register else "not registered"
            content = Text(f"OpenHIM: {api}", style="dim")

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
