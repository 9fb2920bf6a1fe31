"""Real-time CLI dashboard for gateway monitoring."""

from datetime import datetime
from threading import Lock
from typing import Any

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import UpstreamTarget
from ui.log_utils import mask_url, write_cli_log, write_incoming_log, write_upstream_log

console = Console()

ROUTE_STYLES = {
    "query": "blue",
    "create": "green",
    "update": "yellow",
    "webhook": "magenta",
}


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, route: str, method: str, url: str, timestamp: datetime):
        self.route = route
        self.method = method
        self.url = url[:60] + "..." if len(url) > 60 else url
        self.timestamp = timestamp
        self.status: int | None = None


class Dashboard:
    """Real-time dashboard showing traffic per route."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 10
        self._request_count = {route: 0 for route in ROUTE_STYLES}
        self._errors: list[str] = []
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

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: Any,
    ) -> None:
        write_incoming_log(method, path, headers, body)

    def log_forward(self, route: str, target: UpstreamTarget) -> RequestInfo:
        """Log a request about to be sent upstream; the returned row tracks its status."""
        url = mask_url(target.url) if route == "webhook" else target.url
        info = RequestInfo(route, target.method, url, datetime.now())
        with self._lock:
            self._request_count[route] = self._request_count.get(route, 0) + 1
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]
            self._refresh()

            write_upstream_log(route, target)
            write_cli_log(route.upper(), f"{target.method} {url}")
        return info

    def log_response(self, route: str, status: int, entry: RequestInfo | None = None) -> None:
        """Record the upstream status on the row of the forwarded request."""
        with self._lock:
            if entry is not None:
                entry.status = status
            self._refresh()

    def log_error(
        self,
        route: str,
        status: int,
        message: str,
        entry: RequestInfo | None = None,
    ) -> None:
        """Log an error; requests rejected before forwarding have no row."""
        with self._lock:
            if entry is not None:
                entry.status = status
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

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
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with per-route counters."""
        stats = Text()
        stats.append("Salon Gateway", style="bold cyan")
        for route, style in ROUTE_STYLES.items():
            stats.append("  |  ")
            stats.append(f"{route}: {self._request_count.get(route, 0)}", style=style)
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build the recent requests table."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Route", width=8)
            table.add_column("Method", width=6)
            table.add_column("Upstream", ratio=3)
            table.add_column("Status", width=6)

            for info in self._recent:
                status = "…" if info.status is None else str(info.status)
                status_style = "green" if info.status and info.status < 400 else "red"
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    Text(info.route, style=ROUTE_STYLES.get(info.route, "")),
                    info.method,
                    Text(info.url),
                    Text(status, style=status_style if info.status else "dim"),
                )
            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[cyan]Recent requests[/cyan]", border_style="cyan")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            webhooks = ", ".join(sorted(self.config.webhooks.urls)) or "none"
            content = Text(
                f"Listening on http://{self.config.server.host}:{self.config.server.port}"
                f"\nWebhooks: {webhooks}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
