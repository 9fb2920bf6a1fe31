"""Line-oriented request logger for non-interactive runs."""

from typing import Any

from rich.console import Console
from rich.markup import escape

from core.request_types import UpstreamTarget
from ui.log_utils import mask_url, write_cli_log, write_incoming_log, write_upstream_log


class ConsoleLogger:
    """Print one line per event instead of a live dashboard."""

    def __init__(self, console: Console | None = None, write_files: bool = True):
        self._console = console or Console()
        self._write_files = write_files

    def log_incoming(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        body: Any,
    ) -> None:
        if self._write_files:
            write_incoming_log(method, path, headers, body)

    def log_forward(self, route: str, target: UpstreamTarget) -> None:
        url = mask_url(target.url) if route == "webhook" else target.url
        self._console.print(f"[bold]{route}[/bold] {target.method} {escape(url)}")
        if self._write_files:
            write_upstream_log(route, target)
            write_cli_log(route.upper(), f"{target.method} {url}")

    def log_response(self, route: str, status: int, entry: Any = None) -> None:
        self._console.print(f"[green]{route}[/green] <- {status}")

    def log_error(self, route: str, status: int, message: str, entry: Any = None) -> None:
        self._console.print(f"[red]Error {route} {status}:[/red] {escape(message[:200])}")
        if self._write_files:
            write_cli_log("ERROR", message[:200], route=route, status=status)
