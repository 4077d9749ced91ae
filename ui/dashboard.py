"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock
from urllib.parse import urlsplit

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import redact_url, write_cli_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, target_url: str, timestamp: datetime):
        self.method = method
        self.target_url = target_url
        parts = urlsplit(target_url)
        path = parts.path + (f"?{parts.query}" if parts.query else "")
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing recent requests and upstream health."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._counts = {"forwarded": 0, "ok": 0, "upstream_errors": 0, "failed": 0}
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

    def log_forward(self, method: str, target_url: str) -> None:
        """Log a request about to be sent upstream."""
        target_url = redact_url(target_url)
        with self._lock:
            self._counts["forwarded"] += 1
            self._requests.insert(0, RequestInfo(method, target_url, datetime.now()))
            self._requests = self._requests[: self._max_requests]
            self._refresh()
            write_cli_log("FORWARD", target_url, method=method)

    def log_response(self, method: str, target_url: str, status: int) -> None:
        """Log the upstream status for a forwarded request."""
        target_url = redact_url(target_url)
        with self._lock:
            key = "ok" if status < 400 else "upstream_errors"
            self._counts[key] += 1
            pending = next(
                (
                    r
                    for r in self._requests
                    if r.status is None and r.method == method and r.target_url == target_url
                ),
                None,
            )
            if pending:
                pending.status = status
            self._refresh()
            write_cli_log("RESPONSE", target_url, method=method, status=status)

    def log_error(self, method: str, target_url: str, message: str) -> None:
        """Log a transport failure."""
        target_url = redact_url(target_url)
        with self._lock:
            self._counts["failed"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{method} {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], method=method, target=target_url)

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
        """Build header with stats."""
        stats = Text()
        stats.append("Gemini Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._counts['forwarded']}", style="blue")
        stats.append("  |  ")
        stats.append(f"OK: {self._counts['ok']}", style="green")
        stats.append("  |  ")
        stats.append(f"Upstream 4xx/5xx: {self._counts['upstream_errors']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=8)
            table.add_column("Path", ratio=3)
            table.add_column("Status", width=6)

            for req in self._requests:
                if req.status is None:
                    status = Text("...", style="dim")
                else:
                    status = Text(str(req.status), style="green" if req.status < 400 else "yellow")
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    Text(req.path),
                    status,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(
            content,
            title=f"[blue]Upstream: {self.config.upstream.base_url}[/blue]",
            border_style="blue",
        )

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Point clients at http://{self.config.proxy.host}:{self.config.proxy.port}",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
