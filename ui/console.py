"""Line-oriented request logger for terminals without a live dashboard."""

from rich.console import Console
from rich.markup import escape

from ui.log_utils import redact_url, write_cli_log


class ConsoleLogger:
    """Print one line per forwarding event."""

    def __init__(self, console: Console | None = None):
        self._console = console or Console()

    def log_forward(self, method: str, target_url: str) -> None:
        target_url = redact_url(target_url)
        self._console.print(f"[blue]->[/blue] {method} {escape(target_url)}", highlight=False)
        write_cli_log("FORWARD", target_url, method=method)

    def log_response(self, method: str, target_url: str, status: int) -> None:
        target_url = redact_url(target_url)
        style = "green" if status < 400 else "yellow"
        self._console.print(
            f"[{style}]<- {status}[/{style}] {method} {escape(target_url)}", highlight=False
        )
        write_cli_log("RESPONSE", target_url, method=method, status=status)

    def log_error(self, method: str, target_url: str, message: str) -> None:
        target_url = redact_url(target_url)
        self._console.print(
            f"[red][ERROR][/red] {method} {escape(target_url)}: {escape(message)}", highlight=False
        )
        write_cli_log("ERROR", message[:200], method=method, target=target_url)
