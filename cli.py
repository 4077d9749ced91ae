"""CLI entry point for gemini-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from core.exceptions import ConfigurationError
from ui.console import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    plain = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--plain":
            plain = True
        else:
            console.print(f"[red][ERROR][/red] Unknown option: {arg}")
            _print_help()
            sys.exit(2)

    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {CONFIG_FILE} and fix upstream.base_url[/dim]")
        sys.exit(1)

    # Clear previous logs
    clear_logs()
    dashboard = None if plain else Dashboard(config)
    logger = ConsoleLogger(console) if plain else dashboard

    import uvicorn

    app = create_app(config, logger)

    uvicorn_options = {}
    if config.limits.keep_alive_timeout is not None:
        uvicorn_options["timeout_keep_alive"] = config.limits.keep_alive_timeout
    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        **uvicorn_options,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    else:
        console.print(
            f"[bold cyan]Gemini Proxy[/bold cyan] http://{config.proxy.host}:{config.proxy.port}"
            f" -> {config.upstream.base_url}"
        )
    start_time = datetime.now()
    write_cli_log(
        "STARTUP", "Proxy started", port=config.proxy.port, upstream=config.upstream.base_url
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Gemini Proxy[/bold cyan]

Forwards every request, unchanged, to the configured upstream origin
(default: https://generativelanguage.googleapis.com).

[bold]Usage:[/bold]
    gemini-proxy              Start with live dashboard
    gemini-proxy --plain      Start with one log line per request
    gemini-proxy --config     Show config and log locations
    gemini-proxy --help       Show this help
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
