"""CLI entry point for salon-gateway."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import ENV_FILE, WEBHOOK_PREFIX, Config, load_config
from core.exceptions import ConfigurationError
from ui.console import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, mask, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    # Handle CLI arguments
    arg = sys.argv[1] if len(sys.argv) > 1 else ""

    if arg == "--check":
        print_config_status(config)
        return

    if arg == "--config":
        console.print(f"[bold]Env file:[/bold] {ENV_FILE}")
        console.print(f"[bold]CLI log:[/bold] {CLI_LOG_FILE}")
        return

    if arg in ("--help", "-h"):
        _print_help()
        return

    if not config.airtable.token or not config.airtable.base_id:
        console.print(
            "[yellow]Warning:[/yellow] AIRTABLE_TOKEN or AIRTABLE_BASE not set, "
            "Airtable routes will be rejected upstream"
        )

    import uvicorn

    clear_logs()
    plain = arg == "--plain" or not console.is_terminal
    dashboard = None if plain else Dashboard(config)
    logger = ConsoleLogger(console) if dashboard is None else dashboard

    app = create_app(config, logger)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start()
    else:
        console.print(f"Salon gateway listening on port {config.server.port}")
    start_time = datetime.now()
    write_cli_log("STARTUP", "Gateway started", port=config.server.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Gateway stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def print_config_status(config: Config) -> None:
    """Print which secrets are configured, masked."""
    airtable = config.airtable
    token = mask(airtable.token) if airtable.token else "[red]missing[/red]"
    base = airtable.base_id or "[red]missing[/red]"
    console.print(f"[bold]Airtable token:[/bold] {token}")
    console.print(f"[bold]Airtable base:[/bold] {base}")
    console.print(f"[bold]Airtable API:[/bold] {airtable.api_url}")
    if config.webhooks.urls:
        for key in sorted(config.webhooks.urls):
            name = key.removeprefix(WEBHOOK_PREFIX)
            console.print(f"[bold]Webhook {name}:[/bold] configured ({key})")
    else:
        console.print(f"[yellow]No webhooks configured[/yellow] (set {WEBHOOK_PREFIX}<NAME>)")
    console.print(f"[bold]Port:[/bold] {config.server.port}")
    console.print(f"[bold]CORS origins:[/bold] {', '.join(config.server.cors_origins)}")
    console.print(f"[bold]Record response:[/bold] {config.gateway.record_response}")


def _print_help():
    """Print help message."""
    help_text = f"""
[bold cyan]Salon Gateway[/bold cyan]

Forwards frontend calls to Airtable and Make webhooks with server-held secrets.

[bold]Usage:[/bold]
    salon-gateway              Start with live dashboard
    salon-gateway --plain      Start with line-by-line console output
    salon-gateway --check      Show configured secrets (masked)
    salon-gateway --config     Show config locations
    salon-gateway --help       Show this help

[bold]Settings[/bold] (environment or .env):
    AIRTABLE_TOKEN, AIRTABLE_BASE, PORT, CORS_ORIGINS,
    GATEWAY_RECORD_RESPONSE (record|envelope), {WEBHOOK_PREFIX}<NAME>
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
