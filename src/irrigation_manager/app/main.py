"""CLI entry point for the irrigation-app TUI.

Provides the `irrigation-app` command for launching the Textual interface.
"""

import os
import subprocess
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from irrigation_manager import __version__
from irrigation_manager.app.config import (
    AUTH_TOKEN_ENV,
    AppConfig,
    ensure_app_config_exists,
    get_app_config_path,
)
from irrigation_manager.app.logging_config import LOG_FILENAME, setup_logging

app = typer.Typer(
    name="irrigation-app",
    help="Irrigation Manager - Section Control TUI",
    no_args_is_help=False,
)
console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"irrigation-app version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Irrigation Manager - control watering sections."""


def _show_welcome() -> None:
    """Show welcome message for first run."""
    console.print(
        Panel.fit(
            "[bold green]Welcome to Irrigation Manager![/bold green]\n\n"
            "A default configuration will be created at: "
            f"[cyan]{get_app_config_path()}[/cyan]\n"
            "Set [bold]database_url[/bold] and [bold]user_id[/bold] there, "
            "or start with [bold]--offline[/bold].",
            title="irrigation-app",
            border_style="green",
        )
    )


def _check_store_config(config: AppConfig) -> bool:
    """Check that the configured store can be reached at all.

    Args:
        config: App configuration

    Returns:
        True if the configuration is usable
    """
    if config.store_backend == "firebase" and not config.database_url:
        console.print(
            Panel.fit(
                "[bold red]No database configured![/bold red]\n\n"
                f"Set [bold]database_url[/bold] in [cyan]{get_app_config_path()}[/cyan]\n"
                "or run with [bold]--offline[/bold] to use a temporary in-memory store.",
                title="Error",
                border_style="red",
            )
        )
        return False
    return True


def _load_config(config_path: Optional[Path], user: Optional[str], offline: bool) -> AppConfig:
    """Load the configuration and apply command line overrides.

    Exits with status 1 when the file is missing or invalid.
    """
    try:
        config = AppConfig.load(config_path) if config_path else ensure_app_config_exists()
    except FileNotFoundError as e:
        console.print(f"[red]Config file not found: {e}[/red]")
        raise typer.Exit(1)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)

    if user:
        config.user_id = user
    if offline:
        # --offline never touches the configured database
        config.store_backend = "memory"
    return config


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    user: Optional[str] = typer.Option(
        None,
        "--user",
        "-u",
        help="User id whose sections are shown (overrides the config file)",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Use a temporary in-memory store instead of the realtime database",
    ),
) -> None:
    """Launch the TUI application."""
    if config_path is None and not get_app_config_path().exists():
        _show_welcome()

    config = _load_config(config_path, user=user, offline=offline)

    if not _check_store_config(config):
        raise typer.Exit(1)

    logger = setup_logging(config.log_dir)
    logger.info(f"Store backend: {config.store_backend}")
    logger.info(f"Database: {config.database_url or '-'}")
    logger.info(f"User: {config.user_id or '-'}")
    console.print(f"[dim]Session log: {config.log_dir / LOG_FILENAME}[/dim]")

    from irrigation_manager.app.app import IrrigationApp

    try:
        app_instance = IrrigationApp(config)
        logger.info("Launching TUI application")
        app_instance.run()
        logger.info("Application exited normally")
    except KeyboardInterrupt:
        logger.info("Application interrupted by user (Ctrl+C)")
        console.print("\n[yellow]Interrupted by user[/yellow]")
        raise typer.Exit(0)
    except Exception as e:
        logger.exception(f"Application error: {e}")
        console.print(f"[red]Error running app: {e}[/red]")
        raise typer.Exit(1)


def _print_config(config_path: Path, current: AppConfig) -> None:
    table = Table(title="Irrigation Manager Configuration", caption=f"Auth token is read from {AUTH_TOKEN_ENV}")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Config file", str(config_path))
    table.add_row("Store backend", current.store_backend)
    table.add_row("Database URL", current.database_url or "-")
    table.add_row("User", current.user_id or "-")
    table.add_row("Tick interval", f"{current.tick_interval_seconds}s")
    table.add_row("Request timeout", f"{current.timeout_seconds}s")
    table.add_row("Log dir", str(current.log_dir))
    table.add_row("Auth token", "[green]set[/green]" if current.auth_token else "[yellow]not set[/yellow]")

    console.print(table)


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration",
    ),
    edit: bool = typer.Option(
        False,
        "--edit",
        help="Open config in editor",
    ),
) -> None:
    """Manage application configuration."""
    config_path = get_app_config_path()

    if show or not edit:
        if config_path.exists():
            _print_config(config_path, AppConfig.load(config_path))
        else:
            console.print(f"[yellow]No config file at {config_path}[/yellow]")
            console.print("Run [bold]irrigation-app run[/bold] to create default config.")

    if edit:
        ensure_app_config_exists()
        editor = os.environ.get("EDITOR", "nano")
        subprocess.call([editor, str(config_path)])


def cli_entry() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli_entry()
