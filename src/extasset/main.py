"""Main entry point for the extasset CLI.

Provides a Typer-based CLI for mirroring external assets and resolving
their current URLs.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from extasset import __version__
from extasset.commands import assets as asset_commands

console = Console()

# Create the main Typer app
app = typer.Typer(
    name="extasset",
    help="Mirror external assets into content-addressed storage",
    rich_markup_mode="rich",
)

app.command("update")(asset_commands.update)
app.command("url")(asset_commands.url)
app.command("status")(asset_commands.status)


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"extasset version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """extasset: Mirror external assets for cache-busting.

    Fetches remote scripts, stylesheets and images, stores each version
    under a hash-based key and serves the current one.

    ## Commands

    * [bold cyan]update[/bold cyan] - Check and update assets from their sources
    * [bold cyan]url[/bold cyan] - Print the current URL for an asset
    * [bold cyan]status[/bold cyan] - Show mirrored state of all assets
    * [bold cyan]config[/bold cyan] - Show or change configuration

    ## Getting Started

    1. Create the default configuration:
       [dim]$ extasset config show[/dim]

    2. Add assets under [assets."name"] in the config file, then run:
       [dim]$ extasset update[/dim]
    """
    pass


@app.command()
def config(
    action: str = typer.Argument(
        ...,
        help="Action to perform (show, set, path)",
    ),
    key: str = typer.Argument(
        None,
        help="Configuration key (for set action)",
    ),
    value: str = typer.Argument(
        None,
        help="Configuration value (for set action)",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Manage configuration.

    Show, set, or display the path to the configuration file.

    Examples:
        extasset config show          # Show all configuration
        extasset config set concurrency 10
        extasset config path          # Show config file path
    """
    from extasset.config import ConfigError, ensure_config_exists, get_config_path

    if action == "show":
        try:
            cfg = ensure_config_exists(config_path)
        except (ConfigError, OSError) as e:
            console.print(f"[red]Error loading config: {e}[/red]")
            raise typer.Exit(1)

        panel = Panel.fit(
            f"[cyan]Concurrency:[/cyan] {cfg.concurrency}\n"
            f"[cyan]Disk:[/cyan] {cfg.disk}\n"
            f"[cyan]HTTP Timeout:[/cyan] {cfg.timeout}s\n"
            f"[cyan]Metadata DB:[/cyan] {cfg.metadata_path}\n"
            f"[cyan]Local Root:[/cyan] {cfg.local_root}\n"
            f"[cyan]Local Base URL:[/cyan] {cfg.local_base_url}\n"
            f"[cyan]R2 Bucket:[/cyan] {cfg.r2_bucket}\n"
            f"[cyan]R2 Endpoint:[/cyan] {cfg.r2_endpoint_url or '[not set]'}\n"
            f"[cyan]R2 Public URL:[/cyan] {cfg.r2_public_url or '[not set]'}\n"
            f"[cyan]Log Dir:[/cyan] {cfg.log_dir}\n"
            f"[cyan]Assets:[/cyan] {len(cfg.assets)}",
            title="Configuration",
            border_style="green",
        )
        console.print(panel)

    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: extasset config set <key> <value>[/red]")
            raise typer.Exit(1)

        try:
            cfg = ensure_config_exists(config_path)
            cfg.set(key, value)
            cfg.save(config_path)
            console.print(f"[green]Set {key} = {value}[/green]")
        except ConfigError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    elif action == "path":
        console.print(config_path or get_config_path())

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: show, set, path")
        raise typer.Exit(1)


# Entry point for the CLI
def cli_entry() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli_entry()
