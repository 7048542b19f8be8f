"""Asset commands for extasset.

Provides the update, url and status CLI commands.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from extasset.config import ConfigError, ExtassetConfig, get_config_path
from extasset.logging_config import setup_logging
from extasset.models import AssetResult, AssetStatus
from extasset.services.hasher import blob_key
from extasset.services.resolver import AssetResolver
from extasset.services.sync import get_sync_engine_from_config, summarize
from extasset.storage.base import BlobStore, MetadataStore, StoreError
from extasset.storage.factory import create_blob_store, create_metadata_store

console = Console()

STATUS_STYLES = {
    AssetStatus.UPDATED: "green",
    AssetStatus.UNCHANGED: "cyan",
    AssetStatus.SKIPPED: "dim",
    AssetStatus.FAILED: "red",
}


def load_config(config_path: Optional[Path]) -> ExtassetConfig:
    """Load configuration or exit with a readable error.

    Args:
        config_path: Explicit config path, or None for the default location

    Returns:
        Loaded configuration
    """
    try:
        return ExtassetConfig.load(config_path) if config_path else ExtassetConfig.load()
    except FileNotFoundError:
        console.print(
            f"[red]Config file not found: {config_path or get_config_path()}[/red]\n"
            "Run 'extasset config show' to create a default one."
        )
        raise typer.Exit(1)
    except ConfigError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(1)


def open_stores(config: ExtassetConfig) -> tuple[MetadataStore, BlobStore]:
    """Build the configured stores or exit with a readable error."""
    try:
        return create_metadata_store(config), create_blob_store(config)
    except ValueError as e:
        console.print(f"[red]Storage configuration error: {e}[/red]")
        raise typer.Exit(1)


def update(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Ignore check intervals and re-store every asset",
    ),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log progress to the console",
    ),
) -> None:
    """Check and update all assets from their sources.

    Fetches every asset that is due (or all of them with --force), stores
    changed content under a new hash-based key and removes the previous
    version. Fetch failures are logged and do not fail the command.
    """
    config = load_config(config_path)
    setup_logging(config.log_dir, verbose=verbose)

    if not config.assets:
        console.print("[yellow]No assets configured.[/yellow]")
        return

    metadata, blobs = open_stores(config)
    engine = get_sync_engine_from_config(config, metadata, blobs)
    results: List[AssetResult] = []

    try:
        with console.status(f"Updating {len(config.assets)} asset(s)..."):
            engine.synchronize(force=force, callback=results.append)
    except StoreError as e:
        console.print(f"[red]Storage failure: {e}[/red]")
        raise typer.Exit(1)
    finally:
        engine.fetcher.close()
        metadata.close()

    table = Table(title="Asset Update")
    table.add_column("Asset", style="cyan")
    table.add_column("Result")
    table.add_column("Hash", style="dim")
    table.add_column("URL / Error")

    for result in sorted(results, key=lambda r: r.name):
        style = STATUS_STYLES[result.status]
        if result.status == AssetStatus.FAILED:
            detail = f"[red]{result.error}[/red]"
        else:
            detail = blobs.url_for(blob_key(result.name, result.content_hash))
        table.add_row(
            result.name,
            f"[{style}]{result.status.value}[/{style}]",
            result.content_hash or "-",
            detail,
        )

    console.print(table)

    counts = summarize(results)
    console.print(
        f"[green]{counts['updated']} updated[/green], "
        f"{counts['unchanged']} unchanged, "
        f"{counts['skipped']} skipped, "
        f"[red]{counts['failed']} failed[/red]"
    )


def url(
    name: str = typer.Argument(..., help="Asset name"),
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Print the current URL for an asset.

    Falls back to the asset's source URL until it has been updated once.
    """
    config = load_config(config_path)
    metadata, blobs = open_stores(config)
    resolver = AssetResolver(config.assets, metadata, blobs)

    if not resolver.has(name):
        console.print(f"[red]Unknown asset: {name}[/red]")
        metadata.close()
        raise typer.Exit(1)

    try:
        resolved = resolver.url(name)
    except StoreError as e:
        console.print(f"[red]Storage failure: {e}[/red]")
        raise typer.Exit(1)
    finally:
        metadata.close()

    typer.echo(resolved)


def status(
    config_path: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Show configured assets and their mirrored state.

    Displays, for each asset:
    - Source URL and check interval
    - Current content hash and last check time
    - The URL currently served
    """
    config = load_config(config_path)

    if not config.assets:
        console.print("[yellow]No assets configured.[/yellow]")
        return

    metadata, blobs = open_stores(config)
    resolver = AssetResolver(config.assets, metadata, blobs)

    table = Table(title=f"Assets ({config.disk})")
    table.add_column("Asset", style="cyan")
    table.add_column("Source")
    table.add_column("Interval", justify="right")
    table.add_column("Hash", style="dim")
    table.add_column("Last Checked")
    table.add_column("URL")

    try:
        for name, asset in config.assets.items():
            record = metadata.get(name)
            interval = f"{asset.check_interval_minutes}m" if asset.check_interval_minutes else "-"
            table.add_row(
                name,
                asset.source_url,
                interval,
                record.content_hash if record else "[yellow]never synced[/yellow]",
                record.last_checked_at.strftime("%Y-%m-%d %H:%M:%S") if record else "-",
                resolver.url(name),
            )
    except StoreError as e:
        console.print(f"[red]Storage failure: {e}[/red]")
        raise typer.Exit(1)
    finally:
        metadata.close()

    console.print(table)
