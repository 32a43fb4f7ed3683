#!/usr/bin/env python3
"""
NFT Inventory CLI entrypoint
"""

import asyncio
import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn

from nft_inventory import InventoryAggregator, NFT_COLLECTIONS, Chain
from nft_inventory.config import config
from nft_inventory.errors import EndpointPoolExhausted
from nft_inventory.indexers import IndexerFallbackChain
from nft_inventory.metadata import fetch_token_metadata
from nft_inventory.observability import configure_logging
from nft_inventory.rpc import resolve_live_endpoint

app = typer.Typer(help="NFT Inventory - wallet ownership across Lawb collections")
console = Console()


@app.callback()
def main(log_level: str = typer.Option(config.log_level, "--log-level", help="Log level (DEBUG, INFO, WARNING)")):
    configure_logging(log_level)


@app.command()
def inventory(
    address: str = typer.Argument(..., help="Wallet address"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (JSON)"),
):
    """Reconcile the NFTs a wallet owns in every supported collection"""

    async def fetch_inventory():
        aggregator = InventoryAggregator(config)
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task(f"Reconciling inventory for {address}...", total=None)
            snapshot = await aggregator.reconcile_inventory(address)
            progress.update(task, completed=True)

        console.print(f"\n[bold green]Found {snapshot.total_count} NFTs[/bold green]")

        table = Table(title=f"Inventory for {snapshot.wallet}")
        table.add_column("Collection", style="magenta")
        table.add_column("Chain", style="cyan")
        table.add_column("Count", style="white")
        table.add_column("Token IDs", style="yellow")
        table.add_column("Source", style="dim")

        for key, token_ids in snapshot.collections.items():
            collection = NFT_COLLECTIONS[key]
            shown = ", ".join(token_ids[:10]) + (" ..." if len(token_ids) > 10 else "")
            table.add_row(
                collection.name,
                collection.chain.value,
                str(len(token_ids)),
                shown or "-",
                snapshot.sources.get(key) or "none",
            )
        console.print(table)

        if output:
            with open(output, "w") as f:
                json.dump(snapshot.model_dump(), f, indent=2, default=str)
            console.print(f"\n[green]Saved to {output}[/green]")

    try:
        asyncio.run(fetch_inventory())
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def metadata(
    collection: str = typer.Argument(..., help=f"Collection key ({', '.join(NFT_COLLECTIONS)})"),
    token_id: str = typer.Argument(..., help="Token ID"),
    owner: Optional[str] = typer.Option(None, "--owner", help="Owner address (speeds up catalog lookups)"),
):
    """Look up the image and name of one token"""
    if collection not in NFT_COLLECTIONS:
        console.print(f"[red]Unknown collection: {collection}[/red]")
        raise typer.Exit(code=1)

    result = asyncio.run(
        fetch_token_metadata(IndexerFallbackChain.from_config(config), collection, token_id, owner)
    )
    console.print(f"Name:  {result.name or 'Unnamed'}")
    console.print(f"Image: {result.image_url or 'Unknown'}")


@app.command()
def endpoints(
    chain: str = typer.Argument("ethereum", help="Chain (ethereum, base)"),
):
    """Show the RPC pool for a chain and which endpoint answers first"""
    chain_enum = Chain.from_string(chain)
    pool = config.get_rpc_pool(chain_enum)

    table = Table(title=f"RPC pool: {chain_enum.value}")
    table.add_column("#", style="cyan")
    table.add_column("Endpoint", style="white")
    for index, url in enumerate(pool, start=1):
        table.add_row(str(index), url)
    console.print(table)

    try:
        provider = asyncio.run(resolve_live_endpoint(pool, timeout=config.timeout))
        console.print(f"[green]Live endpoint: {provider.url}[/green]")
    except EndpointPoolExhausted as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def serve_relay(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run the relay on"),
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
):
    """Start the indexer relay server"""
    import uvicorn
    from nft_inventory.relay.app import app as relay_app

    console.print(f"[bold green]Starting relay on {host}:{port}[/bold green]")
    console.print("[dim]Endpoints:[/dim]")
    console.print("  GET  /proxy?owner=&contractAddress=&chain=")
    console.print("  GET  /inventory/{wallet}")
    console.print("  GET  /health")

    uvicorn.run(relay_app, host=host, port=port)


if __name__ == "__main__":
    app()
