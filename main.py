#!/usr/bin/env python3
"""
NFT Atlas CLI entrypoint
"""

import asyncio
import json
import sys
from typing import Optional, Any

import typer
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from loguru import logger

from nft_atlas import MultiChainNFTAggregator, SearchQuery
from nft_atlas.config import config
from nft_atlas.storage import get_storage_adapter
from nft_atlas.providers import ProviderFactory
from nft_atlas.utils import validate_address

app = typer.Typer(help="NFT Atlas - Multi-chain NFT aggregation")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    """Configure logging"""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def _build_aggregator(chains: Optional[str] = None) -> MultiChainNFTAggregator:
    factory = ProviderFactory(config, storage=get_storage_adapter(config))
    aggregator = MultiChainNFTAggregator(config, factory=factory)
    if chains:
        wanted = []
        for value in chains.split(","):
            chain = aggregator.catalog.resolve(value.strip())
            if chain is None:
                raise typer.BadParameter(f"Unknown chain '{value.strip()}'")
            wanted.append(chain.chain_id)
        for chain_id in list(aggregator.enabled_chains):
            aggregator.toggle_chain(chain_id, False)
        for chain_id in wanted:
            aggregator.toggle_chain(chain_id, True)
    return aggregator


def _check_address(aggregator: MultiChainNFTAggregator, address: str) -> None:
    """Reject an address that no enabled chain accepts"""
    slugs = [
        aggregator.catalog.get(chain_id).slug
        for chain_id in aggregator.get_enabled_chains()
        if chain_id in aggregator.catalog
    ]
    if not any(validate_address(address, slug)[0] for slug in slugs):
        raise typer.BadParameter(f"'{address}' is not a valid address on the selected chains")


async def _closing(aggregator: MultiChainNFTAggregator, coro):
    """Run a command body, then release the cache connection"""
    try:
        return await coro
    finally:
        storage = aggregator.factory.storage
        if storage is not None:
            await storage.close()


def _shorten(value: Optional[str], width: int = 20) -> str:
    value = value or ""
    return value[:width] + "..." if len(value) > width else value


def _save(output: Optional[str], payload: Any):
    if not output:
        return
    with open(output, "w") as f:
        json.dump(payload, f, indent=2, default=str)
    console.print(f"\n[green]Saved to {output}[/green]")


async def _with_spinner(description: str, coro):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(description, total=None)
        result = await coro
        progress.update(task, completed=True)
    return result


@app.command()
def wallet(
    address: str = typer.Argument(..., help="Wallet address"),
    chains: Optional[str] = typer.Option(None, help="Comma-separated chains (ids or names), default: enabled chains"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (JSON)"),
):
    """Get all NFTs owned by a wallet across chains"""

    aggregator = _build_aggregator(chains)
    _check_address(aggregator, address)

    async def fetch_nfts():
        await aggregator.initialize_providers()
        response = await _with_spinner(
            f"Fetching NFTs for {address}...", aggregator.get_all_nfts(address)
        )

        console.print(f"\n[bold green]Found {response.total_count} NFTs[/bold green]")

        if response.nfts:
            table = Table(title=f"NFTs for {address}")
            table.add_column("Chain", style="cyan")
            table.add_column("Contract", style="magenta")
            table.add_column("Token ID", style="yellow")
            table.add_column("Name", style="white")
            table.add_column("Price", style="green")

            for nft in response.nfts[:20]:  # Show first 20
                table.add_row(
                    nft.blockchain,
                    _shorten(nft.contract_address),
                    _shorten(nft.token_id),
                    nft.name or "Unnamed",
                    f"{nft.price} {nft.currency}" if nft.price else "-",
                )

            console.print(table)

            if response.total_count > 20:
                console.print(f"\n[dim]... and {response.total_count - 20} more[/dim]")

        for chain_id, items in response.chains.items():
            console.print(f"[dim]chain {chain_id}: {len(items)}[/dim]")

        _save(output, [nft.dict() for nft in response.nfts])

    asyncio.run(_closing(aggregator, fetch_nfts()))


@app.command()
def collections(
    address: str = typer.Argument(..., help="Wallet address"),
    chains: Optional[str] = typer.Option(None, help="Comma-separated chains (ids or names)"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (JSON)"),
):
    """Group a wallet's NFTs into collections"""

    aggregator = _build_aggregator(chains)
    _check_address(aggregator, address)

    async def fetch_collections():
        await aggregator.initialize_providers()
        response = await _with_spinner(
            f"Fetching collections for {address}...", aggregator.get_all_collections(address)
        )

        console.print(f"\n[bold green]Found {len(response.collections)} collections[/bold green]")

        if response.collections:
            table = Table(title=f"Collections for {address}")
            table.add_column("Chain", style="cyan")
            table.add_column("Name", style="white")
            table.add_column("Contract", style="magenta")
            table.add_column("Items", style="yellow")

            for item in response.collections:
                table.add_row(item.blockchain, item.name, _shorten(item.contract_address), str(len(item.items)))

            console.print(table)

        _save(output, [c.dict() for c in response.collections])

    asyncio.run(_closing(aggregator, fetch_collections()))


@app.command()
def search(
    text: Optional[str] = typer.Argument(None, help="Contract address, collection slug or symbol"),
    category: Optional[str] = typer.Option(None, help="Category attribute"),
    blockchain: Optional[str] = typer.Option(None, help="Chain name, slug or id"),
    price_min: Optional[float] = typer.Option(None, "--price-min"),
    price_max: Optional[float] = typer.Option(None, "--price-max"),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="price_asc, price_desc, created_desc"),
    sort_order: Optional[str] = typer.Option(None, "--sort-order", help="asc or desc"),
    offset: int = typer.Option(0, min=0),
    limit: int = typer.Option(50, min=1),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (JSON)"),
):
    """Search listings across enabled chains (trending when no text is given)"""
    query = SearchQuery(
        text=text,
        category=category,
        blockchain=blockchain,
        price_min=price_min,
        price_max=price_max,
        sort_by=sort_by,
        sort_order=sort_order,
        offset=offset,
        limit=limit,
    )

    aggregator = _build_aggregator()

    async def run_search():
        await aggregator.initialize_providers()
        result = await _with_spinner("Searching...", aggregator.search_nfts(query))

        console.print(f"\n[bold green]{result.total} matches[/bold green]")
        if result.items:
            table = Table(title="Listings")
            table.add_column("Chain", style="cyan")
            table.add_column("Title", style="white")
            table.add_column("Category", style="magenta")
            table.add_column("Price", style="green")
            for listing in result.items:
                table.add_row(listing.blockchain, listing.title, listing.category, f"{listing.price} {listing.currency}")
            console.print(table)

        if result.filters.categories:
            console.print("Categories: " + ", ".join(f"{f.name} ({f.count})" for f in result.filters.categories))
        if result.filters.blockchains:
            console.print("Chains: " + ", ".join(f"{f.name} ({f.count})" for f in result.filters.blockchains))
        console.print(f"Price range: {result.filters.price_range.min} - {result.filters.price_range.max}")
        if result.has_more:
            console.print(f"[dim]More results after offset {offset + limit}[/dim]")

        _save(output, result.dict())

    asyncio.run(_closing(aggregator, run_search()))


@app.command()
def chains():
    """List supported chains"""
    aggregator = MultiChainNFTAggregator(config)
    table = Table(title="Supported chains")
    table.add_column("ID", style="yellow")
    table.add_column("Name", style="white")
    table.add_column("Currency", style="green")
    table.add_column("Standards", style="magenta")
    table.add_column("Enabled", style="cyan")
    enabled = set(aggregator.get_enabled_chains())
    for chain in aggregator.get_supported_chains():
        table.add_row(
            str(chain.chain_id),
            chain.display_name,
            chain.native_currency,
            ", ".join(sorted(chain.token_standards)),
            "✓" if chain.chain_id in enabled else "✗",
        )
    console.print(table)


@app.command()
def status(
    chains: Optional[str] = typer.Option(None, help="Comma-separated chains (ids or names)"),
):
    """Test every provider's data sources"""

    aggregator = _build_aggregator(chains)

    async def run_status():
        await aggregator.initialize_providers()
        reports = await _with_spinner("Testing connections...", aggregator.test_connections())
        stats = aggregator.get_chain_statistics()

        table = Table(title="Provider status")
        table.add_column("Chain", style="white")
        table.add_column("Enabled", style="cyan")
        table.add_column("RPC configured", style="yellow")
        table.add_column("Working sources", style="green")
        for chain_id, stat in stats.items():
            report = reports.get(chain_id)
            table.add_row(
                stat.name,
                "✓" if stat.enabled else "✗",
                "✓" if stat.is_connected else "✗",
                ", ".join(report.working_sources) if report and report.working_sources else "-",
            )
        console.print(table)

    asyncio.run(_closing(aggregator, run_status()))


if __name__ == "__main__":
    app()
