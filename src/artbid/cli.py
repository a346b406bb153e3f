"""ArtBid CLI for administration and demos."""

import asyncio
from datetime import datetime
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .errors import ArtBidError

app = typer.Typer(name="artbid", help="ArtBid - mobile-number art auction")
window_app = typer.Typer(help="Show or change the auction window")
app.add_typer(window_app, name="window")
console = Console()


def run_with_engine(fn):
    """Run ``fn(engine)`` on a fresh event loop and report business errors."""
    from .engine import close_engine, get_engine

    async def _run():
        engine = await get_engine()
        try:
            return await fn(engine)
        finally:
            await close_engine()

    try:
        return asyncio.run(_run())
    except ArtBidError as e:
        console.print(f"[bold red]{e.code}:[/] {e.message}")
        raise typer.Exit(code=1)


def _money(value: float) -> str:
    return f"₹{value:,.2f}"


# ============================================================
# Server / Setup
# ============================================================

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP API."""
    import uvicorn
    from .config import get_settings

    settings = get_settings()
    uvicorn.run(
        "artbid.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


@app.command()
def setup():
    """Initialize storage (MongoDB indexes)."""
    async def _setup(engine):
        await engine.store.setup()
        console.print("[bold green]Setup complete![/]")

    run_with_engine(_setup)


# ============================================================
# Auction Window
# ============================================================

@window_app.command("show")
def show_window():
    """Show the configured auction window and its state."""
    async def _show(engine):
        settings = await engine.clock.settings()
        state = await engine.clock.state()
        if settings is None:
            console.print(f"[yellow]No auction window configured[/] (state: {state.value})")
            return
        console.print(Panel(
            f"""[bold]Start:[/] {settings.start_date.isoformat()}
[bold]End:[/] {settings.end_date.isoformat()}
[bold]State:[/] {state.value}""",
            title="Auction Window",
        ))

    run_with_engine(_show)


@window_app.command("set")
def set_window(
    start: datetime = typer.Option(..., help="Window start (UTC)"),
    end: datetime = typer.Option(..., help="Window end (UTC)"),
):
    """Replace the auction window."""
    async def _set(engine):
        settings = await engine.clock.configure(start, end)
        state = await engine.clock.state()
        console.print(
            f"[green]Auction window set:[/] {settings.start_date.isoformat()} -> "
            f"{settings.end_date.isoformat()} ({state.value})"
        )

    run_with_engine(_set)


# ============================================================
# Catalog / Users
# ============================================================

@app.command()
def add_painting(
    artist: str = typer.Option(..., help="Artist name"),
    name: str = typer.Option(..., help="Painting name"),
    base_price: float = typer.Option(..., help="Opening price"),
    image_url: Optional[str] = typer.Option(None, help="Image URL"),
):
    """List a new painting."""
    async def _add(engine):
        painting = await engine.registry.create_painting(
            artist_name=artist,
            painting_name=name,
            base_price=base_price,
            image_url=image_url,
        )
        console.print(Panel(
            f"""[bold]Painting ID:[/] {painting.painting_id}
[bold]Name:[/] {painting.painting_name}
[bold]Artist:[/] {painting.artist_name}
[bold]Base Price:[/] {_money(painting.base_price)}""",
            title="[green]Painting Listed[/]",
        ))

    run_with_engine(_add)


@app.command()
def register(
    first_name: str = typer.Option(..., help="First name"),
    last_name: str = typer.Option(..., help="Last name"),
    mobile: str = typer.Option(..., help="10-digit mobile number"),
):
    """Register a bidder."""
    async def _register(engine):
        user = await engine.registry.register_user(first_name, last_name, mobile)
        console.print(f"[green]Registered[/] {user.full_name} ({user.mobile}) as {user.user_id}")

    run_with_engine(_register)


@app.command()
def paintings():
    """List paintings with their current price."""
    async def _list(engine):
        views = await engine.queries.list_paintings()
        if not views:
            console.print("[yellow]No paintings listed yet.[/]")
            return

        table = Table(title="Paintings")
        table.add_column("ID", style="cyan")
        table.add_column("Painting", style="green")
        table.add_column("Artist")
        table.add_column("Base", justify="right")
        table.add_column("Current", justify="right")
        table.add_column("Bidders", justify="right")

        for v in views:
            table.add_row(
                v.painting_id,
                v.painting_name,
                v.artist_name,
                _money(v.base_price),
                _money(v.current_price),
                str(v.total_bidders),
            )

        console.print(table)

    run_with_engine(_list)


# ============================================================
# Bidding
# ============================================================

@app.command()
def bid(
    mobile: str = typer.Option(..., help="Bidder's mobile number"),
    painting_id: str = typer.Option(..., help="Painting ID"),
    amount: float = typer.Option(..., help="Bid amount"),
):
    """Place a bid."""
    async def _bid(engine):
        receipt = await engine.bids.submit_bid(mobile, painting_id, amount)
        rank_color = "green" if receipt.rank == 1 else "yellow"
        console.print(Panel(
            f"""[bold]Bid ID:[/] {receipt.bid_id}
[bold]Amount:[/] {_money(receipt.amount)}
[bold]Rank:[/] [{rank_color}]#{receipt.rank}[/]
[bold]Current Highest:[/] {_money(receipt.current_highest_bid)}
[bold]Total Bidders:[/] {receipt.total_bidders}""",
            title="[green]Bid Accepted[/]",
        ))

    run_with_engine(_bid)


@app.command()
def my_bids(mobile: str = typer.Option(..., help="Bidder's mobile number")):
    """Show a bidder's bids and current ranks."""
    async def _list(engine):
        rows = await engine.queries.bids_for_user(mobile)
        if not rows:
            console.print("[yellow]No bids found.[/]")
            return

        table = Table(title=f"Bids for {mobile}")
        table.add_column("Painting", style="green")
        table.add_column("Your Bid", justify="right")
        table.add_column("Rank", justify="right")
        table.add_column("Highest", justify="right")
        table.add_column("Placed")

        for r in rows:
            rank_color = "green" if r.rank == 1 else "yellow"
            table.add_row(
                r.painting.painting_name,
                _money(r.amount),
                f"[{rank_color}]#{r.rank}[/]",
                _money(r.current_highest_bid),
                r.bid_time.strftime("%Y-%m-%d %H:%M:%S"),
            )

        console.print(table)

    run_with_engine(_list)


@app.command()
def dashboard():
    """Show auction totals."""
    async def _dashboard(engine):
        totals = await engine.queries.dashboard_totals()
        console.print(Panel.fit(
            f"Paintings: [cyan]{totals.total_paintings}[/]\n"
            f"Bidders: [cyan]{totals.total_users}[/]\n"
            f"Bids: [cyan]{totals.total_bids}[/]\n"
            f"Total bid value: [green]{_money(totals.total_bid_value)}[/]",
            title="Dashboard",
        ))

    run_with_engine(_dashboard)


if __name__ == "__main__":
    app()
