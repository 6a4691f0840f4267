"""FTX client CLI.

Commands:
    ftxc markets        - List markets
    ftxc orderbook      - Show the top of a market's orderbook
    ftxc balances       - Show wallet balances (needs credentials)
    ftxc open-orders    - Show open orders (needs credentials)
    ftxc stream         - Subscribe to a channel and print incoming messages

Credentials are read from FTX_PUBLIC_KEY / FTX_PRIVATE_KEY / FTX_SUBACCOUNT
or a .env file.
"""

import asyncio
from typing import Annotated, Any

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ftxc import __version__
from ftxc.client import FtxClient
from ftxc.config import get_settings
from ftxc.errors import DecodeError, FtxError, ProtocolViolation
from ftxc.logging import setup_logging
from ftxc.models.websocket import (
    Closed,
    FillsChannel,
    MarketsChannel,
    OrderbookChannel,
    OrdersChannel,
    TickerChannel,
    TradesChannel,
)
from ftxc.request import Balances, Markets, OpenOrders, Orderbook, Request

app = typer.Typer(
    name="ftxc",
    help="FTX API client - market data, account queries and streaming",
    no_args_is_help=True,
)
console = Console()

MARKET_CHANNELS = {"orderbook": OrderbookChannel, "trades": TradesChannel, "ticker": TickerChannel}
ACCOUNT_CHANNELS = {"markets": MarketsChannel, "fills": FillsChannel, "orders": OrdersChannel}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        rprint(f"ftxc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    _version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Enable verbose logging"),
    ] = False,
) -> None:
    """FTX API client."""
    setup_logging(level="DEBUG" if verbose else "WARNING")


def make_client() -> FtxClient:
    """Build a client from the environment."""
    return FtxClient(settings=get_settings())


async def _run_request(request: Request) -> Any:
    async with make_client() as client:
        return await client.request(request)


def _execute(request: Request) -> Any:
    try:
        return asyncio.run(_run_request(request))
    except FtxError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e


# =============================================================================
# REST Commands
# =============================================================================


@app.command()
def markets(
    quote: Annotated[
        str | None,
        typer.Option("--quote", "-q", help="Only spot markets quoted in this currency"),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-l", help="Rows to show")] = 50,
) -> None:
    """List markets."""
    result = _execute(Markets())
    if quote:
        result = [m for m in result if m.quote_currency == quote.upper()]

    table = Table(title=f"Markets ({len(result)})")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Bid", justify="right")
    table.add_column("Ask", justify="right")
    table.add_column("Last", justify="right")
    table.add_column("Volume 24h (USD)", justify="right", style="green")

    for market in result[:limit]:
        table.add_row(
            market.name,
            market.type,
            str(market.bid or "-"),
            str(market.ask or "-"),
            str(market.last or "-"),
            f"{market.volume_usd_24h or 0:,.0f}",
        )

    console.print(table)


@app.command()
def orderbook(
    market: Annotated[str, typer.Argument(help="Market name, e.g. BTC/USD")],
    depth: Annotated[int, typer.Option("--depth", "-d", help="Levels per side")] = 10,
) -> None:
    """Show the top of a market's orderbook."""
    book = _execute(Orderbook(market_name=market, depth=depth))

    table = Table(title=f"{market} orderbook")
    table.add_column("Bid size", justify="right", style="green")
    table.add_column("Bid", justify="right", style="green")
    table.add_column("Ask", justify="right", style="red")
    table.add_column("Ask size", justify="right", style="red")

    for i in range(max(len(book.bids), len(book.asks))):
        bid = book.bids[i] if i < len(book.bids) else ("", "")
        ask = book.asks[i] if i < len(book.asks) else ("", "")
        table.add_row(str(bid[1]), str(bid[0]), str(ask[0]), str(ask[1]))

    console.print(table)


@app.command()
def balances() -> None:
    """Show wallet balances of the selected (sub)account."""
    result = _execute(Balances())

    if not result:
        console.print("[dim]No balances[/dim]")
        return

    table = Table(title="Balances")
    table.add_column("Coin", style="cyan")
    table.add_column("Free", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("USD value", justify="right", style="green")

    for balance in result:
        table.add_row(
            balance.coin,
            str(balance.free),
            str(balance.total),
            f"${balance.usd_value:,.2f}",
        )

    console.print(table)


@app.command("open-orders")
def open_orders(
    market: Annotated[str | None, typer.Option("--market", "-m", help="Filter by market")] = None,
) -> None:
    """Show open orders."""
    result = _execute(OpenOrders(market=market))

    if not result:
        console.print("[dim]No open orders[/dim]")
        return

    table = Table(title="Open Orders")
    table.add_column("ID", style="dim")
    table.add_column("Market", style="cyan")
    table.add_column("Side")
    table.add_column("Type")
    table.add_column("Price", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Filled", justify="right")
    table.add_column("Client ID", style="dim")

    for order in result:
        table.add_row(
            str(order.id),
            order.market,
            order.side.value,
            order.type.value,
            str(order.price if order.price is not None else "-"),
            str(order.size),
            str(order.filled_size),
            order.client_id or "",
        )

    console.print(table)


# =============================================================================
# Stream Command
# =============================================================================


async def _stream(channel: Any, login: bool, count: int | None) -> None:
    async with make_client() as client:
        async with await client.websocket() as ws:
            if login:
                await client.send_ws_login(ws)
            await ws.subscribe(channel)

            received = 0
            while count is None or received < count:
                try:
                    message = await ws.recv()
                except (DecodeError, ProtocolViolation) as e:
                    # the session survives a bad message
                    console.print(f"[yellow]Skipped: {escape(str(e))}[/yellow]")
                    continue
                if message is None:
                    break
                console.print(message)
                received += 1
                if isinstance(message, Closed):
                    break


@app.command()
def stream(
    channel: Annotated[
        str,
        typer.Argument(help="orderbook, trades, ticker, markets, fills or orders"),
    ],
    market: Annotated[
        str | None,
        typer.Option("--market", "-m", help="Market for orderbook/trades/ticker"),
    ] = None,
    login: Annotated[
        bool,
        typer.Option("--login", help="Authenticate first (required for fills/orders)"),
    ] = False,
    count: Annotated[
        int | None,
        typer.Option("--count", "-n", help="Stop after this many messages"),
    ] = None,
) -> None:
    """Subscribe to a channel and print incoming messages.

    Example:
        ftxc stream orderbook --market BTC/USD
        ftxc stream orders --login
    """
    name = channel.lower()
    if name in MARKET_CHANNELS:
        if not market:
            console.print(f"[red]--market is required for the {name} channel[/red]")
            raise typer.Exit(1)
        subscription = MARKET_CHANNELS[name](market=market)
    elif name in ACCOUNT_CHANNELS:
        subscription = ACCOUNT_CHANNELS[name]()
    else:
        console.print(f"[red]Unknown channel: {channel}[/red]")
        raise typer.Exit(1)

    try:
        asyncio.run(_stream(subscription, login, count))
    except FtxError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")


if __name__ == "__main__":
    app()
