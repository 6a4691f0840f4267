"""WebSocket message models.

Outbound messages are discriminated by ``op``, inbound ones by ``type``.
Channel-bearing messages carry the channel flattened into the top level:

    {"op": "subscribe", "channel": "orderbook", "market": "BTC/USD"}
    {"type": "partial", "channel": "orderbook", "market": "BTC/USD", "data": {...}}

Inbound decoding runs in two stages: ``type`` selects the message kind,
then for partial/update messages ``channel`` selects the payload shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    model_serializer,
    model_validator,
)

from ftxc.models import Fixed, FtxModel, Order, OrderSide, PriceQty

# =============================================================================
# Channels
# =============================================================================


class _Channel(BaseModel):
    model_config = ConfigDict(frozen=True)


class OrderbookChannel(_Channel):
    channel: Literal["orderbook"] = "orderbook"
    market: str


class TradesChannel(_Channel):
    channel: Literal["trades"] = "trades"
    market: str


class TickerChannel(_Channel):
    channel: Literal["ticker"] = "ticker"
    market: str


class MarketsChannel(_Channel):
    channel: Literal["markets"] = "markets"


class FillsChannel(_Channel):
    channel: Literal["fills"] = "fills"


class OrdersChannel(_Channel):
    channel: Literal["orders"] = "orders"


Channel = Annotated[
    Union[
        OrderbookChannel,
        TradesChannel,
        TickerChannel,
        MarketsChannel,
        FillsChannel,
        OrdersChannel,
    ],
    Field(discriminator="channel"),
]


def _nest_channel(data: Any) -> Any:
    """Gather the flattened ``channel``/``market`` keys under ``channel``."""
    if not isinstance(data, dict) or isinstance(data.get("channel"), (dict, BaseModel)):
        return data
    rest = dict(data)
    nested = {"channel": rest.pop("channel", None)}
    if "market" in rest:
        nested["market"] = rest.pop("market")
    rest["channel"] = nested
    return rest


# =============================================================================
# Outbound messages
# =============================================================================


class LoginArgs(BaseModel):
    key: str
    sign: str
    time: int
    subaccount: str | None = None

    def __repr__(self) -> str:
        return f"LoginArgs(key=..., sign=..., time={self.time}, subaccount={self.subaccount!r})"


class Login(BaseModel):
    op: Literal["login"] = "login"
    args: LoginArgs


class _ChannelOp(BaseModel):
    channel: Channel

    @model_serializer(mode="wrap")
    def flatten_channel(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        data.update(data.pop("channel"))
        return data


class Subscribe(_ChannelOp):
    op: Literal["subscribe"] = "subscribe"


class Unsubscribe(_ChannelOp):
    op: Literal["unsubscribe"] = "unsubscribe"


class Ping(BaseModel):
    op: Literal["ping"] = "ping"


OutMessage = Union[Login, Subscribe, Unsubscribe, Ping]


# =============================================================================
# Channel payloads
# =============================================================================


class OrderbookSnapshot(FtxModel):
    """Orderbook levels; a partial is the full book, an update carries changes."""

    bids: list[PriceQty]
    asks: list[PriceQty]
    time: float
    checksum: int
    action: Literal["partial", "update"] | None = None


class WsTrade(FtxModel):
    id: int | None = None
    price: Fixed
    size: Fixed
    # side of the taker
    side: OrderSide
    liquidation: bool
    time: datetime


class Ticker(FtxModel):
    bid: Fixed | None = None
    ask: Fixed | None = None
    bid_size: Fixed | None = None
    ask_size: Fixed | None = None
    last: Fixed | None = None
    time: float


class WsMarket(FtxModel):
    name: str
    type: Literal["spot", "future"]
    base_currency: str | None = None
    quote_currency: str | None = None
    underlying: str | None = None
    enabled: bool
    price_increment: Fixed
    size_increment: Fixed
    restricted: bool = False


class MarketsCatalogue(FtxModel):
    data: dict[str, WsMarket]
    action: Literal["partial", "update"] | None = None


class Fill(FtxModel):
    id: int
    market: str
    future: str | None = None
    base_currency: str | None = None
    quote_currency: str | None = None
    type: str
    side: OrderSide
    price: Fixed
    size: Fixed
    order_id: int | None = None
    trade_id: int | None = None
    time: datetime
    fee: Fixed
    fee_rate: Fixed
    fee_currency: str | None = None
    liquidity: Literal["maker", "taker"]


class OrderbookData(BaseModel):
    channel: Literal["orderbook"] = "orderbook"
    market: str
    data: OrderbookSnapshot


class TradesData(BaseModel):
    channel: Literal["trades"] = "trades"
    market: str
    data: list[WsTrade]


class TickerData(BaseModel):
    channel: Literal["ticker"] = "ticker"
    market: str
    data: Ticker


class MarketsData(BaseModel):
    channel: Literal["markets"] = "markets"
    data: MarketsCatalogue


class FillsData(BaseModel):
    channel: Literal["fills"] = "fills"
    data: Fill


class OrdersData(BaseModel):
    channel: Literal["orders"] = "orders"
    data: Order


ChannelData = Annotated[
    Union[OrderbookData, TradesData, TickerData, MarketsData, FillsData, OrdersData],
    Field(discriminator="channel"),
]


# =============================================================================
# Inbound messages
# =============================================================================


class _ChannelAck(BaseModel):
    channel: Channel

    @model_validator(mode="before")
    @classmethod
    def nest_channel(cls, data: Any) -> Any:
        return _nest_channel(data)


class Subscribed(_ChannelAck):
    type: Literal["subscribed"] = "subscribed"


class Unsubscribed(_ChannelAck):
    type: Literal["unsubscribed"] = "unsubscribed"


class Pong(BaseModel):
    type: Literal["pong"] = "pong"


class Error(BaseModel):
    type: Literal["error"] = "error"
    code: int
    msg: str


class Info(BaseModel):
    """Server notice; code 20001 asks the client to reconnect."""

    type: Literal["info"] = "info"
    code: int
    msg: str


class _ChannelMessage(BaseModel):
    data: ChannelData

    @model_validator(mode="before")
    @classmethod
    def nest_payload(cls, data: Any) -> Any:
        """Move the flattened channel, market and data keys under ``data``."""
        if not isinstance(data, dict) or "channel" not in data:
            return data
        rest = dict(data)
        payload = {"channel": rest.pop("channel")}
        for key in ("market", "data"):
            if key in rest:
                payload[key] = rest.pop(key)
        rest["data"] = payload
        return rest


class Partial(_ChannelMessage):
    type: Literal["partial"] = "partial"


class Update(_ChannelMessage):
    type: Literal["update"] = "update"


class Closed(BaseModel):
    """The server closed the connection; always the last message of a session."""

    type: Literal["closed"] = "closed"


WireMessage = Annotated[
    Union[Subscribed, Unsubscribed, Pong, Error, Info, Partial, Update],
    Field(discriminator="type"),
]

InMessage = Union[Subscribed, Unsubscribed, Pong, Error, Info, Partial, Update, Closed]

wire_message_adapter: TypeAdapter[Any] = TypeAdapter(WireMessage)


__all__ = [
    "Channel",
    "ChannelData",
    "Closed",
    "Error",
    "Fill",
    "FillsChannel",
    "FillsData",
    "InMessage",
    "Info",
    "Login",
    "LoginArgs",
    "MarketsCatalogue",
    "MarketsChannel",
    "MarketsData",
    "OrderbookChannel",
    "OrderbookData",
    "OrderbookSnapshot",
    "OrdersChannel",
    "OrdersData",
    "OutMessage",
    "Partial",
    "Ping",
    "Pong",
    "Subscribe",
    "Subscribed",
    "Ticker",
    "TickerChannel",
    "TickerData",
    "TradesChannel",
    "TradesData",
    "Unsubscribe",
    "Unsubscribed",
    "Update",
    "WireMessage",
    "WsMarket",
    "WsTrade",
    "wire_message_adapter",
]
