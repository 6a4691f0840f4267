"""Pydantic v2 data models for FTX REST results.

Field names are snake_case in Python and camelCase on the wire. Prices and
sizes are ``Decimal`` and travel as exact JSON numbers in both directions:
``loads_exact`` parses non-integer numbers straight into ``Decimal`` and
``dumps_exact`` writes a ``Decimal`` back out with its own digits.
"""

import json
import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Exact price or size (pydantic rejects NaN and infinities for Decimal)
Fixed = Decimal

# (price, size) level as sent by the exchange
PriceQty = tuple[Fixed, Fixed]

# Decimals are first encoded as marked strings, then unquoted
_DECIMAL_MARK = "\x00decimal:"
_MARKED_DECIMAL = re.compile(r'"\\u0000decimal:([-+0-9.eE]+)"')


def loads_exact(raw: str | bytes) -> Any:
    """Parse JSON, keeping every non-integer number as an exact ``Decimal``."""
    return json.loads(raw, parse_float=Decimal)


def _encode_decimal(value: Any) -> str:
    if isinstance(value, Decimal) and value.is_finite():
        return f"{_DECIMAL_MARK}{value}"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps_exact(data: Any) -> str:
    """Serialize to compact JSON, writing ``Decimal`` values as bare numbers."""
    text = json.dumps(data, separators=(",", ":"), default=_encode_decimal)
    return _MARKED_DECIMAL.sub(r"\1", text)


class FtxModel(BaseModel):
    """Base for all wire models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class OrderSide(str, Enum):
    """Order side (for trades, the taker side)."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Order type."""

    LIMIT = "limit"
    MARKET = "market"


class OrderStatus(str, Enum):
    """Order status."""

    NEW = "new"
    OPEN = "open"
    CLOSED = "closed"


class TriggerOrderType(str, Enum):
    """Conditional order kind."""

    STOP = "stop"
    TRAILING_STOP = "trailing_stop"
    TAKE_PROFIT = "take_profit"


class TriggerOrderStatus(str, Enum):
    """Conditional order status."""

    OPEN = "open"
    CANCELLED = "cancelled"
    TRIGGERED = "triggered"


class DepositStatus(str, Enum):
    """Deposit/withdrawal status."""

    CONFIRMED = "confirmed"
    UNCONFIRMED = "unconfirmed"
    CANCELLED = "cancelled"
    REQUESTED = "requested"
    PROCESSING = "processing"
    COMPLETE = "complete"


class TimeResolution(int, Enum):
    """Candle window length in seconds."""

    T15S = 15
    T1M = 60
    T5M = 300
    T15M = 900
    T1H = 3600
    T4H = 14400
    T1D = 86400


# =============================================================================
# Markets
# =============================================================================


class Market(FtxModel):
    """Spot or futures market.

    Freshly listed markets can have no bid/ask/last yet, so those are optional.
    """

    name: str
    type: Literal["spot", "future"]
    base_currency: str | None = None
    quote_currency: str | None = None
    underlying: str | None = None
    enabled: bool
    ask: Fixed | None = None
    bid: Fixed | None = None
    price: Fixed | None = None
    last: Fixed | None = None
    post_only: bool = False
    price_increment: Fixed
    size_increment: Fixed
    restricted: bool = False
    min_provide_size: Fixed | None = None
    high_leverage_fee_exempt: bool = False
    # to_camel would capitalize the letter after the digits
    change_1h: float | None = Field(default=None, alias="change1h")
    change_24h: float | None = Field(default=None, alias="change24h")
    change_bod: float | None = None
    quote_volume_24h: float | None = Field(default=None, alias="quoteVolume24h")
    volume_usd_24h: float | None = Field(default=None, alias="volumeUsd24h")


class Orderbook(FtxModel):
    asks: list[PriceQty]
    bids: list[PriceQty]


class Trade(FtxModel):
    id: int
    liquidation: bool
    side: OrderSide
    size: Fixed
    price: Fixed
    time: datetime


class HistoricalPrice(FtxModel):
    close: Fixed
    high: Fixed
    low: Fixed
    open: Fixed
    start_time: datetime
    volume: float


# =============================================================================
# Subaccounts
# =============================================================================


class Subaccount(FtxModel):
    nickname: str
    special: bool = False
    deletable: bool = True
    editable: bool = True
    competition: bool = False


class SubaccountTransferResult(FtxModel):
    id: int
    coin: str
    size: Fixed
    time: datetime
    notes: str = ""


# =============================================================================
# Account and wallet
# =============================================================================


class Balance(FtxModel):
    coin: str
    free: Fixed
    total: Fixed
    usd_value: float
    spot_borrow: Fixed = Decimal(0)
    available_without_borrow: Fixed = Decimal(0)


class Position(FtxModel):
    """Futures position."""

    future: str
    side: OrderSide
    size: Fixed
    net_size: Fixed
    long_order_size: Fixed = Decimal(0)
    short_order_size: Fixed = Decimal(0)
    cost: Fixed = Decimal(0)
    entry_price: Fixed | None = None
    unrealized_pnl: float = 0.0
    realized_pnl: float = 0.0
    initial_margin_requirement: float | None = None
    maintenance_margin_requirement: float | None = None
    open_size: Fixed | None = None
    collateral_used: float | None = None
    estimated_liquidation_price: float | None = None


class AccountInformation(FtxModel):
    username: str
    backstop_provider: bool
    collateral: Fixed
    free_collateral: Fixed
    leverage: float
    initial_margin_requirement: float
    liquidating: bool
    maintenance_margin_requirement: float
    maker_fee: float
    taker_fee: float
    margin_fraction: float | None = None
    open_margin_fraction: float | None = None
    total_account_value: float
    total_position_size: float
    position_limit: float | None = None
    position_limit_used: float | None = None
    use_ftt_collateral: bool = False
    charge_interest_on_negative_usd: bool = False
    spot_margin_enabled: bool = False
    spot_lending_enabled: bool = False
    positions: list[Position] = Field(default_factory=list)


class Coin(FtxModel):
    id: str
    name: str
    fiat: bool = False
    is_token: bool = False
    is_etf: bool = False
    hidden: bool = False
    can_deposit: bool = False
    can_withdraw: bool = False
    can_convert: bool = False
    collateral: bool = False
    collateral_weight: float = 0.0
    methods: list[str] = Field(default_factory=list)
    credit_to: str | None = None
    bep2_asset: str | None = None
    erc20_contract: str | None = None
    spl_mint: str | None = None
    usd_fungible: bool = False
    has_tag: bool = False
    spot_margin: bool = False
    index_price: float | None = None


class Address(FtxModel):
    address: str
    tag: str | None = None
    method: str | None = None


class TransactionHistoryEntry(FtxModel):
    """Deposit or withdrawal.

    Transfers between subaccounts carry only the common fields; on-chain
    transactions add fee, status, confirmations and address data.
    """

    coin: str
    id: int
    size: Fixed
    time: datetime
    notes: str | None = None
    fee: Fixed | None = None
    status: DepositStatus | None = None
    confirmations: int | None = None
    sent_time: datetime | None = None
    confirmed_time: datetime | None = None
    txid: str | None = None
    address: Address | None = None

    @property
    def is_subaccount_transfer(self) -> bool:
        return self.status is None and self.address is None


# =============================================================================
# Orders
# =============================================================================


class Order(FtxModel):
    id: int
    market: str
    created_at: datetime
    type: OrderType
    side: OrderSide
    price: Fixed | None = None
    size: Fixed
    filled_size: Fixed
    remaining_size: Fixed
    avg_fill_price: Fixed | None = None
    status: OrderStatus
    future: str | None = None
    reduce_only: bool = False
    ioc: bool = False
    post_only: bool = False
    client_id: str | None = None


class TriggerOrder(FtxModel):
    """Conditional (stop, trailing stop, take profit) order."""

    id: int
    market: str
    created_at: datetime
    type: TriggerOrderType
    order_type: OrderType
    trail_start: Fixed | None = None
    trail_value: Fixed | None = None
    order_price: Fixed | None = None
    trigger_price: Fixed | None = None
    side: OrderSide
    size: Fixed
    filled_size: Fixed = Decimal(0)
    avg_fill_price: Fixed | None = None
    status: TriggerOrderStatus
    # None until triggered
    triggered_at: datetime | None = None
    future: str | None = None
    reduce_only: bool = False
    client_id: str | None = None
    retry_until_filled: bool = False


class Trigger(FtxModel):
    """One firing of a conditional order: either the placed order or an error."""

    time: datetime
    order_size: Fixed | None = None
    filled_size: Fixed | None = None
    order_id: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


__all__ = [
    "AccountInformation",
    "Address",
    "Balance",
    "Coin",
    "DepositStatus",
    "Fixed",
    "FtxModel",
    "HistoricalPrice",
    "Market",
    "Order",
    "OrderSide",
    "OrderStatus",
    "OrderType",
    "Orderbook",
    "Position",
    "PriceQty",
    "Subaccount",
    "SubaccountTransferResult",
    "TimeResolution",
    "Trade",
    "TransactionHistoryEntry",
    "Trigger",
    "TriggerOrder",
    "TriggerOrderStatus",
    "TriggerOrderType",
    "dumps_exact",
    "loads_exact",
]
