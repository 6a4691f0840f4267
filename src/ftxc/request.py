"""Typed request descriptors, one class per REST operation.

Each descriptor fixes, at class level, its HTTP method, whether it must be
signed, its endpoint template, and the type its result decodes into. The
instance carries the operation's parameters:

- fields declared with ``path_field()`` are interpolated into the endpoint
  and never sent as query or body parameters;
- for GET, the remaining non-None fields become the query string;
- for POST/DELETE, the remaining fields become the JSON body.

USAGE:
    from ftxc import FtxClient
    from ftxc.request import PlaceOrder
    from ftxc.models import OrderSide, OrderType

    order = await client.request(
        PlaceOrder(
            market="BNB/USD",
            side=OrderSide.SELL,
            price=Decimal("600.0"),
            type=OrderType.LIMIT,
            size=Decimal("0.01"),
        )
    )
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ftxc import models
from ftxc.models import (
    Fixed,
    OrderSide,
    OrderType,
    TimeResolution,
    TriggerOrderType,
    dumps_exact,
)

HttpMethod = Literal["GET", "POST", "DELETE"]


def path_field(**kwargs: Any) -> Any:
    """Declare a field that is rendered into the endpoint path only."""
    return Field(exclude=True, **kwargs)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class OrderId(BaseModel):
    """Address an order by its exchange-assigned id."""

    model_config = ConfigDict(frozen=True)

    id: int

    @property
    def path_segment(self) -> str:
        return str(self.id)


class ClientOrderId(BaseModel):
    """Address an order by the client id it was placed with."""

    model_config = ConfigDict(frozen=True)

    client_id: str

    @property
    def path_segment(self) -> str:
        return f"by_client_id/{self.client_id}"


OrderRequestId = OrderId | ClientOrderId


class Request(BaseModel):
    """Base class for all REST operations.

    Subclasses set the class variables below. Query parameters use the
    exchange's snake_case names; body parameters are camelCase (see
    ``BodyRequest``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: ClassVar[HttpMethod] = "GET"
    needs_auth: ClassVar[bool] = True
    api_path: ClassVar[str]
    response_type: ClassVar[Any] = Any

    def render_endpoint(self) -> str:
        """Render the endpoint path from the template and path fields."""
        values = {
            name: getattr(getattr(self, name), "path_segment", getattr(self, name))
            for name, info in type(self).model_fields.items()
            if info.exclude
        }
        return self.api_path.format(**values)

    def to_query_params(self) -> list[tuple[str, str]]:
        """Flatten the non-path, non-None fields into query pairs."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return [(key, _query_value(value)) for key, value in data.items()]

    def to_json_body(self) -> str:
        """Serialize the non-path fields as a compact JSON object.

        Unset optional fields are sent as ``null``; decimals keep their exact
        digits.
        """
        return dumps_exact(self.model_dump(by_alias=True))


class BodyRequest(Request):
    """Base for POST/DELETE operations: camelCase body keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    method: ClassVar[HttpMethod] = "POST"


# =============================================================================
# Subaccounts
# =============================================================================


class Subaccounts(Request):
    """List all subaccounts."""

    api_path: ClassVar[str] = "/subaccounts"
    response_type: ClassVar[Any] = list[models.Subaccount]


class CreateSubaccount(BodyRequest):
    api_path: ClassVar[str] = "/subaccounts"
    response_type: ClassVar[Any] = models.Subaccount

    nickname: str


class SubaccountUpdateName(BodyRequest):
    api_path: ClassVar[str] = "/subaccounts/update_name"

    nickname: str
    new_nickname: str


class SubaccountBalances(Request):
    api_path: ClassVar[str] = "/subaccounts/{nickname}/balances"
    response_type: ClassVar[Any] = list[models.Balance]

    nickname: str = path_field()


class DeleteSubaccount(BodyRequest):
    method: ClassVar[HttpMethod] = "DELETE"
    api_path: ClassVar[str] = "/subaccounts"

    nickname: str


class SubaccountTransfer(BodyRequest):
    """Move funds between subaccounts ("main" is the main account)."""

    api_path: ClassVar[str] = "/subaccounts/transfer"
    response_type: ClassVar[Any] = models.SubaccountTransferResult

    coin: str
    size: Fixed
    source: str
    destination: str


# =============================================================================
# Markets (public)
# =============================================================================


class Markets(Request):
    """Obtain a list of all markets listed on the exchange."""

    needs_auth: ClassVar[bool] = False
    api_path: ClassVar[str] = "/markets"
    response_type: ClassVar[Any] = list[models.Market]


class Market(Request):
    needs_auth: ClassVar[bool] = False
    api_path: ClassVar[str] = "/markets/{market_name}"
    response_type: ClassVar[Any] = models.Market

    market_name: str = path_field()


class Orderbook(Request):
    needs_auth: ClassVar[bool] = False
    api_path: ClassVar[str] = "/markets/{market_name}/orderbook"
    response_type: ClassVar[Any] = models.Orderbook

    market_name: str = path_field()
    depth: int | None = None


class Trades(Request):
    needs_auth: ClassVar[bool] = False
    api_path: ClassVar[str] = "/markets/{market_name}/trades"
    response_type: ClassVar[Any] = list[models.Trade]

    market_name: str = path_field()
    limit: int | None = None
    start_time: int | None = None
    end_time: int | None = None


class HistoricalPrices(Request):
    needs_auth: ClassVar[bool] = False
    api_path: ClassVar[str] = "/markets/{market_name}/candles"
    response_type: ClassVar[Any] = list[models.HistoricalPrice]

    market_name: str = path_field()
    resolution: TimeResolution
    limit: int | None = None
    start_time: int | None = None
    end_time: int | None = None


# =============================================================================
# Account and wallet
# =============================================================================


class AccountInformation(Request):
    api_path: ClassVar[str] = "/account"
    response_type: ClassVar[Any] = models.AccountInformation


class Coins(Request):
    api_path: ClassVar[str] = "/wallet/coins"
    response_type: ClassVar[Any] = list[models.Coin]


class Balances(Request):
    api_path: ClassVar[str] = "/wallet/balances"
    response_type: ClassVar[Any] = list[models.Balance]


class AllAccountBalances(Request):
    """Balances of every subaccount, keyed by nickname ("main" included)."""

    api_path: ClassVar[str] = "/wallet/all_balances"
    response_type: ClassVar[Any] = dict[str, list[models.Balance]]


class DepositAddress(Request):
    api_path: ClassVar[str] = "/wallet/deposit_address/{coin}"
    response_type: ClassVar[Any] = models.Address

    coin: str = path_field()
    # "method" is taken by the HTTP method class variable
    deposit_method: str | None = Field(default=None, alias="method")


class DepositHistory(Request):
    api_path: ClassVar[str] = "/wallet/deposits"
    response_type: ClassVar[Any] = list[models.TransactionHistoryEntry]

    limit: int | None = None
    start_time: int | None = None
    end_time: int | None = None


class WithdrawalHistory(Request):
    api_path: ClassVar[str] = "/wallet/withdrawals"
    response_type: ClassVar[Any] = list[models.TransactionHistoryEntry]

    limit: int | None = None
    start_time: int | None = None
    end_time: int | None = None


# =============================================================================
# Orders
# =============================================================================


class OpenOrders(Request):
    api_path: ClassVar[str] = "/orders"
    response_type: ClassVar[Any] = list[models.Order]

    market: str | None = None


class OrderHistory(Request):
    api_path: ClassVar[str] = "/orders/history"
    response_type: ClassVar[Any] = list[models.Order]

    market: str | None = None
    start_time: int | None = None
    end_time: int | None = None
    limit: int | None = None


class OpenTriggerOrders(Request):
    api_path: ClassVar[str] = "/conditional_orders"
    response_type: ClassVar[Any] = list[models.TriggerOrder]

    market: str | None = None
    type_: TriggerOrderType | None = Field(default=None, alias="type")


class TriggerOrderHistory(Request):
    api_path: ClassVar[str] = "/conditional_orders/history"
    response_type: ClassVar[Any] = list[models.TriggerOrder]

    market: str | None = None
    side: OrderSide | None = None
    type_: TriggerOrderType | None = Field(default=None, alias="type")
    order_type: OrderType | None = Field(default=None, alias="orderType")
    start_time: int | None = None
    end_time: int | None = None
    limit: int | None = None


class Triggers(Request):
    """Trigger history of one conditional order."""

    api_path: ClassVar[str] = "/conditional_orders/{trigger_order_id}/triggers"
    response_type: ClassVar[Any] = list[models.Trigger]

    trigger_order_id: int = path_field()


class PlaceOrder(BodyRequest):
    """Place a limit or market order.

    ``price`` is required for limit orders and must be None for market orders.
    """

    api_path: ClassVar[str] = "/orders"
    response_type: ClassVar[Any] = models.Order

    market: str
    side: OrderSide
    price: Fixed | None = None
    type_: OrderType = Field(default=OrderType.LIMIT, alias="type")
    size: Fixed
    reduce_only: bool = False
    ioc: bool = False
    post_only: bool = False
    client_id: str | None = None

    @model_validator(mode="after")
    def check_price_matches_type(self) -> PlaceOrder:
        if self.type_ is OrderType.LIMIT and self.price is None:
            raise ValueError("limit orders need a price")
        if self.type_ is OrderType.MARKET and self.price is not None:
            raise ValueError("market orders take no price")
        return self


class OrderStatus(Request):
    api_path: ClassVar[str] = "/orders/{order_request_id}"
    response_type: ClassVar[Any] = models.Order

    order_request_id: OrderRequestId = path_field()


class ModifyOrder(BodyRequest):
    """Change price and/or size; the exchange cancels and re-places the order."""

    api_path: ClassVar[str] = "/orders/{order_request_id}/modify"
    response_type: ClassVar[Any] = models.Order

    order_request_id: OrderRequestId = path_field()
    price: Fixed | None = None
    size: Fixed | None = None
    client_id: str | None = None


class CancelOrder(BodyRequest):
    method: ClassVar[HttpMethod] = "DELETE"
    api_path: ClassVar[str] = "/orders/{order_request_id}"

    order_request_id: OrderRequestId = path_field()


class CancelAllOrders(BodyRequest):
    method: ClassVar[HttpMethod] = "DELETE"
    api_path: ClassVar[str] = "/orders"

    market: str | None = None
    conditional_orders_only: bool = False
    limit_orders_only: bool = False


class CancelTriggerOrder(BodyRequest):
    method: ClassVar[HttpMethod] = "DELETE"
    api_path: ClassVar[str] = "/conditional_orders/{trigger_order_id}"

    trigger_order_id: int = path_field()


__all__ = [
    "AccountInformation",
    "AllAccountBalances",
    "Balances",
    "BodyRequest",
    "CancelAllOrders",
    "CancelOrder",
    "CancelTriggerOrder",
    "ClientOrderId",
    "Coins",
    "CreateSubaccount",
    "DeleteSubaccount",
    "DepositAddress",
    "DepositHistory",
    "HistoricalPrices",
    "HttpMethod",
    "Market",
    "Markets",
    "ModifyOrder",
    "OpenOrders",
    "OpenTriggerOrders",
    "OrderHistory",
    "OrderId",
    "OrderRequestId",
    "OrderStatus",
    "Orderbook",
    "PlaceOrder",
    "Request",
    "SubaccountBalances",
    "SubaccountTransfer",
    "SubaccountUpdateName",
    "Subaccounts",
    "Trades",
    "TriggerOrderHistory",
    "Triggers",
    "WithdrawalHistory",
    "path_field",
]
