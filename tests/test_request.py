"""Tests for request descriptors: endpoints, query strings and JSON bodies."""

import json
from decimal import Decimal

import pytest
from pydantic import ValidationError

from ftxc import models
from ftxc.models import OrderSide, OrderType, TimeResolution, TriggerOrderType
from ftxc.request import (
    AccountInformation,
    AllAccountBalances,
    Balances,
    CancelAllOrders,
    CancelOrder,
    CancelTriggerOrder,
    ClientOrderId,
    CreateSubaccount,
    DeleteSubaccount,
    DepositAddress,
    HistoricalPrices,
    Market,
    Markets,
    ModifyOrder,
    OpenOrders,
    OpenTriggerOrders,
    OrderHistory,
    OrderId,
    Orderbook,
    OrderStatus,
    PlaceOrder,
    SubaccountBalances,
    SubaccountTransfer,
    SubaccountUpdateName,
    Trades,
    TriggerOrderHistory,
    Triggers,
)

# =============================================================================
# Class-level Contract Tests
# =============================================================================


class TestDescriptorContract:
    """Tests for method, auth and response type declarations."""

    @pytest.mark.parametrize(
        ("request_cls", "method", "needs_auth"),
        [
            (Markets, "GET", False),
            (Market, "GET", False),
            (Orderbook, "GET", False),
            (Trades, "GET", False),
            (HistoricalPrices, "GET", False),
            (AccountInformation, "GET", True),
            (Balances, "GET", True),
            (OpenOrders, "GET", True),
            (PlaceOrder, "POST", True),
            (ModifyOrder, "POST", True),
            (CreateSubaccount, "POST", True),
            (SubaccountTransfer, "POST", True),
            (CancelOrder, "DELETE", True),
            (CancelAllOrders, "DELETE", True),
            (DeleteSubaccount, "DELETE", True),
            (CancelTriggerOrder, "DELETE", True),
        ],
    )
    def test_method_and_auth(self, request_cls: type, method: str, needs_auth: bool) -> None:
        """Each operation declares its method and auth requirement."""
        assert request_cls.method == method
        assert request_cls.needs_auth is needs_auth

    def test_response_types(self) -> None:
        """Response types point at the matching models."""
        assert Markets.response_type == list[models.Market]
        assert Market.response_type is models.Market
        assert PlaceOrder.response_type is models.Order
        assert AllAccountBalances.response_type == dict[str, list[models.Balance]]

    def test_descriptors_are_immutable(self) -> None:
        """Descriptors cannot be mutated after construction."""
        request = OpenOrders(market="BTC-PERP")
        with pytest.raises(ValidationError):
            request.market = "ETH-PERP"  # type: ignore[misc]


# =============================================================================
# Endpoint Rendering Tests
# =============================================================================


class TestRenderEndpoint:
    """Tests for endpoint templates."""

    def test_static_endpoint(self) -> None:
        assert Markets().render_endpoint() == "/markets"
        assert Balances().render_endpoint() == "/wallet/balances"

    def test_market_name_in_path(self) -> None:
        """Market names are inserted as-is."""
        assert Market(market_name="BTC-PERP").render_endpoint() == "/markets/BTC-PERP"
        assert (
            Orderbook(market_name="BTC/USD", depth=20).render_endpoint()
            == "/markets/BTC/USD/orderbook"
        )

    def test_subaccount_in_path(self) -> None:
        assert (
            SubaccountBalances(nickname="trading").render_endpoint()
            == "/subaccounts/trading/balances"
        )

    def test_order_id(self) -> None:
        """Exchange ids address /orders/{id}."""
        request = OrderStatus(order_request_id=OrderId(id=12345))
        assert request.render_endpoint() == "/orders/12345"

    def test_client_order_id(self) -> None:
        """Client ids address /orders/by_client_id/{id}."""
        request = CancelOrder(order_request_id=ClientOrderId(client_id="my-order"))
        assert request.render_endpoint() == "/orders/by_client_id/my-order"

    def test_modify_order(self) -> None:
        request = ModifyOrder(order_request_id=OrderId(id=7), price=Decimal("1.5"))
        assert request.render_endpoint() == "/orders/7/modify"

    def test_trigger_ids(self) -> None:
        assert Triggers(trigger_order_id=9).render_endpoint() == "/conditional_orders/9/triggers"
        assert CancelTriggerOrder(trigger_order_id=9).render_endpoint() == "/conditional_orders/9"

    def test_deposit_address(self) -> None:
        request = DepositAddress(coin="USDT", deposit_method="erc20")
        assert request.render_endpoint() == "/wallet/deposit_address/USDT"


# =============================================================================
# Query Parameter Tests
# =============================================================================


class TestQueryParams:
    """Tests for GET query rendering."""

    def test_no_params(self) -> None:
        """Parameterless reads render no pairs."""
        assert Markets().to_query_params() == []
        assert OpenOrders().to_query_params() == []

    def test_path_fields_excluded(self) -> None:
        """Fields rendered into the path are not repeated in the query."""
        assert Market(market_name="BTC-PERP").to_query_params() == []
        assert Orderbook(market_name="BTC-PERP", depth=20).to_query_params() == [("depth", "20")]

    def test_none_fields_omitted(self) -> None:
        request = OrderHistory(market="BTC-PERP", limit=100)
        assert request.to_query_params() == [("market", "BTC-PERP"), ("limit", "100")]

    def test_enum_values(self) -> None:
        """Enums render as their wire values."""
        request = HistoricalPrices(
            market_name="BTC-PERP",
            resolution=TimeResolution.T1H,
            start_time=1559881511,
        )
        assert request.to_query_params() == [("resolution", "3600"), ("start_time", "1559881511")]

    def test_aliased_query_names(self) -> None:
        """Python-side names that shadow builtins use their wire names."""
        request = TriggerOrderHistory(
            market="BTC-PERP",
            side=OrderSide.BUY,
            type_=TriggerOrderType.STOP,
            order_type=OrderType.MARKET,
        )
        assert request.to_query_params() == [
            ("market", "BTC-PERP"),
            ("side", "buy"),
            ("type", "stop"),
            ("orderType", "market"),
        ]

    def test_construct_by_wire_name(self) -> None:
        """Descriptors accept wire names as well."""
        request = OpenTriggerOrders(type="take_profit")  # type: ignore[call-arg]
        assert request.to_query_params() == [("type", "take_profit")]

    def test_deposit_method(self) -> None:
        request = DepositAddress(coin="USDT", deposit_method="trx")
        assert request.to_query_params() == [("method", "trx")]


# =============================================================================
# JSON Body Tests
# =============================================================================


class TestJsonBody:
    """Tests for POST/DELETE body rendering."""

    def test_place_limit_order(self) -> None:
        """Limit order body has camelCase keys in declaration order."""
        request = PlaceOrder(
            market="BNB/USD",
            side=OrderSide.SELL,
            price=Decimal("600.0"),
            type_=OrderType.LIMIT,
            size=Decimal("0.01"),
        )
        assert request.to_json_body() == (
            '{"market":"BNB/USD","side":"sell","price":600.0,"type":"limit",'
            '"size":0.01,"reduceOnly":false,"ioc":false,"postOnly":false,'
            '"clientId":null}'
        )

    def test_place_market_order(self) -> None:
        """Market orders send a null price."""
        request = PlaceOrder(
            market="BTC-PERP",
            side=OrderSide.BUY,
            type_=OrderType.MARKET,
            size=Decimal("1"),
            client_id="abc",
        )
        body = json.loads(request.to_json_body())
        assert body["price"] is None
        assert body["type"] == "market"
        assert body["clientId"] == "abc"

    def test_limit_order_needs_price(self) -> None:
        with pytest.raises(ValidationError):
            PlaceOrder(market="BTC-PERP", side=OrderSide.BUY, size=Decimal("1"))

    def test_market_order_rejects_price(self) -> None:
        with pytest.raises(ValidationError):
            PlaceOrder(
                market="BTC-PERP",
                side=OrderSide.BUY,
                type_=OrderType.MARKET,
                price=Decimal("100"),
                size=Decimal("1"),
            )

    def test_modify_order_keeps_nulls(self) -> None:
        """Unset optionals are sent as null and the path id is not in the body."""
        request = ModifyOrder(order_request_id=OrderId(id=1), price=Decimal("10000"))
        assert request.to_json_body() == '{"price":10000,"size":null,"clientId":null}'

    def test_cancel_order_empty_body(self) -> None:
        """Addressing happens in the path only."""
        request = CancelOrder(order_request_id=OrderId(id=1))
        assert request.to_json_body() == "{}"

    def test_cancel_all_orders(self) -> None:
        request = CancelAllOrders(market="BTC-PERP", limit_orders_only=True)
        assert json.loads(request.to_json_body()) == {
            "market": "BTC-PERP",
            "conditionalOrdersOnly": False,
            "limitOrdersOnly": True,
        }

    def test_subaccount_bodies(self) -> None:
        assert CreateSubaccount(nickname="sub").to_json_body() == '{"nickname":"sub"}'
        assert json.loads(
            SubaccountUpdateName(nickname="old", new_nickname="new").to_json_body()
        ) == {"nickname": "old", "newNickname": "new"}

    def test_subaccount_transfer(self) -> None:
        request = SubaccountTransfer(
            coin="USD",
            size=Decimal("25.5"),
            source="main",
            destination="trading",
        )
        assert json.loads(request.to_json_body()) == {
            "coin": "USD",
            "size": 25.5,
            "source": "main",
            "destination": "trading",
        }

    def test_decimal_digits_preserved(self) -> None:
        """Prices are written with every digit, as a bare JSON number."""
        decimal = "1.234599345987983745987345"
        request = ModifyOrder(
            order_request_id=ClientOrderId(client_id="client"),
            price=Decimal(decimal),
        )
        assert request.to_json_body() == f'{{"price":{decimal},"size":null,"clientId":null}}'

    def test_decimal_size_preserved(self) -> None:
        request = SubaccountTransfer(
            coin="BTC",
            size=Decimal("0.123456789012345678"),
            source="main",
            destination="trading",
        )
        body = request.to_json_body()

        assert '"size":0.123456789012345678' in body
        assert json.loads(body, parse_float=Decimal)["size"] == Decimal("0.123456789012345678")

    @pytest.mark.parametrize(
        ("value", "text"),
        [
            ("-0.5", "-0.5"),
            ("1E+2", "1E+2"),
            ("0.00000001", "1E-8"),
            ("42", "42"),
        ],
    )
    def test_decimal_forms_are_valid_json(self, value: str, text: str) -> None:
        """Every rendering of a decimal is a valid JSON number."""
        request = ModifyOrder(order_request_id=OrderId(id=1), size=Decimal(value))
        body = request.to_json_body()

        assert f'"size":{text}' in body
        assert json.loads(body, parse_float=Decimal)["size"] == Decimal(value)

    def test_non_finite_decimal_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ModifyOrder(order_request_id=OrderId(id=1), price=Decimal("NaN"))
