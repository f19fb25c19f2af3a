"""Shared fixtures: gateway config, sample orders and an in-memory order store."""

import json
from decimal import Decimal

import httpx
import pytest

from paymee_gateway.models import GatewayConfig, Order, OrderFee, OrderItem, OrderTax
from paymee_gateway.orders import TRANSACTION_TOKEN_META_KEY, payment_meta_data


class FakeStore:
    """OrderStore stand-in keeping everything in dicts."""

    def __init__(self, orders=()):
        self.orders = {order.id: order for order in orders}
        self.meta = {}
        self.statuses = {}
        self.notes = []

    def get_order(self, order_id):
        return self.orders.get(order_id)

    def save_checkout_token(self, order_id, token, redirect_url):
        self.meta.setdefault(order_id, {}).update(
            {TRANSACTION_TOKEN_META_KEY: token, "Payment URL": redirect_url}
        )

    def save_payment_meta_data(self, order_id, notification):
        self.meta.setdefault(order_id, {}).update(payment_meta_data(notification))

    def update_status(self, order_id, status, note=""):
        if status is not None:
            self.statuses[order_id] = status
        if note:
            self.notes.append((order_id, note))


def json_transport(status_code=200, body=None, content=None, seen=None):
    """MockTransport answering every request with a fixed response."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, content=json.dumps(body).encode())

    return httpx.MockTransport(handler)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    return GatewayConfig(
        api_key="key-123",
        api_token="token-456",
        invoice_prefix="WC-",
        callback_url="https://shop.example.com/?wc-api=paymee_ipn_listener",
    )


@pytest.fixture
def order():
    return Order(
        id=42,
        total=Decimal("157.90"),
        billing_first_name="Maria",
        billing_last_name="Silva",
        billing_email="maria@example.com",
        billing_cpf="123.456.789-09",
        items=[
            OrderItem(name="Camiseta <b>Azul</b>", quantity=2, unit_total=Decimal("49.9")),
            OrderItem(name="Brinde", quantity=1, unit_total=Decimal("0")),
            OrderItem(name="Sem estoque", quantity=0, unit_total=Decimal("10")),
        ],
        fees=[
            OrderFee(name="Embalagem para presente", line_total=Decimal("5")),
            OrderFee(name="Desconto PIX", line_total=Decimal("-2.50")),
        ],
        taxes=[
            OrderTax(label="ICMS", tax_amount=Decimal("3.10"), shipping_tax_amount=Decimal("1")),
            OrderTax(label="Isento", tax_amount=Decimal("0")),
        ],
        shipping_total=Decimal("12.5"),
    )


@pytest.fixture
def store(order):
    return FakeStore([order])
