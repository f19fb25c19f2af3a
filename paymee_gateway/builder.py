"""Translate a store order into the PayMee checkout schema.

Everything here is a pure transformation of the order; nothing touches the
network or the order store.
"""

import re
from decimal import ROUND_HALF_UP, Decimal

from .models import CheckoutPayload, GatewayConfig, LineItem, Order, OrderItems, Shopper

DESCRIPTION_MAX_LENGTH = 95
CHECKOUT_MAX_AGE_MINUTES = 1440

_TAG_RE = re.compile(r"<[^>]*>")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_SPACES_RE = re.compile(r"\s+")
_CENTS = Decimal("0.01")


def money_format(value) -> str:
    """Two fraction digits, '.' separator, no grouping, whatever the locale."""

    amount = Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return format(amount, "f")


def sanitize_description(description) -> str:
    text = str(description).replace("&ndash;", "-")
    text = _TAG_RE.sub("", text)
    text = text.replace("<", "").replace(">", "")
    text = _CONTROL_RE.sub(" ", text)
    text = _SPACES_RE.sub(" ", text).strip()
    return text[:DESCRIPTION_MAX_LENGTH].rstrip()


def get_order_items(order: Order, send_only_total: bool) -> OrderItems:
    if send_only_total:
        return OrderItems(
            items=[
                LineItem(
                    description=sanitize_description(f"Order {order.get_order_number()}"),
                    amount=money_format(order.total),
                    quantity=1,
                )
            ]
        )

    items = []
    for item in order.items:
        if not item.quantity or item.unit_total <= 0:
            continue
        items.append(
            LineItem(
                description=sanitize_description(item.name),
                amount=money_format(item.unit_total),
                quantity=item.quantity,
            )
        )

    for fee in order.fees:
        if fee.line_total <= 0:
            continue
        items.append(
            LineItem(
                description=sanitize_description(fee.name),
                amount=money_format(fee.line_total),
                quantity=1,
            )
        )

    for tax in order.taxes:
        tax_total = tax.tax_amount + tax.shipping_tax_amount
        if tax_total <= 0:
            continue
        items.append(
            LineItem(
                description=sanitize_description(tax.label),
                amount=money_format(tax_total),
                quantity=1,
            )
        )

    shipping_cost = money_format(order.shipping_total) if order.shipping_total > 0 else ""
    extra_amount = "-" + money_format(order.discount_total) if order.discount_total > 0 else ""
    return OrderItems(items=items, extra_amount=extra_amount, shipping_cost=shipping_cost)


def reference_code(invoice_prefix: str, order_id) -> str:
    return f"{invoice_prefix}{order_id}"


def build_checkout_payload(order: Order, config: GatewayConfig) -> CheckoutPayload:
    return CheckoutPayload(
        currency="BRL",
        amount=order.total,
        reference_code=reference_code(config.invoice_prefix, order.id),
        max_age=CHECKOUT_MAX_AGE_MINUTES,
        callback_url=config.callback_url,
        shopper=Shopper(
            first_name=order.billing_first_name,
            last_name=order.billing_last_name,
            cpf=order.billing_cpf,
            email=order.billing_email,
        ),
        order_items=get_order_items(order, config.send_only_total),
    )
