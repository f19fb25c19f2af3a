"""PostgreSQL-backed order store and payment metadata writer.

Tables (owned by the store platform):
  orders(id, order_number, total, currency, status, payment_method,
         billing_first_name, billing_last_name, billing_email, billing_cpf,
         billing_country, shipping_total, discount_total, updated_at)
  order_items(order_id, name, quantity, unit_total)
  order_fees(order_id, name, line_total)
  order_taxes(order_id, label, tax_amount, shipping_tax_amount)
  order_meta(order_id, meta_key, meta_value jsonb), unique (order_id, meta_key)
  order_notes(order_id, note, created_at)
"""

from typing import Optional

from psycopg.types.json import Jsonb

from .db import get_conn
from .errors import get_payment_method_name, get_payment_name_by_type
from .models import IpnNotification, Order
from .settings import DATABASE_URL

PAYMENT_DATA_META_KEY = "_wc_paymee_payment_data"
TRANSACTION_TOKEN_META_KEY = "_paymee_transaction_token"


def payment_meta_data(notification: IpnNotification) -> dict:
    """Order meta entries describing how the buyer paid."""

    meta = {}
    payment_data = {"type": "", "method": "", "installments": "", "link": ""}

    sender = notification.sender
    if sender is not None and sender.email is not None:
        meta["Payer email"] = sender.email.strip()
    if sender is not None and sender.name is not None:
        meta["Payer name"] = sender.name.strip()

    method = notification.payment_method
    if method is not None and method.type is not None:
        payment_data["type"] = method.type
        meta["Payment type"] = get_payment_name_by_type(method.type)
    if method is not None and method.code is not None:
        payment_data["method"] = get_payment_method_name(method.code)
        meta["Payment method"] = payment_data["method"]

    if notification.payment_link is not None:
        payment_data["link"] = notification.payment_link.strip()
        meta["Payment URL"] = payment_data["link"]

    meta[PAYMENT_DATA_META_KEY] = payment_data
    return meta


class OrderStore:
    def __init__(self, database_url: str = DATABASE_URL, connect=get_conn):
        self.database_url = database_url
        self._connect = connect

    def connect(self):
        return self._connect(self.database_url)

    def get_order(self, order_id: int) -> Optional[Order]:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT id, order_number, total, currency, status, payment_method, "
                "billing_first_name, billing_last_name, billing_email, billing_cpf, billing_country, "
                "shipping_total, discount_total FROM orders WHERE id = %s",
                (order_id,),
            ).fetchone()
            if not row:
                return None

            items = conn.execute(
                "SELECT name, quantity, unit_total FROM order_items WHERE order_id = %s ORDER BY id",
                (order_id,),
            ).fetchall()
            fees = conn.execute(
                "SELECT name, line_total FROM order_fees WHERE order_id = %s ORDER BY id",
                (order_id,),
            ).fetchall()
            taxes = conn.execute(
                "SELECT label, tax_amount, shipping_tax_amount FROM order_taxes WHERE order_id = %s ORDER BY id",
                (order_id,),
            ).fetchall()

        return Order(**row, items=items, fees=fees, taxes=taxes)

    def update_meta(self, order_id: int, meta: dict) -> None:
        with self.connect() as conn:
            for key, value in meta.items():
                conn.execute(
                    "INSERT INTO order_meta(order_id, meta_key, meta_value) VALUES (%s, %s, %s) "
                    "ON CONFLICT (order_id, meta_key) DO UPDATE SET meta_value = EXCLUDED.meta_value",
                    (order_id, key, Jsonb(value)),
                )

    def save_checkout_token(self, order_id: int, token: str, redirect_url: str) -> None:
        self.update_meta(order_id, {TRANSACTION_TOKEN_META_KEY: token, "Payment URL": redirect_url})

    def save_payment_meta_data(self, order_id: int, notification: IpnNotification) -> None:
        self.update_meta(order_id, payment_meta_data(notification))

    def update_status(self, order_id: int, status: Optional[str], note: str = "") -> None:
        with self.connect() as conn:
            if status is not None:
                conn.execute(
                    "UPDATE orders SET status = %s, updated_at = NOW() WHERE id = %s",
                    (status, order_id),
                )
            if note:
                conn.execute(
                    "INSERT INTO order_notes(order_id, note) VALUES (%s, %s)",
                    (order_id, note),
                )
