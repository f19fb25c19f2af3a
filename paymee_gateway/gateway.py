"""PayMee gateway: availability rules, checkout and IPN handling.

One gateway is built per process from an explicit GatewayConfig and handed to
the web layer; there is no global instance.
"""

from typing import Optional

from .builder import build_checkout_payload
from .client import ERROR_LABEL, PaymentClient
from .errors import GENERIC_ERROR_MESSAGE
from .logging import logger, order_id_ctx
from .models import CheckoutResponse, GatewayConfig, IpnNotification, IpnResponse, Order

GATEWAY_ID = "paymee"

# PayMee notification status -> store order status
IPN_STATUSES = {
    "PAID": "processing",
    "CANCELLED": "cancelled",
    "EXPIRED": "cancelled",
    "PENDING": "on-hold",
}


class OrderNotFoundError(LookupError):
    pass


class InvalidReferenceError(ValueError):
    pass


class PayMeeGateway:
    def __init__(self, config: GatewayConfig, client: PaymentClient, store) -> None:
        self.config = config
        self.client = client
        self.store = store

    def using_supported_currency(self) -> bool:
        return self.config.store_currency == "BRL"

    def is_available(self) -> bool:
        return (
            self.config.enabled
            and self.config.api_key != ""
            and self.config.api_token != ""
            and self.using_supported_currency()
        )

    def is_available_for_country(self, country: Optional[str]) -> bool:
        """The gateway is hidden from buyers outside Brazil."""

        return not country or country.upper() == "BR"

    def should_cancel_unpaid(self, order: Order, cancel: bool) -> bool:
        # PayMee orders stay open until the IPN arrives.
        if order.payment_method == GATEWAY_ID:
            return False
        return cancel

    def info(self) -> dict:
        return {
            "id": GATEWAY_ID,
            "title": self.config.title,
            "description": self.config.description,
            "method": self.config.method,
            "sandbox": self.config.sandbox,
            "available": self.is_available(),
        }

    def admin_notices(self) -> list[str]:
        if not self.config.enabled:
            return []
        notices = []
        if not self.using_supported_currency():
            notices.append(
                f"PayMee Disabled: currency {self.config.store_currency} is not supported, PayMee only works with BRL."
            )
        if self.config.api_key == "":
            notices.append("PayMee Disabled: você precisa informar sua x-api-key.")
        if self.config.api_token == "":
            notices.append("PayMee Disabled: você precisa informar sua x-api-token.")
        return notices

    def get_order(self, order_id: int) -> Order:
        order = self.store.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"order {order_id} not found")
        return order

    async def process_payment(self, order: Order) -> CheckoutResponse:
        token = order_id_ctx.set(str(order.id))
        try:
            payload = build_checkout_payload(order, self.config)
            result = await self.client.create_checkout(payload)
            if result.kind == "success":
                self.store.save_checkout_token(order.id, result.token, result.redirect_url)
                logger.info("checkout created order_id=%s reference=%s", order.id, payload.reference_code)
                return CheckoutResponse(result="success", redirect=result.redirect_url)

            logger.warning(
                "checkout failed order_id=%s reference=%s kind=%s errors=%s",
                order.id,
                payload.reference_code,
                result.kind,
                result.errors,
            )
            # Network failures reach the buyer as the generic message only.
            if result.kind == "transport_error":
                errors = [f"{ERROR_LABEL}: {GENERIC_ERROR_MESSAGE}"]
            else:
                errors = result.errors
            return CheckoutResponse(result="fail", redirect="", errors=errors)
        finally:
            order_id_ctx.reset(token)

    def order_id_from_reference(self, reference_code: str) -> int:
        prefix = self.config.invoice_prefix
        if not reference_code.startswith(prefix):
            raise InvalidReferenceError(f"reference {reference_code!r} does not use prefix {prefix!r}")
        suffix = reference_code[len(prefix):]
        if not (suffix.isascii() and suffix.isdigit()):
            raise InvalidReferenceError(f"reference {reference_code!r} has no order id")
        return int(suffix)

    def handle_ipn(self, notification: IpnNotification) -> IpnResponse:
        """Apply one PayMee notification. Repeated deliveries are applied again."""

        order_id = self.order_id_from_reference(notification.reference_code)
        token = order_id_ctx.set(str(order_id))
        try:
            self.get_order(order_id)
            self.store.save_payment_meta_data(order_id, notification)

            new_status = notification.new_status.strip().upper()
            status = IPN_STATUSES.get(new_status)
            self.store.update_status(order_id, status, f"PayMee: notification status {new_status}.")
            if status is None:
                logger.warning("unhandled PayMee status order_id=%s status=%s", order_id, new_status)
            else:
                logger.info("order status updated order_id=%s status=%s", order_id, status)
            return IpnResponse(ok=True, order_id=order_id, status=status)
        finally:
            order_id_ctx.reset(token)
