from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from . import settings

CheckoutStatus = Literal["success", "fail"]
OrderStatus = Literal["pending", "on-hold", "processing", "completed", "cancelled", "refunded", "failed"]


class OrderItem(BaseModel):
    name: str
    quantity: int = Field(ge=0)
    unit_total: Decimal


class OrderFee(BaseModel):
    name: str
    line_total: Decimal


class OrderTax(BaseModel):
    label: str
    tax_amount: Decimal = Decimal("0")
    shipping_tax_amount: Decimal = Decimal("0")


class Order(BaseModel):
    """Read-only view of a store order, as loaded from the order store."""

    id: int
    order_number: Optional[str] = None
    total: Decimal = Field(ge=0)
    currency: str = Field(default="BRL", min_length=3, max_length=3)
    status: OrderStatus = "pending"
    payment_method: str = ""
    billing_first_name: str = ""
    billing_last_name: str = ""
    billing_email: str = ""
    billing_cpf: str = ""
    billing_country: str = "BR"
    items: list[OrderItem] = Field(default_factory=list)
    fees: list[OrderFee] = Field(default_factory=list)
    taxes: list[OrderTax] = Field(default_factory=list)
    shipping_total: Decimal = Decimal("0")
    discount_total: Decimal = Decimal("0")

    def get_order_number(self) -> str:
        return self.order_number or str(self.id)


class LineItem(BaseModel):
    description: str = Field(max_length=95)
    amount: str
    quantity: int = Field(gt=0)


class OrderItems(BaseModel):
    items: list[LineItem] = Field(default_factory=list)
    extra_amount: str = ""
    shipping_cost: str = ""


class Shopper(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    cpf: str
    email: str


class CheckoutPayload(BaseModel):
    """Body of one checkout request; built fresh per attempt and never stored."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    currency: Literal["BRL"] = "BRL"
    amount: Decimal = Field(ge=0)
    reference_code: str = Field(alias="referenceCode", min_length=1)
    max_age: int = Field(default=1440, alias="maxAge")
    callback_url: str = Field(alias="callbackURL")
    shopper: Shopper
    order_items: OrderItems = Field(default_factory=OrderItems, exclude=True)

    @field_serializer("amount")
    def _amount_as_number(self, value: Decimal) -> float:
        return float(value)

    def to_wire(self) -> list[dict]:
        # PayMee expects the checkout object wrapped in a JSON array.
        return [self.model_dump(mode="json", by_alias=True)]


class CheckoutSuccess(BaseModel):
    kind: Literal["success"] = "success"
    redirect_url: str
    token: str

    @property
    def errors(self) -> list[str]:
        return []


class CredentialError(BaseModel):
    kind: Literal["credential_error"] = "credential_error"
    message: str

    @property
    def errors(self) -> list[str]:
        return [self.message]


class ApiError(BaseModel):
    kind: Literal["api_error"] = "api_error"
    messages: list[str] = Field(min_length=1)

    @property
    def errors(self) -> list[str]:
        return list(self.messages)


class TransportError(BaseModel):
    kind: Literal["transport_error"] = "transport_error"
    message: str

    @property
    def errors(self) -> list[str]:
        return [self.message]


CheckoutResult = Annotated[
    Union[CheckoutSuccess, CredentialError, ApiError, TransportError],
    Field(discriminator="kind"),
]


class IpnSender(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class IpnPaymentMethod(BaseModel):
    type: Optional[int] = None
    code: Optional[int] = None


class IpnNotification(BaseModel):
    """Asynchronous status notification posted by PayMee to the IPN listener."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    reference_code: str = Field(alias="referenceCode", min_length=1)
    new_status: str = Field(alias="newStatus")
    sender: Optional[IpnSender] = None
    payment_method: Optional[IpnPaymentMethod] = Field(default=None, alias="paymentMethod")
    payment_link: Optional[str] = Field(default=None, alias="paymentLink")


class CheckoutResponse(BaseModel):
    result: CheckoutStatus
    redirect: str
    errors: list[str] = Field(default_factory=list)


class IpnResponse(BaseModel):
    ok: bool
    order_id: int
    status: Optional[OrderStatus] = None


class GatewayConfig(BaseModel):
    """Merchant settings for one gateway instance. Read-only while checking out."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    title: str = "PayMee"
    description: str = ""
    method: Literal["redirect"] = "redirect"
    sandbox: bool = False
    api_key: str = ""
    api_token: str = ""
    send_only_total: bool = False
    invoice_prefix: str = "WC-"
    debug: bool = False
    callback_url: str
    store_currency: str = "BRL"
    timeout_seconds: float = Field(default=60.0, gt=0)

    @property
    def environment(self) -> str:
        return "apisandbox." if self.sandbox else "api."

    @classmethod
    def from_settings(cls) -> "GatewayConfig":
        return cls(
            enabled=settings.PAYMEE_ENABLED,
            title=settings.PAYMEE_TITLE,
            description=settings.PAYMEE_DESCRIPTION,
            method=settings.PAYMEE_METHOD,
            sandbox=settings.PAYMEE_SANDBOX,
            api_key=settings.PAYMEE_API_KEY,
            api_token=settings.PAYMEE_API_TOKEN,
            send_only_total=settings.PAYMEE_SEND_ONLY_TOTAL,
            invoice_prefix=settings.PAYMEE_INVOICE_PREFIX,
            debug=settings.PAYMEE_DEBUG,
            callback_url=f"{settings.SITE_URL}/?wc-api=paymee_ipn_listener",
            store_currency=settings.STORE_CURRENCY,
            timeout_seconds=settings.PAYMEE_TIMEOUT_SECONDS,
        )
