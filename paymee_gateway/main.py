from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .client import PaymentClient
from .gateway import InvalidReferenceError, OrderNotFoundError, PayMeeGateway
from .logging import configure_logging, logger
from .models import CheckoutResponse, GatewayConfig, IpnNotification, IpnResponse, Order
from .orders import OrderStore
from .settings import DATABASE_URL, LOG_LEVEL

IPN_LISTENER = "paymee_ipn_listener"

configure_logging(LOG_LEVEL)


def build_gateway() -> PayMeeGateway:
    config = GatewayConfig.from_settings()
    return PayMeeGateway(config, PaymentClient(config), OrderStore(DATABASE_URL))


app = FastAPI(title="PayMee Gateway", version="0.1.0")
app.state.gateway = build_gateway()


def get_gateway(request: Request) -> PayMeeGateway:
    return request.app.state.gateway


@app.get("/health")
def health():
    return {"ok": True}


@app.get("/gateway")
def gateway_info(gateway: PayMeeGateway = Depends(get_gateway)):
    return gateway.info()


@app.get("/admin/notices")
def admin_notices(gateway: PayMeeGateway = Depends(get_gateway)):
    return {"notices": gateway.admin_notices()}


@app.get("/orders/{order_id}", response_model=Order)
def get_order(order_id: int, gateway: PayMeeGateway = Depends(get_gateway)):
    try:
        return gateway.get_order(order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")


@app.post("/checkout/{order_id}", response_model=CheckoutResponse)
async def checkout(
    order_id: int,
    country: Optional[str] = None,
    gateway: PayMeeGateway = Depends(get_gateway),
):
    try:
        order = gateway.get_order(order_id)
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")

    if not gateway.is_available():
        raise HTTPException(status_code=409, detail="PayMee is not available")
    if not gateway.is_available_for_country(country or order.billing_country):
        raise HTTPException(status_code=409, detail="PayMee is only available in Brazil")

    resp = await gateway.process_payment(order)
    if resp.result == "fail":
        return JSONResponse(status_code=402, content=resp.model_dump())
    return resp


@app.api_route("/", methods=["GET", "POST"], response_model=IpnResponse)
async def ipn_listener(
    request: Request,
    wc_api: Optional[str] = Query(None, alias="wc-api"),
    gateway: PayMeeGateway = Depends(get_gateway),
):
    """
    PayMee IPN listener (`/?wc-api=paymee_ipn_listener`).

    No signature is checked and duplicate deliveries are re-applied.
    """
    if wc_api != IPN_LISTENER:
        raise HTTPException(status_code=404, detail="Not found")

    body = await request.body()
    if not body:
        logger.warning("empty PayMee notification method=%s", request.method)
        raise HTTPException(status_code=400, detail="PayMee Request Failure")
    try:
        notification = IpnNotification.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("invalid PayMee notification errors=%s", exc.error_count())
        raise HTTPException(status_code=400, detail="PayMee Request Failure")

    try:
        return gateway.handle_ipn(notification)
    except InvalidReferenceError:
        raise HTTPException(status_code=400, detail="PayMee Request Failure")
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
