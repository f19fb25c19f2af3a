"""HTTP client for the PayMee checkout API.

Every outcome of a checkout call is folded into exactly one CheckoutResult
variant; nothing raised by the transport or by a bad body escapes to callers.
"""

import json
from typing import Optional

import httpx

from .errors import GENERIC_ERROR_MESSAGE, INVALID_CREDENTIALS_MESSAGE, get_error_message
from .logging import logger
from .models import (
    ApiError,
    CheckoutPayload,
    CheckoutResult,
    CheckoutSuccess,
    CredentialError,
    GatewayConfig,
    TransportError,
)

PAYMENT_URL = "https://www2.paymee.com.br/redir/{token}"
ERROR_LABEL = "PayMee"


def _labelled(message: str) -> str:
    return f"{ERROR_LABEL}: {message}"


class PaymentClient:
    def __init__(self, config: GatewayConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.config = config
        self.transport = transport

    @property
    def checkout_url(self) -> str:
        return f"https://{self.config.environment}paymee.com.br/v1/checkout"

    @staticmethod
    def payment_url(token: str) -> str:
        return PAYMENT_URL.format(token=token)

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json;charset=UTF-8",
            "x-api-key": self.config.api_key,
            "x-api-token": self.config.api_token,
        }

    def _debug(self, msg: str, *args) -> None:
        if self.config.debug:
            logger.info(msg, *args)

    async def create_checkout(self, payload: CheckoutPayload) -> CheckoutResult:
        """POST one checkout request. Never retried."""

        body = json.dumps(payload.to_wire(), ensure_ascii=False).encode("utf-8")
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                r = await client.post(
                    self.checkout_url,
                    content=body,
                    headers=self._headers(),
                    timeout=self.config.timeout_seconds,
                )
        except httpx.RequestError as exc:
            message = str(exc) or exc.__class__.__name__
            self._debug("transport error generating payment token reference=%s error=%s", payload.reference_code, message)
            return TransportError(message=message)

        return self.classify(r.status_code, r.content, payload.reference_code)

    def classify(self, status_code: int, content: bytes, reference: str = "") -> CheckoutResult:
        if status_code in (401, 403):
            self._debug("invalid api key and/or api token reference=%s status=%s", reference, status_code)
            return CredentialError(message=INVALID_CREDENTIALS_MESSAGE)

        try:
            data = json.loads(content)
        except (ValueError, RecursionError) as exc:
            self._debug("failed to parse PayMee response reference=%s error=%s", reference, exc)
            data = None

        if isinstance(data, dict):
            status = data.get("status")
            response = data.get("response")
            if (
                isinstance(status, int)
                and not isinstance(status, bool)
                and status == 0
                and isinstance(response, list)
                and response
                and isinstance(response[0], dict)
                and response[0].get("transactionToken")
            ):
                token = str(response[0]["transactionToken"])
                self._debug("transaction token generated reference=%s token=%s", reference, token)
                return CheckoutSuccess(redirect_url=self.payment_url(token), token=token)

            errors = data.get("error")
            if isinstance(errors, list) and errors:
                self._debug(
                    "failed to generate transaction token reference=%s status=%s body=%s",
                    reference,
                    status_code,
                    data,
                )
                messages = [
                    _labelled(get_error_message(error.get("code") if isinstance(error, dict) else None))
                    for error in errors
                ]
                return ApiError(messages=messages)

        self._debug(
            "failed to generate transaction token reference=%s status=%s body=%r",
            reference,
            status_code,
            content[:500],
        )
        return ApiError(messages=[_labelled(GENERIC_ERROR_MESSAGE)])
