"""JSON logging with the order being processed attached to every record."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "paymee-gateway"

order_id_ctx: ContextVar[str] = ContextVar("order_id", default="")


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = SERVICE_NAME
        record.order_id = order_id_ctx.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure root logger once per process."""

    handler = logging.StreamHandler(sys.stdout)
    context_filter = ContextFilter()
    handler.addFilter(context_filter)
    handler.setFormatter(
        JsonFormatter("%(asctime)s %(levelname)s %(service_name)s %(order_id)s %(name)s %(message)s")
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)


logger = logging.getLogger("paymee_gateway")
