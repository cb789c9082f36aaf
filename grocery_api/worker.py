from typing import Optional

import structlog
from celery import Celery
from celery.result import AsyncResult
from fastapi import Request
from kombu.exceptions import OperationalError

from .config import load_settings

logger = structlog.get_logger(__name__)

_settings = load_settings()

# Celery App Config
celery = Celery(__name__, broker=_settings.broker_url, backend=_settings.broker_url)


def configure_celery(broker_url: str) -> None:
    """Point the Celery app at the broker an application was built with."""
    celery.conf.update(broker_url=broker_url, result_backend=broker_url)


@celery.task(name="send_order_email")
def send_order_email(email: str, order_id: int, status: str):
    # Mail delivery is simulated by the log line
    logger.info("order_email_sent", email=email, order_id=order_id, status=status)
    return True


class OrderNotifier:
    """Enqueues order status emails; a no-op when no broker is configured."""

    def __init__(self, enabled: bool):
        self.enabled = enabled

    def order_status_changed(self, order) -> Optional[AsyncResult]:
        if not self.enabled:
            return None
        try:
            return send_order_email.delay(order.user.email, order.id, order.order_status.value)
        except OperationalError as exc:
            logger.warning("order_email_enqueue_failed", order_id=order.id, error=str(exc))
            return None


def get_notifier(request: Request) -> OrderNotifier:
    return request.app.state.notifier
