"""Celery application hosting the statement relay.

The relay has no Celery tasks: it consumes the raw JSON parse_ready queue
through a consumer bootstep and publishes parsed records to pdf_ready.
"""

from celery import Celery, signals

from apps.api.core.config import settings
from apps.api.core.logging import setup_logging
from apps.api.domains.statements.consumer import ParseReadyConsumer

celery_app = Celery("estatement_relay", broker=settings.BROKER_URL)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,  # One statement at a time per worker
    worker_hijack_root_logger=False,
    broker_connection_retry_on_startup=True,
)

celery_app.steps["consumer"].add(ParseReadyConsumer)


@signals.setup_logging.connect
def configure_worker_logging(**kwargs) -> None:
    """Use the structlog configuration instead of Celery's default logging."""
    setup_logging(log_level=settings.log_level, json_output=settings.json_logs)


if __name__ == "__main__":
    celery_app.start()
