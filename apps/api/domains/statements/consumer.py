"""parse_ready consumer: a Celery consumer step reading raw JSON jobs.

The file watcher publishes plain JSON (not Celery task messages), so the
worker attaches a kombu consumer to its connection through a bootstep
instead of declaring a task. Messages are acknowledged only after the relay
has finished with them, giving at-least-once processing: a worker that dies
mid-job leaves the message to be redelivered.
"""

import json

import structlog
from celery import bootsteps
from kombu import Consumer, Queue
from pydantic import ValidationError

from apps.api.core.config import settings
from apps.api.domains.statements.blob_store import RedisBlobStore
from apps.api.domains.statements.publisher import QueuePublisher
from apps.api.domains.statements.relay import StatementRelay
from apps.api.domains.statements.schemas import FileMessage

logger = structlog.get_logger()

PREFETCH_COUNT = 1


def build_relay(app) -> StatementRelay:
    store = RedisBlobStore.from_settings(settings)
    publisher = QueuePublisher(app, settings.PDF_READY_QUEUE)
    return StatementRelay(store, publisher)


def handle_message(relay: StatementRelay, body, message) -> None:
    """Validate one delivery, run it through the relay and settle it."""
    if isinstance(body, (bytes, str)):
        try:
            body = json.loads(body)
        except ValueError as e:
            logger.error("parse_ready_message_undecodable", error=str(e))
            message.reject(requeue=False)
            return

    try:
        file_message = FileMessage.model_validate(body)
    except ValidationError as e:
        logger.error("parse_ready_message_invalid", error=str(e))
        message.reject(requeue=False)
        return

    try:
        relay.process(file_message)
    except Exception:
        logger.exception(
            "statement_relay_crashed",
            job_id=file_message.job_id,
            file_hash=file_message.file_hash,
        )
        message.reject(requeue=False)
        return

    message.ack()


class ParseReadyConsumer(bootsteps.ConsumerStep):
    """Feeds parse_ready messages to the statement relay."""

    def __init__(self, parent, **kwargs):
        super().__init__(parent, **kwargs)
        self.relay = build_relay(parent.app)
        self.queue = Queue(
            settings.PARSE_READY_QUEUE,
            routing_key=settings.PARSE_READY_QUEUE,
            durable=True,
        )

    def get_consumers(self, channel):
        return [
            Consumer(
                channel,
                queues=[self.queue],
                callbacks=[self.on_message],
                accept=["json"],
                prefetch_count=PREFETCH_COUNT,
            )
        ]

    def on_message(self, body, message):
        handle_message(self.relay, body, message)
