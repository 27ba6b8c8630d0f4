"""Queue publisher for plain JSON messages.

Downstream consumers (the PDF renderer) and upstream producers (the file
watcher) are not Celery apps, so messages go out as bare JSON bodies on the
default exchange rather than as Celery tasks. The Celery app is only used
for its connection and producer pools.
"""

import structlog
from celery import Celery
from kombu import Queue
from kombu.exceptions import KombuError

from apps.api.domains.statements.errors import ForwardError

logger = structlog.get_logger()

PERSISTENT = 2

DEFAULT_RETRY_POLICY = {
    "max_retries": 3,
    "interval_start": 0,
    "interval_step": 1,
    "interval_max": 5,
}


class QueuePublisher:
    def __init__(self, app: Celery, queue_name: str, retry_policy: dict = None):
        self.app = app
        self.queue = Queue(queue_name, routing_key=queue_name, durable=True)
        self.retry_policy = retry_policy or DEFAULT_RETRY_POLICY

    @property
    def queue_name(self) -> str:
        return self.queue.name

    def publish(self, payload: dict) -> None:
        """Publish ``payload`` as a persistent JSON message.

        Raises:
            ForwardError: the broker could not be reached or refused the
                message after retries.
        """
        try:
            with self.app.producer_or_acquire() as producer:
                producer.publish(
                    payload,
                    exchange="",
                    routing_key=self.queue.name,
                    serializer="json",
                    delivery_mode=PERSISTENT,
                    declare=[self.queue],
                    retry=True,
                    retry_policy=self.retry_policy,
                )
        except (KombuError, OSError) as e:
            logger.error("queue_publish_failed", queue=self.queue.name, error=str(e))
            raise ForwardError(f"Could not publish to {self.queue.name}: {e}") from e

        logger.debug("queue_published", queue=self.queue.name)
