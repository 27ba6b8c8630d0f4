"""FastAPI dependencies for the blob store and queue publisher.

Both are process-wide singletons; tests swap them out through
``app.dependency_overrides``.
"""

from functools import lru_cache

from apps.api.core.config import settings
from apps.api.domains.statements.blob_store import RedisBlobStore
from apps.api.domains.statements.publisher import QueuePublisher


@lru_cache(maxsize=1)
def get_blob_store() -> RedisBlobStore:
    return RedisBlobStore.from_settings(settings)


@lru_cache(maxsize=1)
def get_parse_ready_publisher() -> QueuePublisher:
    """Publisher for handing submitted statements to the relay worker."""
    from apps.api.celery_app import celery_app

    return QueuePublisher(celery_app, settings.PARSE_READY_QUEUE)
