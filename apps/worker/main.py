"""Relay worker entry point: runs the Celery worker that consumes parse_ready."""

import structlog

from apps.api.celery_app import celery_app
from apps.api.core.config import settings
from apps.api.core.logging import setup_logging

logger = structlog.get_logger()


def worker_argv(extra_args=None) -> list[str]:
    """Celery worker arguments for the relay.

    The relay consumer runs in the worker's main thread, so the solo pool is
    enough; scale out by running more worker processes.
    """
    return [
        "worker",
        f"--loglevel={settings.LOG_LEVEL}",
        "--pool=solo",
        "--concurrency=1",
        "--without-gossip",
        "--without-mingle",
        *(extra_args or []),
    ]


def main(extra_args=None):
    setup_logging(log_level=settings.log_level, json_output=settings.json_logs)
    logger.info(
        "worker_starting",
        consume=settings.PARSE_READY_QUEUE,
        forward=settings.PDF_READY_QUEUE,
    )
    celery_app.worker_main(worker_argv(extra_args))


if __name__ == "__main__":
    main()
