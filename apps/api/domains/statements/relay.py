"""Statement relay. Drives one unit of work end to end.

    Received -> BytesMaterialized -> Parsed -> Forwarded -> Complete
    Received | BytesMaterialized | Parsed -> Failed

Each step depends on the previous one, so there is no concurrency inside a
unit of work. The blob is released exactly once on every path that got
past materialize, whether parsing and forwarding succeeded or not. Failed
units are logged with their correlation ids and dropped; redelivery and
dead-lettering are left to the broker.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

import structlog

from apps.api.domains.statements.blob_source import BlobStore, blob_source_for
from apps.api.domains.statements.errors import BLOB_ERRORS, ForwardError
from apps.api.domains.statements.schemas import FileMessage
from packages.statement_parser import StatementParseError, StatementRecord, parse_statement_bytes

logger = structlog.get_logger()


class RelayState(str, Enum):
    RECEIVED = "received"
    BYTES_MATERIALIZED = "bytes_materialized"
    PARSED = "parsed"
    FORWARDED = "forwarded"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class RelayOutcome:
    state: RelayState
    record: Optional[StatementRecord] = None
    error: Optional[Exception] = None
    # last state reached before failing
    failed_after: Optional[RelayState] = None

    @property
    def ok(self) -> bool:
        return self.state is RelayState.COMPLETE


class Publisher(Protocol):
    def publish(self, payload: dict) -> None: ...


class StatementRelay:
    def __init__(self, store: BlobStore, publisher: Publisher):
        self.store = store
        self.publisher = publisher

    def process(self, message: FileMessage) -> RelayOutcome:
        log = logger.bind(
            job_id=message.job_id,
            file_hash=message.file_hash,
            filename=message.filename,
        )
        log.info(
            "statement_received",
            inline=message.is_inline,
            redis_key=message.redis_key,
            file_size=message.file_size,
            org_id=message.org_id,
        )

        source = blob_source_for(message, self.store)
        try:
            data = source.materialize()
        except BLOB_ERRORS as e:
            return self._fail(log, RelayState.RECEIVED, e)

        log.info("blob_materialized", size=len(data))
        try:
            outcome = self._parse_and_forward(message, data, log)
        finally:
            source.release()

        if outcome.state is RelayState.FORWARDED:
            outcome.state = RelayState.COMPLETE
            log.info("statement_relay_complete")
        return outcome

    def _parse_and_forward(self, message: FileMessage, data: bytes, log) -> RelayOutcome:
        try:
            record = parse_statement_bytes(data)
        except StatementParseError as e:
            return self._fail(
                log,
                RelayState.BYTES_MATERIALIZED,
                e,
                line=e.line_number,
                field=e.field_index,
            )

        record.stamp(message.job_id, message.file_hash)
        log.info(
            "statement_parsed",
            org_id=record.org_id,
            transactions=len(record.transactions),
        )

        try:
            self.publisher.publish(record.to_message())
        except ForwardError as e:
            # no durable staging: the parsed record is lost
            return self._fail(log, RelayState.PARSED, e, record=record)

        log.info("statement_forwarded", org_id=record.org_id)
        return RelayOutcome(state=RelayState.FORWARDED, record=record)

    @staticmethod
    def _fail(log, reached: RelayState, error: Exception, record=None, **context) -> RelayOutcome:
        log.error(
            "statement_relay_failed",
            stage=reached.value,
            error_type=type(error).__name__,
            error=str(error),
            **context,
        )
        return RelayOutcome(
            state=RelayState.FAILED,
            record=record,
            error=error,
            failed_after=reached,
        )
