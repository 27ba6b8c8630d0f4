"""Statements router: synchronous upload parsing and async job submission.

``/upload`` parses in-request and returns the record; nothing touches the
blob store or the broker. ``/submit`` stages the bytes in the blob store and
queues a parse_ready job for the relay worker, the same way the file watcher
does for statements dropped in object storage.
"""

import hashlib
import tempfile
import uuid
from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from apps.api.core.config import settings
from apps.api.core.errors import AppError
from apps.api.deps import get_blob_store, get_parse_ready_publisher
from apps.api.domains.statements.blob_source import StoredBlobSource
from apps.api.domains.statements.blob_store import RedisBlobStore
from apps.api.domains.statements.errors import ForwardError
from apps.api.domains.statements.publisher import QueuePublisher
from apps.api.domains.statements.schemas import FileMessage, SubmitResponse
from packages.statement_parser import StatementParseError, StatementRecord, parse_statement_file

router = APIRouter(prefix="/statements", tags=["statements"])
logger = structlog.get_logger()


async def _read_upload(file: UploadFile) -> bytes:
    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (max {settings.MAX_UPLOAD_BYTES} bytes)",
        )
    return contents


def _write_scratch_file(contents: bytes) -> Path:
    with tempfile.NamedTemporaryFile(prefix="statement-", suffix=".txt", delete=False) as f:
        f.write(contents)
        return Path(f.name)


@router.post("/upload", response_model=StatementRecord)
async def upload_statement(file: UploadFile = File(...)):
    """Parse an uploaded extract and return the statement record.

    Any parse failure is reported as a generic 500 without partial data.
    """
    filename = file.filename or ""
    contents = await _read_upload(file)

    scratch = _write_scratch_file(contents)
    try:
        record = parse_statement_file(scratch)
    except StatementParseError as e:
        logger.warning(
            "statement_upload_parse_failed",
            filename=filename,
            error=str(e),
            line=e.line_number,
            field=e.field_index,
        )
        raise AppError("Failed to parse statement file") from e
    finally:
        scratch.unlink(missing_ok=True)

    logger.info(
        "statement_upload_parsed",
        filename=filename,
        org_id=record.org_id,
        transactions=len(record.transactions),
    )
    return record


@router.post("/submit", response_model=SubmitResponse, status_code=202)
async def submit_statement(
    file: UploadFile = File(...),
    store: RedisBlobStore = Depends(get_blob_store),
    publisher: QueuePublisher = Depends(get_parse_ready_publisher),
):
    """Stage an extract in the blob store and queue it for the relay.

    The blob is keyed by the SHA-256 of its content; the worker deletes it
    once processed, or here if the job cannot be queued. The store TTL reaps
    anything left behind.
    """
    filename = file.filename or ""
    contents = await _read_upload(file)

    file_hash = hashlib.sha256(contents).hexdigest()
    job_id = str(uuid.uuid4())

    await run_in_threadpool(store.put, file_hash, contents)

    message = FileMessage(
        job_id=job_id,
        file_hash=file_hash,
        filename=filename,
        redis_key=store.key_for(file_hash),
        file_size=len(contents),
    )
    try:
        await run_in_threadpool(publisher.publish, message.model_dump(exclude_none=True))
    except ForwardError:
        # nobody will consume the staged blob
        await run_in_threadpool(StoredBlobSource(store, file_hash).release)
        raise

    logger.info(
        "statement_submitted",
        job_id=job_id,
        file_hash=file_hash,
        filename=filename,
        file_size=len(contents),
    )
    return SubmitResponse(
        job_id=job_id,
        file_hash=file_hash,
        file_size=len(contents),
        queue=publisher.queue_name,
    )
