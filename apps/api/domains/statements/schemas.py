"""Pydantic schemas for the statements domain."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator


class FileMessage(BaseModel):
    """A statement job on the parse_ready queue.

    Carries the extract either inline (``file_content``, base64) or by
    reference to the blob store (``redis_key`` + ``file_size``, looked up by
    ``file_hash``). ``job_id`` and ``file_hash`` are passed through to the
    forwarded record untouched.
    """

    model_config = ConfigDict(extra="ignore")

    job_id: Optional[str] = None
    file_hash: Optional[str] = None
    filename: str = ""
    file_content: Optional[str] = None
    redis_key: Optional[str] = None
    file_size: Optional[int] = None
    org_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_payload(self) -> "FileMessage":
        if self.file_content is None and self.redis_key is None:
            raise ValueError("message carries neither file_content nor redis_key")
        if self.file_content is None and not self.file_hash:
            raise ValueError("file_hash is required to look up a stored blob")
        return self

    @property
    def is_inline(self) -> bool:
        return self.file_content is not None


class SubmitResponse(BaseModel):
    """Response from queuing a statement for asynchronous parsing."""

    job_id: str
    file_hash: str
    file_size: int
    queue: str
