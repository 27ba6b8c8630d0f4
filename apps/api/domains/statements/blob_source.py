"""Blob sources: one contract over the two ways statement bytes arrive.

A parse_ready message either embeds the extract (base64 ``file_content``)
or points at a staged blob in the transient store. Both are wrapped in an
object exposing:

    materialize() -> bytes   raises BlobNotFoundError / BlobUnavailableError /
                             InvalidBlobError
    release() -> None        best effort, never raises

``blob_source_for`` picks the variant from the message fields.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Protocol, Union

import structlog

from apps.api.domains.statements.errors import BlobUnavailableError, InvalidBlobError
from apps.api.domains.statements.schemas import FileMessage

logger = structlog.get_logger()


class BlobStore(Protocol):
    def get(self, key: str) -> bytes: ...

    def delete(self, key: str) -> bool: ...


@dataclass(frozen=True)
class InlineBlobSource:
    """Extract carried in the message itself. Never touches the store."""

    content: str

    def materialize(self) -> bytes:
        try:
            return base64.b64decode(self.content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidBlobError(f"file_content is not valid base64: {e}") from e

    def release(self) -> None:
        return None


@dataclass(frozen=True)
class StoredBlobSource:
    """Extract staged in the transient store under ``key``."""

    store: BlobStore
    key: str

    def materialize(self) -> bytes:
        return self.store.get(self.key)

    def release(self) -> None:
        try:
            deleted = self.store.delete(self.key)
        except BlobUnavailableError as e:
            # the TTL will reap it
            logger.warning("blob_release_failed", key=self.key, error=str(e))
            return

        if deleted:
            logger.info("blob_released", key=self.key)
        else:
            logger.warning("blob_release_missed", key=self.key)


BlobSource = Union[InlineBlobSource, StoredBlobSource]


def blob_source_for(message: FileMessage, store: BlobStore) -> BlobSource:
    """Choose the blob source for a message. Inline content wins if both are set."""
    if message.is_inline:
        return InlineBlobSource(message.file_content)
    return StoredBlobSource(store, message.file_hash)
