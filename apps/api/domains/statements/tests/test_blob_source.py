import base64

import pytest

from apps.api.domains.statements.blob_source import (
    InlineBlobSource,
    StoredBlobSource,
    blob_source_for,
)
from apps.api.domains.statements.errors import BlobNotFoundError, InvalidBlobError
from apps.api.domains.statements.schemas import FileMessage
from apps.api.domains.statements.tests.support import FakeBlobStore


class TestInlineBlobSource:
    def test_decodes_base64(self):
        source = InlineBlobSource(base64.b64encode(b"1|2|3").decode())
        assert source.materialize() == b"1|2|3"

    def test_rejects_invalid_base64(self):
        with pytest.raises(InvalidBlobError) as exc_info:
            InlineBlobSource("not base64!").materialize()
        assert exc_info.value.status_code == 422

    def test_release_is_noop(self):
        assert InlineBlobSource("").release() is None


class TestStoredBlobSource:
    def test_materialize_reads_store(self):
        store = FakeBlobStore({"abc": b"data"})
        assert StoredBlobSource(store, "abc").materialize() == b"data"
        assert store.get_calls == ["abc"]

    def test_materialize_missing_blob(self):
        with pytest.raises(BlobNotFoundError) as exc_info:
            StoredBlobSource(FakeBlobStore(), "gone").materialize()
        assert exc_info.value.key == "blob:gone"

    def test_release_deletes(self):
        store = FakeBlobStore({"abc": b"data"})
        StoredBlobSource(store, "abc").release()
        assert store.delete_calls == ["abc"]
        assert "abc" not in store.blobs

    def test_release_of_missing_blob_does_not_raise(self):
        store = FakeBlobStore()
        StoredBlobSource(store, "gone").release()
        assert store.delete_calls == ["gone"]

    def test_release_swallows_store_outage(self):
        store = FakeBlobStore({"abc": b"data"}, fail_delete=True)
        StoredBlobSource(store, "abc").release()
        assert store.delete_calls == ["abc"]


class TestBlobSourceFor:
    def test_inline_message(self):
        message = FileMessage(job_id="j", file_hash="h", file_content="eA==")
        source = blob_source_for(message, FakeBlobStore())
        assert isinstance(source, InlineBlobSource)

    def test_stored_message_keys_by_file_hash(self):
        message = FileMessage(job_id="j", file_hash="h", redis_key="anything", file_size=3)
        source = blob_source_for(message, FakeBlobStore())
        assert isinstance(source, StoredBlobSource)
        assert source.key == "h"

    def test_inline_wins_when_both_present(self):
        message = FileMessage(job_id="j", file_hash="h", file_content="eA==", redis_key="blob:h")
        assert isinstance(blob_source_for(message, FakeBlobStore()), InlineBlobSource)
