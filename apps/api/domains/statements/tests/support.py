"""Shared extract sample and in-memory fakes for the statements tests."""

from apps.api.domains.statements.errors import BlobNotFoundError, BlobUnavailableError, ForwardError


def make_row(record_type: str, values: dict, width: int = 90) -> str:
    fields = [""] * width
    fields[3] = record_type
    for index, value in values.items():
        fields[index] = value
    return "|".join(fields)


EXTRACT = "\n".join(
    [
        make_row(
            "1",
            {
                0: "ORG1",
                2: "00-1234567890123",
                12: "100.000",
                14: "01012024",
                27: "250000",
                41: "50.000",
                43: "30.000",
                45: "80.000",
            },
        ),
        make_row("2", {5: "JOHN DOE", 6: "12 MAIN ST", 7: "MANAMA", 8: "BLOCK 3", 82: "BAHRAIN"}),
        make_row("4", {4: "05012024", 7: "4500", 10: "06012024", 22: "COFFEE", 56: "BHD", 57: "4500"}),
        make_row(
            "4",
            {4: "07012024", 7: "100000", 10: "07012024", 22: "Payment Received", 56: "BHD", 57: "100000"},
        ),
        make_row("6", {}),
        "trailer noise",
    ]
)


class FakeBlobStore:
    def __init__(self, blobs=None, fail_get=False, fail_delete=False):
        self.blobs = dict(blobs or {})
        self.fail_get = fail_get
        self.fail_delete = fail_delete
        self.get_calls = []
        self.delete_calls = []
        self.put_calls = []

    def key_for(self, key):
        return f"blob:{key}"

    def get(self, key):
        self.get_calls.append(key)
        if self.fail_get:
            raise BlobUnavailableError("connection refused")
        if key not in self.blobs:
            raise BlobNotFoundError(self.key_for(key))
        return self.blobs[key]

    def put(self, key, data):
        self.put_calls.append(key)
        self.blobs[key] = data

    def delete(self, key):
        self.delete_calls.append(key)
        if self.fail_delete:
            raise BlobUnavailableError("connection refused")
        return self.blobs.pop(key, None) is not None


class FakePublisher:
    queue_name = "parse_ready"

    def __init__(self, fail=False):
        self.fail = fail
        self.published = []

    def publish(self, payload):
        if self.fail:
            raise ForwardError("broker unreachable")
        self.published.append(payload)
