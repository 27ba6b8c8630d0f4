import base64

import pytest

from apps.api.domains.statements.tests.support import EXTRACT, FakePublisher


@pytest.fixture
def extract_bytes() -> bytes:
    return EXTRACT.encode("utf-8")


@pytest.fixture
def extract_b64(extract_bytes) -> str:
    return base64.b64encode(extract_bytes).decode("ascii")


@pytest.fixture
def publisher():
    return FakePublisher()
