from unittest.mock import MagicMock

import pytest
from kombu.exceptions import OperationalError

from apps.api.domains.statements.errors import ForwardError
from apps.api.domains.statements.publisher import PERSISTENT, QueuePublisher


@pytest.fixture
def producer():
    return MagicMock()


@pytest.fixture
def app(producer):
    app = MagicMock()
    app.producer_or_acquire.return_value.__enter__.return_value = producer
    return app


def test_publishes_persistent_json_to_named_queue(app, producer):
    publisher = QueuePublisher(app, "pdf_ready")
    publisher.publish({"orgId": "ORG1"})

    producer.publish.assert_called_once()
    args, kwargs = producer.publish.call_args
    assert args == ({"orgId": "ORG1"},)
    assert kwargs["exchange"] == ""
    assert kwargs["routing_key"] == "pdf_ready"
    assert kwargs["serializer"] == "json"
    assert kwargs["delivery_mode"] == PERSISTENT
    assert kwargs["retry"] is True
    assert kwargs["declare"][0].name == "pdf_ready"
    assert kwargs["declare"][0].durable is True


def test_queue_name(app):
    assert QueuePublisher(app, "parse_ready").queue_name == "parse_ready"


def test_broker_error_becomes_forward_error(app, producer):
    producer.publish.side_effect = OperationalError("connection refused")

    with pytest.raises(ForwardError) as exc_info:
        QueuePublisher(app, "pdf_ready").publish({})
    assert exc_info.value.status_code == 502


def test_socket_error_becomes_forward_error(app):
    app.producer_or_acquire.side_effect = ConnectionRefusedError()

    with pytest.raises(ForwardError):
        QueuePublisher(app, "pdf_ready").publish({})
