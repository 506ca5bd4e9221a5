"""
Tests for Loguru based logging.
"""

import json

import pytest
from loguru import logger as loguru_logger

from omninats import logging as omninats_logging
from omninats.exceptions import DecodingError
from omninats.serdes import JsonSerDes, SerDesRegistry

from conftest import Order


@pytest.fixture
def captured():
    messages = []
    sink_id = loguru_logger.add(lambda m: messages.append(str(m)), level="DEBUG", format="{message}")
    yield messages
    loguru_logger.remove(sink_id)


def test_serialization_errors_are_logged(captured):
    registry = SerDesRegistry([JsonSerDes()])

    with pytest.raises(DecodingError):
        registry.decode(b'{"a":', Order)

    assert any("Serialization error during decode" in m for m in captured)


def test_selection_is_logged_at_debug(captured):
    SerDesRegistry([JsonSerDes()]).serdes_for(Order)

    assert any("SerDes selected: json for [Order]" in m for m in captured)


def test_get_logger_binds_name():
    record = {}
    sink_id = loguru_logger.add(lambda m: record.update(m.record["extra"]), level="INFO")
    try:
        omninats_logging.get_logger().info("bound")
    finally:
        loguru_logger.remove(sink_id)

    assert record["name"] == "omninats"


def test_prod_mode_writes_json_file(monkeypatch, tmp_path):
    log_file = tmp_path / "omninats.log"
    monkeypatch.setenv("OMNINATS_LOG_MODE", "PROD")
    monkeypatch.setenv("OMNINATS_LOG_FILE", str(log_file))
    try:
        omninats_logging.configure()
        omninats_logging.log_connection_opened("default", ["nats://localhost:4222"])
        loguru_logger.remove()

        line = log_file.read_text().splitlines()[0]
        assert "NATS connection 'default' opened" in json.loads(line)["text"]
    finally:
        monkeypatch.undo()
        omninats_logging.configure()


def test_get_logger_binds_connection_and_context():
    record = {}
    sink_id = loguru_logger.add(lambda m: record.update(m.record["extra"]), level="INFO")
    try:
        omninats_logging.get_logger(connection="audit", subject="audit.events").info("bound")
    finally:
        loguru_logger.remove(sink_id)

    assert record == {"name": "omninats", "connection": "audit", "subject": "audit.events"}


@pytest.mark.asyncio
async def test_transport_logs_carry_connection_name():
    from unittest.mock import AsyncMock, MagicMock, patch

    from omninats.config import ConnectionSettings
    from omninats.transport import NatsTransport

    nc = MagicMock()
    nc.publish = AsyncMock()
    nc.drain = AsyncMock()
    records = []
    sink_id = loguru_logger.add(lambda m: records.append(m.record["extra"]), level="DEBUG")
    try:
        with patch("omninats.transport.nats.connect", AsyncMock(return_value=nc)):
            async with NatsTransport(ConnectionSettings(name="orders")) as transport:
                await transport.publish("orders.created", b"{}")
    finally:
        loguru_logger.remove(sink_id)

    published = [r for r in records if r.get("subject") == "orders.created"]
    assert published and published[0]["connection"] == "orders"
    assert all(r.get("connection") == "orders" for r in records)
