from pathlib import Path

import pytest

from logbroker.broker import DEFAULT_TOPIC, Broker, RequestHandler
from logbroker.message import BinaryMessage
from logbroker.metadata import BrokerError, TopicConfig
from logbroker.protocol import (
    FetchRequest,
    JoinGroupRequest,
    ListTopicsRequest,
    MetadataRequest,
    OffsetFetchRequest,
    ProduceRequest,
)


def make_config(base_dir, name="orders", partitions=3):
    return TopicConfig(
        name=name,
        partitions=partitions,
        replication_factor=1,
        segment_size=1024 * 1024,
        base_dir=str(base_dir),
    )


@pytest.fixture
def broker(tmp_path):
    created = Broker()
    created.create_topic("orders", make_config(tmp_path))
    return created


def test_create_topic_makes_partition_directories(tmp_path):
    fresh = Broker()
    fresh.create_topic("events", make_config(tmp_path, name="events"))
    for partition_id in range(3):
        assert (Path(tmp_path) / f"events-{partition_id}").is_dir()
    assert not (Path(tmp_path) / "events-3").exists()


def test_duplicate_topic_rejected(tmp_path, broker):
    with pytest.raises(BrokerError, match="Topic already exists"):
        broker.create_topic("orders", make_config(tmp_path))


def test_send_and_fetch_round_trip(broker):
    message = b"hello kafka"
    offset = broker.send_message("orders", message)
    partition = len(message) % 3
    assert broker.fetch_message("orders", partition, offset) == message


def test_offsets_increase_within_partition(broker):
    first = broker.send_message("orders", b"abc")
    second = broker.send_message("orders", b"xyz")
    assert second == first + 1
    assert broker.fetch_message("orders", 0, second) == b"xyz"


def test_unknown_topic_errors(broker):
    with pytest.raises(BrokerError, match="Topic not found"):
        broker.send_message("missing", b"x")
    with pytest.raises(BrokerError, match="Topic not found"):
        broker.fetch_message("missing", 0, 0)


def test_fetch_absent_offset_is_none(broker):
    assert broker.fetch_message("orders", 1, 42) is None


def test_commit_and_get_offset(broker):
    broker.commit_offset("group-a", "orders", 1, 17)
    assert broker.get_offset("group-a", "orders", 1) == 17
    assert broker.get_offset("group-a", "orders", 2) is None
    assert broker.get_offset("group-b", "orders", 1) is None
    broker.commit_offset("group-a", "orders", 1, 18)
    assert broker.get_offset("group-a", "orders", 1) == 18


def test_handle_produce_then_fetch(broker):
    message = b"payload"
    offset = broker.handle_request(ProduceRequest("orders", 0, message))
    fetched = broker.handle_request(FetchRequest("orders", len(message) % 3, offset))
    assert fetched == message


def test_handle_offset_fetch(broker):
    broker.commit_offset("group-a", "orders", 0, 7)
    assert broker.handle_request(OffsetFetchRequest("group-a", "orders", 0)) == 7


def test_handle_metadata(broker):
    found = broker.handle_request(MetadataRequest("orders"))
    assert [meta.name for meta in found] == ["orders"]
    assert broker.handle_request(MetadataRequest("missing")) == []


def test_handle_join_group_accepted(broker):
    assert broker.handle_request(JoinGroupRequest("group-a", "consumer-1")) is None


def test_handle_unsupported_request(broker):
    with pytest.raises(BrokerError, match="Unsupported request"):
        broker.handle_request(ListTopicsRequest())


@pytest.fixture
def handler(tmp_path):
    created = Broker()
    created.create_topic(DEFAULT_TOPIC, make_config(tmp_path, DEFAULT_TOPIC, partitions=1))
    return RequestHandler(created)


def test_handler_produce_then_fetch(handler):
    reply = handler.handle_request(BinaryMessage(1, 99, b"hello kafka"))
    assert reply.msg_type == 1
    assert reply.payload == b""
    fetched = handler.handle_request(BinaryMessage(2, reply.msg_id, b""))
    assert fetched == BinaryMessage(2, reply.msg_id, b"hello kafka")


def test_handler_fetch_missing_offset_gives_empty_payload(handler):
    assert handler.handle_request(BinaryMessage(2, 5, b"")) == BinaryMessage(2, 5, b"")


def test_handler_unknown_type(handler):
    assert handler.handle_request(BinaryMessage(9, 3, b"x")) == BinaryMessage(0, 0, b"")


def test_handler_without_default_topic():
    handler = RequestHandler(Broker())
    assert handler.handle_request(BinaryMessage(1, 4, b"x")) == BinaryMessage(1, 0, b"")
    assert handler.handle_request(BinaryMessage(2, 4, b"")) == BinaryMessage(2, 4, b"")