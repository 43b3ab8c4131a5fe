"""The broker: owns topics, routes messages and tracks consumer-group offsets."""

from __future__ import annotations

import threading

from .message import BinaryMessage
from .metadata import (
    BrokerError,
    MetadataManager,
    PartitionMetadata,
    TopicConfig,
    TopicMetadata,
)
from .protocol import (
    ClientRequest,
    FetchRequest,
    JoinGroupRequest,
    MetadataRequest,
    OffsetFetchRequest,
    ProduceRequest,
    SyncGroupRequest,
)
from .topic import Topic

DEFAULT_TOPIC = "default_topic"
_U32_MASK = 0xFFFFFFFF


class Broker:
    """Holds topics, places produced messages and remembers committed offsets."""

    def __init__(self) -> None:
        self._topics: dict[str, Topic] = {}
        self._topics_lock = threading.Lock()
        self.metadata_manager = MetadataManager()
        self._offsets: dict[str, dict[str, int]] = {}
        self._offsets_lock = threading.Lock()

    def create_topic(self, topic: str, config: TopicConfig) -> None:
        """Register a topic and create all its partitions."""
        self.metadata_manager.add_topic(TopicMetadata(topic, config))
        created = Topic(topic, config)
        for partition_id in range(config.partitions):
            created.create_partition(
                partition_id,
                PartitionMetadata(id=partition_id, leader=1, replicas=[1], isr=[1]),
            )
        with self._topics_lock:
            self._topics[topic] = created

    def _topic(self, name: str) -> Topic:
        topic = self._topics.get(name)
        if topic is None:
            raise BrokerError("Topic not found")
        return topic

    def send_message(self, topic: str, message: bytes) -> int:
        """Store ``message`` in ``topic`` and return its offset.

        The partition is chosen by message length modulo the partition count.
        """
        with self._topics_lock:
            target = self._topic(topic)
            count = target.partition_count()
            if count == 0:
                raise BrokerError(f"topic {topic} has no partitions")
            return target.append_message(len(message) % count, message)

    def fetch_message(self, topic: str, partition: int, offset: int) -> bytes | None:
        """Return the message at ``offset`` in a topic partition, or None."""
        with self._topics_lock:
            return self._topic(topic).read_message(partition, offset)

    def commit_offset(self, group: str, topic: str, partition: int, offset: int) -> None:
        """Record a consumer group's offset for a topic partition."""
        with self._offsets_lock:
            self._offsets.setdefault(group, {})[f"{topic}-{partition}"] = offset

    def get_offset(self, group: str, topic: str, partition: int) -> int | None:
        """Return a consumer group's committed offset, or None if none was committed."""
        with self._offsets_lock:
            return self._offsets.get(group, {}).get(f"{topic}-{partition}")

    def _describe(self, topic: str | None) -> list[TopicMetadata]:
        with self._topics_lock:
            names = [topic] if topic is not None else list(self._topics)
        found = (self.metadata_manager.get_topic(name) for name in names)
        return [meta for meta in found if meta is not None]

    def handle_request(self, request: ClientRequest) -> object:
        """Carry out a client request and return its result.

        Produce gives the new offset, Fetch the message, OffsetFetch the
        committed offset and Metadata the matching topic metadata. Group
        requests are accepted without effect; anything else is unsupported.
        """
        match request:
            case ProduceRequest(topic=topic, message=message):
                return self.send_message(topic, message)
            case FetchRequest(topic=topic, partition=partition, offset=offset):
                return self.fetch_message(topic, partition, offset)
            case MetadataRequest(topic=topic):
                return self._describe(topic)
            case OffsetFetchRequest(group_id=group, topic=topic, partition=partition):
                return self.get_offset(group, topic, partition)
            case JoinGroupRequest() | SyncGroupRequest():
                return None
            case _:
                raise BrokerError("Unsupported request")


class RequestHandler:
    """Answers binary frames: type 1 produces, type 2 fetches from the default topic."""

    def __init__(self, broker: Broker) -> None:
        self.broker = broker

    def handle_request(self, request: BinaryMessage) -> BinaryMessage:
        """Return the reply frame for ``request``."""
        if request.msg_type == 1:
            try:
                offset = self.broker.send_message(DEFAULT_TOPIC, request.payload)
            except BrokerError:
                offset = 0
            return BinaryMessage(1, offset & _U32_MASK, b"")
        if request.msg_type == 2:
            try:
                payload = self.broker.fetch_message(DEFAULT_TOPIC, 0, request.msg_id)
            except BrokerError:
                payload = None
            return BinaryMessage(2, request.msg_id, payload or b"")
        return BinaryMessage(0, 0, b"")