"""Topic and partition metadata, and the registry that holds it."""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field


class BrokerError(Exception):
    """Raised when a broker operation cannot be carried out."""


@dataclass
class PartitionMetadata:
    """Placement of one partition: its leader, replicas and in-sync replicas."""

    id: int
    leader: int
    replicas: list[int] = field(default_factory=list)
    isr: list[int] = field(default_factory=list)


@dataclass
class TopicConfig:
    """Basic properties of a topic."""

    name: str
    partitions: int
    replication_factor: int
    segment_size: int
    base_dir: str


@dataclass
class TopicMetadata:
    """A topic's configuration and its known partitions."""

    name: str
    config: TopicConfig
    partitions: list[PartitionMetadata] = field(default_factory=list)

    def add_partition(self, partition: PartitionMetadata) -> None:
        """Add ``partition`` to the topic."""
        self.partitions.append(partition)

    def remove_partition(self, partition_id: int) -> None:
        """Drop every partition with id ``partition_id``."""
        self.partitions = [p for p in self.partitions if p.id != partition_id]

    def get_partition(self, partition_id: int) -> PartitionMetadata | None:
        """Return the partition with id ``partition_id``, if any."""
        return next((p for p in self.partitions if p.id == partition_id), None)


class MetadataManager:
    """Thread-safe registry of topic metadata keyed by topic name."""

    def __init__(self) -> None:
        self._topics: dict[str, TopicMetadata] = {}
        self._lock = threading.Lock()

    def add_topic(self, topic: TopicMetadata) -> None:
        """Register ``topic``; raise BrokerError if the name is taken."""
        with self._lock:
            if topic.name in self._topics:
                raise BrokerError("Topic already exists")
            self._topics[topic.name] = topic

    def get_topic(self, name: str) -> TopicMetadata | None:
        """Return a copy of the named topic's metadata, or None."""
        with self._lock:
            topic = self._topics.get(name)
            return copy.deepcopy(topic) if topic is not None else None

    def remove_topic(self, name: str) -> None:
        """Forget the named topic; unknown names are ignored."""
        with self._lock:
            self._topics.pop(name, None)