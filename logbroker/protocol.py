"""Request types a client can send to the broker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias


@dataclass
class ProduceRequest:
    """Send ``message`` to a topic partition."""

    topic: str
    partition: int
    message: bytes

    def __post_init__(self) -> None:
        self.message = bytes(self.message)


@dataclass
class FetchRequest:
    """Fetch the message at ``offset`` from a topic partition."""

    topic: str
    partition: int
    offset: int


@dataclass
class MetadataRequest:
    """Ask for topic metadata; ``None`` means every topic."""

    topic: str | None = None


@dataclass
class OffsetFetchRequest:
    """Ask for a consumer group's committed offset on a topic partition."""

    group_id: str
    topic: str
    partition: int


@dataclass
class JoinGroupRequest:
    """Ask for a consumer to join a group."""

    group_id: str
    consumer_id: str


@dataclass
class SyncGroupRequest:
    """Synchronise a group's topic-partition assignments."""

    group_id: str
    consumer_id: str
    assignments: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class CreateTopicRequest:
    """Create a topic."""

    name: str
    num_partitions: int
    replication_factor: int
    configs: dict[str, str] = field(default_factory=dict)


@dataclass
class DeleteTopicRequest:
    """Delete a topic."""

    name: str


@dataclass
class DescribeTopicRequest:
    """Describe a topic."""

    name: str


@dataclass
class ListTopicsRequest:
    """List every topic."""


@dataclass
class UpdateTopicConfigRequest:
    """Replace configuration entries of a topic."""

    name: str
    configs: dict[str, str] = field(default_factory=dict)


@dataclass
class GetClusterInfoRequest:
    """Ask for the brokers in the cluster."""


ClientRequest: TypeAlias = (
    ProduceRequest
    | FetchRequest
    | MetadataRequest
    | OffsetFetchRequest
    | JoinGroupRequest
    | SyncGroupRequest
    | CreateTopicRequest
    | DeleteTopicRequest
    | DescribeTopicRequest
    | ListTopicsRequest
    | UpdateTopicConfigRequest
    | GetClusterInfoRequest
)