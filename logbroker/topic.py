"""A message topic: a set of numbered partitions, each backed by its own log queue."""

from __future__ import annotations

import shutil
import sys
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .metadata import BrokerError, PartitionMetadata, TopicConfig
from .queue import LogQueue


class PartitionState(Enum):
    """Lifecycle state of a partition."""

    ACTIVE = "active"
    DELETED = "deleted"


@dataclass
class _Partition:
    queue: LogQueue
    state: PartitionState = PartitionState.ACTIVE
    deleted_at: float | None = None


class Topic:
    """A named topic whose partitions live under ``config.base_dir``."""

    def __init__(self, name: str, config: TopicConfig) -> None:
        self.name = name
        self.config = config
        self._partitions: dict[int, _Partition] = {}

    def __str__(self) -> str:
        return f"Topic: {self.name} ({len(self._partitions)} partitions)"

    def __repr__(self) -> str:
        return f"Topic(name={self.name!r}, partitions={sorted(self._partitions)})"

    def partition_count(self) -> int:
        """Number of partitions the topic currently holds."""
        return len(self._partitions)

    def partition_dir(self, partition_id: int) -> str:
        """Directory that stores the given partition's log."""
        return f"{self.config.base_dir}/{self.name}-{partition_id}"

    def create_partition(self, partition_id: int, metadata: PartitionMetadata) -> None:
        """Create partition ``partition_id`` and open its log queue."""
        if partition_id in self._partitions:
            raise BrokerError(f"partition {partition_id} already exists")
        if partition_id >= self.config.partitions:
            raise BrokerError(f"partition number {partition_id} is invalid")

        directory = Path(self.partition_dir(partition_id))
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BrokerError(f"failed to create partition directory: {exc}") from exc
        try:
            queue = LogQueue(directory, self.config.segment_size)
        except OSError as exc:
            raise BrokerError(f"failed to create message queue: {exc}") from exc
        self._partitions[partition_id] = _Partition(queue)

    def init_partitions(self) -> None:
        """Create every partition the configuration calls for."""
        for partition_id in range(self.config.partitions):
            self.create_partition(
                partition_id,
                PartitionMetadata(id=partition_id, leader=0, replicas=[0], isr=[0]),
            )

    def delete_partition(self, partition_id: int) -> None:
        """Remove partition ``partition_id`` from the topic."""
        partition = self._partitions.get(partition_id)
        if partition is None:
            raise BrokerError(f"partition {partition_id} does not exist")
        if partition.state is PartitionState.DELETED:
            raise BrokerError(f"partition {partition_id} is already marked as deleted")
        partition.state = PartitionState.DELETED
        partition.deleted_at = time.monotonic()
        partition.queue.close()
        del self._partitions[partition_id]

    def delete_topic(self) -> None:
        """Delete every partition together with its directory."""
        for partition_id in list(self._partitions):
            self.delete_partition(partition_id)
            try:
                shutil.rmtree(self.partition_dir(partition_id))
            except OSError as exc:
                raise BrokerError(f"failed to delete partition directory: {exc}") from exc

    def delete_all_partitions(self) -> None:
        """Delete every partition, leaving the directories on disk."""
        for partition_id in list(self._partitions):
            self.delete_partition(partition_id)

    def cleanup_deleted_partitions(self, max_age_seconds: float) -> None:
        """Drop partitions marked deleted at least ``max_age_seconds`` ago, with their files."""
        now = time.monotonic()
        expired = [
            partition_id
            for partition_id, partition in self._partitions.items()
            if partition.state is PartitionState.DELETED
            and partition.deleted_at is not None
            and now - partition.deleted_at >= max_age_seconds
        ]
        for partition_id in expired:
            self._partitions[partition_id].queue.close()
            try:
                shutil.rmtree(self.partition_dir(partition_id))
            except OSError as exc:
                print(f"failed to delete partition directory: {exc}", file=sys.stderr)
                continue
            del self._partitions[partition_id]

    def _active_queue(self, partition_id: int) -> LogQueue:
        partition = self._partitions.get(partition_id)
        if partition is None:
            raise BrokerError(f"partition {partition_id} does not exist")
        if partition.state is PartitionState.DELETED:
            raise BrokerError(f"partition {partition_id} is marked as deleted")
        return partition.queue

    def append_message(self, partition_id: int, message: bytes) -> int:
        """Append ``message`` to a partition and return its offset."""
        queue = self._active_queue(partition_id)
        try:
            return queue.append_message(message)
        except OSError as exc:
            raise BrokerError(f"failed to write message: {exc}") from exc

    def read_message(self, partition_id: int, offset: int) -> bytes | None:
        """Return the message at ``offset`` in a partition, or None if absent."""
        queue = self._active_queue(partition_id)
        try:
            return queue.read_message(offset)
        except (OSError, EOFError) as exc:
            raise BrokerError(f"failed to read message: {exc}") from exc