"""A consumer: a member of a consumer group that tracks per-partition offsets."""

from __future__ import annotations

from .group import ConsumerGroup


class Consumer:
    """A consumer that belongs to its own group and remembers where it is in each partition."""

    def __init__(self, consumer_id: str, group_id: str) -> None:
        self.consumer_id = consumer_id
        self.group = ConsumerGroup(group_id)
        self.group.add_member(consumer_id)
        self._offsets: dict[int, int] = {}

    def __repr__(self) -> str:
        return f"Consumer(consumer_id={self.consumer_id!r}, group_id={self.group.group_id!r})"

    def get_offset(self, partition_id: int) -> int:
        """Return the offset for a partition; 0 if none has been recorded."""
        return self._offsets.get(partition_id, 0)

    def update_offset(self, partition_id: int, offset: int) -> None:
        """Record the offset reached in a partition."""
        self._offsets[partition_id] = offset