"""A producer that chooses the partition each message goes to."""

from __future__ import annotations

from dataclasses import dataclass, field

_U64_MASK = 0xFFFFFFFFFFFFFFFF


@dataclass
class ProducerConfig:
    """How a producer picks partitions."""

    auto_select_partition: bool = True
    partition_count: int = 1

    def __post_init__(self) -> None:
        if self.partition_count < 1:
            raise ValueError("partition_count must be at least 1")


@dataclass
class Producer:
    """Chooses partitions by key hash, or round-robin when there is no key."""

    producer_id: str
    config: ProducerConfig = field(default_factory=ProducerConfig)
    _counter: int = field(default=0, init=False, repr=False)

    def select_partition(self, key: bytes | None = None) -> int:
        """Return the partition for a message with ``key``.

        With automatic selection off every message goes to partition 0. A key
        is hashed by summing its bytes; without a key partitions are used in
        turn.
        """
        if not self.config.auto_select_partition:
            return 0
        if key is not None:
            digest = sum(bytes(key)) & _U64_MASK
            return digest % self.config.partition_count
        partition = self._counter % self.config.partition_count
        self._counter = (self._counter + 1) & _U64_MASK
        return partition

    def send_message(self, message: bytes, key: bytes | None = None) -> tuple[int, int]:
        """Place ``message`` and return (partition, offset).

        No broker is contacted, so the offset is always 0.
        """
        return self.select_partition(key), 0