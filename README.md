# logbroker

A small message broker built around an append-only, segmented commit log.

Messages are stored per partition in a `LogQueue`, which is a chain of
`LogSegment` files. Each segment has a `.log` file of length-prefixed records and
a sparse `.index` file. When a segment reaches its size limit, a new one is
started at the next offset. A `Topic` groups partitions, and a `Broker` routes
produce and fetch calls to them. A TCP server speaks a length-prefixed binary
frame format (`BinaryMessage`).

The package has no runtime dependencies beyond the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Running the server

```
logbroker
logbroker --address 0.0.0.0:9093
```

This starts `logbroker.network.NetworkServer`, by default on `127.0.0.1:9092`.
The server echoes back every `BinaryMessage` frame it receives. It stops on
Ctrl-C.

For use from code, `logbroker.network.send_message(writer, msg)` and
`receive_message(reader)` write and read one frame on asyncio streams.

## Storage

```python
from logbroker.queue import LogQueue

with LogQueue("data/orders-0", 1024 * 1024) as queue:
    offset = queue.append_message(b"hello")
    assert queue.read_message(offset) == b"hello"
```

Offsets start at 0 and grow by one per message. They continue across segment
rollovers and across reopening the directory. `read_message` returns `None` for
an offset that is not stored.

A single `logbroker.segment.LogSegment` can also be used on its own. Its
`append_message` raises `logbroker.segment.SegmentFull` once the log file has
reached `max_segment_size`; `LogQueue` handles that by starting a new segment.
Index files are read through `logbroker.index.load_index`, which returns an
`OffsetIndex`.

`logbroker.retention.clean_old_segments(log_dir)` removes segments (and their
index files) that are older than the retention time (7 days by default) or that
push the directory's total size over the limit (10 GiB by default). It returns
the removed `.log` paths. `start_cleaner(log_dir, interval)` runs it every
`interval` seconds (one hour by default) in a daemon thread; call `stop()` on
the returned thread to end it.

## Topics and the broker

```python
from logbroker.broker import Broker
from logbroker.metadata import TopicConfig

broker = Broker()
broker.create_topic("orders", TopicConfig(
    name="orders",
    partitions=3,
    replication_factor=1,
    segment_size=1024 * 1024,
    base_dir="data",
))
offset = broker.send_message("orders", b"payload")
broker.commit_offset("billing", "orders", 0, 5)
print(broker.get_offset("billing", "orders", 0))  # 5
```

`send_message` picks the partition as the message length modulo the partition
count. Partition logs live in `<base_dir>/<topic>-<partition>`.

Failures such as an unknown topic, a duplicate topic or a missing partition
raise `logbroker.metadata.BrokerError`.

`Broker.handle_request` takes one of the request dataclasses from
`logbroker.protocol`: `ProduceRequest` returns the new offset, `FetchRequest`
the message, `OffsetFetchRequest` the committed offset and `MetadataRequest`
the matching `TopicMetadata` list. `JoinGroupRequest` and `SyncGroupRequest`
are accepted without effect; any other request raises `BrokerError`.

`RequestHandler` maps a decoded `BinaryMessage` to broker calls:

- type 1: produce to `default_topic`; the reply carries the offset as its id
- type 2: fetch from partition 0 of `default_topic` at `msg_id`; the reply
  carries the message as its payload
- anything else: an empty reply of type 0

The `default_topic` topic must be created with `create_topic` first; errors are
answered with offset 0 or an empty payload.

## Wire format

A frame is laid out as follows. All integers are big-endian.

| field   | size     |
|---------|----------|
| length  | 4 bytes, counts type + id + payload |
| type    | 1 byte   |
| id      | 4 bytes  |
| payload | `length - 5` bytes |

```python
from logbroker.message import BinaryMessage, decode

frame = BinaryMessage(msg_type=1, msg_id=42, payload=b"abc").encode()
assert decode(frame[4:]).payload == b"abc"
```

`decode` raises `ValueError` for a body shorter than five bytes.
`decode_stream` reads only the type and id from a binary stream and leaves the
payload unread.

## Configuration

`logbroker.config.load_config` starts from built-in defaults. It then applies
an optional TOML file (`cfg.toml` by default) with `[broker]` and `[storage]`
tables, and finally environment variables of the form `APP__<SECTION>__<KEY>`,
for example `APP__BROKER__PORT=9093` or `APP__STORAGE__LOG_DIR=./data`. It
returns a `Settings` object with `broker` (`BrokerConfig`) and `storage`
(`StorageConfig`) sections. Values that cannot be parsed or are out of range
raise `ConfigError`.

## Client helpers

- `logbroker.producer.Producer` with `ProducerConfig` picks partitions. It uses
  round robin when no key is given and a byte-sum hash when a key is given.
- `logbroker.consumer.Consumer` keeps per-partition offsets and belongs to a
  `logbroker.group.ConsumerGroup`.

## What it does not do

- The server only echoes frames; it is not connected to a `Broker` or a
  `RequestHandler`.
- `Producer.send_message` does not contact a broker and always reports offset 0;
  `Consumer` does not fetch messages.
- There is no replication, no cluster membership and no admin client; group
  join and sync requests have no effect, and the topic management requests in
  `logbroker.protocol` are not handled by the broker.
- The settings from `load_config` are not applied to the server or the broker
  automatically.