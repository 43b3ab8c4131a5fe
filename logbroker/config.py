"""Broker and storage settings built from defaults, a TOML file and the environment."""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from os import PathLike
from pathlib import Path
from typing import Any

ENV_PREFIX = "APP"
ENV_SEPARATOR = "__"
DEFAULT_CONFIG_FILE = "cfg.toml"

_U16 = (0, 0xFFFF)
_U32 = (0, 0xFFFFFFFF)
_I32 = (-(2**31), 2**31 - 1)
_I64 = (-(2**63), 2**63 - 1)
_USIZE = (0, 2**64 - 1)

_TRUE_WORDS = frozenset({"true", "on", "yes", "1"})
_FALSE_WORDS = frozenset({"false", "off", "no", "0"})

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration cannot be read or holds an invalid value."""


def _int(default: int, bounds: tuple[int, int]) -> Any:
    return field(default=default, metadata={"range": bounds})


@dataclass
class BrokerConfig:
    """Network, replication, retention and group settings of a broker."""

    id: int = _int(1, _U32)
    host: str = "127.0.0.1"
    port: int = _int(9092, _U16)
    num_network_threads: int = _int(3, _U32)
    num_io_threads: int = _int(8, _U32)
    socket_send_buffer_bytes: int = _int(102400, _I32)
    socket_receive_buffer_bytes: int = _int(102400, _I32)
    socket_request_max_bytes: int = _int(104857600, _I32)
    num_partitions: int = _int(3, _U32)
    default_replication_factor: int = _int(3, _U32)
    offsets_topic_replication_factor: int = _int(3, _U32)
    transaction_state_log_replication_factor: int = _int(3, _U32)
    transaction_state_log_min_isr: int = _int(2, _U32)
    log_retention_hours: int = _int(168, _U32)
    log_retention_bytes: int = _int(-1, _I64)
    log_segment_bytes: int = _int(1073741824, _I64)
    log_retention_check_interval_ms: int = _int(300000, _U32)
    zookeeper_connect: str = "localhost:2181"
    zookeeper_connection_timeout_ms: int = _int(18000, _U32)
    group_initial_rebalance_delay_ms: int = _int(0, _U32)
    group_min_session_timeout_ms: int = _int(6000, _U32)
    group_max_session_timeout_ms: int = _int(300000, _U32)


@dataclass
class StorageConfig:
    """Log storage, flushing and replica fetch settings."""

    log_dir: str = "/var/lib/rust_kafka"
    segment_size: int = _int(1048576, _USIZE)
    flush_interval_ms: int = _int(1000, _U32)
    flush_scheduler_interval_ms: int = _int(3000, _U32)
    num_recovery_threads_per_data_dir: int = _int(1, _U32)
    num_partition_recovery_threads: int = _int(1, _U32)
    auto_create_topics_enable: bool = True
    delete_topic_enable: bool = True
    background_threads_enable: bool = True
    num_background_threads: int = _int(10, _U32)
    compression_type: str = "producer"
    message_max_bytes: int = _int(1000012, _I32)
    replica_fetch_max_bytes: int = _int(1048576, _I32)
    replica_fetch_min_bytes: int = _int(1, _I32)
    replica_fetch_wait_max_ms: int = _int(500, _U32)
    replica_high_watermark_checkpoint_interval_ms: int = _int(5000, _U32)
    replica_socket_timeout_ms: int = _int(30000, _U32)
    replica_socket_receive_buffer_bytes: int = _int(65536, _I32)
    replica_socket_send_buffer_bytes: int = _int(65536, _I32)
    replica_lag_time_max_ms: int = _int(10000, _U32)
    replica_lag_max_messages: int = _int(4000, _U32)


@dataclass
class Settings:
    """The complete configuration: broker and storage sections."""

    broker: BrokerConfig = field(default_factory=BrokerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


_SECTIONS: dict[str, type] = {"broker": BrokerConfig, "storage": StorageConfig}


def _coerce(key: str, kind: Any, value: Any, bounds: tuple[int, int] | None) -> Any:
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        raise ConfigError(f"invalid value {value!r} for {key}: expected a boolean")

    if kind is int:
        if isinstance(value, bool):
            raise ConfigError(f"invalid value {value!r} for {key}: expected an integer")
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ConfigError(
                    f"invalid value {value!r} for {key}: expected an integer"
                ) from None
        elif not isinstance(value, int):
            raise ConfigError(f"invalid value {value!r} for {key}: expected an integer")
        if bounds is not None:
            low, high = bounds
            if not low <= value <= high:
                raise ConfigError(f"value {value} for {key} is out of range [{low}, {high}]")
        return value

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"invalid value {value!r} for {key}: expected a string")


def _build(section: str, cls: type, values: Mapping[str, Any]) -> Any:
    kwargs = {
        f.name: _coerce(f"{section}.{f.name}", f.type, values[f.name], f.metadata.get("range"))
        for f in fields(cls)
        if f.name in values
    }
    return cls(**kwargs)


def _read_file(path: str | PathLike[str] | None) -> dict[str, dict[str, Any]]:
    if path is None:
        return {}
    try:
        with Path(path).open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"cannot parse {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc

    layers: dict[str, dict[str, Any]] = {}
    for section in _SECTIONS:
        if section not in document:
            continue
        table = document[section]
        if not isinstance(table, dict):
            raise ConfigError(f"section {section!r} in {path} must be a table")
        layers[section] = dict(table)
    return layers


def _read_env(environ: Mapping[str, str]) -> dict[str, dict[str, str]]:
    layers: dict[str, dict[str, str]] = {}
    for name, value in environ.items():
        parts = name.split(ENV_SEPARATOR)
        if len(parts) != 3 or parts[0].lower() != ENV_PREFIX.lower():
            continue
        section, key = parts[1].lower(), parts[2].lower()
        if section in _SECTIONS and key:
            layers.setdefault(section, {})[key] = value
    return layers


def load_config(
    config_file: str | PathLike[str] | None = DEFAULT_CONFIG_FILE,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build the settings from defaults, then ``config_file``, then the environment.

    The file is optional; environment variables of the form
    ``APP__<SECTION>__<KEY>`` override it.
    """
    if environ is None:
        environ = os.environ
    merged: dict[str, dict[str, Any]] = {section: {} for section in _SECTIONS}
    for layer in (_read_file(config_file), _read_env(environ)):
        for section, values in layer.items():
            merged[section].update(values)

    settings = Settings(
        broker=_build("broker", BrokerConfig, merged["broker"]),
        storage=_build("storage", StorageConfig, merged["storage"]),
    )
    logger.debug("loaded configuration: %r", settings)
    return settings