"""Connection options for a box and the connection ID derived from them."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable

DEFAULT_TIMEOUT = 0.020
DEFAULT_CONNECTION_TIMEOUT = 0.020
DEFAULT_REDIAL_INTERVAL = 0.050
DEFAULT_PING_INTERVAL = 1.0
DEFAULT_POOL_SIZE = 1

_CRC_POLY = 0x04C11DB7
_MASK32 = 0xFFFFFFFF


def _make_crc_table(poly: int) -> tuple[int, ...]:
    table = []
    for value in range(256):
        crc = value
        for _ in range(8):
            crc = (crc >> 1) ^ poly if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_CRC_TABLE = _make_crc_table(_CRC_POLY)


def _crc_update(crc: int, data: bytes) -> int:
    crc = ~crc & _MASK32
    for byte in data:
        crc = _CRC_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return ~crc & _MASK32


def _nanoseconds(value: float | timedelta) -> int:
    if isinstance(value, timedelta):
        return (value.days * 86_400 + value.seconds) * 1_000_000_000 + value.microseconds * 1000
    return round(value * 1_000_000_000)


def _seconds(value: float | timedelta) -> float:
    return value.total_seconds() if isinstance(value, timedelta) else float(value)


class ServerMode(enum.IntEnum):
    """Role of an instance; selects from replicas are read-only."""

    MASTER = 0
    REPLICA = 1


@dataclass
class ChannelConfig:
    write_timeout: float = DEFAULT_TIMEOUT
    request_timeout: float = DEFAULT_TIMEOUT
    ping_interval: float = DEFAULT_PING_INTERVAL


@dataclass
class PoolConfig:
    size: int = DEFAULT_POOL_SIZE
    connect_timeout: float = DEFAULT_CONNECTION_TIMEOUT
    dial_timeout: float = DEFAULT_CONNECTION_TIMEOUT
    redial_interval: float = DEFAULT_REDIAL_INTERVAL
    max_redial_interval: float = DEFAULT_REDIAL_INTERVAL
    channel_config: ChannelConfig = field(default_factory=ChannelConfig)


ConnectionOption = Callable[["ConnectionOptions"], None]


class ConnectionOptions:
    """Options for connecting to one server.

    Every option feeds the connection ID, so equal options share a connection.
    Durations are in seconds.
    """

    def __init__(
        self,
        server: str,
        mode: ServerMode = ServerMode.MASTER,
        *opts: ConnectionOption,
    ) -> None:
        if not server:
            raise ValueError("invalid param: server is empty")

        self.server = server
        self.mode = ServerMode(mode)
        self.pool_config = PoolConfig()
        self.calculated = False
        self._crc = 0

        for opt in opts:
            opt(self)

        self.update_hash("S", server)

    def update_hash(self, *args: Any) -> None:
        """Feed values into the connection ID; not allowed once it was read."""
        if self.calculated:
            raise RuntimeError("can't update hash after calculate")

        for value in args:
            self._crc = _crc_update(self._crc, _encode_hash_value(value))

    def get_connection_id(self) -> str:
        """Return the connection ID as hex; the options are frozen afterwards."""
        self.calculated = True
        return self._crc.to_bytes(4, "big").hex()

    def instance_mode(self) -> ServerMode:
        return self.mode


def _encode_hash_value(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, bool):
        return b"\x01" if value else b"\x00"
    if isinstance(value, int):
        try:
            return struct.pack("<q", value)
        except struct.error as exc:
            raise ValueError(f"can't calculate connectionID: {exc}") from exc
    if isinstance(value, float):
        return struct.pack("<d", value)
    if isinstance(value, timedelta):
        return struct.pack("<q", _nanoseconds(value))
    raise TypeError(f"can't calculate connectionID: unsupported type {type(value).__name__}")


def with_timeout(request: float | timedelta, connection: float | timedelta) -> ConnectionOption:
    """Set request and connection timeouts."""

    def apply(options: ConnectionOptions) -> None:
        pool = options.pool_config
        pool.connect_timeout = _seconds(connection)
        pool.dial_timeout = _seconds(connection)
        pool.channel_config.write_timeout = _seconds(request)
        pool.channel_config.request_timeout = _seconds(request)
        options.update_hash("T", _nanoseconds(request), _nanoseconds(connection))

    return apply


def with_intervals(
    redial: float | timedelta,
    max_redial: float | timedelta,
    ping: float | timedelta,
) -> ConnectionOption:
    """Set redial and ping intervals."""

    def apply(options: ConnectionOptions) -> None:
        pool = options.pool_config
        pool.redial_interval = _seconds(redial)
        pool.max_redial_interval = _seconds(max_redial)
        pool.channel_config.ping_interval = _seconds(ping)
        options.update_hash(
            "I", _nanoseconds(redial), _nanoseconds(max_redial), _nanoseconds(ping)
        )

    return apply


def with_pool_size(size: int) -> ConnectionOption:
    """Set the number of connections in the pool."""

    def apply(options: ConnectionOptions) -> None:
        options.pool_config.size = size
        options.update_hash("s", size)

    return apply