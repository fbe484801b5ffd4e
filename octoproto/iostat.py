"""Wrappers that count I/O usage or set deadlines before each call."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Protocol

_UINT32_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class Stat:
    """Usage statistics of a wrapped reader or writer."""

    bytes: int = 0
    calls: int = 0


class CountingReader:
    """Counts bytes read and read calls made on an underlying reader."""

    def __init__(self, reader: Any) -> None:
        self._reader = reader
        self._bytes = 0
        self._calls = 0

    def read(self, size: int = -1) -> bytes:
        data = self._reader.read(size)
        self._bytes = (self._bytes + len(data)) & _UINT32_MASK
        self._calls = (self._calls + 1) & _UINT32_MASK
        return data

    def stat(self) -> Stat:
        return Stat(self._bytes, self._calls)


class CountingWriter:
    """Counts bytes written and write calls made on an underlying writer."""

    def __init__(self, writer: Any) -> None:
        self._writer = writer
        self._bytes = 0
        self._calls = 0

    def write(self, data: bytes) -> int:
        written = self._writer.write(data)
        if written is None:
            written = len(data)
        self._bytes = (self._bytes + written) & _UINT32_MASK
        self._calls = (self._calls + 1) & _UINT32_MASK
        return written

    def stat(self) -> Stat:
        return Stat(self._bytes, self._calls)


def wrap_reader(reader: Any) -> CountingReader:
    """Wrap ``reader`` to collect usage statistics. Not thread safe."""
    return CountingReader(reader)


def wrap_writer(writer: Any) -> CountingWriter:
    """Wrap ``writer`` to collect usage statistics. Not thread safe."""
    return CountingWriter(writer)


class DeadlineWriter(Protocol):
    def write(self, data: bytes) -> int: ...

    def set_write_deadline(self, deadline: float) -> None: ...


class DeadlineReader(Protocol):
    def read(self, size: int = -1) -> bytes: ...

    def set_read_deadline(self, deadline: float) -> None: ...


@dataclass
class TimeoutWriter:
    """Sets a write deadline ``timeout`` seconds ahead before every write."""

    dest: DeadlineWriter
    timeout: float

    def write(self, data: bytes) -> int:
        self.dest.set_write_deadline(time.time() + self.timeout)
        return self.dest.write(data)


@dataclass
class TimeoutReader:
    """Sets a read deadline ``timeout`` seconds ahead before every read."""

    dest: DeadlineReader
    timeout: float

    def read(self, size: int = -1) -> bytes:
        self.dest.set_read_deadline(time.time() + self.timeout)
        return self.dest.read(size)