"""iproto packet framing: a 12-byte little-endian header plus payload."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO

_HEADER = struct.Struct("<III")
HEADER_SIZE = _HEADER.size


@dataclass(frozen=True)
class Header:
    msg: int = 0
    length: int = 0
    sync: int = 0


@dataclass(frozen=True)
class Packet:
    header: Header = field(default_factory=Header)
    data: bytes = b""


class StreamWriter:
    """Writes packets to a binary stream; the length field is taken from the data."""

    def __init__(self, dest: BinaryIO) -> None:
        self.dest = dest

    def write_packet(self, packet: Packet) -> None:
        header = _HEADER.pack(packet.header.msg, len(packet.data), packet.header.sync)
        self.dest.write(header)
        self.dest.write(packet.data)


def write_packet(dest: BinaryIO, packet: Packet) -> None:
    """Write ``packet`` to ``dest``."""
    StreamWriter(dest).write_packet(packet)


def packet_size(packet: Packet) -> int:
    """Size of the packet's binary representation."""
    return len(packet.data) + HEADER_SIZE


def put_packet(buf: bytearray, packet: Packet) -> None:
    """Encode ``packet`` into the start of ``buf``.

    The length field is taken from the header. Raises ValueError if ``buf``
    is smaller than ``packet_size(packet)``.
    """
    size = packet_size(packet)
    if buf is None or len(buf) < size:
        raise ValueError(f"buffer too small for packet: need {size} bytes")
    _HEADER.pack_into(buf, 0, packet.header.msg, packet.header.length, packet.header.sync)
    buf[HEADER_SIZE:size] = packet.data


def marshal_packet(packet: Packet) -> bytes:
    """Return the binary representation of ``packet``."""
    buf = bytearray(packet_size(packet))
    put_packet(buf, packet)
    return bytes(buf)