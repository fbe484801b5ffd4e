"""Binary encoding of box request and response parts."""

from __future__ import annotations

import io
import struct
from typing import BinaryIO, Iterable, Sequence

from .protocol import (
    OP_FIELD_NUM_LEN,
    OP_OP_LEN,
    OPS_LEN,
    Ops,
    RetCode,
)

_UINT32 = struct.Struct("<I")
_UINT32_MAX = 0xFFFFFFFF
_NO_LIMIT = 0xFFFFFFFF
_BER_MAX_BYTES = 5


class PackError(ValueError):
    """Raised when data cannot be encoded or decoded.

    ``ret_code`` holds the box status code when the box reported an error.
    """

    def __init__(self, message: str, ret_code: int | None = None) -> None:
        super().__init__(message)
        self.ret_code = ret_code


def pack_uint32(value: int) -> bytes:
    """Encode ``value`` as a 4-byte little-endian unsigned integer."""
    if not 0 <= value <= _UINT32_MAX:
        raise PackError(f"value {value} out of uint32 range")
    return _UINT32.pack(value)


def unpack_uint32(reader: BinaryIO) -> int:
    """Read a 4-byte little-endian unsigned integer."""
    data = reader.read(4)
    if len(data) < 4:
        raise PackError(f"unexpected end of data: got {len(data)} of 4 bytes")
    return _UINT32.unpack(data)[0]


def pack_ber(value: int) -> bytes:
    """Encode ``value`` as a BER compressed integer (7-bit groups, high first)."""
    if not 0 <= value <= _UINT32_MAX:
        raise PackError(f"value {value} out of uint32 range")
    groups = [value & 0x7F]
    value >>= 7
    while value:
        groups.append((value & 0x7F) | 0x80)
        value >>= 7
    return bytes(reversed(groups))


def unpack_ber(reader: BinaryIO) -> int:
    """Read a BER compressed unsigned 32-bit integer."""
    result = 0
    for _ in range(_BER_MAX_BYTES):
        chunk = reader.read(1)
        if not chunk:
            raise PackError("unexpected end of data in BER integer")
        byte = chunk[0]
        result = (result << 7) | (byte & 0x7F)
        if not byte & 0x80:
            if result > _UINT32_MAX:
                raise PackError("BER integer overflows uint32")
            return result
    raise PackError("BER integer is too long")


def byte_len(length: int) -> int:
    """Size of a field of ``length`` bytes with its BER length prefix."""
    for prefix, bound in enumerate((1 << 7, 1 << 14, 1 << 21, 1 << 28), start=1):
        if length < bound:
            return prefix + length
    return 5 + length


def packed_field_len(field: bytes) -> int:
    return byte_len(len(field))


def packed_tuple_len(keys: Sequence[bytes]) -> int:
    return 4 + sum(packed_field_len(k) for k in keys)


def packed_keys_len(keys: Sequence[bytes]) -> int:
    return 4 + sum(packed_field_len(k) for k in keys)


def packed_key_len(keys: Sequence[bytes]) -> int:
    return packed_keys_len(keys)


def packed_update_ops_len(update_ops: Iterable[Ops]) -> int:
    return OPS_LEN + sum(
        OP_FIELD_NUM_LEN + OP_OP_LEN + byte_len(len(op.value)) for op in update_ops
    )


def packed_tuples_len(keys: Sequence[Sequence[bytes]]) -> int:
    return 4 + sum(packed_tuple_len(kt) for kt in keys)


def pack_field_nums(count: int) -> bytes:
    return pack_uint32(count)


def unpack_field_nums(reader: BinaryIO) -> int:
    try:
        return unpack_uint32(reader)
    except PackError as exc:
        raise PackError(f"can't unpack fieldsNum: {exc}") from exc


def pack_bool(value: bool) -> bytes:
    return bytes([bool_to_uint(value)])


def pack_field(field: bytes) -> bytes:
    """Encode a field as its BER length followed by its bytes."""
    return pack_ber(len(field)) + bytes(field)


def unpack_field(reader: BinaryIO) -> bytes:
    try:
        length = unpack_ber(reader)
        data = reader.read(length)
        if len(data) < length:
            raise PackError(f"unexpected end of data: got {len(data)} of {length} bytes")
    except PackError as exc:
        raise PackError(f"can't unpack field: {exc}") from exc
    return data


def _pack_fields(keys: Sequence[bytes]) -> bytes:
    return pack_field_nums(len(keys)) + b"".join(pack_field(k) for k in keys)


def pack_key(key: Sequence[bytes]) -> bytes:
    return _pack_fields(key)


def unpack_key(reader: BinaryIO) -> list[bytes]:
    try:
        field_num = unpack_uint32(reader)
    except PackError as exc:
        raise PackError(f"can't unpack fieldnum: {exc}") from exc
    fields = []
    for index in range(field_num):
        try:
            fields.append(unpack_field(reader))
        except PackError as exc:
            raise PackError(f"can't unpack field {index}: {exc}") from exc
    return fields


def pack_tuple(keys: Sequence[bytes]) -> bytes:
    return _pack_fields(keys)


def unpack_tuple(reader: BinaryIO) -> list[bytes]:
    try:
        fields_num = unpack_field_nums(reader)
    except PackError as exc:
        raise PackError(f"can't unpack fieldnum: {exc}") from exc
    return [unpack_field(reader) for _ in range(fields_num)]


def pack_tuples(keys: Sequence[Sequence[bytes]]) -> bytes:
    return pack_uint32(len(keys)) + b"".join(pack_tuple(kt) for kt in keys)


def unpack_tuples(reader: BinaryIO) -> list[list[bytes]]:
    try:
        count = unpack_uint32(reader)
    except PackError as exc:
        raise PackError(f"can't unpack tuple cnt: {exc}") from exc
    tuples = []
    for _ in range(count):
        try:
            tuples.append(unpack_tuple(reader))
        except PackError as exc:
            raise PackError(f"can't unpack tuple: {exc}") from exc
    return tuples


def _unpack_named_uint32(reader: BinaryIO, what: str) -> int:
    try:
        return unpack_uint32(reader)
    except PackError as exc:
        raise PackError(f"can't unpack {what}: {exc}") from exc


def pack_space(space: int) -> bytes:
    return pack_uint32(space)


def unpack_space(reader: BinaryIO) -> int:
    return _unpack_named_uint32(reader, "space")


def pack_index_num(indexnum: int) -> bytes:
    return pack_uint32(indexnum)


def unpack_index_num(reader: BinaryIO) -> int:
    return _unpack_named_uint32(reader, "indexnum")


def pack_request_flags(ret: bool, mode: int) -> bytes:
    """Encode request flags: bit 0 asks for the tuple back, bit ``mode`` sets the mode."""
    flags = 1 if ret else 0
    if mode != 0:
        flags |= 1 << int(mode)
    return pack_uint32(flags)


def unpack_request_flags(reader: BinaryIO) -> tuple[bool, int]:
    """Return the return-tuple flag and the remaining flag bits."""
    flags = _unpack_named_uint32(reader, "flags")
    if flags & 1:
        return True, flags ^ 1
    return False, flags


def pack_delete_flags(ret: bool) -> bytes:
    return pack_uint32(1 if ret else 0)


def pack_limit(limit: int) -> bytes:
    """Encode a limit; zero means no limit."""
    return pack_uint32(_NO_LIMIT if limit == 0 else limit)


def unpack_limit(reader: BinaryIO) -> int:
    limit = _unpack_named_uint32(reader, "limit")
    return 0 if limit == _NO_LIMIT else limit


def pack_offset(offset: int) -> bytes:
    return pack_uint32(offset)


def unpack_offset(reader: BinaryIO) -> int:
    return _unpack_named_uint32(reader, "offset")


def unpack_response_status(data: bytes) -> tuple[int, bytes]:
    """Split a box response into its tuple count and tuple data.

    Raises PackError carrying the box status when the box reported an error.
    """
    reader = io.BytesIO(data)
    try:
        ret_code = unpack_uint32(reader)
    except PackError as exc:
        raise PackError(f"error unpack retCode: {exc}") from exc

    rest = data[4:]
    if ret_code == RetCode.OK:
        if not rest:
            return 0, b""
        if len(rest) < 4:
            raise PackError(f"error unpack tuple cnt data to small: '{len(rest)}'")
        count = _UINT32.unpack_from(rest)[0]
        return count, rest[4:]

    message = rest[:-1] if rest.endswith(b"\x00") else rest
    raise PackError(
        f"error request to octopus `{message.decode('utf-8', errors='replace')}`",
        ret_code=ret_code,
    )


def pack_response_status(status: int, data: Sequence[Sequence[bytes]]) -> bytes:
    """Build a box response with ``status`` and the given tuples.

    For an error status the first field of the first tuple is the message.
    """
    resp = pack_uint32(int(status))
    if status == RetCode.OK:
        if not data:
            return resp
        parts = [resp, pack_uint32(len(data))]
        for tuple_ in data:
            payload = pack_uint32(len(tuple_)) + b"".join(pack_field(f) for f in tuple_)
            parts.append(pack_uint32(len(payload)))
            parts.append(payload)
        return b"".join(parts)

    if not data or not data[0]:
        raise PackError("error response needs a message field")
    return resp + pack_uint32(len(data[0])) + bytes(data[0][0])


def pack_string(field: str | bytes) -> bytes:
    """Encode a string as its raw bytes with no length prefix."""
    if isinstance(field, str):
        return field.encode("utf-8", errors="surrogateescape")
    return bytes(field)


def unpack_string(reader: BinaryIO) -> str:
    """Read everything left in ``reader`` as a string."""
    data = reader.read()
    return data.decode("utf-8", errors="surrogateescape")


def bool_to_uint(value: bool) -> int:
    return 1 if value else 0


def uint_to_bool(value: int) -> bool:
    return value != 0