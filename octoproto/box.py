"""Encoding of box requests and decoding of box responses."""

from __future__ import annotations

import io
from typing import BinaryIO, Sequence

from .pack import (
    PackError,
    pack_ber,
    pack_field,
    pack_index_num,
    pack_key,
    pack_limit,
    pack_offset,
    pack_request_flags,
    pack_space,
    pack_tuple,
    pack_tuples,
    pack_uint32,
    unpack_ber,
    unpack_field,
    unpack_key,
    unpack_request_flags,
    unpack_response_status,
    unpack_space,
    unpack_tuple,
    unpack_uint32,
)
from .protocol import CountFlags, OpCode, Ops, TupleData


def _remaining(reader: io.BytesIO) -> int:
    return len(reader.getbuffer()) - reader.tell()


def process_resp(resp: bytes, count_flags: int) -> list[TupleData]:
    """Decode the tuples of a box response, checking ``count_flags``."""
    try:
        tuple_cnt, resp_data = unpack_response_status(resp)
    except PackError as exc:
        raise PackError(f"error response from box: `{exc}`", ret_code=exc.ret_code) from exc

    if count_flags & CountFlags.UNIQ_RESP and tuple_cnt > 2:
        raise PackError(f"returning more than one tuple: {tuple_cnt}")

    if count_flags & CountFlags.NEED_RESP and tuple_cnt == 0:
        raise PackError("empty tuple")

    reader = io.BytesIO(resp_data)
    tuples: list[TupleData] = []

    for number in range(tuple_cnt):
        try:
            tuple_size = unpack_uint32(reader)
        except PackError as exc:
            raise PackError(f"error unpacking tuple '{exc}'") from exc

        if _remaining(reader) < tuple_size:
            raise PackError(
                f"error tuple({number + 1}) size {_remaining(reader)}, need {tuple_size}"
            )

        try:
            field_cnt = unpack_uint32(reader)
        except PackError as exc:
            raise PackError(f"error unpack fields cnt in tuple {number}: {exc}") from exc

        fields: list[bytes] = []
        total_field_len = 0
        for field_number in range(field_cnt):
            try:
                field_len = unpack_ber(reader)
            except PackError as exc:
                raise PackError(
                    f"error unpack fieldLen({field_number}) in tuple({number}): '{exc}'"
                ) from exc

            if total_field_len + field_len > tuple_size:
                raise PackError(
                    f"len fields overflow({total_field_len + field_len}) in tuple({number})"
                )

            total_field_len += field_len
            value = reader.read(field_len)
            if len(value) < field_len:
                raise PackError(f"can't seek: field {field_number} in tuple({number}) is cut")
            fields.append(value)

        tuples.append(TupleData(cnt=field_cnt, data=fields))

    extra = reader.read()
    if extra:
        raise PackError(f"extra data in resp: '{extra.hex().upper()}'")

    return tuples


def pack_insert_replace(ns: int, insert_mode: int, tuple_: Sequence[bytes]) -> bytes:
    """Build an insert/replace request body."""
    return pack_space(ns) + pack_request_flags(True, insert_mode) + pack_tuple(tuple_)


def unpack_insert_replace(data: bytes) -> tuple[int, bool, int, list[bytes]]:
    """Decode an insert/replace request into namespace, return flag, mode bits and tuple."""
    reader = io.BytesIO(data)
    ns = unpack_space(reader)

    try:
        need_ret_val, insert_mode = unpack_request_flags(reader)
    except PackError as exc:
        raise PackError(f"can't unpack flags: {exc}") from exc

    try:
        tuple_ = unpack_tuple(reader)
    except PackError as exc:
        raise PackError(f"can't unpack insert tuple: {exc}") from exc

    return ns, need_ret_val, insert_mode, tuple_


def pack_select(
    ns: int,
    indexnum: int,
    offset: int,
    limit: int,
    keys: Sequence[Sequence[bytes]],
) -> bytes:
    """Build a select request body."""
    return (
        pack_space(ns)
        + pack_index_num(indexnum)
        + pack_offset(offset)
        + pack_limit(limit)
        + pack_tuples(keys)
    )


def pack_update(ns: int, primary_key: Sequence[bytes], update_ops: Sequence[Ops]) -> bytes:
    """Build an update request body."""
    parts = [pack_space(ns), pack_request_flags(True, 0), pack_key(primary_key)]

    if update_ops:
        parts.append(pack_uint32(len(update_ops)))
        for op in update_ops:
            parts.append(pack_uint32(op.field))
            parts.append(bytes([int(op.op)]))
            parts.append(pack_field(op.value))

    return b"".join(parts)


def _op_code(value: int) -> OpCode | int:
    try:
        return OpCode(value)
    except ValueError:
        return value


def unpack_update(data: bytes) -> tuple[int, list[bytes], list[Ops]]:
    """Decode an update request into namespace, primary key and operations."""
    reader = io.BytesIO(data)
    ns = unpack_space(reader)

    try:
        unpack_request_flags(reader)
    except PackError as exc:
        raise PackError(f"can't unpack flags: {exc}") from exc

    try:
        primary_key = unpack_key(reader)
    except PackError as exc:
        raise PackError(f"can't unpack PK: {exc}") from exc

    update_ops: list[Ops] = []
    if _remaining(reader):
        try:
            num_update = unpack_uint32(reader)
        except PackError as exc:
            raise PackError("can't unpack updateOps len") from exc

        for number in range(num_update):
            try:
                field = unpack_uint32(reader)
            except PackError as exc:
                raise PackError(
                    f"can't unpack field name from updateops ({number}): {exc}"
                ) from exc

            op_byte = reader.read(1)
            if not op_byte:
                raise PackError(f"can't unpack opCode from updateops ({number}): EOF")

            try:
                value = unpack_field(reader)
            except PackError as exc:
                raise PackError(
                    f"can't unpack field value from updateops ({number}): {exc}"
                ) from exc

            update_ops.append(Ops(field=field, op=_op_code(op_byte[0]), value=value))

    return ns, primary_key, update_ops


def pack_delete(ns: int, primary_key: Sequence[bytes]) -> bytes:
    """Build a delete request body."""
    return pack_space(ns) + pack_request_flags(True, 0) + pack_key(primary_key)


def unpack_delete(data: bytes) -> tuple[int, list[bytes]]:
    """Decode a delete request into namespace and primary key."""
    reader = io.BytesIO(data)
    ns = unpack_space(reader)

    try:
        unpack_request_flags(reader)
    except PackError as exc:
        raise PackError(f"can't unpack flags: {exc}") from exc

    try:
        primary_key = unpack_key(reader)
    except PackError as exc:
        raise PackError(f"can't unpack PK: {exc}") from exc

    return ns, primary_key


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def pack_lua(name: str, *args: str | bytes) -> bytes:
    """Build a request body calling the stored procedure ``name``."""
    parts = [pack_uint32(0), pack_field(_as_bytes(name)), pack_uint32(len(args))]
    parts.extend(pack_field(_as_bytes(arg)) for arg in args)
    return b"".join(parts)


def _unpack_lua_name(reader: BinaryIO) -> bytes:
    length = unpack_ber(reader)
    name = reader.read(length)
    if len(name) < length:
        raise PackError(f"unexpected end of data: got {len(name)} of {length} bytes")
    return name


def unpack_lua(data: bytes) -> tuple[str, list[bytes]]:
    """Decode a procedure call request into its name and arguments."""
    reader = io.BytesIO(data)

    try:
        marker = unpack_uint32(reader)
    except PackError as exc:
        raise PackError(f"can't unpack as call lua procedure: {exc}") from exc
    if marker != 0:
        raise PackError(f"can't unpack as call lua procedure: unexpected marker {marker}")

    try:
        proc_name = _unpack_lua_name(reader)
    except PackError as exc:
        raise PackError(f"can't unpack lua procedure name: {exc}") from exc

    try:
        args = unpack_tuple(reader)
    except PackError as exc:
        raise PackError(f"can't unpack lua procedure args: {exc}") from exc

    return proc_name.decode("utf-8", errors="surrogateescape"), args