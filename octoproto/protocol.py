"""Request types, codes, modes and records of the octopus box protocol."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class RequestType(enum.IntEnum):
    """Message type of a box request."""

    INSERT = 13
    SELECT = 17
    UPDATE = 19
    DELETE = 21
    CALL = 22

    def __str__(self) -> str:
        return self.name.title()


class InsertMode(enum.IntEnum):
    INSERT_OR_REPLACE = 0
    INSERT = 1
    REPLACE = 2


class OpCode(enum.IntEnum):
    """Update operation codes."""

    SET = 0
    ADD = 1
    AND = 2
    XOR = 3
    OR = 4
    SPLICE = 5
    DELETE = 6
    INSERT = 7
    UPDATE = 8


class RetCode(enum.IntEnum):
    """Status codes returned by the box."""

    OK = 0x0
    READ_ONLY = 0x0401
    LOCKED = 0x0601
    MEMORY_ISSUE = 0x0701
    NON_MASTER = 0x0102
    ILLEGAL_PARAMS = 0x0202
    SECONDARY_PORT = 0x0301
    BAD_INTEGRITY = 0x0801
    UNSUPPORTED_COMMAND = 0x0A02
    DUPLICATE = 0x2002
    WRONG_FIELD = 0x1E02
    WRONG_NUMBER = 0x1F02
    WRONG_VERSION = 0x2602
    WAL_IO = 0x2702
    DOESNT_EXISTS = 0x3102
    STORED_PROC_NOT_DEFINED = 0x3202
    LUA_ERROR = 0x3302
    TUPLE_EXISTS = 0x3702
    DUPLICATE_KEY = 0x3802


class BoxMode(enum.IntEnum):
    """Which instances a request may go to."""

    REPLICA_MASTER = 0
    MASTER_REPLICA = 1
    REPLICA_ONLY = 2
    MASTER_ONLY = 3
    SELECT_MODE_DEFAULT = 0


class CountFlags(enum.IntFlag):
    """Constraints on the number of tuples in a response."""

    UNIQ_RESP = 1
    NEED_RESP = 2


class Format(str, enum.Enum):
    """Field formats a model may declare."""

    UINT8 = "uint8"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    UINT = "uint"
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    INT = "int"
    STRING = "string"
    BOOL = "bool"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING_ARRAY = "[]string"
    BYTE_ARRAY = "[]byte"


UNSIGNED_FORMAT = (Format.UINT8, Format.UINT16, Format.UINT32, Format.UINT64, Format.UINT)
NUMERIC_FORMAT = UNSIGNED_FORMAT + (
    Format.INT8,
    Format.INT16,
    Format.INT32,
    Format.INT64,
    Format.INT,
)
FLOAT_FORMAT = (Format.FLOAT32, Format.FLOAT64)
DATA_FORMAT = (Format.STRING,)
ALL_FORMAT = NUMERIC_FORMAT + FLOAT_FORMAT + DATA_FORMAT + (Format.BOOL,)
ALL_PROC_FORMAT = ALL_FORMAT + (Format.STRING_ARRAY, Format.BYTE_ARRAY)

SPACE_LEN = 4
INDEX_LEN = 4
LIMIT_LEN = 4
OFFSET_LEN = 4
FLAGS_LEN = 4
FIELD_NUM_LEN = 4
OPS_LEN = 4
OP_FIELD_NUM_LEN = 4
OP_OP_LEN = 1


@dataclass
class TupleData:
    """A tuple from a box response: field count and raw field values."""

    cnt: int = 0
    data: list[bytes] = field(default_factory=list)


@dataclass
class Ops:
    """One update operation on a field."""

    field: int = 0
    op: OpCode = OpCode.SET
    value: bytes = b""


@dataclass
class BaseField:
    collection: list[Any] = field(default_factory=list)
    update_ops: list[Ops] = field(default_factory=list)
    extra_fields: list[bytes] = field(default_factory=list)
    objects: dict[str, list[Any]] = field(default_factory=dict)
    fieldset_altered: bool = False
    exists: bool = False
    shard_num: int = 0
    is_replica: bool = False
    readonly: bool = False
    repaired: bool = False


@dataclass
class MutatorField:
    op_func: dict[OpCode, str] = field(default_factory=dict)
    partial_fields: dict[str, Any] = field(default_factory=dict)
    update_ops: list[Ops] = field(default_factory=list)


_OP_CODE_NAMES = {
    OpCode.SET: "Set",
    OpCode.ADD: "Add",
    OpCode.AND: "And",
    OpCode.XOR: "Xor",
    OpCode.OR: "Or",
    OpCode.SPLICE: "Splice",
    OpCode.DELETE: "Delete",
    OpCode.INSERT: "Insert",
}

_INSERT_MODE_NAMES = {
    InsertMode.INSERT_OR_REPLACE: "InsertOrReplaceMode",
    InsertMode.INSERT: "InsertMode",
    InsertMode.REPLACE: "ReplaceMode",
}


def op_code_name(op: int) -> str:
    """Human name of an update operation; unknown codes give "invalid opcode"."""
    return _OP_CODE_NAMES.get(op, "invalid opcode")


def insert_mode_name(mode: int) -> str:
    """Human name of an insert mode; unknown modes give "Invalid mode"."""
    return _INSERT_MODE_NAMES.get(mode, "Invalid mode")