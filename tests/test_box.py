import pytest

from octoproto.box import (
    pack_delete,
    pack_insert_replace,
    pack_lua,
    pack_select,
    pack_update,
    process_resp,
    unpack_delete,
    unpack_insert_replace,
    unpack_lua,
    unpack_update,
)
from octoproto.pack import PackError, pack_response_status
from octoproto.protocol import CountFlags, OpCode, Ops, RetCode, TupleData


def test_pack_select_matches_source_case():
    expected = bytes(
        [0x02, 0, 0, 0]
        + [0x01, 0, 0, 0]
        + [0x00, 0, 0, 0]
        + [0x0A, 0, 0, 0]
        + [0x02, 0, 0, 0]
        + [0x02, 0, 0, 0, 0x03, 97, 97, 97, 0x02, 0x10, 0x00]
        + [0x02, 0, 0, 0, 0x03, 98, 98, 98, 0x02, 0x20, 0x00]
    )
    keys = [[b"aaa", b"\x10\x00"], [b"bbb", b"\x20\x00"]]
    assert pack_select(2, 1, 0, 10, keys) == expected


FIELD_VALUE = bytes([0x0A, 0, 0, 0])
TUPLE_PART = bytes([0x02, 0, 0, 0, 0x04]) + FIELD_VALUE + bytes([0x00])


@pytest.mark.parametrize(
    "mode, flags",
    [
        (1, bytes([0x03, 0, 0, 0])),
        (2, bytes([0x05, 0, 0, 0])),
        (0, bytes([0x01, 0, 0, 0])),
    ],
)
def test_pack_insert_replace_matches_source_cases(mode, flags):
    expected = bytes([0x02, 0, 0, 0]) + flags + TUPLE_PART
    assert pack_insert_replace(2, mode, [FIELD_VALUE, b""]) == expected


def test_insert_replace_round_trip():
    data = pack_insert_replace(7, 1, [b"abc", b"", b"x" * 200])
    ns, need_ret, mode_bits, tuple_ = unpack_insert_replace(data)
    assert ns == 7
    assert need_ret is True
    assert mode_bits == 1 << 1
    assert tuple_ == [b"abc", b"", b"x" * 200]


def test_update_round_trip():
    ops = [Ops(field=1, op=OpCode.ADD, value=b"\x01\x00\x00\x00"), Ops(3, OpCode.SET, b"zz")]
    data = pack_update(4, [b"pk"], ops)
    ns, pk, got_ops = unpack_update(data)
    assert ns == 4
    assert pk == [b"pk"]
    assert got_ops == ops


def test_update_without_ops_round_trip():
    ns, pk, got_ops = unpack_update(pack_update(4, [b"a", b"b"], []))
    assert (ns, pk, got_ops) == (4, [b"a", b"b"], [])


def test_delete_round_trip():
    assert unpack_delete(pack_delete(9, [b"key"])) == (9, [b"key"])


def test_lua_round_trip_and_layout():
    data = pack_lua("proc", "a", "bc")
    assert data[:4] == b"\x00\x00\x00\x00"
    assert data[4:9] == b"\x04proc"
    assert unpack_lua(data) == ("proc", [b"a", b"bc"])


def test_unpack_lua_rejects_non_zero_marker():
    with pytest.raises(PackError):
        unpack_lua(b"\x01\x00\x00\x00\x00\x00\x00\x00\x00")


def test_process_resp_decodes_tuples():
    resp = pack_response_status(RetCode.OK, [[b"a", b"bcd"], [b""]])
    assert process_resp(resp, 0) == [
        TupleData(cnt=2, data=[b"a", b"bcd"]),
        TupleData(cnt=1, data=[b""]),
    ]


def test_process_resp_empty_ok():
    assert process_resp(pack_response_status(RetCode.OK, []), 0) == []


def test_process_resp_need_resp_on_empty():
    with pytest.raises(PackError, match="empty tuple"):
        process_resp(pack_response_status(RetCode.OK, []), CountFlags.NEED_RESP)


def test_process_resp_uniq_too_many():
    resp = pack_response_status(RetCode.OK, [[b"a"], [b"b"], [b"c"]])
    with pytest.raises(PackError, match="more than one tuple"):
        process_resp(resp, CountFlags.UNIQ_RESP)


def test_process_resp_error_status():
    resp = pack_response_status(RetCode.LUA_ERROR, [[b"boom\x00"]])
    with pytest.raises(PackError, match="boom") as info:
        process_resp(resp, 0)
    assert info.value.ret_code == RetCode.LUA_ERROR


def test_process_resp_extra_data():
    resp = pack_response_status(RetCode.OK, [[b"a"]]) + b"\xff"
    with pytest.raises(PackError, match="extra data"):
        process_resp(resp, 0)


def test_process_resp_truncated_tuple():
    resp = pack_response_status(RetCode.OK, [[b"abcdef"]])[:-2]
    with pytest.raises(PackError):
        process_resp(resp, 0)