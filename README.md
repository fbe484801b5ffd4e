# octoproto

Pure-Python pieces for speaking the Octopus box protocol over iproto.
No third-party dependencies.

## Modules

- `octoproto.box` builds request bodies: `pack_select`, `pack_insert_replace`,
  `pack_update`, `pack_delete` and `pack_lua`. It decodes them again with
  `unpack_insert_replace`, `unpack_update`, `unpack_delete` and `unpack_lua`.
  It turns box responses into lists of `TupleData` with
  `process_resp(resp, count_flags)`.
- `octoproto.pack` holds the low-level encoders and decoders: little-endian
  uint32, BER lengths, fields, keys, tuples, flags, limit and offset, and
  response status (`pack_response_status` / `unpack_response_status`).
  Every decoding failure raises `PackError`. When the box reported an error
  status, the status is kept in `PackError.ret_code`.
- `octoproto.protocol` defines `RequestType`, `InsertMode`, `OpCode`,
  `RetCode`, `BoxMode`, `CountFlags` and `Format`, the records `TupleData`,
  `Ops`, `BaseField` and `MutatorField`, and the helpers `op_code_name` and
  `insert_mode_name`.
- `octoproto.packet` frames iproto packets: a 12-byte little-endian header
  (`msg`, `length`, `sync`) followed by the body. It provides `Header`,
  `Packet`, `StreamWriter`, `write_packet`, `put_packet`, `marshal_packet`
  and `packet_size`.
- `octoproto.options` provides `ConnectionOptions`, with the option functions
  `with_timeout`, `with_intervals` and `with_pool_size`, plus the
  `PoolConfig`/`ChannelConfig` settings. Every option feeds a CRC-based
  connection ID (`get_connection_id()`), so equal settings give equal IDs.
  Reading the ID freezes the options, and any later `update_hash` raises
  `RuntimeError`.
- `octoproto.fixtures` builds `FixtureType` records for a mock box: the
  expected request bytes and the response to send back.
  - `create_select_fixture`, `create_call_fixture`,
    `create_insert_or_replace_fixture`, `create_update_fixture`,
    `create_delete_fixture` and `create_fixture` build the records.
  - `pack_mock_response` and `unpack_select` pack a response and decode a
    select request.
  - `wrap_trigger_with_on_use_promise` wraps a trigger so you can check
    whether it ran.
- Small helpers:
  - `octoproto.text`: `split2`, `split2_reversed`, `to_snake_case`.
  - `octoproto.timestamp`: `MonotonicTimestamp`, `monotonic()`.
  - `octoproto.iostat`: counting and deadline-setting reader and writer
    wrappers.
  - `octoproto.throttle`: `Throttle`, which allows one success per period.

## Install

```
pip install .
```

## Example

```python
from octoproto.box import pack_select, process_resp
from octoproto.pack import pack_response_status
from octoproto.protocol import RetCode
from octoproto.options import ConnectionOptions, ServerMode, with_timeout

# Select from space 2, index 1, no offset, at most 10 tuples, two keys.
request = pack_select(2, 1, 0, 10, [[b"aaa", b"\x10\x00"], [b"bbb", b"\x20\x00"]])

# Decode a successful response carrying one tuple of two fields.
response = pack_response_status(RetCode.OK, [[b"a", b"b"]])
print(process_resp(response, 0))  # [TupleData(cnt=2, data=[b'a', b'b'])]

opts = ConnectionOptions("127.0.0.1:11211", ServerMode.MASTER, with_timeout(0.05, 0.1))
print(opts.get_connection_id())
```

Durations given to the option functions are seconds (floats) or
`datetime.timedelta` values.

## What this package does not do

- It opens no network connections. It has no connection pool and no client
  that sends requests to a box.
- It runs no mock server. The fixtures only describe requests and responses
  for one.

You supply the transport. Use `octoproto.packet` to frame request bodies,
and `octoproto.box.process_resp` to read the replies.

## Tests

```
pip install .[test]
pytest
```