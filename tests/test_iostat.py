import io
import time

import pytest

from octoproto.iostat import (
    Stat,
    TimeoutReader,
    TimeoutWriter,
    wrap_reader,
    wrap_writer,
)


def test_reader_counts_bytes_and_calls():
    payload = b"hello, world"
    reader = wrap_reader(io.BytesIO(payload))
    chunks = [reader.read(5), reader.read(5), reader.read(5), reader.read(5)]
    assert b"".join(chunks) == payload
    assert reader.stat() == Stat(bytes=len(payload), calls=4)


def test_writer_counts_bytes_and_calls():
    sink = io.BytesIO()
    writer = wrap_writer(sink)
    parts = [b"abc", b"", b"defgh"]
    for part in parts:
        writer.write(part)
    assert sink.getvalue() == b"".join(parts)
    assert writer.stat() == Stat(bytes=sum(map(len, parts)), calls=len(parts))


class _DeadlineDevice:
    def __init__(self, data=b"", fail=False):
        self.buffer = io.BytesIO(data)
        self.written = []
        self.deadlines = []
        self.fail = fail

    def set_write_deadline(self, deadline):
        if self.fail:
            raise OSError("deadline refused")
        self.deadlines.append(deadline)

    def set_read_deadline(self, deadline):
        if self.fail:
            raise OSError("deadline refused")
        self.deadlines.append(deadline)

    def write(self, data):
        self.written.append(data)
        return len(data)

    def read(self, size=-1):
        return self.buffer.read(size)


def test_timeout_writer_sets_deadline_before_write():
    device = _DeadlineDevice()
    before = time.time()
    n = TimeoutWriter(device, 2.0).write(b"data")
    assert n == 4
    assert device.written == [b"data"]
    assert len(device.deadlines) == 1
    assert device.deadlines[0] >= before + 2.0


def test_timeout_writer_propagates_deadline_error():
    device = _DeadlineDevice(fail=True)
    with pytest.raises(OSError):
        TimeoutWriter(device, 1.0).write(b"data")
    assert device.written == []


def test_timeout_reader_sets_deadline_before_read():
    device = _DeadlineDevice(b"payload")
    before = time.time()
    assert TimeoutReader(device, 0.5).read(3) == b"pay"
    assert device.deadlines[0] >= before + 0.5


def test_timeout_reader_propagates_deadline_error():
    device = _DeadlineDevice(b"payload", fail=True)
    with pytest.raises(OSError):
        TimeoutReader(device, 1.0).read(3)
    assert device.buffer.tell() == 0