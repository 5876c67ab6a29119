import errno
import os

import pytest

from spongetcp.buffer import BufferList
from spongetcp.file_descriptor import FileDescriptor
from spongetcp.util import UnixError


@pytest.fixture
def pipe():
    r, w = os.pipe()
    reader, writer = FileDescriptor(r), FileDescriptor(w)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_write_then_read_round_trip(pipe):
    reader, writer = pipe
    assert writer.write(b"hello world") == 11
    assert reader.read() == b"hello world"
    assert reader.read_count() == 1
    assert writer.write_count() == 1


def test_read_respects_limit(pipe):
    reader, writer = pipe
    writer.write(b"abcdef")
    assert reader.read(3) == b"abc"
    assert reader.read(10) == b"def"
    assert reader.read_count() == 2


def test_write_buffer_list(pipe):
    reader, writer = pipe
    data = BufferList(b"abc")
    data.append(b"defg")
    assert writer.write(data) == 7
    assert reader.read() == b"abcdefg"


def test_write_str(pipe):
    reader, writer = pipe
    writer.write("text")
    assert reader.read() == b"text"


def test_eof_after_writer_closes(pipe):
    reader, writer = pipe
    writer.write(b"x")
    writer.close()
    assert reader.read() == b"x"
    assert not reader.eof()
    assert reader.read() == b""
    assert reader.eof()


def test_zero_limit_read_does_not_set_eof(pipe):
    reader, writer = pipe
    writer.close()
    assert reader.read(0) == b""
    assert not reader.eof()


def test_duplicate_shares_state(pipe):
    reader, writer = pipe
    twin = reader.duplicate()
    assert twin.fd_num() == reader.fd_num()
    writer.write(b"ab")
    twin.read()
    assert reader.read_count() == 1
    twin.close()
    assert reader.closed()
    assert reader.eof()


def test_invalid_fd_number():
    with pytest.raises(ValueError):
        FileDescriptor(-1)


def test_read_on_closed_descriptor_raises(pipe):
    reader, _ = pipe
    reader.close()
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.errno == errno.EBADF
    assert info.value.attempt == "read"


def test_non_blocking_read_of_empty_pipe_raises(pipe):
    reader, _ = pipe
    reader.set_blocking(False)
    with pytest.raises(UnixError) as info:
        reader.read()
    assert info.value.errno == errno.EAGAIN
    reader.set_blocking(True)
    assert os.get_blocking(reader.fd_num())


def test_context_manager_closes():
    r, w = os.pipe()
    os.close(w)
    with FileDescriptor(r) as fd:
        assert not fd.closed()
    assert fd.closed()


def test_register_counts(pipe):
    reader, _ = pipe
    reader.register_read()
    reader.register_write()
    reader.register_write()
    assert (reader.read_count(), reader.write_count()) == (1, 2)