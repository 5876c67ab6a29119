import pytest

from spongetcp.buffer import Buffer, BufferList, BufferViewList


def test_buffer_round_trip():
    data = b"hello world"
    buf = Buffer(data)
    assert bytes(buf) == data
    assert buf.copy() == data
    assert len(buf) == len(data)


def test_empty_buffer():
    buf = Buffer()
    assert len(buf) == 0
    assert bytes(buf) == b""


@pytest.mark.parametrize("n", [0, 1, 4, 11])
def test_buffer_remove_prefix(n):
    data = b"hello world"
    buf = Buffer(data)
    buf.remove_prefix(n)
    assert bytes(buf) == data[n:]
    assert len(buf) == len(data) - n


def test_buffer_remove_prefix_too_far_raises_and_keeps_state():
    data = b"abc"
    buf = Buffer(data)
    with pytest.raises(IndexError):
        buf.remove_prefix(len(data) + 1)
    assert bytes(buf) == data


def test_buffer_at():
    data = b"xyz"
    buf = Buffer(data)
    assert buf.at(1) == data[1]
    buf.remove_prefix(1)
    assert buf.at(0) == data[1]
    with pytest.raises(IndexError):
        buf.at(len(buf))


def test_bufferlist_concatenate_and_len():
    parts = [b"ab", b"", b"cde", b"f"]
    blist = BufferList()
    for part in parts:
        blist.append(part)
    assert blist.concatenate() == b"".join(parts)
    assert len(blist) == sum(len(p) for p in parts)
    assert [bytes(b) for b in blist.buffers()] == parts


@pytest.mark.parametrize("n", [0, 1, 2, 3, 5, 6])
def test_bufferlist_remove_prefix(n):
    parts = [b"ab", b"cde", b"f"]
    joined = b"".join(parts)
    blist = BufferList(parts[0])
    blist.append(parts[1])
    blist.append(Buffer(parts[2]))
    blist.remove_prefix(n)
    assert blist.concatenate() == joined[n:]
    assert len(blist) == len(joined) - n


def test_bufferlist_remove_prefix_too_far_raises():
    blist = BufferList(b"abc")
    with pytest.raises(IndexError):
        blist.remove_prefix(len(b"abc") + 1)


def test_bufferlist_does_not_alter_appended_buffer():
    data = b"payload"
    buf = Buffer(data)
    blist = BufferList(buf)
    blist.remove_prefix(3)
    assert bytes(buf) == data
    assert blist.concatenate() == data[3:]


def test_bufferlist_append_list():
    first = BufferList(b"head")
    second = BufferList(b"body")
    first.append(second)
    assert first.concatenate() == b"headbody"
    second.remove_prefix(2)
    assert first.concatenate() == b"headbody"


def test_bufferlist_to_buffer():
    assert len(BufferList().to_buffer()) == 0
    assert bytes(BufferList(b"one").to_buffer()) == b"one"
    two = BufferList(b"one")
    two.append(b"two")
    with pytest.raises(ValueError):
        two.to_buffer()


def test_viewlist_from_bytes():
    data = b"abcdef"
    views = BufferViewList(data)
    assert len(views) == len(data)
    views.remove_prefix(2)
    assert b"".join(bytes(v) for v in views.as_views()) == data[2:]


def test_viewlist_from_bufferlist():
    parts = [b"ab", b"cd", b"ef"]
    blist = BufferList()
    for part in parts:
        blist.append(part)
    views = BufferViewList(blist)
    assert [bytes(v) for v in views.as_views()] == parts
    views.remove_prefix(3)
    assert b"".join(bytes(v) for v in views.as_views()) == b"".join(parts)[3:]
    assert len(views) == len(b"".join(parts)) - 3
    assert blist.concatenate() == b"".join(parts)


def test_viewlist_from_buffer_after_prefix_removed():
    data = b"0123456789"
    buf = Buffer(data)
    buf.remove_prefix(4)
    views = BufferViewList(buf)
    assert b"".join(bytes(v) for v in views.as_views()) == data[4:]


def test_viewlist_remove_prefix_too_far_raises():
    views = BufferViewList(b"ab")
    with pytest.raises(IndexError):
        views.remove_prefix(len(b"ab") + 1)


def test_viewlist_rejects_text():
    with pytest.raises(TypeError):
        BufferViewList("text")