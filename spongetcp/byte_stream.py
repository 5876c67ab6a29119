"""A flow-controlled, in-memory, in-order byte stream."""

from __future__ import annotations


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` unread bytes. Once the writer ends
    the input, no more bytes are accepted.
    """

    def __init__(self, capacity: int) -> None:
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_read = 0
        self._bytes_written = 0
        self._input_ended = False
        self._error = False

    # Writer side

    def write(self, data: bytes) -> int:
        """Write as many bytes as fit and return how many were accepted."""
        if self._input_ended:
            return 0
        accepted = min(len(data), self.remaining_capacity())
        self._buffer += data[:accepted]
        self._bytes_written += accepted
        return accepted

    def remaining_capacity(self) -> int:
        """Number of additional bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that no more bytes will be written."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Reader side

    def peek_output(self, length: int) -> bytes:
        """Return up to ``length`` bytes from the front without removing them."""
        return bytes(self._buffer[:length])

    def pop_output(self, length: int) -> None:
        """Discard up to ``length`` bytes from the front."""
        removed = min(length, len(self._buffer))
        del self._buffer[:removed]
        self._bytes_read += removed

    def read(self, length: int) -> bytes:
        """Remove and return up to ``length`` bytes from the front."""
        data = self.peek_output(length)
        self.pop_output(length)
        return data

    def input_ended(self) -> bool:
        return self._input_ended

    def error(self) -> bool:
        return self._error

    def buffer_size(self) -> int:
        """Number of bytes that can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        return not self._buffer

    def eof(self) -> bool:
        """True once the input has ended and everything has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        return self._bytes_written

    def bytes_read(self) -> int:
        return self._bytes_read