"""User-space TCP building blocks: byte streams, reassembly, segments, a receiver and POSIX I/O helpers."""

__version__ = "0.1.0"