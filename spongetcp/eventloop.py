"""Waiting for readiness on file descriptors and running callbacks."""

from __future__ import annotations

import enum
import select
from dataclasses import dataclass
from typing import Callable

from spongetcp.file_descriptor import FileDescriptor


class Direction(enum.IntEnum):
    """Whether a rule waits for its descriptor to become readable or writable."""

    In = select.POLLIN
    Out = select.POLLOUT


class EventLoopResult(enum.Enum):
    """What a call to EventLoop.wait_next_event came to."""

    Success = enum.auto()
    Timeout = enum.auto()
    Exit = enum.auto()


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


@dataclass
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callable[[], None]
    interest: Callable[[], bool]
    cancel: Callable[[], None]

    def service_count(self) -> int:
        if self.direction is Direction.In:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Holds rules and, on each wait, polls their descriptors and runs ready callbacks.

    Every callback must read from or write to its descriptor, or its interest
    must turn false; otherwise a busy wait is detected and RuntimeError raised.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callable[[], None],
        interest: Callable[[], bool] = _always,
        cancel: Callable[[], None] = _nothing,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction`` and ``interest()`` holds."""
        self._rules.append(_Rule(fd.duplicate(), Direction(direction), callback, interest, cancel))

    def wait_next_event(self, timeout_ms: int) -> EventLoopResult:
        """Poll once for up to ``timeout_ms`` milliseconds and service ready rules."""
        polled: list[tuple[_Rule, int]] = []
        something_to_poll = False
        for rule in self._rules:
            if (rule.direction is Direction.In and rule.fd.eof()) or rule.fd.closed():
                rule.cancel()
                continue
            if rule.interest():
                polled.append((rule, int(rule.direction)))
                something_to_poll = True
            else:
                polled.append((rule, 0))  # still want errors reported
        self._rules = [rule for rule, _ in polled]

        if not something_to_poll:
            return EventLoopResult.Exit

        masks: dict[int, int] = {}
        for rule, events in polled:
            fd = rule.fd.fd_num()
            masks[fd] = masks.get(fd, 0) | events
        poller = select.poll()
        for fd, events in masks.items():
            poller.register(fd, events)

        revents_by_fd: dict[int, int] = {}
        try:
            ready = poller.poll(timeout_ms)
            if not ready:
                return EventLoopResult.Timeout
            for fd, revents in ready:
                revents_by_fd[fd] = revents_by_fd.get(fd, 0) | revents
        except InterruptedError:
            return EventLoopResult.Exit
        except OSError:
            pass

        remaining: list[_Rule] = []
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                self._rules = remaining + [r for r, _ in polled[len(remaining):]]
                raise RuntimeError("EventLoop: error on polled file descriptor")

            poll_ready = bool(revents & events)
            poll_hup = bool(revents & select.POLLHUP)
            if poll_hup and events and not poll_ready:
                rule.cancel()
                continue

            if poll_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )
            remaining.append(rule)
        self._rules = remaining
        return EventLoopResult.Success