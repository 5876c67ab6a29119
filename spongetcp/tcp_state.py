"""Summaries of a TCP receiver's state, for comparison with the official TCP states."""

from __future__ import annotations

import enum

from spongetcp.tcp_receiver import TCPReceiver


class TCPReceiverStateSummary(str, enum.Enum):
    """The states a TCPReceiver can be summarised as."""

    ERROR = "error (connection was reset)"
    LISTEN = "waiting for SYN: ackno is empty"
    SYN_RECV = "SYN received (ackno exists), and input to stream hasn't ended"
    FIN_RECV = "input to stream has ended"

    def __str__(self) -> str:
        return self.value


def state_summary(receiver: TCPReceiver) -> TCPReceiverStateSummary:
    """Summarise the state of ``receiver``."""
    stream = receiver.stream_out()
    if stream.error():
        return TCPReceiverStateSummary.ERROR
    if receiver.ackno() is None:
        return TCPReceiverStateSummary.LISTEN
    if stream.input_ended():
        return TCPReceiverStateSummary.FIN_RECV
    return TCPReceiverStateSummary.SYN_RECV