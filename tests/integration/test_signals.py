"""Tests for interrupt_on_signals."""

from __future__ import annotations

import os
import signal

import pytest

from barrage.engine.general import interrupt_on_signals
from barrage.engine.mission import CancellationFlag


@pytest.mark.timeout(10)
@pytest.mark.parametrize("signum", [signal.SIGINT, signal.SIGTERM])
def test_signal_cancels_flag(signum: int):
    flag = CancellationFlag()
    with interrupt_on_signals(flag) as yielded:
        assert yielded is flag
        os.kill(os.getpid(), signum)
        assert flag.sleep(5.0)
    assert flag.cancelled


def test_second_signal_is_harmless():
    flag = CancellationFlag()
    with interrupt_on_signals(flag):
        os.kill(os.getpid(), signal.SIGINT)
        flag.sleep(5.0)
        os.kill(os.getpid(), signal.SIGINT)
        flag.sleep(0.1)
    assert flag.cancelled


def test_handlers_are_restored():
    before_int = signal.getsignal(signal.SIGINT)
    before_term = signal.getsignal(signal.SIGTERM)

    with interrupt_on_signals(CancellationFlag()):
        assert signal.getsignal(signal.SIGINT) is not before_int
        assert signal.getsignal(signal.SIGTERM) is not before_term

    assert signal.getsignal(signal.SIGINT) is before_int
    assert signal.getsignal(signal.SIGTERM) is before_term


def test_handlers_are_restored_after_error():
    before_int = signal.getsignal(signal.SIGINT)

    with pytest.raises(ValueError, match="inside"), interrupt_on_signals(CancellationFlag()):
        msg = "inside"
        raise ValueError(msg)

    assert signal.getsignal(signal.SIGINT) is before_int
