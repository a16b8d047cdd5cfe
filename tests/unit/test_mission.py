"""Tests for Mission and CancellationFlag."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, Any

import pytest

from barrage._internal.config import BenchConfig, Node
from barrage.engine.mission import CancellationFlag, Mission

if TYPE_CHECKING:
    from barrage._internal.types import WorkResult

NODES = (Node("a", 1), Node("b", 2), Node("c", 3))


def _echo_port(node: Node, data: Any) -> WorkResult:
    return float(node.port), (1, 0, 0)


class TestCancellationFlag:
    def test_starts_unset(self):
        assert not CancellationFlag().cancelled

    def test_cancel_is_sticky(self):
        flag = CancellationFlag()
        flag.cancel()
        flag.cancel()
        assert flag.cancelled

    def test_sleep_returns_early_when_cancelled(self):
        flag = CancellationFlag()
        threading.Timer(0.05, flag.cancel).start()

        start = time.perf_counter()
        assert flag.sleep(5.0)
        assert time.perf_counter() - start < 2.0

    def test_sleep_runs_out(self):
        assert not CancellationFlag().sleep(0.01)


class TestMission:
    def test_from_config(self):
        config = BenchConfig(nodes=NODES, thread=4, amount=7, interval=3, category="blockNumber")
        flag = CancellationFlag()
        mission = Mission.from_config(config, _echo_port, data="shared", terminate=flag)

        assert mission.captain_num == 3
        assert mission.soldier_num == 4
        assert mission.amount == 7
        assert mission.interval == 3
        assert mission.category == "blockNumber"
        assert mission.terminate is flag
        assert mission.data == "shared"

    def test_party_count_includes_general(self):
        mission = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=5)
        assert mission.party_count == 3 * 5 + 1

    def test_run_targets_captain_node(self):
        mission = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=1)
        assert mission.run(2) == (3.0, (1, 0, 0))

    def test_halted_by_either_flag(self):
        mission = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=1)
        assert not mission.halted
        mission.aborted.cancel()
        assert mission.halted

        other = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=1)
        other.terminate.cancel()
        assert other.halted

    def test_frozen(self):
        mission = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=1)
        with pytest.raises(AttributeError):
            mission.amount = 3  # type: ignore[misc]


class TestAnyOf:
    def test_follows_any_source(self):
        first, second = CancellationFlag(), CancellationFlag()
        combined = CancellationFlag.any_of(first, second)
        assert not combined.cancelled

        second.cancel()
        assert combined.cancelled
        assert not first.cancelled

    def test_source_already_set(self):
        source = CancellationFlag()
        source.cancel()
        assert CancellationFlag.any_of(source).cancelled

    def test_wakes_a_sleeper(self):
        source = CancellationFlag()
        combined = CancellationFlag.any_of(CancellationFlag(), source)
        threading.Timer(0.05, source.cancel).start()

        start = time.perf_counter()
        assert combined.sleep(5.0)
        assert time.perf_counter() - start < 2.0


class TestPause:
    @pytest.mark.parametrize("flag", ["terminate", "aborted"])
    def test_either_flag_ends_the_pause(self, flag: str):
        mission = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=1)
        threading.Timer(0.05, getattr(mission, flag).cancel).start()

        start = time.perf_counter()
        mission.pause(5.0)
        assert time.perf_counter() - start < 2.0
        assert mission.halted

    def test_pause_runs_out(self):
        mission = Mission(work_unit=_echo_port, data=None, category="t", nodes=NODES, soldier_num=1)
        start = time.perf_counter()
        mission.pause(0.02)
        assert time.perf_counter() - start >= 0.015
        assert not mission.halted
