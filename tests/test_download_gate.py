"""Tests for DownloadGate."""

from pytestqt.qtbot import QtBot

from layermint.core.download_gate import DownloadGate


def test_locked_gate_parks_action(qtbot: QtBot) -> None:
    gate = DownloadGate(message="Pay first")
    calls: list[str] = []
    with qtbot.waitSignal(gate.authorization_required, timeout=1000) as blocker:
        ran = gate.request(lambda: calls.append("download"))
    assert ran is False
    assert blocker.args == ["Pay first"]
    assert calls == []
    assert gate.has_pending


def test_unlock_runs_pending_action_once(qtbot: QtBot) -> None:
    gate = DownloadGate()
    calls: list[str] = []
    gate.request(lambda: calls.append("download"))
    with qtbot.waitSignal(gate.unlocked_changed, timeout=1000) as blocker:
        gate.unlock()
    assert blocker.args == [True]
    assert calls == ["download"]
    assert not gate.has_pending
    gate.unlock()
    assert calls == ["download"]


def test_unlocked_gate_runs_immediately(qtbot: QtBot) -> None:
    gate = DownloadGate()
    gate.unlock()
    calls: list[str] = []
    with qtbot.assertNotEmitted(gate.authorization_required):
        assert gate.request(lambda: calls.append("download")) is True
    assert calls == ["download"]


def test_reset_drops_pending() -> None:
    gate = DownloadGate()
    calls: list[str] = []
    gate.request(lambda: calls.append("download"))
    gate.reset()
    gate.unlock()
    assert calls == []


def test_lock_again() -> None:
    gate = DownloadGate()
    gate.unlock()
    gate.lock()
    assert gate.unlocked is False
