import threading
import time

import pytest

from deckbuddy.interfaces import (
    NativeAutoStartHandlerInterface,
    NativePcStateHandlerInterface,
    NativeProcessHandlerInterface,
    NativeResolutionHandlerInterface,
    Resolution,
    Signal,
    SteamRegistryObserverInterface,
    Timer,
    TrackedAppData,
    single_shot,
)


def test_signal_emits_to_all_slots_in_order():
    signal = Signal()
    received = []
    signal.connect(lambda value: received.append(("a", value)))
    signal.connect(lambda value: received.append(("b", value)))
    signal.emit(7)
    assert received == [("a", 7), ("b", 7)]


def test_signal_disconnect_stops_delivery():
    signal = Signal()
    received = []
    slot = received.append
    signal.connect(slot)
    signal.disconnect(slot)
    signal.emit(1)
    assert received == []
    with pytest.raises(ValueError):
        signal.disconnect(slot)


def test_signal_disconnect_unknown_raises():
    with pytest.raises(ValueError):
        Signal().disconnect(print)


def test_signal_passes_several_arguments():
    signal = Signal()
    received = []
    signal.connect(lambda *args: received.append(args))
    signal.emit(1, "two", None)
    assert received == [(1, "two", None)]


def test_signal_can_forward_to_another_signal():
    source = Signal()
    target = Signal()
    received = []
    target.connect(received.append)
    source.connect(target.emit)
    source.emit(99)
    assert received == [99]


def test_timer_fires_once_when_single_shot():
    fired = threading.Event()
    calls = []

    def callback():
        calls.append(1)
        fired.set()

    timer = Timer(callback, 10, single_shot=True)
    timer.start()
    assert fired.wait(2)
    time.sleep(0.05)
    assert calls == [1]
    assert timer.is_active() is False


def test_timer_stop_prevents_firing():
    calls = []
    timer = Timer(lambda: calls.append(1), 150, single_shot=True)
    timer.start()
    assert timer.is_active() is True
    timer.stop()
    time.sleep(0.3)
    assert calls == []
    assert timer.is_active() is False


def test_repeating_timer_fires_multiple_times():
    calls = []
    done = threading.Event()

    def callback():
        calls.append(1)
        if len(calls) >= 3:
            done.set()

    timer = Timer(callback, 5)
    timer.start()
    assert done.wait(2)
    assert timer.is_active() is True
    timer.stop()
    assert timer.is_active() is False
    assert len(calls) >= 3


def test_timer_start_updates_interval():
    timer = Timer(interval_ms=10, single_shot=True)
    timer.start(500)
    assert timer.interval == 500
    timer.stop()


def test_single_shot_calls_callback():
    fired = threading.Event()
    timer = single_shot(0, fired.set)
    assert fired.wait(2)
    assert timer.is_active() is False


def test_single_shot_can_be_cancelled():
    calls = []
    timer = single_shot(150, lambda: calls.append(1))
    timer.stop()
    time.sleep(0.3)
    assert calls == []


def test_resolution_equality():
    assert Resolution(1280, 800) == Resolution(1280, 800)
    assert Resolution(1280, 800) != Resolution(800, 1280)


def test_tracked_app_defaults():
    data = TrackedAppData(42)
    assert (data.app_id, data.is_running, data.is_updating) == (42, False, False)


@pytest.mark.parametrize(
    "interface",
    [
        NativeAutoStartHandlerInterface,
        NativePcStateHandlerInterface,
        NativeProcessHandlerInterface,
        NativeResolutionHandlerInterface,
        SteamRegistryObserverInterface,
    ],
)
def test_interfaces_are_abstract(interface):
    with pytest.raises(TypeError):
        interface()