import re
import threading

import pytest

from deckbuddy.interfaces import NativeProcessHandlerInterface
from deckbuddy.processhandler import ProcessHandler, matching_process

STEAM = re.compile(r"[\\/]steam(?:\.exe$|$)", re.IGNORECASE)


class FakeNative(NativeProcessHandlerInterface):
    def __init__(self, processes):
        self.processes = dict(processes)
        self.closed = []
        self.terminated = []
        self.terminated_event = threading.Event()

    def get_pids(self):
        return list(self.processes)

    def get_exec_path(self, pid):
        return self.processes.get(pid, "")

    def close(self, pid):
        self.closed.append(pid)

    def terminate(self, pid):
        self.terminated.append(pid)
        self.terminated_event.set()


@pytest.fixture
def native():
    return FakeNative({10: "/usr/bin/steam", 20: "/usr/bin/bash", 30: "/opt/other/steam"})


@pytest.fixture
def handler(native):
    proc = ProcessHandler(native)
    yield proc
    proc.stop_monitoring()


def test_matching_process_rejects_empty_path():
    assert matching_process("", STEAM) is False


def test_matching_process_matches_pattern():
    assert matching_process("/usr/bin/steam", STEAM) is True
    assert matching_process("C:\\Steam\\Steam.exe", STEAM) is True
    assert matching_process("/usr/bin/steamcmd", STEAM) is False


def test_get_pids_matching_exec_path(handler):
    assert handler.get_pids_matching_exec_path(STEAM) == [10, 30]


def test_start_monitoring_zero_pid(handler):
    assert handler.start_monitoring(0, STEAM) is False
    assert handler.is_running() is False


def test_start_monitoring_non_matching(handler):
    assert handler.start_monitoring(20, STEAM) is False
    assert handler.is_running() is False


def test_start_monitoring_matching(handler):
    assert handler.start_monitoring(10, STEAM) is True
    assert handler.is_running() is True


def test_check_state_reports_death(handler, native):
    died = []
    handler.process_died.connect(lambda: died.append(True))
    handler.start_monitoring(10, STEAM)
    del native.processes[10]
    handler.check_state()
    assert died == [True]
    assert handler.is_running() is False


def test_is_running_now_detects_death(handler, native):
    handler.start_monitoring(10, STEAM)
    native.processes[10] = "/usr/bin/bash"
    assert handler.is_running_now() is False


def test_close_running_process(handler, native):
    handler.start_monitoring(10, STEAM)
    handler.close()
    assert native.closed == [10]
    assert native.terminated == []
    assert handler.is_running() is True


def test_close_with_timer_terminates(handler, native):
    handler.start_monitoring(10, STEAM)
    handler.close(10)
    assert native.terminated_event.wait(2)
    assert native.terminated[0] == 10
    assert handler.is_running() is True


def test_close_when_not_running_does_nothing(handler, native):
    handler.close(10)
    handler.terminate()
    assert native.closed == []
    assert native.terminated == []
    assert handler.is_running_now() is False


def test_stop_monitoring_cancels_kill(handler, native):
    handler.start_monitoring(10, STEAM)
    handler.close(200)
    handler.stop_monitoring()
    assert native.terminated_event.wait(0.4) is False
    assert handler.is_running() is False


def test_close_detached_closes_and_kills_survivors(handler, native):
    handler.close_detached(STEAM, 10)
    assert sorted(native.closed) == [10, 30]
    done = threading.Event()

    def wait_both():
        while len(native.terminated) < 2:
            native.terminated_event.wait(0.05)
        done.set()

    threading.Thread(target=wait_both, daemon=True).start()
    assert done.wait(2)
    assert sorted(native.terminated) == [10, 30]
    assert handler.is_running() is False


def test_close_detached_pid_skips_dead_process(handler, native):
    handler.close_detached_pid(20, STEAM, 10)
    assert native.closed == []
    assert handler.get_pids_matching_exec_path(STEAM) == [10, 30]


def test_close_detached_pid_no_kill_after_exit(handler, native):
    handler.close_detached_pid(10, STEAM, 50)
    del native.processes[10]
    assert handler.get_pids_matching_exec_path(STEAM) == [30]
    assert native.terminated_event.wait(0.3) is False
    assert native.closed == [10]


def test_requires_native_handler():
    with pytest.raises(ValueError):
        ProcessHandler(None)