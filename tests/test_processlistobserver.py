import pytest

from deckbuddy.processlistobserver import SteamProcessListObserver

STEAM_PATH = "/home/user/.local/share/Steam/ubuntu12_32/steam"


class FakeProcesses:
    def __init__(self, exec_paths=None, children=None, cmdlines=None):
        self.exec_paths = exec_paths or {}
        self.children = children or {}
        self.cmdlines = cmdlines or {}

    def get_pids(self):
        return list(self.exec_paths)

    def get_exec_path(self, pid):
        return self.exec_paths.get(pid, "")

    def get_children_pids(self, pid):
        return self.children.get(pid, [])

    def get_cmdline(self, pid):
        return self.cmdlines.get(pid, "")


@pytest.fixture
def make_observer():
    created = []

    def factory(processes):
        observer = SteamProcessListObserver(processes, check_interval_ms=60000)
        created.append(observer)
        return observer

    yield factory
    for observer in created:
        observer.stop_observing()


def test_find_steam_process_prefers_previous(make_observer):
    processes = FakeProcesses({10: STEAM_PATH, 20: STEAM_PATH})
    assert make_observer(processes).find_steam_process(20) == 20


def test_find_steam_process_searches_when_previous_is_stale(make_observer):
    processes = FakeProcesses({10: "/usr/bin/bash", 30: STEAM_PATH})
    assert make_observer(processes).find_steam_process(10) == 30


def test_find_steam_process_none_found(make_observer):
    processes = FakeProcesses({10: "/usr/bin/bash", 11: ""})
    assert make_observer(processes).find_steam_process(0) == 0


def test_observe_pid_collects_app_ids(make_observer):
    processes = FakeProcesses(
        {100: STEAM_PATH},
        children={100: [101, 102, 103, 104]},
        cmdlines={
            101: "reaper SteamLaunch AppId=620 -- game",
            102: "steamwebhelper",
            103: "reaper appid=440",
            104: "reaper AppId=99999999999",
        },
    )
    observer = make_observer(processes)
    emitted = []
    observer.list_changed.connect(lambda: emitted.append(True))
    observer.observe_pid(100)
    assert observer.app_ids == {620, 440}
    assert emitted == [True]

    observer.check_process_list()
    assert emitted == [True]


def test_stop_observing_clears_on_next_check(make_observer):
    processes = FakeProcesses({100: STEAM_PATH}, children={100: [101]}, cmdlines={101: "AppId=620"})
    observer = make_observer(processes)
    emitted = []
    observer.list_changed.connect(lambda: emitted.append(True))
    observer.observe_pid(100)
    observer.stop_observing()
    observer.check_process_list()
    assert observer.app_ids == frozenset()
    assert len(emitted) == 2


def test_observe_zero_pid_does_nothing(make_observer):
    processes = FakeProcesses({100: STEAM_PATH}, children={100: [101]}, cmdlines={101: "AppId=620"})
    observer = make_observer(processes)
    emitted = []
    observer.list_changed.connect(lambda: emitted.append(True))
    observer.observe_pid(0)
    assert observer.app_ids == frozenset()
    assert emitted == []