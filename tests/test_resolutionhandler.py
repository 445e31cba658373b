from typing import Optional

from deckbuddy.interfaces import NativeResolutionHandlerInterface, Resolution
from deckbuddy.resolutionhandler import ResolutionHandler


class FakeDisplays(NativeResolutionHandlerInterface):
    def __init__(self, displays: dict, primary: str) -> None:
        self.current = dict(displays)
        self.primary = primary
        self.broken: set = set()

    def change_resolution(self, predicate) -> dict[str, Optional[Resolution]]:
        changed: dict[str, Optional[Resolution]] = {}
        for name, current in self.current.items():
            wanted = predicate(name, name == self.primary)
            if wanted is None or name in self.broken:
                continue
            if wanted == current:
                changed[name] = None
                continue
            self.current[name] = wanted
            changed[name] = current
        return changed


BIG = Resolution(1920, 1080)
SMALL = Resolution(1280, 800)


def make_displays():
    return FakeDisplays({"0": BIG, "1": BIG}, primary="0")


def test_changes_only_primary_when_no_displays_handled():
    native = make_displays()
    handler = ResolutionHandler(native)
    assert handler.change_resolution(SMALL.width, SMALL.height) is True
    assert native.current == {"0": SMALL, "1": BIG}


def test_changes_only_handled_displays():
    native = make_displays()
    handler = ResolutionHandler(native, {"1"})
    assert handler.change_resolution(SMALL.width, SMALL.height) is True
    assert native.current == {"0": BIG, "1": SMALL}


def test_returns_false_when_nothing_matched():
    native = make_displays()
    handler = ResolutionHandler(native, {"missing"})
    assert handler.change_resolution(SMALL.width, SMALL.height) is False
    assert native.current == {"0": BIG, "1": BIG}


def test_restore_returns_original_resolution():
    native = make_displays()
    handler = ResolutionHandler(native)
    handler.change_resolution(SMALL.width, SMALL.height)
    handler.restore_resolution()
    assert native.current == {"0": BIG, "1": BIG}


def test_keeps_first_original_over_several_changes():
    native = make_displays()
    handler = ResolutionHandler(native)
    handler.change_resolution(SMALL.width, SMALL.height)
    handler.change_resolution(800, 600)
    assert native.current["0"] == Resolution(800, 600)
    handler.restore_resolution()
    assert native.current["0"] == BIG


def test_same_resolution_is_not_remembered():
    native = make_displays()
    handler = ResolutionHandler(native)
    assert handler.change_resolution(BIG.width, BIG.height) is True
    native.current["0"] = SMALL
    handler.restore_resolution()
    assert native.current["0"] == SMALL


def test_failed_restore_can_be_retried():
    native = make_displays()
    handler = ResolutionHandler(native)
    handler.change_resolution(SMALL.width, SMALL.height)
    native.broken.add("0")
    handler.restore_resolution()
    assert native.current["0"] == SMALL
    native.broken.clear()
    handler.restore_resolution()
    assert native.current["0"] == BIG


def test_context_manager_restores_on_exit():
    native = make_displays()
    with ResolutionHandler(native) as handler:
        handler.change_resolution(SMALL.width, SMALL.height)
        assert native.current["0"] == SMALL
    assert native.current["0"] == BIG


def test_requires_native_handler():
    try:
        ResolutionHandler(None)
    except ValueError as error:
        assert "native_handler" in str(error)
    else:
        raise AssertionError("expected ValueError")