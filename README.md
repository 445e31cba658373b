# deckbuddy

Building blocks for a host-side service that controls a gaming PC from a
remote client. They cover the Steam client process, PC power state,
display resolution and the desktop autostart entry on Linux. The package
has no third-party dependencies.

## Installation

```
pip install deckbuddy
```

## Modules

- `deckbuddy.interfaces`: small thread-based primitives and shared types.
  - `Signal` with `connect`, `disconnect` and `emit`.
  - `Timer`, a restartable timer. It has `start`, `stop` and `is_active`.
    It can be single-shot. It emits `timeout`.
  - `single_shot(interval_ms, callback)`.
  - The `Resolution` and `TrackedAppData` records.
  - The abstract back-end interfaces: `NativeAutoStartHandlerInterface`,
    `NativePcStateHandlerInterface`, `NativeProcessHandlerInterface`,
    `NativeResolutionHandlerInterface` and `SteamRegistryObserverInterface`.
- `deckbuddy.registryparser`: a simplified parser for Steam's
  `registry.vdf` text format. It does not handle macros or comments.
  - `parse_registry(data)` turns bytes into a tree of `Node(key, value)`.
    A value is a list of child nodes, a string, or an int that fits in 32
    bits. Malformed input raises `RegistryParseError`, whose `nodes`
    attribute holds what was parsed before the error.
  - `format_nodes(nodes)` renders the tree as indented text.
  - `RegistryFileParser.parse(path)` returns `False` when the file cannot
    be read or is malformed. The result is kept in `root`.
- `deckbuddy.registrywatcher`: `RegistryFileWatcher` watches the file by
  polling its modification time and size. After a short delay it
  re-parses the file and emits `registry_changed`. It raises
  `FileNotFoundError` if the file is missing at construction. It can be
  used as a context manager, or stopped with `close()`.
- `deckbuddy.nativeprocess`: `NativeProcessHandler` reads `/proc`, or
  another root you pass in. It lists pids, executable paths, parent pids,
  related and child pids, and command lines. `close` sends `SIGTERM` and
  `terminate` sends `SIGKILL` to a process and all its descendants.
- `deckbuddy.processhandler`: `ProcessHandler` monitors one pid whose
  executable path matches a regex, checking it every second. It emits
  `process_died` when the process goes away. It can close the process,
  optionally with a forced kill after a timeout, and it has
  `close_detached` for processes it does not monitor. `matching_process`
  is the helper it uses to match paths.
- `deckbuddy.processlistobserver`: `SteamProcessListObserver` finds the
  Steam process. It collects the `AppId=` values from the command lines
  of Steam's children and grandchildren, and emits `list_changed` when
  that set changes.
- `deckbuddy.steamregistryobserver`: `SteamRegistryObserver` combines the
  registry watcher and the process list observer. It emits the Steam pid,
  the Steam executable path, the global app id and the running state of
  the tracked app. `get_entry(path, nodes, kind)` looks up a key path in a
  parsed registry tree. By default the observer uses
  `~/.steam/registry.vdf` and `/usr/bin/steam`. It raises
  `FileNotFoundError` if either is missing.
- `deckbuddy.steamhandler`: `SteamHandler` launches Steam apps, with
  optional big picture mode. It closes Steam gracefully, with a forced
  kill after a grace period, and reports the running, active and updating
  tracked apps.
- `deckbuddy.pcstatehandler`: `PcStateHandler` performs shutdown,
  restart, suspend or hibernate after a grace period. It refuses a new
  request while one is pending. Its `state` is a `PcState`: `Normal`,
  `Restarting`, `ShuttingDown` or `Suspending`. Hibernation also reports
  `Suspending`.
- `deckbuddy.resolutionhandler`: `ResolutionHandler` changes the
  resolution of the handled displays. When no displays are named, it
  changes the primary one. It remembers the original resolutions and
  restores them with `restore_resolution()`, `close()` or on leaving a
  `with` block. If a restore fails, it tries again every 10 seconds.
- `deckbuddy.nativeresolution`: `is_wayland_session(environ)` checks the
  `XDG_SESSION_TYPE` and `WAYLAND_DISPLAY` variables.
  `NativeResolutionHandler` passes resolution changes to an X11 back-end
  that you supply, and does nothing under Wayland.
- `deckbuddy.autostart`: `AutoStartHandler` writes or removes an XDG
  desktop entry at the path you give it. `autostart_contents` returns the
  text of that entry.

## Examples

Parsing registry data:

```python
from deckbuddy.registryparser import parse_registry, format_nodes
from deckbuddy.steamregistryobserver import get_entry

nodes = parse_registry(b'"Registry" { "HKLM" { "SteamPID" "1234" } }')
print(format_nodes(nodes))
print(get_entry(["Registry", "HKLM", "SteamPID"], nodes, int))  # 1234
```

Managing the autostart entry:

```python
from deckbuddy.autostart import AutoStartHandler

handler = AutoStartHandler("/tmp/autostart/mybuddy.desktop", "mybuddy", "mybuddy --start")
handler.set_auto_start(True)
assert handler.is_auto_start_enabled()
```

## What the package does not do

- It provides no HTTP server, no request routing, no pairing and no
  command-line program. It offers building blocks only.
- It has no power-management back-end. `PcStateHandler` needs an
  implementation of `NativePcStateHandlerInterface`, for example one that
  talks to logind.
- It has no X11 back-end. `NativeResolutionHandler` changes nothing
  unless you give it an `x11_handler` that implements
  `NativeResolutionHandlerInterface`.
- It starts no programs by itself. `SteamHandler` takes a `launcher`
  callable that starts a detached program and reports whether it
  succeeded.
- It does not inhibit sleep, and it has no system tray.

## Running the tests

```
pip install -e .[test]
pytest
```