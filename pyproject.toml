[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "deckbuddy"
version = "0.1.0"
description = "Host-side helpers for managing Steam, PC power state, display resolution and autostart on Linux"
requires-python = ">=3.10"
dependencies = []
keywords = ["steam", "vdf", "registry", "resolution", "power-management", "autostart", "procfs"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["deckbuddy"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
