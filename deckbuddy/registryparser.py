"""Parser for Steam's text registry (VDF-like) files.

This is a simplified parser: macros, comments and other extensions are not supported.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

log = logging.getLogger(__name__)

_WHITESPACE = frozenset(b"\n \t\r")
_ESCAPABLE = frozenset(b'\n\t\r\\"')
_QUOTE = ord('"')
_ESCAPE = ord("\\")
_GROUP_START = ord("{")
_GROUP_END = ord("}")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


@dataclass
class Node:
    key: str
    value: Union[list["Node"], str, int] = ""


class RegistryParseError(ValueError):
    """Raised for malformed registry data; ``nodes`` holds what was parsed before the error."""

    def __init__(self, message: str, nodes: Optional[list[Node]] = None) -> None:
        super().__init__(message)
        self.nodes = nodes if nodes is not None else []


def _to_value(text: str) -> Union[str, int]:
    if _INTEGER.fullmatch(text):
        number = int(text)
        if _INT32_MIN <= number <= _INT32_MAX:
            return number
    return text


class _Parser:
    def __init__(self) -> None:
        self.root: list[Node] = []
        self.parents: list[list[Node]] = [self.root]
        self.buffer = bytearray()
        self.expecting_key = True
        self.quoted = False
        self.escaped = False

    def fail(self, message: str) -> None:
        raise RegistryParseError(message, self.root)

    def feed(self, data: bytes) -> None:
        for byte in data:
            self.process(byte)

    def process(self, byte: int) -> None:
        if self.escaped:
            if byte not in _ESCAPABLE:
                self.fail(f"expected escaped char, got {chr(byte)!r} instead")
            self.escaped = False
            self.buffer.append(byte)
            return

        if byte == _ESCAPE:
            self.escaped = True
            return

        if self.quoted:
            if byte == _QUOTE:
                self.quoted = False
                self.save_and_flip()
            else:
                self.buffer.append(byte)
            return

        is_quote = byte == _QUOTE
        if byte in _WHITESPACE or is_quote:
            self.quoted = is_quote
            self.save_if_needed()
        elif byte == _GROUP_START:
            self.save_if_needed()
            self.enter_group()
        elif byte == _GROUP_END:
            self.save_if_needed()
            self.leave_group()
        else:
            self.buffer.append(byte)

    def save_if_needed(self) -> None:
        if self.buffer:
            self.save_and_flip()

    def enter_group(self) -> None:
        if self.expecting_key:
            self.fail("trying to enter group, but we are searching for a key")
        if not self.parents:
            self.fail("trying to enter group, but no parents are available")
        current = self.parents[-1]
        if not current:
            self.fail("trying to enter group, but no nodes are available")
        children: list[Node] = []
        current[-1].value = children
        self.parents.append(children)
        self.expecting_key = True

    def leave_group(self) -> None:
        if not self.expecting_key:
            self.fail("trying to leave group, but we are searching for a value")
        if not self.parents:
            self.fail("trying to leave group, but no parents are available")
        self.parents.pop()

    def save_and_flip(self) -> None:
        if not self.parents:
            self.fail("trying to save buffer, but no parents are available")
        current = self.parents[-1]
        text = self.buffer.decode("utf-8", errors="replace")
        if self.expecting_key:
            current.append(Node(text))
        else:
            if not current:
                self.fail("trying to save buffer, but no nodes are available")
            current[-1].value = _to_value(text)
        self.buffer.clear()
        self.expecting_key = not self.expecting_key


def parse_registry(data: bytes) -> list[Node]:
    """Parse registry file contents into a list of top-level nodes."""
    parser = _Parser()
    parser.feed(data)
    return parser.root


def _format_node(node: Node, level: int) -> str:
    pad = "  " * level
    head = f'{pad}"{node.key}"'
    if isinstance(node.value, list):
        return f"{head} {{\n{_format_nodes(node.value, level + 1)}{pad}}}\n"
    if isinstance(node.value, str):
        return f'{head} "{node.value}"\n'
    return f"{head} {node.value}\n"


def _format_nodes(nodes: list[Node], level: int) -> str:
    return "".join(_format_node(node, level) for node in nodes)


def format_nodes(nodes: list[Node]) -> str:
    """Render nodes as indented registry text."""
    return _format_nodes(nodes, 0)


class RegistryFileParser:
    """Parses a registry file and keeps the resulting node tree."""

    def __init__(self) -> None:
        self._root: list[Node] = []

    @property
    def root(self) -> list[Node]:
        return self._root

    def parse(self, path: Union[str, Path]) -> bool:
        """Parse the file at ``path``; returns False if it cannot be read or is malformed."""
        try:
            data = Path(path).read_bytes()
        except OSError:
            log.warning("registry file %s does not exist!", path)
            return False

        try:
            self._root = parse_registry(data)
        except RegistryParseError as error:
            log.warning("failed to parse registry file %s: %s", path, error)
            self._root = error.nodes
            return False
        return True