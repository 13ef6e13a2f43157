"""JSON parsing that records the line span of every value."""

from __future__ import annotations

import bisect
import json
import re
from dataclasses import dataclass
from typing import Any

_WHITESPACE = " \t\n\r"
_NUMBER = re.compile(r"-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?")
_LITERALS = {"true": ("bool", True), "false": ("bool", False), "null": ("null", None)}


class JSONPositionError(ValueError):
    """Raised for malformed JSON input."""


@dataclass
class JSONNode:
    """A JSON value with the 1-based lines where it starts and ends."""

    kind: str
    value: Any
    start_line: int
    end_line: int

    def to_python(self) -> Any:
        """Convert the node and its children into plain Python values."""
        if self.kind == "object":
            return {key: child.to_python() for key, child in self.value.items()}
        if self.kind == "array":
            return [child.to_python() for child in self.value]
        return self.value

    def get(self, key: str) -> JSONNode | None:
        """Return the member named key of an object node, or None."""
        if self.kind != "object":
            return None
        return self.value.get(key)


class _Reader:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", text)]

    def line(self, pos: int) -> int:
        return bisect.bisect_right(self._line_starts, pos)

    def error(self, message: str) -> None:
        raise JSONPositionError(f"{message} at line {self.line(self.pos)}")

    def skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def peek(self) -> str:
        self.skip_whitespace()
        if self.pos >= len(self.text):
            raise JSONPositionError("unexpected EOF")
        return self.text[self.pos]

    def value(self) -> JSONNode:
        char = self.peek()
        start = self.pos
        if char == "{":
            return self.object()
        if char == "[":
            return self.array()
        if char == '"':
            string = self.string()
            return JSONNode("string", string, self.line(start), self.line(self.pos - 1))
        for word, (kind, literal) in _LITERALS.items():
            if self.text.startswith(word, self.pos):
                self.pos += len(word)
                line = self.line(start)
                return JSONNode(kind, literal, line, line)
        match = _NUMBER.match(self.text, self.pos)
        if match:
            self.pos = match.end()
            line = self.line(start)
            return JSONNode("number", json.loads(match.group()), line, line)
        self.error(f"invalid character {char!r}")
        raise AssertionError("unreachable")

    def string(self) -> str:
        text = self.text
        end = self.pos + 1
        while True:
            if end >= len(text):
                raise JSONPositionError("unexpected EOF")
            char = text[end]
            if char == '"':
                break
            end += 2 if char == "\\" else 1
        try:
            decoded = json.loads(text[self.pos:end + 1])
        except ValueError as exc:
            self.error(f"invalid string: {exc}")
        self.pos = end + 1
        return decoded

    def object(self) -> JSONNode:
        start = self.pos
        self.pos += 1
        members: dict[str, JSONNode] = {}
        if self.peek() == "}":
            self.pos += 1
        else:
            while True:
                if self.peek() != '"':
                    self.error("expected a string key")
                key = self.string()
                if self.peek() != ":":
                    self.error("expected ':'")
                self.pos += 1
                members[key] = self.value()
                char = self.peek()
                if char == "}":
                    self.pos += 1
                    break
                if char != ",":
                    self.error("expected ',' or '}'")
                self.pos += 1
        return JSONNode("object", members, self.line(start), self.line(self.pos - 1))

    def array(self) -> JSONNode:
        start = self.pos
        self.pos += 1
        items: list[JSONNode] = []
        if self.peek() == "]":
            self.pos += 1
        else:
            while True:
                items.append(self.value())
                char = self.peek()
                if char == "]":
                    self.pos += 1
                    break
                if char != ",":
                    self.error("expected ',' or ']'")
                self.pos += 1
        return JSONNode("array", items, self.line(start), self.line(self.pos - 1))


def parse(text: str | bytes) -> JSONNode:
    """Parse a JSON document into a tree of positioned nodes."""
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise JSONPositionError(f"invalid UTF-8: {exc}") from exc
    if text.startswith("\ufeff"):
        text = text[1:]
    reader = _Reader(text)
    reader.skip_whitespace()
    if reader.pos >= len(text):
        raise JSONPositionError("EOF")
    node = reader.value()
    reader.skip_whitespace()
    if reader.pos < len(text):
        reader.error("invalid character after top-level value")
    return node