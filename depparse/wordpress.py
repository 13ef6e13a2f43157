"""Detects the WordPress release from its wp-includes/version.php file."""

from __future__ import annotations

from typing import IO

from depparse.core import Library, ParseError

_VARIABLE = "$wp_version"


def _read_lines(stream: IO) -> list[str]:
    data = stream.read()
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8", errors="replace")
    lines = data.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _find_version(lines: list[str]) -> str:
    in_comment = False
    for raw in lines:
        line = raw
        comment_at = line.find("//")
        if comment_at != -1:
            line = line[:comment_at]
        line = line.strip()

        if line.startswith("/*"):
            in_comment = True
            continue
        if in_comment and line.endswith("*/"):
            in_comment = False
            continue
        if in_comment:
            continue

        # The prefix also matches names such as $wp_version_something.
        if not line.startswith(_VARIABLE):
            continue
        parts = line.split("=")
        if len(parts) != 2 or parts[0].strip() != _VARIABLE:
            continue
        end = parts[1].find(";")
        if end == -1:
            continue
        return parts[1][:end].strip().strip("'\"")
    return ""


def parse(stream: IO) -> Library:
    """Return the WordPress library described by a version.php stream."""
    try:
        version = _find_version(_read_lines(stream))
    except (OSError, ValueError) as exc:
        raise ParseError("version.php could not be parsed") from exc
    if not version:
        raise ParseError("version.php could not be parsed")
    return Library(name="wordpress", version=version)