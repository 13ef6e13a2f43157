"""Parser for .NET Core *.deps.json files."""

from __future__ import annotations

from typing import IO

from depparse import jsonpos
from depparse.core import Dependency, Library, Location, ParseError, logger

_DECODE_ERROR = "failed to decode .deps.json file"


def _expect(node: jsonpos.JSONNode | None, kind: str, what: str) -> jsonpos.JSONNode | None:
    if node is None or node.kind == "null":
        return None
    if node.kind != kind:
        raise ParseError(f"{_DECODE_ERROR}: {what} must be of type {kind}")
    return node


class Parser:
    """Reads NuGet packages listed under "libraries" in a .deps.json file."""

    def parse(self, stream: IO) -> tuple[list[Library], list[Dependency]]:
        """Parse the deps file read from stream."""
        try:
            root = jsonpos.parse(stream.read())
        except jsonpos.JSONPositionError as exc:
            raise ParseError(f"{_DECODE_ERROR}: {exc}") from exc

        root = _expect(root, "object", "document")
        entries = _expect(root.get("libraries"), "object", "libraries") if root else None

        libraries = []
        for name_version, entry in (entries.value.items() if entries else ()):
            entry_obj = _expect(entry, "object", f"library {name_version!r}")
            type_node = _expect(entry_obj.get("type"), "string", "type") if entry_obj else None
            lib_type = type_node.value if type_node else ""
            if lib_type.lower() != "package":
                continue

            parts = name_version.split("/")
            if len(parts) != 2:
                logger.warning("Cannot parse .NET library version from: %s", name_version)
                continue

            libraries.append(
                Library(
                    name=parts[0],
                    version=parts[1],
                    locations=(Location(entry.start_line, entry.end_line),),
                )
            )
        return libraries, []