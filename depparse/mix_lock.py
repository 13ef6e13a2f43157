"""Parser for Elixir mix.lock files."""

from __future__ import annotations

import re
from typing import IO

from depparse.core import Dependency, Library, Location, logger, unique_libraries

_FIELD_SEPARATOR = re.compile(r"[\s,]+")


class Parser:
    """Reads Hex packages from a mix.lock file."""

    def parse(self, stream: IO) -> tuple[list[Library], list[Dependency]]:
        """Parse the lock file read from stream."""
        data = stream.read()
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        lines = data.split("\n")
        if lines and lines[-1] == "":
            lines.pop()

        libraries = []
        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            name, sep, body = line.partition(":")
            if not sep:
                # The opening and closing lines of the map.
                continue
            name = name.strip('"')

            # "<name>": {:hex, :<name>, "<version>", "<checksum>", [:mix], [<deps>], "hexpm", "<checksum>"},
            fields = [part for part in _FIELD_SEPARATOR.split(body) if part]
            if len(fields) < 8:
                # Git dependencies carry no version.
                if fields and ":git" in fields[0]:
                    logger.debug("Skip git dependencies: %s", name)
                else:
                    logger.warning("Cannot parse dependency: %s", line)
                continue
            version = fields[2].strip('"')
            libraries.append(
                Library(
                    id=f"{name}@{version}",
                    name=name,
                    version=version,
                    locations=(Location(line_number, line_number),),
                )
            )
        return unique_libraries(libraries), []