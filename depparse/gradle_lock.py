"""Parser for Gradle dependency lock files (gradle.lockfile)."""

from __future__ import annotations

from typing import IO

from depparse.core import Dependency, Library, unique_libraries


class Parser:
    """Reads locked artifacts from a gradle.lockfile."""

    def parse(self, stream: IO) -> tuple[list[Library], list[Dependency]]:
        """Parse the lock file read from stream."""
        data = stream.read()
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")

        libraries = []
        for raw in data.split("\n"):
            line = raw.strip()
            if line.startswith("#"):
                continue
            # group:artifact:version=classPaths; the trailing "empty=" line has no colons.
            parts = line.split(":")
            if len(parts) != 3:
                continue
            libraries.append(Library(name=":".join(parts[:2]), version=parts[2].split("=")[0]))
        return unique_libraries(libraries), []