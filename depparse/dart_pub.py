"""Parser for Dart pubspec.lock files."""

from __future__ import annotations

from typing import IO

import yaml

from depparse.core import Dependency, Library, ParseError

_TRANSITIVE = "transitive"


def _package_id(name: str, version: str) -> str:
    return f"{name}@{version}"


class Parser:
    """Reads packages from a pubspec.lock file."""

    def parse(self, stream: IO) -> tuple[list[Library], list[Dependency]]:
        """Parse the lock file read from stream."""
        try:
            document = yaml.load(stream.read(), Loader=yaml.BaseLoader)
        except yaml.YAMLError as exc:
            raise ParseError(f"failed to decode pubspec.lock: {exc}") from exc

        if document is None:
            raise ParseError("failed to decode pubspec.lock: EOF")
        if not isinstance(document, dict):
            raise ParseError("failed to decode pubspec.lock: document must be a mapping")

        packages = document.get("packages") or {}
        if not isinstance(packages, dict):
            raise ParseError("failed to decode pubspec.lock: packages must be a mapping")

        # Dev dependencies are kept: pub cannot tell which transitive
        # dependencies were brought in by them.
        libraries = []
        for name, dep in packages.items():
            dep = dep or {}
            if not isinstance(dep, dict):
                raise ParseError(f"failed to decode pubspec.lock: package {name!r} must be a mapping")
            version = dep.get("version", "")
            kind = dep.get("dependency", "")
            if not isinstance(version, str) or not isinstance(kind, str):
                raise ParseError(f"failed to decode pubspec.lock: bad fields in package {name!r}")
            libraries.append(
                Library(
                    id=_package_id(name, version),
                    name=name,
                    version=version,
                    indirect=kind == _TRANSITIVE,
                )
            )
        return libraries, []