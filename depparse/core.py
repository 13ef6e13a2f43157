"""Shared data types and helpers used by every dependency parser."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Mapping

logger = logging.getLogger("depparse")


class ParseError(Exception):
    """Raised when a dependency file cannot be parsed."""


class RefType(str, Enum):
    """Kinds of external references attached to a library."""

    VCS = "vcs"


@dataclass(frozen=True, order=True)
class Location:
    """Line span of a library inside the parsed file."""

    start_line: int = 0
    end_line: int = 0


@dataclass(frozen=True, order=True)
class ExternalRef:
    """A link from a library to somewhere outside the parsed file."""

    type: RefType
    url: str


@dataclass(frozen=True, order=True)
class Library:
    """A single package found in a dependency file."""

    id: str = ""
    name: str = ""
    version: str = ""
    indirect: bool = False
    license: str = ""
    external_references: tuple[ExternalRef, ...] = ()
    locations: tuple[Location, ...] = ()
    file_path: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "external_references", tuple(self.external_references))
        object.__setattr__(self, "locations", tuple(self.locations))


@dataclass(frozen=True, order=True)
class Dependency:
    """The libraries that one library depends on, by ID."""

    id: str
    depends_on: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "depends_on", tuple(self.depends_on))


def unique_libraries(libraries: Iterable[Library]) -> list[Library]:
    """Drop libraries repeated by name and version, merging their locations."""
    unique: dict[str, Library] = {}
    for lib in libraries:
        key = f"{lib.name}@{lib.version}"
        seen = unique.get(key)
        if seen is None:
            unique[key] = lib
        elif lib.locations:
            merged = tuple(sorted(seen.locations + lib.locations))
            unique[key] = replace(seen, locations=merged)
    return sorted(unique.values(), key=lambda lib: (lib.id, lib.name, lib.version))


def unique_strings(items: Iterable[str]) -> list[str]:
    """Return the items without repeats, keeping first-seen order."""
    return list(dict.fromkeys(items))


def merge_maps(parent: Mapping[str, str] | None, child: Mapping[str, str] | None) -> dict[str, str]:
    """Return a new mapping of the parent's entries overridden by the child's."""
    return {**(parent or {}), **(child or {})}