"""Parser for conda environment package metadata (conda-meta/<package>.json)."""

from __future__ import annotations

import json
from typing import IO

from depparse.core import Dependency, Library, ParseError


class Parser:
    """Reads the single package described by a conda-meta JSON file."""

    def parse(self, stream: IO) -> tuple[list[Library], list[Dependency]]:
        """Parse the metadata read from stream."""
        try:
            data = json.loads(stream.read())
        except ValueError as exc:
            raise ParseError(f"JSON decode error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError("JSON decode error: package metadata must be an object")

        fields = {}
        for key in ("name", "version", "license"):
            value = data.get(key)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise ParseError(f"JSON decode error: {key} must be a string")
            fields[key] = value

        if not fields["name"] or not fields["version"]:
            raise ParseError("unable to parse conda package")

        return [Library(name=fields["name"], version=fields["version"], license=fields["license"])], []