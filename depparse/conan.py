"""Parser for conan.lock files."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import IO

from depparse import jsonpos
from depparse.core import Dependency, Library, Location, ParseError, logger

_DECODE_ERROR = "failed to decode conan lock file"


@dataclass(frozen=True)
class _Node:
    ref: str
    requires: tuple[str, ...]
    start_line: int
    end_line: int


def _expect(node: jsonpos.JSONNode | None, kind: str, what: str) -> jsonpos.JSONNode | None:
    if node is None or node.kind == "null":
        return None
    if node.kind != kind:
        raise ParseError(f"{_DECODE_ERROR}: {what} must be of type {kind}")
    return node


def _decode_node(key: str, node: jsonpos.JSONNode) -> _Node:
    if _expect(node, "object", f"node {key!r}") is None:
        return _Node("", (), node.start_line, node.end_line)
    ref = _expect(node.get("ref"), "string", f"ref of node {key!r}")
    requires = _expect(node.get("requires"), "array", f"requires of node {key!r}")
    required = []
    for item in requires.value if requires else ():
        if _expect(item, "string", f"requirement of node {key!r}") is not None:
            required.append(item.value)
    return _Node(ref.value if ref else "", tuple(required), node.start_line, node.end_line)


def _parse_ref(node: _Node) -> Library:
    # Full ref format: package/version@user/channel#rrev:package_id#prev
    parts = node.ref.split("@")[0].split("#")[0].split("/")
    if len(parts) != 2:
        raise ParseError(f'Unable to determine conan dependency: "{node.ref}"')
    name, version = parts
    return Library(
        id=f"{name}/{version}",
        name=name,
        version=version,
        locations=(Location(node.start_line, node.end_line),),
    )


class Parser:
    """Reads libraries and their dependency graph from a conan lock file."""

    def parse(self, stream: IO) -> tuple[list[Library], list[Dependency]]:
        """Parse the lock file read from stream."""
        try:
            root = jsonpos.parse(stream.read())
        except jsonpos.JSONPositionError as exc:
            raise ParseError(f"{_DECODE_ERROR}: {exc}") from exc

        root = _expect(root, "object", "lock file")
        graph_lock = _expect(root.get("graph_lock"), "object", "graph_lock") if root else None
        raw_nodes = _expect(graph_lock.get("nodes"), "object", "nodes") if graph_lock else None
        nodes = {
            key: _decode_node(key, value)
            for key, value in (raw_nodes.value.items() if raw_nodes else ())
        }

        root_node = nodes.get("0")
        direct = set(root_node.requires) if root_node else set()

        parsed: dict[str, Library] = {}
        for key, node in nodes.items():
            if not node.ref:
                continue
            try:
                lib = _parse_ref(node)
            except ParseError as exc:
                logger.debug("%s", exc)
                continue
            parsed[key] = replace(lib, indirect=key not in direct)

        libraries: list[Library] = []
        dependencies: list[Dependency] = []
        for key, node in nodes.items():
            lib = parsed.get(key)
            if lib is None:
                continue
            children = [parsed[req].id for req in node.requires if req in parsed]
            if children:
                dependencies.append(Dependency(lib.id, children))
            libraries.append(lib)
        return libraries, dependencies