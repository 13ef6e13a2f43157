"""Maven artifact coordinates, version requirements and property evaluation."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from depparse.core import logger

_VARIABLE = re.compile(r"\$\{([^\t\n\f\r ]+?)\}")


@dataclass(frozen=True)
class Version:
    """A version requirement: soft by default, hard when written as [x]."""

    ver: str = ""
    hard: bool = False

    def should_override(self, other: Version) -> bool:
        """Whether other, being a hard requirement, replaces this soft one."""
        return not self.hard and other.hard

    def __str__(self) -> str:
        return self.ver


def new_version(s: str) -> Version:
    """Parse a version requirement; ranges are not supported and yield an empty version."""
    hard = False
    if s.startswith("[") and s.endswith("]"):
        s = s.strip("[]")
        hard = True
    if any(char in s for char in ",()[]"):
        s = ""
    return Version(s, hard)


@dataclass(frozen=True)
class Artifact:
    """A Maven artifact and how it was reached while resolving a project."""

    group_id: str = ""
    artifact_id: str = ""
    version: Version = field(default_factory=Version)
    licenses: tuple[str, ...] = ()
    exclusions: set[str] = field(default_factory=set, compare=False)
    module: bool = False
    root: bool = False
    direct: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "licenses", tuple(self.licenses))

    def is_empty(self) -> bool:
        """Whether any of group, artifact or version is missing."""
        return not self.group_id or not self.artifact_id or not str(self.version)

    def equal(self, other: Artifact) -> bool:
        """Whether the two artifacts share a group, an artifact ID or a version."""
        return (
            self.group_id == other.group_id
            or self.artifact_id == other.artifact_id
            or str(self.version) == str(other.version)
        )

    def join_licenses(self) -> str:
        """Return the licenses as one comma-separated string."""
        return ", ".join(self.licenses)

    def inherit(self, parent: Artifact) -> Artifact:
        """Return a copy filling group, licenses and version from the parent."""
        return Artifact(
            group_id=self.group_id or parent.group_id,
            artifact_id=self.artifact_id,
            version=self.version if str(self.version) else parent.version,
            licenses=self.licenses or parent.licenses,
            exclusions=self.exclusions,
            module=self.module,
            root=self.root,
            direct=self.direct,
        )

    def name(self) -> str:
        """Return "group:artifact"."""
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self) -> str:
        return f"{self.name()}:{self.version}"


def new_artifact(
    group_id: str,
    artifact_id: str,
    version: str,
    licenses: Iterable[str] | None,
    props: Mapping[str, str] | None,
) -> Artifact:
    """Build an artifact, evaluating ${...} variables in its coordinates."""
    return Artifact(
        group_id=evaluate_variable(group_id, props, None),
        artifact_id=evaluate_variable(artifact_id, props, None),
        version=new_version(evaluate_variable(version, props, None)),
        licenses=tuple(licenses or ()),
    )


def _warn_loop(variable: str, seen: list[str]) -> None:
    chain = "".join(f"{prop} -> " for prop in seen)
    logger.warning("Looped properties were detected: %s%s", chain, variable)


def evaluate_variable(s: str, props: Mapping[str, str] | None = None, seen_props: list[str] | None = None) -> str:
    """Replace ${name} references with property values, or environment values for ${env.X}."""
    props = props or {}
    seen = list(seen_props or [])
    for match in _VARIABLE.finditer(s):
        whole, key = match.group(0), match.group(1)
        new_value = ""
        if key.startswith("env."):
            new_value = os.environ.get(key[len("env."):], "")
        elif key in props:
            value = props[key]
            if value in seen:
                _warn_loop(whole, seen)
                return ""
            new_value = evaluate_variable(value, props, seen + [value])
            # Start afresh so that repeated references such as ${foo}-${foo} both resolve.
            seen = []
        s = s.replace(whole, new_value)
    return s


def is_property(version: str) -> bool:
    """Whether the string is a single ${...} reference."""
    return bool(version) and version.startswith("${") and version.endswith("}")


def package_id(name: str, version: str) -> str:
    """Return the ID "<name>:<version>"."""
    return f"{name}:{version}"