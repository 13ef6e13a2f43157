"""The POM document model: XML decoding, properties, inheritance and managed dependencies."""

from __future__ import annotations

import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from typing import IO, Iterable, Mapping, Sequence, Union

from depparse.core import ParseError, merge_maps
from depparse.pom_artifact import Artifact, evaluate_variable, is_property, new_artifact, new_version

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}

Source = Union[str, bytes, bytearray, IO]


def _local(tag: object) -> str:
    """Return an element tag without its namespace."""
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _text(elem: ET.Element) -> str:
    """Return the character data directly inside an element, excluding child elements."""
    return (elem.text or "") + "".join(child.tail or "" for child in elem)


def _children(parents: Iterable[ET.Element], name: str) -> list[ET.Element]:
    return [child for parent in parents for child in parent if _local(child.tag) == name]


def _string(parents: Iterable[ET.Element], name: str) -> str:
    # A repeated element overwrites the earlier value.
    matches = _children(parents, name)
    return _text(matches[-1]) if matches else ""


def _bool(parents: Iterable[ET.Element], name: str) -> bool:
    matches = _children(parents, name)
    if not matches:
        return False
    raw = _text(matches[-1])
    if raw == "":
        return False
    value = raw.strip()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ParseError(f"xml decode error: invalid boolean {raw!r} in <{name}>")


@dataclass(frozen=True)
class PomParent:
    """The <parent> section of a POM."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    relative_path: str = ""


@dataclass(frozen=True)
class PomExclusion:
    """An excluded transitive dependency."""

    group_id: str = ""
    artifact_id: str = ""


@dataclass(frozen=True)
class PomRepository:
    """A repository declared in the <repositories> section."""

    id: str = ""
    name: str = ""
    url: str = ""
    releases_enabled: str = ""
    snapshots_enabled: str = ""


@dataclass(frozen=True)
class PomDependency:
    """A <dependency> entry, either declared or managed."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    scope: str = ""
    optional: bool = False
    exclusions: tuple[PomExclusion, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "exclusions", tuple(self.exclusions))

    def name(self) -> str:
        """Return "group:artifact"."""
        return f"{self.group_id}:{self.artifact_id}"

    def resolve(
        self,
        props: Mapping[str, str] | None,
        dep_management: Sequence[PomDependency] | None,
        root_dep_management: Sequence[PomDependency] | None,
    ) -> PomDependency:
        """Evaluate variables and take missing fields from dependencyManagement."""
        dep = PomDependency(
            group_id=evaluate_variable(self.group_id, props, None),
            artifact_id=evaluate_variable(self.artifact_id, props, None),
            version=evaluate_variable(self.version, props, None),
            scope=evaluate_variable(self.scope, props, None),
            optional=self.optional,
            exclusions=self.exclusions,
        )

        # Management in the root POM overrides the dependency's own fields.
        managed = find_dep(self.name(), root_dep_management)
        if managed is not None:
            changes: dict = {}
            if managed.version:
                changes["version"] = evaluate_variable(managed.version, props, None)
            if managed.scope:
                changes["scope"] = evaluate_variable(managed.scope, props, None)
            if managed.optional:
                changes["optional"] = True
            if managed.exclusions:
                changes["exclusions"] = managed.exclusions
            return replace(dep, **changes)

        # Management from this POM or its parents only fills in missing fields.
        managed = find_dep(self.name(), dep_management)
        if managed is not None:
            changes = {}
            if not dep.version:
                changes["version"] = evaluate_variable(managed.version, props, None)
            if not dep.scope:
                changes["scope"] = evaluate_variable(managed.scope, props, None)
            if not dep.optional:
                changes["optional"] = managed.optional
            if not dep.exclusions:
                changes["exclusions"] = managed.exclusions
            dep = replace(dep, **changes)
        return dep

    def to_artifact(self, exclusions: set[str] | None) -> Artifact:
        """Convert a resolved dependency into an artifact.

        The dependency's exclusions are added to the given set, which the
        artifact then shares; a new set is made when none is given.
        """
        if exclusions is None:
            exclusions = set()
        exclusions.update(f"{e.group_id}:{e.artifact_id}" for e in self.exclusions)
        return Artifact(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=new_version(self.version),
            exclusions=exclusions,
        )


@dataclass
class PomXML:
    """The parts of a pom.xml document that matter for dependency resolution."""

    parent: PomParent = field(default_factory=PomParent)
    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    licenses: list[str] = field(default_factory=list)
    modules: list[str] = field(default_factory=list)
    properties: dict[str, str] | None = None
    dependency_management: list[PomDependency] = field(default_factory=list)
    dependencies: list[PomDependency] = field(default_factory=list)
    repositories: list[PomRepository] = field(default_factory=list)


def find_dep(name: str, dep_management: Sequence[PomDependency] | None) -> PomDependency | None:
    """Return the first managed dependency with this name, or None."""
    for dep in dep_management or ():
        if dep.name() == name:
            return dep
    return None


def _read(source: Source) -> bytes | str:
    if hasattr(source, "read"):
        return source.read()
    return source


def _parse_root(data: bytes | str) -> ET.Element:
    if isinstance(data, bytearray):
        data = bytes(data)
    try:
        return ET.fromstring(data)
    except (ET.ParseError, ValueError, LookupError) as exc:
        raise ParseError(f"xml decode error: {exc}") from exc


def _dependency(elem: ET.Element) -> PomDependency:
    exclusion_elems = _children(_children([elem], "exclusions"), "exclusion")
    return PomDependency(
        group_id=_string([elem], "groupId"),
        artifact_id=_string([elem], "artifactId"),
        version=_string([elem], "version"),
        scope=_string([elem], "scope"),
        optional=_bool([elem], "optional"),
        exclusions=tuple(
            PomExclusion(_string([ex], "groupId"), _string([ex], "artifactId")) for ex in exclusion_elems
        ),
    )


def _repository(elem: ET.Element) -> PomRepository:
    return PomRepository(
        id=_string([elem], "id"),
        name=_string([elem], "name"),
        url=_string([elem], "url"),
        releases_enabled=_string(_children([elem], "releases"), "enabled"),
        snapshots_enabled=_string(_children([elem], "snapshots"), "enabled"),
    )


def parse_pom(source: Source) -> PomXML:
    """Decode a pom.xml document from bytes, text or a readable stream."""
    try:
        data = _read(source)
    except OSError as exc:
        raise ParseError(f"xml decode error: {exc}") from exc
    root = [_parse_root(data)]

    parents = _children(root, "parent")
    parent = PomParent(
        group_id=_string(parents, "groupId"),
        artifact_id=_string(parents, "artifactId"),
        version=_string(parents, "version"),
        relative_path=_string(parents, "relativePath"),
    )

    properties = None
    property_blocks = _children(root, "properties")
    if property_blocks:
        # Each <properties> block replaces the previous one.
        properties = {_local(child.tag): _text(child) for child in property_blocks[-1] if isinstance(child.tag, str)}

    managed = _children(_children(_children(root, "dependencyManagement"), "dependencies"), "dependency")
    declared = _children(_children(root, "dependencies"), "dependency")

    return PomXML(
        parent=parent,
        group_id=_string(root, "groupId"),
        artifact_id=_string(root, "artifactId"),
        version=_string(root, "version"),
        licenses=[_string([lic], "name") for lic in _children(_children(root, "licenses"), "license")],
        modules=[_text(mod) for mod in _children(_children(root, "modules"), "module")],
        properties=properties,
        dependency_management=[_dependency(d) for d in managed],
        dependencies=[_dependency(d) for d in declared],
        repositories=[_repository(r) for r in _children(_children(root, "repositories"), "repository")],
    )


@dataclass
class Pom:
    """A POM document together with the path it was read from ("" if remote)."""

    file_path: str
    content: PomXML

    def inherit(self, parent_properties: Mapping[str, str] | None, parent_artifact: Artifact) -> None:
        """Take properties, group, licenses and version from the parent POM."""
        self.content.properties = merge_maps(parent_properties, self.content.properties)

        art = self.artifact().inherit(parent_artifact)
        self.content.group_id = art.group_id
        self.content.artifact_id = art.artifact_id
        self.content.licenses = list(art.licenses)

        version = str(art.version)
        if is_property(version):
            self.content.version = evaluate_variable(version, self.content.properties, None)
        else:
            self.content.version = version

    def properties(self) -> dict[str, str]:
        """Return the declared properties merged with the project.* properties."""
        return merge_maps(self.content.properties, self.project_properties())

    def project_properties(self) -> dict[str, str]:
        """Return model values as both project.<name> and the deprecated bare <name>."""
        content = self.content
        values = {
            "parent.groupId": content.parent.group_id,
            "parent.artifactId": content.parent.artifact_id,
            "parent.version": content.parent.version,
            "parent.relativePath": content.parent.relative_path,
            "groupId": content.group_id,
            "artifactId": content.artifact_id,
            "version": content.version,
        }
        values.update(content.properties or {})
        # groupId and version may have been inherited from the parent.
        values["groupId"] = content.group_id
        values["version"] = content.version

        result: dict[str, str] = {}
        for key, value in values.items():
            if key.startswith("project."):
                continue
            result[f"project.{key}"] = value
            result[key] = value
        return result

    def artifact(self) -> Artifact:
        """Return this POM's own artifact with variables evaluated."""
        content = self.content
        return new_artifact(content.group_id, content.artifact_id, content.version, self.licenses(), content.properties)

    def licenses(self) -> list[str]:
        """Return the non-empty license names."""
        return [name for name in self.content.licenses if name]

    def repositories(self) -> list[str]:
        """Return URLs of repositories whose releases are not disabled."""
        return [repo.url for repo in self.content.repositories if repo.releases_enabled != "false"]


@dataclass(frozen=True)
class Settings:
    """The parts of a Maven settings.xml that are used."""

    local_repository: str = ""


def _open_settings(file_path: str) -> Settings:
    with open(file_path, "rb") as f:
        data = f.read()
    root = _parse_root(data)
    return Settings(local_repository=_string([root], "localRepository"))


def read_settings() -> Settings:
    """Read the user settings, falling back to the global Maven settings."""
    candidates = (
        os.path.join(os.environ.get("HOME", ""), ".m2", "settings.xml"),
        os.path.join(os.environ.get("MAVEN_HOME", ""), "conf", "settings.xml"),
    )
    for path in candidates:
        try:
            settings = _open_settings(path)
        except (OSError, ParseError):
            continue
        if settings.local_repository:
            return settings
    return Settings()