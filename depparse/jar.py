"""Identifies Java artifacts packed in JAR, WAR and EAR archives."""

from __future__ import annotations

import hashlib
import os
import posixpath
import re
import shutil
import tempfile
import zipfile
import zlib
from dataclasses import dataclass, replace
from typing import IO, Protocol, runtime_checkable

from depparse.core import Dependency, Library, ParseError, logger

_JAR_FILE = re.compile(r"^([a-zA-Z0-9\._-]*[^-*])-(\d\S*(?:-SNAPSHOT)?).jar\Z", re.ASCII)
_ARTIFACT_EXTENSIONS = {".jar", ".ear", ".war"}
_ZIP_ERRORS = (zipfile.BadZipFile, OSError, RuntimeError, ValueError, EOFError, zlib.error)

_MANIFEST_FIELDS = {
    "Implementation-Version:": "implementation_version",
    "Implementation-Title:": "implementation_title",
    "Implementation-Vendor:": "implementation_vendor",
    "Implementation-Vendor-Id:": "implementation_vendor_id",
    "Specification-Version:": "specification_version",
    "Specification-Title:": "specification_title",
    "Specification-Vendor:": "specification_vendor",
    "Bundle-Version:": "bundle_version",
    "Bundle-Name:": "bundle_name",
    "Bundle-SymbolicName:": "bundle_symbolic_name",
}


class ArtifactNotFoundError(LookupError):
    """Raised by a client when no artifact matches a search."""

    def __init__(self, message: str = "no artifact found") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class Properties:
    """Maven coordinates of an artifact and the file they were found in."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    file_path: str = ""

    def library(self) -> Library:
        """Return the library these coordinates describe."""
        return Library(
            name=f"{self.group_id}:{self.artifact_id}",
            version=self.version,
            file_path=self.file_path,
        )

    def valid(self) -> bool:
        """Whether group, artifact and version are all known."""
        return bool(self.group_id and self.artifact_id and self.version)

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@runtime_checkable
class Client(Protocol):
    """A search service for artifacts in the Maven central repository."""

    def exists(self, group_id: str, artifact_id: str) -> bool:
        """Whether an artifact with this group and artifact ID exists."""

    def search_by_sha1(self, sha1: str) -> Properties:
        """Return the artifact with this SHA-1 digest or raise ArtifactNotFoundError."""

    def search_by_artifact_id(self, artifact_id: str) -> str:
        """Return the likely group ID of an artifact ID or raise ArtifactNotFoundError."""


@dataclass
class _Manifest:
    implementation_version: str = ""
    implementation_title: str = ""
    implementation_vendor: str = ""
    implementation_vendor_id: str = ""
    specification_title: str = ""
    specification_version: str = ""
    specification_vendor: str = ""
    bundle_name: str = ""
    bundle_version: str = ""
    bundle_symbolic_name: str = ""

    def _group_id(self) -> str:
        if self.implementation_vendor_id:
            return self.implementation_vendor_id.strip()
        if self.bundle_symbolic_name:
            # "com.fasterxml.jackson.core.jackson-databind" => "com.fasterxml.jackson.core"
            idx = self.bundle_symbolic_name.rfind(".")
            group = self.bundle_symbolic_name[:idx] if idx > 0 else self.bundle_symbolic_name
            return group.strip()
        return (self.implementation_vendor or self.specification_vendor).strip()

    def _artifact_id(self) -> str:
        return (self.implementation_title or self.specification_title or self.bundle_name).strip()

    def _version(self) -> str:
        return (self.implementation_version or self.specification_version or self.bundle_version).strip()

    def properties(self, file_path: str) -> Properties:
        group_id, artifact_id, version = self._group_id(), self._artifact_id(), self._version()
        if not group_id or not artifact_id or not version:
            return Properties()
        return Properties(group_id, artifact_id, version, file_path)


def _lines(data: bytes) -> list[str]:
    text = data.decode("utf-8", errors="replace")
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _base(name: str) -> str:
    return name.rstrip("/").rsplit("/", 1)[-1]


def _is_artifact(name: str) -> bool:
    last = name.rsplit("/", 1)[-1]
    dot = last.rfind(".")
    return dot != -1 and last[dot:] in _ARTIFACT_EXTENSIONS


def parse_file_name(file_path: str) -> Properties:
    """Guess artifact ID and version from a file name such as spring-core-5.3.4.jar."""
    match = _JAR_FILE.match(os.path.basename(file_path))
    if match is None:
        return Properties()
    return Properties(artifact_id=match.group(1), version=match.group(2), file_path=file_path)


def _parse_pom_properties(data: bytes, file_path: str) -> Properties:
    fields = {"groupId=": "", "artifactId=": "", "version=": ""}
    for raw in _lines(data):
        line = raw.strip()
        for prefix in fields:
            if line.startswith(prefix):
                fields[prefix] = line[len(prefix):]
                break
    return Properties(fields["groupId="], fields["artifactId="], fields["version="], file_path)


def _parse_manifest(data: bytes) -> _Manifest:
    manifest = _Manifest()
    for line in _lines(data):
        # Skip variables, e.g. "Bundle-Name: %bundleName".
        words = line.split()
        if len(words) <= 1 or words[1].startswith("%"):
            continue
        for prefix, attribute in _MANIFEST_FIELDS.items():
            if line.startswith(prefix):
                setattr(manifest, attribute, line[len(prefix):])
                break
    return manifest


def _remove_duplicates(libraries: list[Library]) -> list[Library]:
    unique: dict[tuple[str, str, str], Library] = {}
    for lib in libraries:
        unique.setdefault((lib.name, lib.version, lib.file_path), lib)
    return list(unique.values())


class Parser:
    """Finds the artifacts inside a Java archive, including nested archives."""

    def __init__(self, client: Client, file_path: str = "", offline: bool = False) -> None:
        self.client = client
        self.file_path = file_path
        self.offline = offline

    def parse(self, stream: IO[bytes]) -> tuple[list[Library], list[Dependency]]:
        """Parse the archive read from a seekable binary stream."""
        try:
            libraries = self._parse_artifact(self.file_path, stream)
        except ParseError as exc:
            raise ParseError(f"unable to parse {self.file_path}: {exc}") from exc
        return _remove_duplicates(libraries), []

    def _parse_artifact(self, file_path: str, stream: IO[bytes]) -> list[Library]:
        logger.debug("Parsing Java artifacts... file=%s", file_path)
        file_name = os.path.basename(file_path)
        file_props = parse_file_name(file_path)

        libraries: list[Library] = []
        manifest = _Manifest()
        found_pom_props = False

        try:
            archive = zipfile.ZipFile(stream)
        except _ZIP_ERRORS as exc:
            raise ParseError(f"zip error: {exc}") from exc

        with archive:
            for entry in archive.infolist():
                base = _base(entry.filename)
                if base == "pom.properties":
                    try:
                        props = _parse_pom_properties(archive.read(entry), file_path)
                    except _ZIP_ERRORS as exc:
                        raise ParseError(f"failed to parse {entry.filename}: {exc}") from exc
                    libraries.append(props.library())
                    # Does this pom.properties describe the archive itself?
                    if (file_props.artifact_id, file_props.version) == (props.artifact_id, props.version):
                        found_pom_props = True
                elif base == "MANIFEST.MF":
                    try:
                        manifest = _parse_manifest(archive.read(entry))
                    except _ZIP_ERRORS as exc:
                        raise ParseError(f"failed to parse MANIFEST.MF: {exc}") from exc
                elif _is_artifact(entry.filename):
                    try:
                        libraries.extend(self._parse_inner_jar(archive, entry, file_path))
                    except ParseError as exc:
                        logger.debug("Failed to parse %s: %s", entry.filename, exc)

        # pom.properties is preferred over MANIFEST.MF.
        if found_pom_props:
            return libraries

        manifest_props = manifest.properties(file_path)
        if self.offline:
            # Offline, the manifest's coordinates cannot be verified.
            if not manifest_props.valid():
                logger.debug("Unable to identify POM in offline mode: file=%s", file_name)
                return libraries
            return libraries + [manifest_props.library()]

        if manifest_props.valid() and self._exists(manifest_props):
            return libraries + [manifest_props.library()]

        try:
            props = self._search_by_sha1(stream, file_path)
        except ArtifactNotFoundError:
            logger.debug("No such POM in the central repositories: file=%s", file_name)
        else:
            return libraries + [props.library()]

        if not file_props.artifact_id or not file_props.version:
            return libraries

        # Several artifacts may share an artifact ID, so this is only a heuristic.
        try:
            group_id = self.client.search_by_artifact_id(file_props.artifact_id)
        except ArtifactNotFoundError:
            return libraries
        except Exception as exc:
            raise ParseError(f"failed to search by artifact id: {exc}") from exc
        guessed = replace(file_props, group_id=group_id)
        logger.debug("POM was determined in a heuristic way: file=%s artifact=%s", file_name, guessed)
        libraries.append(guessed.library())
        return libraries

    def _exists(self, props: Properties) -> bool:
        try:
            return bool(self.client.exists(props.group_id, props.artifact_id))
        except Exception as exc:
            logger.debug("Existence check failed for %s: %s", props, exc)
            return False

    def _parse_inner_jar(self, archive: zipfile.ZipFile, entry: zipfile.ZipInfo, root_path: str) -> list[Library]:
        full_path = posixpath.normpath(posixpath.join(root_path, entry.filename))
        try:
            with archive.open(entry) as source, tempfile.TemporaryFile() as copy:
                shutil.copyfileobj(source, copy)
                copy.seek(0)
                return self._parse_artifact(full_path, copy)
        except _ZIP_ERRORS as exc:
            raise ParseError(f"unable to open {entry.filename}: {exc}") from exc

    def _search_by_sha1(self, stream: IO[bytes], file_path: str) -> Properties:
        try:
            stream.seek(0)
            digest = hashlib.sha1()
            for chunk in iter(lambda: stream.read(65536), b""):
                digest.update(chunk)
        except OSError as exc:
            raise ParseError(f"failed to search by SHA1: unable to calculate SHA-1: {exc}") from exc
        try:
            props = self.client.search_by_sha1(digest.hexdigest())
        except ArtifactNotFoundError:
            raise
        except Exception as exc:
            raise ParseError(f"failed to search by SHA1: {exc}") from exc
        return replace(props, file_path=file_path)