# depparse

Parsers that read dependency lock files, package metadata and Java
archives and report the libraries they name: name, version, whether they
are direct or indirect, licence, line locations in the file and, where the
format records it, the dependency graph between them.

| Ecosystem | Module | Input |
|-----------|--------|-------|
| C/C++ (Conan) | `depparse.conan` | `conan.lock` |
| Conda | `depparse.conda_meta` | `conda-meta/<package>.json` |
| Dart | `depparse.dart_pub` | `pubspec.lock` |
| .NET | `depparse.dotnet_deps` | `*.deps.json` |
| WordPress | `depparse.wordpress` | `wp-includes/version.php` |
| Gradle | `depparse.gradle_lock` | `gradle.lockfile` |
| Elixir (Hex) | `depparse.mix_lock` | `mix.lock` |
| Java | `depparse.jar` | `.jar`, `.war`, `.ear` archives |

Building blocks for Maven POM files are in `depparse.pom_model` and
`depparse.pom_artifact`.

## Installation

```
pip install depparse
```

## Usage

Each lock-file parser is a `Parser` class whose `parse(stream)` method
takes a file object and returns a pair `(libraries, dependencies)`: a list
of `depparse.core.Library` and a list of `depparse.core.Dependency`. Both
are frozen dataclasses. A file that cannot be decoded raises
`depparse.core.ParseError`.

```python
from depparse.conan import Parser

with open("conan.lock", "rb") as f:
    libraries, dependencies = Parser().parse(f)

for lib in libraries:
    print(lib.id, "indirect" if lib.indirect else "direct", lib.locations)
for dep in dependencies:
    print(dep.id, "->", ", ".join(dep.depends_on))
```

`depparse.conan` and `depparse.dotnet_deps` record the start and end line
of each entry in `Library.locations`; `depparse.mix_lock` records the line
of each entry. `depparse.gradle_lock` and `depparse.mix_lock` drop entries
repeated with the same name and version.

WordPress is a single function that returns one library:

```python
from depparse import wordpress

with open("wp-includes/version.php", "rb") as f:
    lib = wordpress.parse(f)
print(lib.name, lib.version)
```

### Shared helpers

`depparse.core` also provides `unique_libraries`, `unique_strings` and
`merge_maps`, and the logger `depparse` to which parsers report skipped
entries. `depparse.jsonpos.parse` parses JSON into `JSONNode` objects that
carry the lines where each value starts and ends.

### Java archives

`depparse.jar.Parser(client, file_path="", offline=False)` opens a
JAR/WAR/EAR archive from a seekable binary stream, walks nested archives,
and reads `pom.properties` and `MANIFEST.MF`. When these do not identify
the archive, it asks the given client, which must provide the methods of
the `depparse.jar.Client` protocol: `exists`, `search_by_sha1` and
`search_by_artifact_id`, the last two raising `ArtifactNotFoundError` when
nothing matches. With `offline=True` the manifest is trusted as it is and
the client is never called.

```python
from depparse.jar import ArtifactNotFoundError, Parser


class NoLookup:
    def exists(self, group_id, artifact_id):
        return False

    def search_by_sha1(self, sha1):
        raise ArtifactNotFoundError()

    def search_by_artifact_id(self, artifact_id):
        raise ArtifactNotFoundError()


path = "app.war"
with open(path, "rb") as f:
    libraries, _ = Parser(NoLookup(), file_path=path, offline=True).parse(f)
```

`depparse.jar.parse_file_name` guesses artifact ID and version from a name
such as `spring-core-5.3.4-SNAPSHOT.jar`.

### Maven POM building blocks

`depparse.pom_model.parse_pom` decodes a `pom.xml` from bytes, text or a
stream into a `PomXML`. Wrapped in a `Pom`, it gives its properties
(declared ones merged with `project.*` values), its own `Artifact`, its
licences and its release repositories, and can `inherit` from a parent's
properties and artifact. `PomDependency.resolve` evaluates variables and
applies dependency management; `read_settings` finds the local repository
named in `~/.m2/settings.xml` or `$MAVEN_HOME/conf/settings.xml`.

`depparse.pom_artifact` holds `Artifact`, `Version` (soft and hard `[x]`
requirements; ranges give an empty version), and `evaluate_variable`,
which expands `${name}` from properties and `${env.NAME}` from the
environment.

```python
from depparse.pom_model import Pom, parse_pom

with open("pom.xml", "rb") as f:
    pom = Pom("pom.xml", parse_pom(f))
print(pom.artifact(), pom.properties().get("project.version"))
```

## What the package does not do

- It does not read `go.mod` or `go.sum` files.
- It ships no client for the Maven Central search service; `depparse.jar`
  works offline or with a client you supply.
- It does not resolve a whole Maven project: there is no parser that
  fetches parent and dependency POMs from local or remote repositories and
  walks the dependency tree. Only the single-document model above is
  provided.

## Running the tests

```
pip install -e ".[test]"
pytest
```