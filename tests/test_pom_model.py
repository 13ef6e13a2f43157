import io

import pytest

from depparse.core import ParseError
from depparse.pom_artifact import Artifact, new_version
from depparse.pom_model import (
    Pom,
    PomDependency,
    PomExclusion,
    PomXML,
    Settings,
    find_dep,
    parse_pom,
    read_settings,
)

POM = b"""<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <parent>
    <groupId>com.example</groupId>
    <artifactId>parent</artifactId>
    <version>1.0.0</version>
    <relativePath>../parent</relativePath>
  </parent>
  <artifactId>child</artifactId>
  <version>${revision}</version>
  <licenses>
    <license><name>Apache 2.0</name></license>
    <license><url>no-name</url></license>
  </licenses>
  <modules><module>module-a</module></modules>
  <properties>
    <revision>2.0.0</revision>
    <api.version>1.7.30</api.version>
  </properties>
  <dependencyManagement>
    <dependencies>
      <dependency>
        <groupId>org.example</groupId>
        <artifactId>example-api</artifactId>
        <version>${api.version}</version>
      </dependency>
    </dependencies>
  </dependencyManagement>
  <dependencies>
    <dependency>
      <groupId>org.example</groupId>
      <artifactId>example-api</artifactId>
      <optional>true</optional>
      <exclusions>
        <exclusion><groupId>org.other</groupId><artifactId>*</artifactId></exclusion>
      </exclusions>
    </dependency>
  </dependencies>
  <repositories>
    <repository><url>https://repo.example.com/a</url></repository>
    <repository>
      <url>https://repo.example.com/b</url>
      <releases><enabled>false</enabled></releases>
    </repository>
  </repositories>
</project>
"""


def test_parse_pom_reads_namespaced_fields():
    content = parse_pom(POM)
    assert content.parent.group_id == "com.example"
    assert content.parent.relative_path == "../parent"
    assert content.artifact_id == "child"
    assert content.version == "${revision}"
    assert content.group_id == ""
    assert content.modules == ["module-a"]
    assert content.properties == {"revision": "2.0.0", "api.version": "1.7.30"}


def test_parse_pom_dependencies_and_exclusions():
    content = parse_pom(io.BytesIO(POM))
    assert content.dependency_management == [
        PomDependency("org.example", "example-api", "${api.version}")
    ]
    dep = content.dependencies[0]
    assert dep.optional is True
    assert dep.version == ""
    assert dep.exclusions == (PomExclusion("org.other", "*"),)


def test_parse_pom_invalid_xml():
    with pytest.raises(ParseError, match="xml decode error"):
        parse_pom(b"<project><groupId>x</project>")


def test_parse_pom_empty_input():
    with pytest.raises(ParseError, match="xml decode error"):
        parse_pom(b"")


def test_parse_pom_invalid_optional():
    text = "<project><dependencies><dependency><optional>maybe</optional></dependency></dependencies></project>"
    with pytest.raises(ParseError):
        parse_pom(text)


def test_parse_pom_without_properties_is_none():
    assert parse_pom("<project><artifactId>a</artifactId></project>").properties is None


def test_licenses_skip_empty_names():
    pom = Pom("pom.xml", parse_pom(POM))
    assert pom.licenses() == ["Apache 2.0"]


def test_repositories_skip_disabled_releases():
    pom = Pom("pom.xml", parse_pom(POM))
    assert pom.repositories() == ["https://repo.example.com/a"]


def test_project_properties_have_prefixed_and_bare_keys():
    pom = Pom("pom.xml", parse_pom(POM))
    props = pom.project_properties()
    assert props["project.artifactId"] == "child"
    assert props["artifactId"] == "child"
    assert props["project.parent.groupId"] == "com.example"
    assert props["project.revision"] == "2.0.0"
    assert all(not key.startswith("project.project.") for key in props)


def test_properties_merge_declared_and_project():
    pom = Pom("pom.xml", parse_pom(POM))
    props = pom.properties()
    assert props["api.version"] == "1.7.30"
    assert props["project.version"] == "${revision}"


def test_artifact_evaluates_version_property():
    pom = Pom("pom.xml", parse_pom(POM))
    art = pom.artifact()
    assert art.artifact_id == "child"
    assert str(art.version) == "2.0.0"
    assert art.licenses == ("Apache 2.0",)


def test_inherit_takes_group_and_properties_from_parent():
    pom = Pom("pom.xml", parse_pom(POM))
    parent = Artifact(group_id="com.example", artifact_id="parent", version=new_version("1.0.0"), licenses=("MIT",))
    pom.inherit({"parent.only": "yes", "revision": "9.9.9"}, parent)
    assert pom.content.group_id == "com.example"
    assert pom.content.version == "2.0.0"
    assert pom.content.licenses == ["Apache 2.0"]
    assert pom.content.properties["parent.only"] == "yes"
    assert pom.content.properties["revision"] == "2.0.0"


def test_inherit_version_and_licenses_when_missing():
    pom = Pom("pom.xml", parse_pom("<project><artifactId>a</artifactId></project>"))
    parent = Artifact(group_id="g", artifact_id="p", version=new_version("3.0.0"), licenses=("MIT",))
    pom.inherit(None, parent)
    assert (pom.content.group_id, pom.content.version) == ("g", "3.0.0")
    assert pom.licenses() == ["MIT"]


def test_resolve_fills_from_dep_management():
    content = parse_pom(POM)
    props = {"api.version": "1.7.30"}
    dep = content.dependencies[0].resolve(props, content.dependency_management, None)
    assert dep.version == "1.7.30"
    assert dep.exclusions == (PomExclusion("org.other", "*"),)


def test_resolve_root_management_overrides():
    dep = PomDependency("org.example", "example-dependency", "1.2.3")
    root = [PomDependency("org.example", "example-dependency", "${v}", scope="test")]
    resolved = dep.resolve({"v": "1.2.4"}, None, root)
    assert resolved.version == "1.2.4"
    assert resolved.scope == "test"


def test_resolve_keeps_own_version_over_parent_management():
    dep = PomDependency("org.example", "example-api", "2.0.0")
    managed = [PomDependency("org.example", "example-api", "1.7.30", scope="runtime")]
    resolved = dep.resolve({}, managed, None)
    assert resolved.version == "2.0.0"
    assert resolved.scope == "runtime"


def test_to_artifact_shares_and_extends_exclusions():
    shared = {"a:b"}
    dep = PomDependency("g", "x", "[1.0]", exclusions=(PomExclusion("c", "d"),))
    art = dep.to_artifact(shared)
    assert shared == {"a:b", "c:d"}
    assert art.exclusions is shared
    assert art.version.hard is True
    assert str(art.version) == "1.0"


def test_to_artifact_without_exclusions_creates_set():
    art = PomDependency("g", "x", "1").to_artifact(None)
    assert art.exclusions == set()


def test_find_dep():
    deps = [PomDependency("a", "b", "1"), PomDependency("a", "b", "2")]
    assert find_dep("a:b", deps).version == "1"
    assert find_dep("a:c", deps) is None
    assert find_dep("a:b", None) is None


def _write_settings(path, repo):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        '<settings xmlns="http://maven.apache.org/SETTINGS/1.0.0">'
        f"<localRepository>{repo}</localRepository></settings>"
    )


def test_read_settings_prefers_user(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("MAVEN_HOME", str(tmp_path / "maven"))
    _write_settings(tmp_path / "maven" / "conf" / "settings.xml", "/global/repo")
    assert read_settings() == Settings("/global/repo")
    _write_settings(tmp_path / "home" / ".m2" / "settings.xml", "/user/repo")
    assert read_settings() == Settings("/user/repo")


def test_read_settings_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "none"))
    monkeypatch.setenv("MAVEN_HOME", str(tmp_path / "none"))
    assert read_settings().local_repository == ""


def test_pomxml_defaults_give_empty_artifact():
    pom = Pom("", PomXML())
    assert pom.artifact().is_empty() is True
    assert pom.repositories() == []