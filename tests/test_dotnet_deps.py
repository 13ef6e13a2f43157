import io

import pytest

from depparse.core import Library, Location, ParseError
from depparse.dotnet_deps import Parser

EXAMPLE_APP = """\
{
  "runtimeTarget": {
    "name": ".NETCoreApp,Version=v5.0",
    "signature": ""
  },
  "compilationOptions": {},
  "targets": {
    ".NETCoreApp,Version=v5.0": {
      "ExampleApp1/1.0.0": {
        "dependencies": {
          "Newtonsoft.Json": "13.0.1"
        },
        "runtime": {
          "ExampleApp1.dll": {}
        }
      },
      "Newtonsoft.Json/13.0.1": {
        "runtime": {
          "lib/netstandard2.0/Newtonsoft.Json.dll": {
            "assemblyVersion": "13.0.0.0",
            "fileVersion": "13.0.1.25517"
          }
        }
      }
    }
  },
  "libraries": {
    "ExampleApp1/1.0.0": {
      "type": "project",
      "serviceable": false,
      "sha512": ""
    },
    "Newtonsoft.Json/13.0.1": {
      "type": "package",
      "serviceable": true,
      "sha512": "sha512-placeholder",
      "path": "newtonsoft.json/13.0.1",
      "hashPath": "newtonsoft.json.13.0.1.nupkg.sha512"
    }
  }
}
"""

NO_LIBRARIES = """\
{
  "runtimeTarget": {
    "name": ".NETCoreApp,Version=v5.0",
    "signature": ""
  },
  "compilationOptions": {},
  "targets": {},
  "libraries": {}
}
"""


def _sorted(libs):
    return sorted(libs, key=lambda lib: (lib.name, lib.version))


@pytest.mark.parametrize(
    "content, want",
    [
        (EXAMPLE_APP, [Library(name="Newtonsoft.Json", version="13.0.1", locations=[Location(33, 39)])]),
        (NO_LIBRARIES, []),
    ],
    ids=["ExampleApp1.deps.json", "NoLibraries.deps.json"],
)
def test_parse(content, want):
    libs, deps = Parser().parse(io.BytesIO(content.encode("utf-8")))
    assert _sorted(libs) == want
    assert deps == []


def test_invalid_json():
    with pytest.raises(ParseError, match="failed to decode .deps.json file: EOF"):
        Parser().parse(io.BytesIO(b""))


def test_type_is_case_insensitive_and_bad_names_skipped():
    content = '{"libraries": {"A/1.0": {"type": "Package"}, "Broken": {"type": "package"}}}'
    libs, _ = Parser().parse(io.StringIO(content))
    assert [(lib.name, lib.version) for lib in libs] == [("A", "1.0")]


def test_wrong_libraries_type_raises():
    with pytest.raises(ParseError, match="libraries"):
        Parser().parse(io.StringIO('{"libraries": []}'))