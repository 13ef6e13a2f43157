[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "depparse"
version = "0.1.0"
description = "Parsers for dependency lock files, package metadata and Java archives"
requires-python = ">=3.10"
keywords = [
    "dependencies",
    "lockfile",
    "sbom",
    "conan",
    "conda",
    "pubspec",
    "nuget",
    "gradle",
    "mix",
    "jar",
    "maven",
    "pom",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Security",
]
dependencies = [
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[tool.hatch.build.targets.wheel]
packages = ["depparse"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
