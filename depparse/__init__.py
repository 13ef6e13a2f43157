"""Parsers for dependency lock files, package metadata, Java archives and POM documents."""

__version__ = "0.1.0"