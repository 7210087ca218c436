"""Helpers for tools that work with CSAF security advisories."""

__version__ = "0.1.0"