"""Pipeline exceptions."""

from __future__ import annotations


class ConfigError(RuntimeError):
    """A required environment setting is missing or invalid."""


class ArtifactError(ValueError):
    """The catalog artifact on disk does not have the expected shape."""
