"""Exceptions raised at the claude-prune boundaries."""

from __future__ import annotations


class PruneError(Exception):
    """Base class for claude-prune errors."""


class InvalidRangeError(PruneError, ValueError):
    """A custom range expression failed validation."""


class ResourceMissingError(PruneError, FileNotFoundError):
    """A transcript file or backup directory does not exist."""


class NoBackupsFoundError(PruneError, LookupError):
    """No usable backup exists for the session."""
