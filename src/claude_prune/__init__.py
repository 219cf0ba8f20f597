"""Prune early turns from Claude Code session transcripts."""

__version__ = "2.0.0"
