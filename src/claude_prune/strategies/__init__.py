"""Candidate-selection strategies for claude-prune.

Importing this package registers all menu strategies with the global registry.
"""

from . import selection  # noqa: F401
