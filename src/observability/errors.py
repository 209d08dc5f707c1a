"""Errors that abort a generation run."""

from __future__ import annotations


class GenerationError(Exception):
    """A directory or file could not be written.

    ``path`` is the artifact path relative to the output directory. Files
    written before the failure are left in place.
    """

    def __init__(self, path: str, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"failed to write {path}: {cause}")
