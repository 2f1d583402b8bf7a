"""Exceptions raised while loading the Healthpoint directory."""
from __future__ import annotations


class DirectoryError(RuntimeError):
    """Base class for failures while loading the clinic directory."""


class DirectoryNetworkError(DirectoryError):
    """Raised when the directory endpoint cannot be reached or answers non-2xx."""


class DirectoryParseError(DirectoryError):
    """Raised when the directory response cannot be interpreted."""
