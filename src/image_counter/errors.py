"""
Error taxonomy for image counting.
"""
from __future__ import annotations


class ImageCounterError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ImageCounterError, ValueError):
    """Invalid configuration, raised before any traversal starts."""


class ResourceError(ImageCounterError):
    """A failure scoped to a single resource."""

    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(reason)
        self.identifier = identifier
        self.reason = reason


class FetchError(ResourceError):
    """The resource could not be retrieved (network, timeout, not found)."""


class ParseError(ResourceError):
    """The resource was retrieved but its content is unsupported or malformed."""


class ResolutionError(ResourceError):
    """A link reference could not be made into an absolute identifier."""
