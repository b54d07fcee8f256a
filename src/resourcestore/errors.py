"""Exceptions raised by the resource store."""
from __future__ import annotations


class ResourceError(Exception):
    """Base class for errors raised on purpose by this package."""


class IllegalResourceState(ResourceError):
    """Raised when a resource cannot perform the requested operation in its current state."""


class ResourceIOError(ResourceError):
    """Raised when a requested change to the backing store did not take effect."""
