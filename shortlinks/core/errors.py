from __future__ import annotations


class ShortlinksError(Exception):
    """Base class for failures that end a request with a 500."""


class RequestDecodeError(ShortlinksError):
    """The request body could not be read or parsed."""


class StoreError(ShortlinksError):
    """The mapping store failed to read or write."""
