"""
Custom exceptions for IOP client library.

Transport failures are not wrapped: the underlying requests exception
reaches the caller unchanged.
"""


class IopClientError(Exception):
    """Base exception for IOP client errors."""
    pass


class ConfigurationError(IopClientError):
    """Raised when client configuration is invalid."""
    pass


class InvalidRequestError(IopClientError):
    """Raised when a request cannot be built from the given values."""
    pass
