"""
Exceptions raised by SPSMonday.
"""

from typing import Optional


class MondayClientError(Exception):
    """Base exception for monday.com API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_data: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_data = response_data


class ConfigurationError(MondayClientError):
    """No active token, or a profile that is missing or unreadable."""


class RemoteError(MondayClientError):
    """The service answered with a non-empty GraphQL ``errors`` list."""


class TransportError(MondayClientError):
    """Network failure, HTTP error status, or an undecodable response body."""


class NotFoundError(MondayClientError):
    """A single requested board or item is absent or inaccessible."""
