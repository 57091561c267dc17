"""SPSMonday: a thin client for the monday.com GraphQL API."""

from .config import Settings, configure_logging, get_settings
from .errors import (
    ConfigurationError,
    MondayClientError,
    NotFoundError,
    RemoteError,
    TransportError,
)
from .monday_client import MondayClient, MondayQueries, escape_graphql_string
from .profiles import ProfileStore

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "MondayClient",
    "MondayClientError",
    "MondayQueries",
    "NotFoundError",
    "ProfileStore",
    "RemoteError",
    "Settings",
    "TransportError",
    "configure_logging",
    "escape_graphql_string",
    "get_settings",
]
