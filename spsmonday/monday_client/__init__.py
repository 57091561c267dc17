"""monday.com GraphQL API client module."""

from .client import MondayClient
from .queries import MondayQueries, escape_graphql_string

__all__ = ["MondayClient", "MondayQueries", "escape_graphql_string"]
