"""Expose constructed client wrappers."""

from .dynamodb import DynamoDBKVStore
from .github_auth import ExchangeResult, GitHubOAuthClient, OAuthStateEncoder
from .memory_store import MemoryKVStore
from .sqlite_store import SQLiteKVStore

__all__ = [
    "DynamoDBKVStore",
    "ExchangeResult",
    "GitHubOAuthClient",
    "MemoryKVStore",
    "OAuthStateEncoder",
    "SQLiteKVStore",
]
