"""GitHub OAuth login with server-side sessions held in a key-value store."""

__version__ = "0.1.0"
