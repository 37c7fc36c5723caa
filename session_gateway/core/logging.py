"""
Logging utilities for the session gateway.

Provides a consistent logging format and a helper for referring to session
identifiers in log lines without writing the capability itself to disk.
"""

import hashlib
import logging
import sys

_NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "boto3")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    if level.upper() != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def fingerprint(value: str) -> str:
    """Short, non-reversible tag for a secret value, safe to log."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]


__all__ = ["configure_logging", "fingerprint"]
