"""
Session storage in a DynamoDB table with native time-to-live.

The table uses the ``pk``/``sk`` key schema and ``expires_at`` (epoch
seconds) as its TTL attribute. DynamoDB deletes expired items lazily, so
reads also filter on ``expires_at``.
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import boto3
from boto3.dynamodb.types import Binary
from botocore.exceptions import BotoCoreError, ClientError

from session_gateway.core.config import StoreSettings
from session_gateway.core.errors import StoreCorruptError, StoreUnavailableError

_SORT_KEY = "session"


class DynamoDBKVStore:
    """Get/put/delete of opaque values keyed by session identifier."""

    def __init__(self, settings: StoreSettings, *, table: Any = None) -> None:
        if table is None:
            if not settings.dynamodb_table_name:
                raise StoreUnavailableError("DYNAMODB_TABLE_NAME must be set for the dynamodb backend.")
            resource = boto3.resource("dynamodb", region_name=settings.region_name)
            table = resource.Table(settings.dynamodb_table_name)
        self._table = table

    @staticmethod
    def _key(key: str) -> Dict[str, str]:
        return {"pk": f"session#{key}", "sk": _SORT_KEY}

    def get(self, key: str) -> Optional[bytes]:
        try:
            response = self._table.get_item(Key=self._key(key), ConsistentRead=True)
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"DynamoDB get_item failed: {exc}") from exc

        item = response.get("Item")
        if not item or int(item.get("expires_at", 0)) <= int(time.time()):
            return None
        data = item.get("data")
        if isinstance(data, Binary):
            return data.value
        if isinstance(data, str):
            return data.encode("utf-8")
        raise StoreCorruptError("DynamoDB item carries no session payload.")

    def put(self, key: str, value: bytes, ttl_seconds: int) -> None:
        item = {
            **self._key(key),
            "data": value,
            "expires_at": int(time.time()) + ttl_seconds,
        }
        try:
            self._table.put_item(Item=item)
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"DynamoDB put_item failed: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._table.delete_item(Key=self._key(key))
        except (BotoCoreError, ClientError) as exc:
            raise StoreUnavailableError(f"DynamoDB delete_item failed: {exc}") from exc


__all__ = ["DynamoDBKVStore"]
