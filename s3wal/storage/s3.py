"""
S3 object store adapter built on boto3.

Works against AWS S3 and S3-compatible endpoints (MinIO, LocalStack, R2)
through ``endpoint_url``.
"""

from typing import Any, Iterator, List, Optional, Sequence

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from s3wal.storage.base import DeleteFailure, ObjectNotFound, ObjectStore, ObjectStoreError
from s3wal.utils.config import Config
from s3wal.utils.logging import get_logger

logger = get_logger(__name__)

_NOT_FOUND_CODES = {"NoSuchKey", "404", "NotFound"}

# DeleteObjects accepts at most this many keys per request
S3_MAX_DELETE_BATCH = 1000


def _is_not_found(err: Exception) -> bool:
    if isinstance(err, ClientError):
        code = err.response.get("Error", {}).get("Code", "")
        return code in _NOT_FOUND_CODES
    return False


class S3ObjectStore(ObjectStore):
    """
    Object store backed by a single S3 bucket.

    Attributes:
        bucket: Bucket every request is issued against
        max_delete_batch: Keys per DeleteObjects request, at most 1000

    The log's own delete_batch_size is configured separately and is
    clamped to max_delete_batch by the log.
    """

    def __init__(self, client: Any, bucket: str, max_delete_batch: int = S3_MAX_DELETE_BATCH):
        if not bucket:
            raise ValueError("bucket must be set")
        if not 0 < max_delete_batch <= S3_MAX_DELETE_BATCH:
            raise ValueError(
                f"max_delete_batch must be in 1..{S3_MAX_DELETE_BATCH}, got {max_delete_batch}"
            )
        self._client = client
        self.bucket = bucket
        self.max_delete_batch = max_delete_batch

    @classmethod
    def from_config(cls, config: Config, client: Optional[Any] = None) -> "S3ObjectStore":
        """
        Build a store from the storage section of a Config.

        Credentials are resolved by boto3's default provider chain.
        """
        if client is None:
            region = config.get("storage.region")
            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=config.get("storage.endpoint_url"),
                config=BotoConfig(retries={"max_attempts": 3, "mode": "standard"}),
            )
        return cls(
            client=client,
            bucket=config.get("storage.bucket"),
        )

    def put(self, key: str, body: bytes) -> None:
        try:
            self._client.put_object(Bucket=self.bucket, Key=key, Body=body)
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"put_object {self.bucket}/{key}: {e}") from e

    def get(self, key: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self.bucket, Key=key)
            body = resp["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            if _is_not_found(e):
                raise ObjectNotFound(key) from e
            raise ObjectStoreError(f"get_object {self.bucket}/{key}: {e}") from e

    def list_pages(self, prefix: str) -> Iterator[List[str]]:
        paginator = self._client.get_paginator("list_objects_v2")
        pages = paginator.paginate(Bucket=self.bucket, Prefix=prefix)
        try:
            for page in pages:
                keys = [item["Key"] for item in page.get("Contents", []) if item.get("Key")]
                logger.debug(
                    "Listed page",
                    bucket=self.bucket,
                    prefix=prefix,
                    keys=len(keys),
                    truncated=page.get("IsTruncated", False),
                )
                yield keys
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(f"list_objects_v2 {self.bucket}/{prefix}: {e}") from e

    def delete_batch(self, keys: Sequence[str]) -> List[DeleteFailure]:
        if not keys:
            return []
        if len(keys) > self.max_delete_batch:
            raise ValueError(
                f"batch of {len(keys)} keys exceeds limit {self.max_delete_batch}"
            )
        try:
            resp = self._client.delete_objects(
                Bucket=self.bucket,
                Delete={
                    "Objects": [{"Key": key} for key in keys],
                    "Quiet": False,
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise ObjectStoreError(
                f"delete_objects {self.bucket} ({len(keys)} keys): {e}"
            ) from e

        return [
            DeleteFailure(
                key=err.get("Key", ""),
                reason=f"{err.get('Code', 'Error')}: {err.get('Message', '')}".rstrip(": "),
            )
            for err in resp.get("Errors", [])
        ]
