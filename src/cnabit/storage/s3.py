"""S3 file storage backend."""

import asyncio
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cnabit.domain.errors import StorageError, StorageObjectNotFoundError
from cnabit.storage.base import FileStorage

logger = logging.getLogger(__name__)

_MISSING_CODES = ("NoSuchKey", "404", "NotFound")


class S3FileStorage(FileStorage):
    """FileStorage backed by an S3 bucket.

    boto3 is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, bucket: str, region: str = "us-east-1", endpoint_url: Optional[str] = None):
        self._bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    @property
    def bucket(self) -> str:
        return self._bucket

    def _read(self, key: str) -> bytes:
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
            return resp["Body"].read()
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
                raise StorageObjectNotFoundError(key) from exc
            raise StorageError(f"S3 read failed for {key!r}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"S3 read failed for {key!r}: {exc}") from exc

    def _write(self, key: str, data: bytes) -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=data, ContentType="text/plain",
            )
            return key
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"S3 write failed for {key!r}: {exc}") from exc

    def _exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return False
            raise StorageError(f"S3 head failed for {key!r}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"S3 head failed for {key!r}: {exc}") from exc

    async def read(self, key: str) -> bytes:
        return await asyncio.to_thread(self._read, key)

    async def write(self, key: str, data: bytes) -> str:
        result = await asyncio.to_thread(self._write, key, data)
        logger.debug("Uploaded %d bytes to s3://%s/%s", len(data), self._bucket, key)
        return result

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self._exists, key)
