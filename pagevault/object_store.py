"""S3-compatible object store adapter."""

from typing import Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from common.logging_config import get_logger
from pagevault import config
from pagevault.exceptions import StorageError
from pagevault.types import ListedObject, ObjectPage, StoredObject

logger = get_logger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def _is_missing(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _MISSING_CODES


def _total_size(response: dict) -> int:
    """
    Full object size from a (possibly ranged) GET response.
    """
    content_range = response.get("ContentRange")
    if content_range and "/" in content_range:
        total = content_range.rsplit("/", 1)[-1]
        if total.isdigit():
            return int(total)
    return int(response.get("ContentLength", 0))


def create_s3_client():
    """
    Build a boto3 S3 client from configuration with per-call timeouts and retries.
    """
    return boto3.client(
        "s3",
        endpoint_url=config.S3_ENDPOINT_URL,
        region_name=config.S3_REGION,
        aws_access_key_id=config.S3_ACCESS_KEY_ID,
        aws_secret_access_key=config.S3_SECRET_ACCESS_KEY,
        config=Config(
            connect_timeout=config.S3_CONNECT_TIMEOUT_SECONDS,
            read_timeout=config.S3_READ_TIMEOUT_SECONDS,
            retries={"max_attempts": config.S3_MAX_ATTEMPTS, "mode": "standard"},
        ),
    )


class ObjectStore:
    """
    Blocking key/value access to one bucket.

    Every botocore failure surfaces as StorageError; a missing key on a read
    returns None instead.
    """

    def __init__(self, client=None, bucket: Optional[str] = None):
        self.client = client if client is not None else create_s3_client()
        self.bucket = bucket or config.S3_BUCKET

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        custom_metadata: Optional[Dict[str, str]] = None
    ) -> None:
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata=custom_metadata or {},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object put failed [key={key}]: {e}")
            raise StorageError(f"Failed to store object {key}") from e
        logger.debug(f"Stored object [key={key}] size={len(data)}")

    def get(self, key: str) -> Optional[StoredObject]:
        return self._get(key, None)

    def get_range(self, key: str, max_bytes: int) -> Optional[StoredObject]:
        """
        Read at most max_bytes from the start of an object.
        """
        return self._get(key, f"bytes=0-{max_bytes - 1}")

    def _get(self, key: str, byte_range: Optional[str]) -> Optional[StoredObject]:
        params = {"Bucket": self.bucket, "Key": key}
        if byte_range:
            params["Range"] = byte_range
        try:
            response = self.client.get_object(**params)
            body = response["Body"].read()
        except ClientError as e:
            if _is_missing(e):
                return None
            logger.error(f"Object get failed [key={key}]: {e}")
            raise StorageError(f"Failed to read object {key}") from e
        except BotoCoreError as e:
            logger.error(f"Object get failed [key={key}]: {e}")
            raise StorageError(f"Failed to read object {key}") from e

        return StoredObject(
            key=key,
            data=body,
            size=_total_size(response),
            content_type=response.get("ContentType"),
            custom_metadata=dict(response.get("Metadata") or {}),
        )

    def head(self, key: str) -> Optional[StoredObject]:
        """
        Object headers without the body (data is empty).
        """
        try:
            response = self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                return None
            raise StorageError(f"Failed to inspect object {key}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to inspect object {key}") from e

        return StoredObject(
            key=key,
            data=b"",
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
            custom_metadata=dict(response.get("Metadata") or {}),
        )

    def delete(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object delete failed [key={key}]: {e}")
            raise StorageError(f"Failed to delete object {key}") from e
        logger.debug(f"Deleted object [key={key}]")

    def copy(
        self,
        src: str,
        dst: str,
        custom_metadata: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None
    ) -> None:
        """
        Server-side copy. When custom_metadata is given it replaces the source's.
        """
        params = {
            "Bucket": self.bucket,
            "Key": dst,
            "CopySource": {"Bucket": self.bucket, "Key": src},
        }
        if custom_metadata is not None:
            params["Metadata"] = custom_metadata
            params["MetadataDirective"] = "REPLACE"
            if content_type:
                params["ContentType"] = content_type
        try:
            self.client.copy_object(**params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object copy failed [src={src}] [dst={dst}]: {e}")
            raise StorageError(f"Failed to copy object {src} to {dst}") from e
        logger.debug(f"Copied object [src={src}] [dst={dst}]")

    def list_objects(self, cursor: Optional[str] = None, page_size: int = 500) -> ObjectPage:
        params = {"Bucket": self.bucket, "MaxKeys": page_size}
        if cursor:
            params["ContinuationToken"] = cursor
        try:
            response = self.client.list_objects_v2(**params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Object listing failed: {e}")
            raise StorageError("Failed to list objects") from e

        objects = [
            ListedObject(key=item["Key"], size=int(item.get("Size", 0)))
            for item in response.get("Contents", [])
        ]
        truncated = bool(response.get("IsTruncated"))
        return ObjectPage(
            objects=objects,
            next_cursor=response.get("NextContinuationToken") if truncated else None,
            truncated=truncated,
        )
