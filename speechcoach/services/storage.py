"""S3 blob store access for uploaded speech recordings."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from speechcoach.config.settings import StorageConfig, settings
from speechcoach.errors import BlobNotFound, StorageUnavailable

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


class S3BlobStore:
    """Download audio objects from an S3-compatible bucket."""

    def __init__(self, client: Any) -> None:
        self._client = client

    async def download(self, bucket: str, key: str) -> bytes:
        """Return the object body, raising BlobNotFound when the key is absent."""

        def _read() -> bytes:
            response = self._client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()

        try:
            payload = await run_in_threadpool(_read)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_KEY_CODES:
                raise BlobNotFound(
                    f"Failed to download audio: object {key!r} not found in {bucket!r}",
                    upstream_status=404,
                ) from exc
            status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            raise StorageUnavailable(
                f"Failed to download audio: {exc}",
                upstream_status=status,
            ) from exc
        except BotoCoreError as exc:
            raise StorageUnavailable(f"Failed to download audio: {exc}") from exc

        logger.debug("Downloaded %s bytes from s3://%s/%s", len(payload), bucket, key)
        return payload


def build_s3_client(config: StorageConfig) -> Any:
    """Create an S3 client; explicit keys are optional and fall back to the boto3 chain."""

    client_kwargs: dict[str, Any] = {"region_name": config.region}
    if config.endpoint_url:
        client_kwargs["endpoint_url"] = config.endpoint_url
    if config.access_key and config.secret_key:
        client_kwargs["aws_access_key_id"] = config.access_key
        client_kwargs["aws_secret_access_key"] = config.secret_key
    return boto3.client("s3", **client_kwargs)


@lru_cache(maxsize=1)
def get_blob_store() -> S3BlobStore:
    """Return the process-wide blob store for the configured bucket endpoint."""

    return S3BlobStore(build_s3_client(settings.storage))


__all__ = ["S3BlobStore", "build_s3_client", "get_blob_store"]
