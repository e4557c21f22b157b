"""
Interact with S3-compatible object storage (e.g., AWS S3, MinIO, SeaweedFS, Cloudflare R2).
"""

from typing import AsyncIterable

import async_lru
from botocore.exceptions import BotoCoreError, ClientError

from mediatree.config import get_settings
from mediatree.connections import s3
from mediatree.errors import UpstreamFailure
from mediatree.models import ImageObject


def _failure(message: str, e: Exception) -> UpstreamFailure:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode") or 502
        return UpstreamFailure(error.get("Message") or message, status_code=status, details=[error])
    return UpstreamFailure(f"{message}: {e}")


async def get_bucket() -> str:
    return await _create_or_get_bucket_name(get_settings().s3_bucket)


@async_lru.alru_cache(maxsize=100)
async def _create_or_get_bucket_name(bucket: str) -> str:
    try:
        await s3().head_bucket(Bucket=bucket)
    except ClientError as e:
        error = e.response.get("Error", {})
        if error.get("Code") in ("404", "NoSuchBucket"):
            await s3().create_bucket(Bucket=bucket)
        else:
            raise
    return bucket


async def scan_s3_objects(bucket: str, prefix: str = "", page_size=1000) -> AsyncIterable[ImageObject]:
    paginator = s3().get_paginator("list_objects_v2")

    async for page in paginator.paginate(Bucket=bucket, Prefix=prefix, PaginationConfig={"PageSize": page_size}):
        for content in page.get("Contents", []):
            if "Key" in content:
                last_modified = content.get("LastModified")
                yield ImageObject(
                    id=content["Key"],
                    uploaded_at=last_modified.isoformat() if last_modified else None,
                    size_bytes=content.get("Size"),
                )


async def list_s3_images() -> list[ImageObject]:
    try:
        bucket = await get_bucket()
        return [obj async for obj in scan_s3_objects(bucket)]
    except (BotoCoreError, ClientError) as e:
        raise _failure("Failed to fetch images", e) from e


async def add_s3_object(key: str, data: bytes, content_type: str | None = None) -> ImageObject:
    try:
        bucket = await get_bucket()
        if content_type:
            await s3().put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
        else:
            await s3().put_object(Bucket=bucket, Key=key, Body=data)
        head = await s3().head_object(Bucket=bucket, Key=key)
    except (BotoCoreError, ClientError) as e:
        raise _failure("Upload failed", e) from e
    last_modified = head.get("LastModified")
    return ImageObject(
        id=key,
        uploaded_at=last_modified.isoformat() if last_modified else None,
        size_bytes=head.get("ContentLength", len(data)),
    )


async def delete_s3_object(key: str) -> None:
    """Delete an object. Unlike a plain S3 delete, a missing key is reported as a 404 failure."""
    try:
        bucket = await get_bucket()
        await s3().head_object(Bucket=bucket, Key=key)
        await s3().delete_object(Bucket=bucket, Key=key)
    except (BotoCoreError, ClientError) as e:
        raise _failure("Delete failed", e) from e


async def presigned_get(key: str, hours_valid=24) -> str:
    bucket = await get_bucket()
    return await s3().generate_presigned_url(
        "get_object", Params={"Bucket": bucket, "Key": key}, ExpiresIn=hours_valid * 3600
    )
